"""Registration, login and own-account management."""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, ValidationError
from ..core.security import (
    create_access_token,
    generate_agency_unique_id,
    hash_password,
    session_expiry,
    verify_password,
)
from ..models.agency import Agency
from ..models.notification import NotificationType
from ..models.user import User, UserRole, UserSession
from ..schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UpdateProfileRequest,
    UserOut,
)
from .email_service import EmailService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, request: RegisterRequest, email_service: EmailService) -> User:
        """
        Create a customer, or an agency owner together with their agency.

        Raises:
            ConflictError: If the email is already registered
        """
        email = request.email.lower()
        existing = await self.db.scalar(select(User.id).where(User.email == email))
        if existing is not None:
            raise ConflictError(
                detail="An account with this email already exists",
                conflicting_resource={"email": email},
            )

        user = User(
            name=request.name,
            email=email,
            password_hash=hash_password(request.password),
            phone_number=request.phone_number,
            role=request.role,
        )
        self.db.add(user)
        await self.db.flush()

        agency: Optional[Agency] = None
        if request.role == UserRole.AGENCY_OWNER:
            details = request.agency
            agency = Agency(
                owner_id=user.id,
                agency_name=details.agency_name,
                agency_unique_id=generate_agency_unique_id(),
                contact_email=(details.contact_email or email).lower(),
                contact_phone=details.contact_phone or request.phone_number,
                address=details.address,
                description=details.description,
                website=details.website,
            )
            self.db.add(agency)
            await self.db.flush()
            await NotificationService(self.db).notify_admins(
                title="New agency registration",
                message=f"{agency.agency_name} registered and awaits verification",
                type=NotificationType.INFO,
                related_item_type="agency",
                related_item_id=agency.id,
            )

        await self.db.commit()
        await self.db.refresh(user)

        logger.info("User registered", extra={"user_id": user.id, "role": user.role})

        if agency is not None:
            await email_service.send_agency_registration(agency.agency_name, email)
        return user

    async def login(
        self,
        request: LoginRequest,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> TokenResponse:
        """
        Check credentials and open a login session.

        Raises:
            AuthenticationError: If the credentials are wrong
            AuthorizationError: If the account is banned
        """
        result = await self.db.execute(select(User).where(User.email == request.email.lower()))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(request.password, user.password_hash):
            logger.info("Login rejected", extra={"email": request.email.lower()})
            raise AuthenticationError("Invalid email or password")
        if user.banned:
            raise AuthorizationError(f"This account has been banned: {user.ban_reason or 'no reason given'}")

        now = utcnow()
        expires_at = session_expiry(now)
        login_session = UserSession(
            user_id=user.id,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=now,
        )
        self.db.add(login_session)
        await self.db.commit()

        token = create_access_token(user.id, login_session.id, user.role, expires_at)
        logger.info("User logged in", extra={"user_id": user.id, "session_id": login_session.id})
        return TokenResponse(
            access_token=token,
            expires_at=expires_at,
            user=UserOut.model_validate(user),
        )

    async def logout(self, user: User, session_id: int) -> None:
        await self.db.execute(
            delete(UserSession).where(UserSession.id == session_id, UserSession.user_id == user.id)
        )
        await self.db.commit()
        logger.info("User logged out", extra={"user_id": user.id, "session_id": session_id})

    async def update_profile(self, user: User, request: UpdateProfileRequest) -> User:
        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def change_password(self, user: User, request: ChangePasswordRequest) -> None:
        """
        Replace the password after checking the current one.

        Raises:
            ValidationError: If the current password is wrong or unchanged
        """
        if not verify_password(request.current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        if request.current_password == request.new_password:
            raise ValidationError("New password must differ from the current one")

        user.password_hash = hash_password(request.new_password)
        await self.db.commit()
        logger.info("Password changed", extra={"user_id": user.id})
