"""FastAPI dependencies for database access, authentication and role checks."""

import logging
from typing import Callable, Optional

import jwt
from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User, UserRole, UserSession
from .database import as_utc, get_db, utcnow
from .exceptions import AuthenticationError, AuthorizationError
from .security import TokenClaims, decode_access_token

logger = logging.getLogger(__name__)

DB_DEPENDENCY = Depends(get_db)


def _parse_bearer(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError("Authorization header missing")
    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError("Invalid authorization header format")
    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authentication scheme")
    return token


async def get_token_claims(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> TokenClaims:
    """
    Validate the Bearer token of the request.

    Raises:
        AuthenticationError: If the header is missing, malformed or the token invalid
    """
    token = _parse_bearer(authorization)
    try:
        return decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected access token", extra={"error": str(e)})
        raise AuthenticationError("Token validation failed")


async def get_current_user(
    claims: TokenClaims = Depends(get_token_claims),
    db: AsyncSession = DB_DEPENDENCY,
) -> User:
    """
    Resolve the authenticated user.

    The login session named by the token must still exist; banning a user
    deletes their sessions, which revokes every token they hold.

    Raises:
        AuthenticationError: If the session is gone or expired
        AuthorizationError: If the account is banned
    """
    result = await db.execute(
        select(UserSession).where(
            UserSession.id == claims.session_id,
            UserSession.user_id == claims.user_id,
        )
    )
    login_session = result.scalar_one_or_none()
    if login_session is None or as_utc(login_session.expires_at) <= utcnow():
        raise AuthenticationError("Session has expired or was revoked")

    user = await db.get(User, claims.user_id)
    if user is None:
        raise AuthenticationError("Account no longer exists")
    if user.banned:
        raise AuthorizationError("This account has been banned")

    return user


async def get_optional_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: AsyncSession = DB_DEPENDENCY,
) -> Optional[User]:
    """Like ``get_current_user`` but anonymous requests yield ``None``."""
    if not authorization:
        return None
    claims = await get_token_claims(authorization)
    return await get_current_user(claims, db)


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency that admits only users holding one of ``roles``.

    Example:
        ``admin: User = Depends(require_roles(UserRole.ADMIN))``
    """
    allowed = {role.value for role in roles}

    async def _checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise AuthorizationError(
                "Your role does not allow this operation",
                required_roles=sorted(allowed),
            )
        return user

    return _checker


CurrentUser = Depends(get_current_user)
OptionalUser = Depends(get_optional_user)
AdminUser = Depends(require_roles(UserRole.ADMIN))
AgencyStaff = Depends(require_roles(UserRole.AGENCY_OWNER, UserRole.AGENCY_EMPLOYEE))
AgencyOwner = Depends(require_roles(UserRole.AGENCY_OWNER))
PaymentStaff = Depends(require_roles(UserRole.ADMIN, UserRole.AGENCY_OWNER, UserRole.AGENCY_EMPLOYEE))
