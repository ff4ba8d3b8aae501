"""Authentication router: registration, login and own account."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, CurrentUser, get_token_claims
from ..core.security import TokenClaims
from ..models.user import User
from ..schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UpdateProfileRequest,
    UserOut,
)
from ..schemas.common import MessageResponse
from ..services.auth_service import AuthService
from ..services.email_service import EmailService, get_email_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"])

EMAIL_DEPENDENCY = Depends(get_email_service)


@router.post("/register", response_model=UserOut, status_code=201)
async def register(
    request: RegisterRequest,
    db: AsyncSession = DB_DEPENDENCY,
    email_service: EmailService = EMAIL_DEPENDENCY,
) -> UserOut:
    """
    Create a customer account, or an agency owner with their agency.

    New agencies are announced to the administrators for verification.
    """
    user = await AuthService(db).register(request, email_service)
    return UserOut.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    http_request: Request,
    db: AsyncSession = DB_DEPENDENCY,
) -> TokenResponse:
    """Exchange credentials for a bearer token bound to a new login session."""
    return await AuthService(db).login(
        request,
        ip_address=http_request.client.host if http_request.client else None,
        user_agent=http_request.headers.get("user-agent"),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    user: User = CurrentUser,
    claims: TokenClaims = Depends(get_token_claims),
    db: AsyncSession = DB_DEPENDENCY,
) -> MessageResponse:
    await AuthService(db).logout(user, claims.session_id)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserOut)
async def me(user: User = CurrentUser) -> UserOut:
    return UserOut.model_validate(user)


@router.patch("/me", response_model=UserOut)
async def update_me(
    request: UpdateProfileRequest,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> UserOut:
    user = await AuthService(db).update_profile(user, request)
    return UserOut.model_validate(user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> MessageResponse:
    await AuthService(db).change_password(user, request)
    return MessageResponse(message="Password changed")
