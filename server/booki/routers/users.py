"""Admin user management router."""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, AdminUser
from ..models.user import User, UserRole
from ..schemas.auth import UserOut
from ..schemas.common import MessageResponse
from ..schemas.user import BanUserRequest, SetRoleRequest, UserListResponse
from ..services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/users", tags=["admin"])


@router.get("", response_model=UserListResponse)
async def list_users(
    search: Optional[str] = Query(None, max_length=255),
    role: Optional[UserRole] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> UserListResponse:
    users, total = await UserService(db).list_users(search, role, limit, offset)
    return UserListResponse(users=[UserOut.model_validate(u) for u in users], total=total)


@router.post("/{user_id}/ban", response_model=UserOut)
async def ban_user(
    user_id: int,
    request: BanUserRequest,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> UserOut:
    """Ban a user, revoking their sessions and canceling their active car rentals."""
    user = await UserService(db).ban_user(admin, user_id, request.reason)
    return UserOut.model_validate(user)


@router.post("/{user_id}/unban", response_model=UserOut)
async def unban_user(user_id: int, admin: User = AdminUser, db: AsyncSession = DB_DEPENDENCY) -> UserOut:
    user = await UserService(db).unban_user(user_id)
    return UserOut.model_validate(user)


@router.put("/{user_id}/role", response_model=UserOut)
async def set_role(
    user_id: int,
    request: SetRoleRequest,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> UserOut:
    user = await UserService(db).set_role(admin, user_id, request.role)
    return UserOut.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: int, admin: User = AdminUser, db: AsyncSession = DB_DEPENDENCY) -> MessageResponse:
    await UserService(db).delete_user(admin, user_id)
    return MessageResponse(message=f"User {user_id} deleted")
