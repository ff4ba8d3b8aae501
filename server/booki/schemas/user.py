"""Admin user-management schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.user import UserRole
from .auth import UserOut


class BanUserRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500, description="Defaults to 'Banned by admin'")


class SetRoleRequest(BaseModel):
    role: UserRole


class UserListResponse(BaseModel):
    users: List[UserOut]
    total: int
