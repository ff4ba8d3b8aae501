"""Admin moderation router."""

import logging
from typing import Any, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, AdminUser
from ..models.user import User
from ..schemas.blog import BlogOut
from ..schemas.car import CarOut
from ..schemas.common import DecisionRequest
from ..schemas.hotel import HotelOut
from ..schemas.trip import TripOut
from ..services.approval_service import ApprovalItemType, ApprovalService
from ..services.email_service import EmailService, get_email_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/approvals", tags=["admin"])

EMAIL_DEPENDENCY = Depends(get_email_service)

_OUT_SCHEMAS = {"trip": TripOut, "hotel": HotelOut, "car": CarOut, "blog": BlogOut}


def _serialize(item_type: str, item) -> dict[str, Any]:
    return _OUT_SCHEMAS[item_type].model_validate(item).model_dump(mode="json")


@router.get("/{item_type}", response_model=List[dict])
async def list_pending(
    item_type: ApprovalItemType,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> List[dict]:
    """Items of one type awaiting review, oldest first."""
    items = await ApprovalService(db).list_pending(item_type)
    return [_serialize(item_type, item) for item in items]


@router.post("/{item_type}/{item_id}/approve", response_model=dict)
async def approve(
    item_type: ApprovalItemType,
    item_id: int,
    request: DecisionRequest,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
    email_service: EmailService = EMAIL_DEPENDENCY,
) -> dict:
    item = await ApprovalService(db).decide(item_type, item_id, True, email_service, request.reason)
    return _serialize(item_type, item)


@router.post("/{item_type}/{item_id}/reject", response_model=dict)
async def reject(
    item_type: ApprovalItemType,
    item_id: int,
    request: DecisionRequest,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
    email_service: EmailService = EMAIL_DEPENDENCY,
) -> dict:
    """Reject an item; rejected trips are also taken off sale."""
    item = await ApprovalService(db).decide(item_type, item_id, False, email_service, request.reason)
    return _serialize(item_type, item)
