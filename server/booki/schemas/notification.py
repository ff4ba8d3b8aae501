"""Notification schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    message: str
    type: str
    related_item_type: Optional[str] = None
    related_item_id: Optional[int] = None
    is_read: bool
    created_at: datetime


class NotificationList(BaseModel):
    notifications: List[NotificationOut]
    unread: int


class UnreadCount(BaseModel):
    count: int
