"""Chat schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PostType = Literal["trip", "hotel", "car", "blog"]


class SendMessageRequest(BaseModel):
    post_id: int = Field(..., gt=0)
    post_type: PostType
    receiver_id: int = Field(..., gt=0)
    content: str = Field(..., min_length=1, max_length=5000)
    type: Literal["text", "image"] = "text"


class ChatMessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    post_type: str
    sender_id: int
    receiver_id: int
    content: str
    type: str
    is_read: bool
    created_at: datetime
