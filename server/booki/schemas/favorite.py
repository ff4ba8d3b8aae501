"""Favorite schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ItemType = Literal["trip", "hotel", "car", "blog"]


class ToggleFavoriteRequest(BaseModel):
    item_type: ItemType
    item_id: int = Field(..., gt=0)


class FavoriteStatus(BaseModel):
    item_type: ItemType
    item_id: int
    is_favorite: bool


class FavoriteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_type: str
    item_id: int
    created_at: datetime
