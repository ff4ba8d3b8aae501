"""Chat messages and favorites."""

import logging
from typing import List, Optional

from fastapi import APIRouter
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, CurrentUser
from ..models.user import User
from ..schemas.chat import ChatMessageOut, PostType, SendMessageRequest
from ..schemas.favorite import FavoriteOut, FavoriteStatus, ItemType, ToggleFavoriteRequest
from ..schemas.notification import UnreadCount
from ..services.chat_service import ChatService
from ..services.favorite_service import FavoriteService

logger = logging.getLogger(__name__)

chat_router = APIRouter(prefix="/v1/chat", tags=["chat"])
favorites_router = APIRouter(prefix="/v1/favorites", tags=["favorites"])


@chat_router.post("/messages", response_model=ChatMessageOut, status_code=201)
async def send_message(
    request: SendMessageRequest,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> ChatMessageOut:
    message = await ChatService(db).send_message(user, request)
    return ChatMessageOut.model_validate(message)


@chat_router.get("/messages/{post_type}/{post_id}", response_model=List[ChatMessageOut])
async def list_messages(
    post_type: PostType,
    post_id: int,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> List[ChatMessageOut]:
    """Messages about a post that the caller sent or received, oldest first."""
    messages = await ChatService(db).list_post_messages(user, post_type, post_id)
    return [ChatMessageOut.model_validate(m) for m in messages]


@chat_router.post("/messages/{post_type}/{post_id}/read", response_model=UnreadCount)
async def mark_messages_read(
    post_type: PostType,
    post_id: int,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> UnreadCount:
    service = ChatService(db)
    await service.mark_read(user, post_type, post_id)
    return UnreadCount(count=await service.unread_count(user))


@chat_router.get("/unread-count", response_model=UnreadCount)
async def unread_messages(user: User = CurrentUser, db: AsyncSession = DB_DEPENDENCY) -> UnreadCount:
    return UnreadCount(count=await ChatService(db).unread_count(user))


@favorites_router.post("/toggle", response_model=FavoriteStatus)
async def toggle_favorite(
    request: ToggleFavoriteRequest,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> FavoriteStatus:
    return await FavoriteService(db).toggle(user, request.item_type, request.item_id)


@favorites_router.get("/check/{item_type}/{item_id}", response_model=FavoriteStatus)
async def check_favorite(
    item_type: ItemType,
    item_id: int,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> FavoriteStatus:
    return await FavoriteService(db).check(user, item_type, item_id)


@favorites_router.get("", response_model=List[FavoriteOut])
async def list_favorites(
    item_type: Optional[ItemType] = None,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> List[FavoriteOut]:
    favorites = await FavoriteService(db).list_favorites(user, item_type)
    return [FavoriteOut.model_validate(f) for f in favorites]
