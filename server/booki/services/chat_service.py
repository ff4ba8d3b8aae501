"""Customer to agency messages about a post."""

import logging

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..models.chat import ChatMessage
from ..models.user import User
from ..schemas.chat import SendMessageRequest

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def send_message(self, sender: User, request: SendMessageRequest) -> ChatMessage:
        if request.receiver_id == sender.id:
            raise ValidationError("You cannot send a message to yourself")
        receiver = await self.db.get(User, request.receiver_id)
        if receiver is None:
            raise NotFoundError("user", request.receiver_id)

        message = ChatMessage(
            post_id=request.post_id,
            post_type=request.post_type,
            sender_id=sender.id,
            receiver_id=receiver.id,
            content=request.content,
            type=request.type,
        )
        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        logger.info(
            "Chat message sent",
            extra={"message_id": message.id, "post_type": request.post_type, "post_id": request.post_id},
        )
        return message

    async def list_post_messages(self, user: User, post_type: str, post_id: int) -> list[ChatMessage]:
        """Messages about a post that the caller sent or received, oldest first."""
        result = await self.db.execute(
            select(ChatMessage)
            .where(
                ChatMessage.post_type == post_type,
                ChatMessage.post_id == post_id,
                or_(ChatMessage.sender_id == user.id, ChatMessage.receiver_id == user.id),
            )
            .order_by(ChatMessage.created_at, ChatMessage.id)
        )
        return list(result.scalars().all())

    async def mark_read(self, user: User, post_type: str, post_id: int) -> int:
        """Mark the caller's received messages about a post as read."""
        result = await self.db.execute(
            update(ChatMessage)
            .where(
                ChatMessage.post_type == post_type,
                ChatMessage.post_id == post_id,
                ChatMessage.receiver_id == user.id,
                ChatMessage.is_read.is_(False),
            )
            .values(is_read=True)
        )
        await self.db.commit()
        return result.rowcount or 0

    async def unread_count(self, user: User) -> int:
        count = await self.db.scalar(
            select(func.count(ChatMessage.id)).where(
                ChatMessage.receiver_id == user.id,
                ChatMessage.is_read.is_(False),
            )
        )
        return count or 0
