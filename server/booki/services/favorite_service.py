"""Saved trips, hotels, cars and blogs."""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.blog import Blog
from ..models.car import Car
from ..models.favorite import Favorite
from ..models.hotel import Hotel
from ..models.trip import Trip
from ..models.user import User
from ..schemas.favorite import FavoriteStatus

logger = logging.getLogger(__name__)

FAVORITE_MODELS = {"trip": Trip, "hotel": Hotel, "car": Car, "blog": Blog}


class FavoriteService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, user: User, item_type: str, item_id: int) -> Optional[Favorite]:
        result = await self.db.execute(
            select(Favorite).where(
                Favorite.user_id == user.id,
                Favorite.item_type == item_type,
                Favorite.item_id == item_id,
            )
        )
        return result.scalar_one_or_none()

    async def toggle(self, user: User, item_type: str, item_id: int) -> FavoriteStatus:
        """
        Add the item to the caller's favorites, or remove it if already there.

        Raises:
            NotFoundError: If the item does not exist
        """
        existing = await self._find(user, item_type, item_id)
        if existing is not None:
            await self.db.execute(delete(Favorite).where(Favorite.id == existing.id))
            await self.db.commit()
            logger.info("Favorite removed", extra={"user_id": user.id, "item_type": item_type, "item_id": item_id})
            return FavoriteStatus(item_type=item_type, item_id=item_id, is_favorite=False)

        if await self.db.get(FAVORITE_MODELS[item_type], item_id) is None:
            raise NotFoundError(item_type, item_id)
        self.db.add(Favorite(user_id=user.id, item_type=item_type, item_id=item_id))
        await self.db.commit()
        logger.info("Favorite added", extra={"user_id": user.id, "item_type": item_type, "item_id": item_id})
        return FavoriteStatus(item_type=item_type, item_id=item_id, is_favorite=True)

    async def check(self, user: User, item_type: str, item_id: int) -> FavoriteStatus:
        existing = await self._find(user, item_type, item_id)
        return FavoriteStatus(item_type=item_type, item_id=item_id, is_favorite=existing is not None)

    async def list_favorites(self, user: User, item_type: Optional[str] = None) -> list[Favorite]:
        query = select(Favorite).where(Favorite.user_id == user.id)
        if item_type:
            query = query.where(Favorite.item_type == item_type)
        result = await self.db.execute(query.order_by(Favorite.item_type, Favorite.created_at.desc()))
        return list(result.scalars().all())
