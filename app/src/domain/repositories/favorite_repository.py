from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.domain.models.favorite import Favorite
from src.domain.repositories.base_repository import BaseRepository


class FavoriteRepository(BaseRepository[Favorite, Any, Any]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Favorite, session)

    async def find_for_user(self, user_id: str) -> list[Favorite]:
        query = select(Favorite).where(Favorite.user_id == user_id).order_by(col(Favorite.created_datetime).desc())
        result = await self.session.exec(query)
        return list(result.all())

    async def find_one(self, user_id: str, product_id: UUID) -> Favorite | None:
        return await self.find_one_by_and_none(user_id=user_id, product_id=product_id)
