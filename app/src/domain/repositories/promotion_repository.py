from __future__ import annotations

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.domain.models.promotion import Promotion
from src.domain.repositories.base_repository import BaseRepository
from src.domain.schemas.promotion import PromotionCreate, PromotionUpdate


class PromotionRepository(BaseRepository[Promotion, PromotionCreate, PromotionUpdate]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Promotion, session)

    async def find_active(self) -> list[Promotion]:
        """Active promotions, newest first."""
        query = (
            select(Promotion)
            .where(col(Promotion.is_active).is_(True))
            .order_by(col(Promotion.created_datetime).desc())
        )
        result = await self.session.exec(query)
        return list(result.all())
