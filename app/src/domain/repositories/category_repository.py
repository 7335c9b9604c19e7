from __future__ import annotations

from uuid import UUID

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.logging import get_logger
from src.domain.models.category import Category
from src.domain.repositories.base_repository import BaseRepository
from src.domain.schemas.category import CategoryCreate, CategoryUpdate

logger = get_logger(__name__)


class CategoryRepository(BaseRepository[Category, CategoryCreate, CategoryUpdate]):
    """
    Repository for managing categories in the system.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Category, session)

    async def find_active_categories(self) -> list[Category]:
        """
        Find all active categories in display order.

        Returns:
            list[Category]: List of active categories
        """
        query = (
            select(Category)
            .where(col(Category.is_active).is_(True))
            .order_by(col(Category.sort_order).asc(), col(Category.name).asc())
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        query = select(Category.id).where(Category.slug == slug)
        if exclude_id:
            query = query.where(Category.id != exclude_id)
        return (await self.session.exec(query)).first() is not None
