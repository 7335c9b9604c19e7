from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.exceptions import errors
from src.core.logging import get_logger
from src.domain.models.promotion import Promotion
from src.domain.repositories.promotion_repository import PromotionRepository
from src.domain.schemas import PromotionCreate, PromotionUpdate

logger = get_logger(__name__)


class PromotionService:
    """Service for storefront promotions."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.promotion_repository = PromotionRepository(session)

    async def list_active(self) -> list[Promotion]:
        try:
            return await self.promotion_repository.find_active()
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.promotion_service.list_active:: error while listing promotions: {e}")
            raise errors.ServiceError(detail="Failed to retrieve promotions") from e

    async def get_promotion(self, promotion_id: UUID) -> Promotion:
        promotion = await self.promotion_repository.find_one_by(promotion_id)
        if not promotion:
            raise errors.NotFoundError(detail="Promotion not found")
        return promotion

    async def create_promotion(self, data: PromotionCreate) -> Promotion:
        try:
            return await self.promotion_repository.create(data)
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.promotion_service.create_promotion:: error while creating promotion: {e}")
            raise errors.ServiceError(detail="Failed to create promotion") from e

    async def update_promotion(self, promotion_id: UUID, data: PromotionUpdate) -> Promotion:
        promotion = await self.get_promotion(promotion_id)
        changes = data.model_dump(exclude_unset=True)
        if "title" in changes and changes["title"] is None:
            changes.pop("title")

        try:
            return await self.promotion_repository.update_entity(promotion, changes)
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.promotion_service.update_promotion:: error while updating promotion: {e}")
            raise errors.ServiceError(detail="Failed to update promotion") from e

    async def delete_promotion(self, promotion_id: UUID) -> None:
        await self.get_promotion(promotion_id)

        try:
            await self.promotion_repository.delete(promotion_id)
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.promotion_service.delete_promotion:: error while deleting promotion: {e}")
            raise errors.ServiceError(detail="Failed to delete promotion") from e
