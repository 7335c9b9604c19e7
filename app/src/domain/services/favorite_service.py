from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.exceptions import errors
from src.core.logging import get_logger
from src.domain.models.favorite import Favorite
from src.domain.repositories.favorite_repository import FavoriteRepository
from src.domain.repositories.product_repository import ProductRepository

logger = get_logger(__name__)


class FavoriteService:
    """Service for the products a user has saved."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.favorite_repository = FavoriteRepository(session)
        self.product_repository = ProductRepository(session)

    async def list_favorites(self, user_id: str) -> list[Favorite]:
        return await self.favorite_repository.find_for_user(user_id)

    async def get_favorite_product_ids(self, user_id: str) -> set[str]:
        return {str(favorite.product_id) for favorite in await self.list_favorites(user_id)}

    async def is_favorited(self, user_id: str | None, product_id: UUID) -> bool:
        if not user_id:
            return False
        return await self.favorite_repository.find_one(user_id, product_id) is not None

    async def add_favorite(self, user_id: str, product_id: UUID) -> Favorite:
        """
        Save a product. Saving it twice returns the existing favorite.

        Raises:
            NotFoundError: If the product does not exist
        """
        existing = await self.favorite_repository.find_one(user_id, product_id)
        if existing:
            return existing

        if not await self.product_repository.exists(product_id):
            raise errors.NotFoundError(detail="Product not found")

        try:
            return await self.favorite_repository.create({"user_id": user_id, "product_id": product_id})
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.favorite_service.add_favorite:: error while saving favorite: {e}")
            raise errors.ServiceError(detail="Failed to add favorite") from e

    async def remove_favorite(self, user_id: str, product_id: UUID) -> bool:
        favorite = await self.favorite_repository.find_one(user_id, product_id)
        if not favorite:
            return False

        try:
            return await self.favorite_repository.delete(favorite.id)
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.favorite_service.remove_favorite:: error while removing favorite: {e}")
            raise errors.ServiceError(detail="Failed to remove favorite") from e
