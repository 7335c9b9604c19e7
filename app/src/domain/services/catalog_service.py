from __future__ import annotations

from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.database.transaction import Transaction
from src.core.exceptions import errors
from src.core.helpers.misc import slugify
from src.core.logging import get_logger
from src.domain.models.category import Category
from src.domain.models.product import Product
from src.domain.repositories.category_repository import CategoryRepository
from src.domain.repositories.product_repository import ProductRepository
from src.domain.schemas import (
    CartProductSnapshot,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductUpdate,
)

logger = get_logger(__name__)


class CatalogService:
    """Service for the product catalog: products and their categories."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.product_repository = ProductRepository(session)
        self.category_repository = CategoryRepository(session)

    async def list_products(self, category_id: UUID | None = None) -> list[Product]:
        """Active products, newest first, optionally within one category."""
        try:
            return await self.product_repository.find_active(category_id=category_id)
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.catalog_service.list_products:: error while listing products: {e}")
            raise errors.ServiceError(detail="Failed to retrieve products") from e

    async def get_product(self, product_id: UUID) -> Product:
        """
        Get a product by ID.

        Raises:
            NotFoundError: If the product does not exist
        """
        product = await self.product_repository.find_one_by(product_id)
        if not product:
            raise errors.NotFoundError(detail="Product not found")
        return product

    async def get_cart_snapshot(self, product_id: str) -> CartProductSnapshot:
        """
        Build the display copy of an active product that a cart line carries.

        Raises:
            NotFoundError: If the id is malformed or the product is not on sale
        """
        try:
            product = await self.product_repository.get_active(UUID(product_id))
        except ValueError:
            product = None

        if not product:
            raise errors.NotFoundError(detail="Product not found")

        return CartProductSnapshot(
            id=str(product.id),
            name=product.name,
            price=product.price,
            description=product.short_description or product.description,
            stock=product.stock,
            images=product.images or [],
            is_active=product.is_active,
        )

    async def create_product(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Raises:
            ConflictError: If the slug is already taken
            NotFoundError: If the category does not exist
        """
        data = product_data.model_dump()
        data["slug"] = slugify(product_data.slug or product_data.name)

        await self._ensure_unique_product_slug(data["slug"])
        await self._ensure_category(product_data.category_id)

        try:
            product = await self.product_repository.create(data)
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.catalog_service.create_product:: error while creating product: {e}")
            raise errors.ServiceError(detail="Failed to create product") from e

        logger.info(f"Product {product.slug} created", extra={"event_type": "product_created"})
        return product

    async def update_product(self, product_id: UUID, product_data: ProductUpdate) -> Product:
        """
        Apply the fields set in ``product_data``.

        Raises:
            NotFoundError: If the product or the new category does not exist
            ConflictError: If the new slug is already taken
        """
        product = await self.get_product(product_id)
        changes = product_data.model_dump(exclude_unset=True)

        if changes.get("slug"):
            changes["slug"] = slugify(changes["slug"])
            await self._ensure_unique_product_slug(changes["slug"], exclude_id=product.id)
        else:
            changes.pop("slug", None)

        if changes.get("category_id"):
            await self._ensure_category(changes["category_id"])

        for required in ("name", "price", "stock"):
            if required in changes and changes[required] is None:
                changes.pop(required)

        try:
            return await self.product_repository.update_entity(product, changes)
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.catalog_service.update_product:: error while updating product: {e}")
            raise errors.ServiceError(detail="Failed to update product") from e

    async def delete_product(self, product_id: UUID) -> None:
        """
        Raises:
            NotFoundError: If the product does not exist
            ConflictError: If orders or favorites still reference the product
        """
        await self.get_product(product_id)

        try:
            await self.product_repository.delete(product_id)
        except errors.DatabaseError as e:
            logger.exception(
                f"src.domain.services.catalog_service.delete_product:: error while deleting product {product_id}: {e}"
            )
            raise errors.ConflictError(detail="Product is referenced by orders, deactivate it instead") from e

    async def list_categories(self) -> list[CategoryResponse]:
        """Active categories in display order, each with its active product count."""
        try:
            categories = await self.category_repository.find_active_categories()
            counts = await self.product_repository.count_active_by_category()
        except errors.DatabaseError as e:
            logger.exception(
                f"src.domain.services.catalog_service.list_categories:: error while listing categories: {e}"
            )
            raise errors.ServiceError(detail="Failed to retrieve categories") from e

        return [self._category_response(category, counts.get(category.id, 0)) for category in categories]

    async def get_category(self, category_id: UUID) -> CategoryResponse:
        category = await self._get_category(category_id)
        counts = await self.product_repository.count_active_by_category()
        return self._category_response(category, counts.get(category.id, 0))

    async def create_category(self, category_data: CategoryCreate) -> CategoryResponse:
        """
        Create a new category, deriving the slug from the name when omitted.

        Raises:
            ConflictError: If the slug is already taken
        """
        data = category_data.model_dump()
        data["slug"] = slugify(category_data.slug or category_data.name)

        if await self.category_repository.slug_exists(data["slug"]):
            raise errors.ConflictError(detail="A category with this slug already exists")

        try:
            category = await self.category_repository.create(data)
        except errors.DatabaseError as e:
            logger.exception(
                f"src.domain.services.catalog_service.create_category:: error while creating category: {e}"
            )
            raise errors.ServiceError(detail="Failed to create category") from e

        return self._category_response(category, 0)

    async def update_category(self, category_id: UUID, category_data: CategoryUpdate) -> CategoryResponse:
        category = await self._get_category(category_id)
        changes = category_data.model_dump(exclude_unset=True)

        if changes.get("slug"):
            changes["slug"] = slugify(changes["slug"])
        elif changes.get("name"):
            changes["slug"] = slugify(changes["name"])
        else:
            changes.pop("slug", None)

        if changes.get("slug") and await self.category_repository.slug_exists(changes["slug"], exclude_id=category.id):
            raise errors.ConflictError(detail="A category with this slug already exists")

        if "name" in changes and changes["name"] is None:
            changes.pop("name")

        try:
            category = await self.category_repository.update_entity(category, changes)
        except errors.DatabaseError as e:
            logger.exception(
                f"src.domain.services.catalog_service.update_category:: error while updating category: {e}"
            )
            raise errors.ServiceError(detail="Failed to update category") from e

        counts = await self.product_repository.count_active_by_category()
        return self._category_response(category, counts.get(category.id, 0))

    async def delete_category(self, category_id: UUID) -> None:
        """Delete a category. Its products stay in the catalog without a category."""
        await self._get_category(category_id)

        try:
            async with Transaction(self.session):
                await self.product_repository.detach_category(category_id)
                await self.category_repository.delete(category_id)
        except errors.DatabaseError as e:
            logger.exception(
                f"src.domain.services.catalog_service.delete_category:: error while deleting category {category_id}: {e}"
            )
            raise errors.ServiceError(detail="Failed to delete category") from e

    async def _get_category(self, category_id: UUID) -> Category:
        category = await self.category_repository.find_one_by(category_id)
        if not category:
            raise errors.NotFoundError(detail="Category not found")
        return category

    async def _ensure_category(self, category_id: UUID | None) -> None:
        if category_id and not await self.category_repository.exists(category_id):
            raise errors.NotFoundError(detail="Category not found")

    async def _ensure_unique_product_slug(self, slug: str, exclude_id: UUID | None = None) -> None:
        if await self.product_repository.slug_exists(slug, exclude_id=exclude_id):
            raise errors.ConflictError(detail="A product with this slug already exists")

    def _category_response(self, category: Category, product_count: int) -> CategoryResponse:
        response = CategoryResponse.model_validate(category)
        response.product_count = product_count
        return response
