from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.exceptions import errors
from src.core.logging import get_logger
from src.domain.models.product import Product
from src.domain.repositories.base_repository import BaseRepository
from src.domain.schemas.product import ProductCreate, ProductUpdate

logger = get_logger(__name__)


class ProductRepository(BaseRepository[Product, ProductCreate, ProductUpdate]):
    """
    Repository for the product ledger: catalog reads plus the stock mutations
    used by checkout and cancellation.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Product, session)

    async def get_active_by_ids(self, ids: Iterable[UUID]) -> dict[UUID, Product]:
        """
        Load every active product among ``ids`` in a single query.

        Returns:
            dict[UUID, Product]: Products keyed by id. Missing or inactive ids are absent.
        """
        id_list = list(set(ids))
        if not id_list:
            return {}

        try:
            query = (
                select(Product)
                .where(col(Product.id).in_(id_list), col(Product.is_active).is_(True))
                .execution_options(populate_existing=True)
            )
            result = await self.session.exec(query)
            return {product.id: product for product in result.all()}
        except SQLAlchemyError as e:
            logger.exception(
                f"src.domain.repositories.product_repository.get_active_by_ids:: error while loading products: {e}"
            )
            raise errors.DatabaseError(detail="An error occurred while retrieving products.") from e

    async def get_active(self, product_id: UUID) -> Product | None:
        return (await self.get_active_by_ids([product_id])).get(product_id)

    async def find_active(self, category_id: UUID | None = None) -> list[Product]:
        """Active products, newest first."""
        query = select(Product).where(col(Product.is_active).is_(True))
        if category_id:
            query = query.where(Product.category_id == category_id)

        query = query.order_by(col(Product.created_datetime).desc())
        result = await self.session.exec(query)
        return list(result.all())

    async def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        query = select(Product.id).where(Product.slug == slug)
        if exclude_id:
            query = query.where(Product.id != exclude_id)
        return (await self.session.exec(query)).first() is not None

    async def count_active_by_category(self) -> dict[UUID, int]:
        query = (
            select(Product.category_id, func.count())
            .where(col(Product.is_active).is_(True), col(Product.category_id).is_not(None))
            .group_by(Product.category_id)
        )
        result = await self.session.exec(query)
        return {category_id: int(count) for category_id, count in result.all()}

    async def decrement_stock(self, product_id: UUID, quantity: int) -> bool:
        """
        Take ``quantity`` units in one conditional statement.

        The WHERE clause only matches while enough stock remains, so two
        concurrent checkouts can never drive stock below zero.

        Returns:
            bool: False when the stock was no longer sufficient
        """
        statement = (
            update(Product)
            .where(col(Product.id) == product_id, col(Product.stock) >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.session.exec(statement)  # type: ignore[call-overload]
        except SQLAlchemyError as e:
            logger.exception(
                f"src.domain.repositories.product_repository.decrement_stock:: error decrementing stock for {product_id}: {e}"
            )
            raise errors.DatabaseError(detail="An error occurred while updating stock.") from e

        return result.rowcount == 1

    async def restore_stock(self, product_id: UUID, quantity: int) -> None:
        """Give back ``quantity`` units, e.g. when an order is cancelled."""
        statement = (
            update(Product)
            .where(col(Product.id) == product_id)
            .values(stock=Product.stock + quantity)
            .execution_options(synchronize_session=False)
        )

        try:
            await self.session.exec(statement)  # type: ignore[call-overload]
        except SQLAlchemyError as e:
            logger.exception(
                f"src.domain.repositories.product_repository.restore_stock:: error restoring stock for {product_id}: {e}"
            )
            raise errors.DatabaseError(detail="An error occurred while updating stock.") from e

    async def detach_category(self, category_id: UUID) -> None:
        """Leave the products of a deleted category uncategorized."""
        statement = (
            update(Product)
            .where(col(Product.category_id) == category_id)
            .values(category_id=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.exec(statement)  # type: ignore[call-overload]
