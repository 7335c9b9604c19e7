from __future__ import annotations

from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.exceptions import errors
from src.core.logging import get_logger
from src.domain.enums import OrderStatus
from src.domain.models.order import Order
from src.domain.models.order_item import OrderItem
from src.domain.repositories.base_repository import BaseRepository
from src.domain.schemas.order import OrderAdminUpdate

logger = get_logger(__name__)


class OrderRepository(BaseRepository[Order, Any, OrderAdminUpdate]):
    """
    Repository for orders and their lines.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Order, session)

    async def find_for_user(self, user_id: str) -> list[Order]:
        """Orders of one customer, newest first."""
        query = select(Order).where(Order.user_id == user_id).order_by(col(Order.created_datetime).desc())
        result = await self.session.exec(query)
        return list(result.all())

    async def find_recent(self) -> list[Order]:
        """Every order, newest first."""
        query = select(Order).order_by(col(Order.created_datetime).desc())
        result = await self.session.exec(query)
        return list(result.all())

    async def find_by_idempotency_key(self, user_id: str, key: str) -> Order | None:
        return await self.find_one_by_and_none(user_id=user_id, idempotency_key=key)

    async def add_items(self, order: Order, items: list[OrderItem]) -> None:
        """
        Insert the lines of ``order``. Callers run this inside the order's transaction.
        """
        try:
            self.session.add_all(items)
            await self._save_changes()
            await self.session.refresh(order, attribute_names=["items"])
        except SQLAlchemyError as e:
            await self._discard_changes()
            logger.exception(f"src.domain.repositories.order_repository.add_items:: error inserting order items: {e}")
            raise errors.DatabaseError() from e

    async def change_status(
        self, order: Order, expected: OrderStatus, target: OrderStatus, **values: Any
    ) -> bool:
        """
        Move ``order`` from ``expected`` to ``target`` in one conditional statement.

        The WHERE clause only matches while the stored status is still
        ``expected``, so of two requests acting on the same read only one wins.

        Returns:
            bool: False when another request changed the status first
        """
        statement = (
            update(Order)
            .where(col(Order.id) == order.id, col(Order.status) == expected)
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.session.exec(statement)  # type: ignore[call-overload]
            if result.rowcount != 1:
                return False
            await self.session.refresh(order)
        except SQLAlchemyError as e:
            logger.exception(
                f"src.domain.repositories.order_repository.change_status:: error changing status of {order.id}: {e}"
            )
            raise errors.DatabaseError(detail="An error occurred while updating the order.") from e

        return True
