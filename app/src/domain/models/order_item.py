from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, Numeric
from sqlmodel import Column, Field, Relationship
from src.core.database.mixins import CreatedDateTimeMixin, UUIDMixin

if TYPE_CHECKING:
    from src.domain.models import Order, Product


class OrderItem(UUIDMixin, CreatedDateTimeMixin, table=True):
    """
    Represents a line of an order. Immutable once written.

    Attributes:
        id (UUID): The unique identifier for the order item.
        order_id (UUID): ID of the order.
        product_id (UUID): ID of the product ordered.
        quantity (int): Quantity ordered.
        price (Decimal): Ledger unit price at the time of the order.
        created_datetime (datetime): When the line was written.
    """

    __table_args__ = (CheckConstraint("quantity >= 1", name="chk_order_items_quantity_positive"),)

    order_id: UUID = Field(foreign_key="orders.id", nullable=False, index=True)
    product_id: UUID = Field(foreign_key="products.id", nullable=False, index=True)
    quantity: int = Field(nullable=False)
    price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    # Relationships
    order: "Order" = Relationship(back_populates="items")
    product: "Product" = Relationship(sa_relationship_kwargs={"lazy": "selectin"})

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
