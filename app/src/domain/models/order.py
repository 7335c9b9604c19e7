from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import VARCHAR, Numeric, UniqueConstraint
from sqlmodel import TIMESTAMP, Column, Field, Relationship
from src.core.database.mixins import TimestampMixin, UUIDMixin
from src.domain.enums import OrderStatus, PaymentMethod

if TYPE_CHECKING:
    from src.domain.models import OrderItem


class Order(UUIDMixin, TimestampMixin, table=True):
    """
    Represents a cash-on-delivery order.

    Totals are fixed at creation from ledger prices. Afterwards only the
    status, delivery location and phone may change.

    Attributes:
        id (UUID): The unique identifier for the order.
        order_number (str): Human-readable unique number, e.g. ORD-20240101-3F2A9C01BD.
        user_id (str | None): Identity-provider user id of the customer.
        email (str | None): Customer email at checkout.
        phone (str): Contact phone for delivery.
        location_name (str): Delivery location descriptor.
        address (str | None): Mirror of the delivery location kept for older clients.
        latitude (float | None): Delivery latitude, when known.
        longitude (float | None): Delivery longitude, when known.
        distance_km (Decimal): Delivery distance, zero in simple checkout.
        transport_fee (Decimal): Delivery fee, zero in simple checkout.
        service_fee (Decimal): Service fee, zero in simple checkout.
        products_total (Decimal): Sum of line totals.
        total_amount (Decimal): Amount due on delivery.
        payment_method (PaymentMethod): Always COD.
        status (OrderStatus): Current lifecycle state.
        idempotency_key (str | None): Client supplied key deduplicating retried checkouts.
        cancelled_datetime (datetime | None): When the order was cancelled.
        created_datetime (datetime): When the order was placed.
        updated_datetime (datetime | None): When the order was last updated.
    """

    __table_args__ = (UniqueConstraint("user_id", "idempotency_key", name="uq_orders_user_idempotency_key"),)

    order_number: str = Field(max_length=64, nullable=False, unique=True, index=True)
    user_id: str | None = Field(default=None, max_length=128, nullable=True, index=True)
    email: str | None = Field(default=None, max_length=320, nullable=True)
    phone: str = Field(max_length=50, nullable=False)
    location_name: str = Field(max_length=500, nullable=False)
    address: str | None = Field(default=None, max_length=500, nullable=True)
    latitude: float | None = Field(default=None, nullable=True)
    longitude: float | None = Field(default=None, nullable=True)
    distance_km: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(10, 2), nullable=False, default=0))
    transport_fee: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0))
    service_fee: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0))
    products_total: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    total_amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.COD,
        sa_column=Column(VARCHAR(20), nullable=False, default=PaymentMethod.COD),
    )
    status: OrderStatus = Field(
        default=OrderStatus.PENDING,
        sa_column=Column(VARCHAR(32), nullable=False, index=True, default=OrderStatus.PENDING),
    )
    idempotency_key: str | None = Field(default=None, max_length=255, nullable=True, index=True)
    cancelled_datetime: datetime | None = Field(
        default=None,
        nullable=True,
        sa_type=TIMESTAMP(timezone=True),  # type: ignore[assignment]
    )

    # Relationships
    items: list["OrderItem"] = Relationship(back_populates="order", sa_relationship_kwargs={"lazy": "selectin"})

    def is_owned_by(self, user_id: str | None) -> bool:
        return user_id is not None and self.user_id == user_id
