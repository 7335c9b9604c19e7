from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from src.core.helpers.schema import optional
from src.domain.enums import OrderStatus, PaymentMethod
from src.domain.schemas.product import ProductCategoryResponse


class CheckoutLine(BaseModel):
    """A product and the quantity requested."""

    product_id: UUID
    quantity: int = Field(..., ge=1)


class CheckoutContact(BaseModel):
    phone: str = Field("", max_length=50)
    email: str | None = Field(None, max_length=320)


class CheckoutRequest(BaseModel):
    """
    A cart snapshot submitted for checkout. Prices are never accepted from
    the client.

    Attributes:
        lines (list[CheckoutLine]): Products and quantities.
        contact (CheckoutContact): Phone and optional email.
        delivery_location (str): Free-text delivery location.
        latitude (float | None): Optional delivery latitude.
        longitude (float | None): Optional delivery longitude.
    """

    lines: list[CheckoutLine] = Field(default_factory=list)
    contact: CheckoutContact = Field(default_factory=CheckoutContact)
    delivery_location: str = Field("", max_length=500)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


class CheckoutResponse(BaseModel):
    """
    Order confirmation returned by checkout.
    """

    order_id: UUID
    order_number: str
    products_total: Decimal
    transport_fee: Decimal
    service_fee: Decimal
    total_amount: Decimal
    payment_method: PaymentMethod
    status: OrderStatus


class OrderItemProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    images: list[str] = Field(default_factory=list)
    category: ProductCategoryResponse | None = None


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    quantity: int
    price: Decimal
    product: OrderItemProductResponse | None = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_number: str
    user_id: str | None = None
    email: str | None = None
    phone: str
    location_name: str
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    distance_km: Decimal
    transport_fee: Decimal
    service_fee: Decimal
    products_total: Decimal
    total_amount: Decimal
    payment_method: PaymentMethod
    status: OrderStatus
    cancelled_datetime: datetime | None = None
    created_datetime: datetime
    updated_datetime: datetime | None = None
    items: list[OrderItemResponse] = Field(default_factory=list)


class OrderCancelResponse(BaseModel):
    id: UUID
    status: OrderStatus
    cancelled_at: datetime | None


class OrderAdminUpdateBase(BaseModel):
    status: OrderStatus
    location_name: str = Field(..., min_length=1, max_length=500)
    phone: str = Field(..., min_length=1, max_length=50)


@optional
class OrderAdminUpdate(OrderAdminUpdateBase):
    """
    Fields an administrator may change on an existing order.
    """

    pass
