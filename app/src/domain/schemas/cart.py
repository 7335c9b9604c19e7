from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from src.core.constants import CART_GUEST_KEY, CART_GUEST_KEY_TEMPLATE, CART_USER_KEY_TEMPLATE


class CartProductSnapshot(BaseModel):
    """
    Denormalized copy of a product taken when it was added to the cart.
    It is display data only; checkout re-reads the ledger.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    price: Decimal = Decimal("0")
    description: str | None = None
    stock: int | None = Field(None, description="Stock ceiling known when the snapshot was taken")
    images: list[str] = Field(default_factory=list)
    is_active: bool = True


class CartLineItem(BaseModel):
    """
    A line of a cart.

    Attributes:
        id (str): Line key, ``{product_id}-{epoch_millis}``.
        product_id (str): The product the line refers to.
        quantity (int): Units, at least one.
        price (Decimal): Unit price captured when the line was created.
        product (CartProductSnapshot): Display copy of the product.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    product: CartProductSnapshot

    @model_validator(mode="before")
    @classmethod
    def _fill_product_snapshot(cls, data: Any) -> Any:
        # lines written by older clients carried flat name/price fields and no snapshot
        if isinstance(data, dict) and not isinstance(data.get("product"), (dict, CartProductSnapshot)):
            data = dict(data)
            data["product"] = {
                "id": data.get("product_id"),
                "name": data.get("name", ""),
                "price": data.get("price", 0),
                "images": data.get("images") or [],
            }
        return data

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class CartSnapshot(BaseModel):
    """The cart as presented to callers."""

    items: list[CartLineItem]
    item_count: int
    total: Decimal
    currency: str
    formatted_total: str


class AddToCartRequest(BaseModel):
    """
    Schema for adding a product to the cart. Quantities below one are ignored.
    """

    product_id: str = Field(..., min_length=1)
    quantity: int = 1


class UpdateCartItemRequest(BaseModel):
    """
    Schema for changing a line quantity. Quantities below one are ignored.
    """

    quantity: int


class CartIdentity(BaseModel):
    """
    Whose cart a store is bound to. Guest and user carts live under different
    keys and are never merged.

    Attributes:
        user_id (str | None): Authenticated user id.
        guest_id (str | None): Guest id tracked by the ``X-Guest-Id`` header.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str | None = None
    guest_id: str | None = None

    @property
    def storage_key(self) -> str:
        if self.user_id:
            return CART_USER_KEY_TEMPLATE.format(user_id=self.user_id)
        if self.guest_id:
            return CART_GUEST_KEY_TEMPLATE.format(guest_id=self.guest_id)
        return CART_GUEST_KEY

    def is_guest(self) -> bool:
        return not self.user_id
