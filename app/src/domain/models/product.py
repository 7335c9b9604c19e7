from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import JSON, Boolean, CheckConstraint, Column, Integer, Numeric
from sqlmodel import TEXT, Field, Relationship
from src.core.database.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from src.domain.models import Category


class Product(UUIDMixin, TimestampMixin, table=True):
    """
    A sellable part or accessory. This row is the authority for price and stock.

    Attributes:
        id (UUID): The unique identifier for the product.
        name (str): The name of the product.
        slug (str): URL-friendly unique name.
        description (str | None): Long description.
        short_description (str | None): One-line summary for listings.
        brand (str | None): Manufacturer or brand.
        price (Decimal): Current unit price in the store currency.
        compare_price (Decimal | None): Previous price shown struck through.
        stock (int): Units available. Never negative.
        images (list[str]): Image URLs, first one is the cover.
        is_active (bool): Whether the product is offered for sale.
        is_best_selling (bool): Flag for the best sellers shelf.
        category_id (UUID | None): The category this product belongs to.
        created_datetime (datetime): The timestamp when the product was created.
        updated_datetime (datetime | None): The timestamp when the product was last updated.
    """

    __table_args__ = (
        CheckConstraint("stock >= 0", name="chk_products_stock_non_negative"),
        CheckConstraint("price > 0", name="chk_products_price_positive"),
    )

    name: str = Field(sa_column=Column(TEXT(), nullable=False, index=True))
    slug: str = Field(max_length=255, nullable=False, unique=True, index=True)
    description: str | None = Field(default=None, sa_column=Column(TEXT(), nullable=True))
    short_description: str | None = Field(default=None, max_length=500, nullable=True)
    brand: str | None = Field(default=None, max_length=255, nullable=True)
    price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    compare_price: Decimal | None = Field(default=None, sa_column=Column(Numeric(12, 2), nullable=True))
    stock: int = Field(default=0, sa_column=Column(Integer(), nullable=False, default=0))
    images: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False, default=list))
    is_active: bool = Field(default=True, sa_column=Column(Boolean(), nullable=False, default=True, index=True))
    is_best_selling: bool = Field(default=False, sa_column=Column(Boolean(), nullable=False, default=False))

    category_id: UUID | None = Field(default=None, foreign_key="categories.id", index=True, nullable=True)

    # Relationships
    category: Optional["Category"] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})

    def has_stock_for(self, quantity: int) -> bool:
        return self.stock >= quantity
