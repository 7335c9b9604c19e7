from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship
from src.core.database.mixins import CreatedDateTimeMixin, UUIDMixin

if TYPE_CHECKING:
    from src.domain.models import Product


class Favorite(UUIDMixin, CreatedDateTimeMixin, table=True):
    """
    A product saved by a user.

    Attributes:
        id (UUID): The unique identifier for the favorite.
        user_id (str): Identity-provider user id.
        product_id (UUID): The saved product.
        created_datetime (datetime): When the product was saved.
    """

    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_favorites_user_product"),)

    user_id: str = Field(max_length=128, nullable=False, index=True)
    product_id: UUID = Field(foreign_key="products.id", nullable=False, index=True)

    # Relationships
    product: "Product" = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
