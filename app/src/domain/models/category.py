from sqlalchemy import TEXT, Column
from sqlmodel import Field
from src.core.database.mixins import TimestampMixin, UUIDMixin


class Category(UUIDMixin, TimestampMixin, table=True):
    """
    Represents a product category.

    Attributes:
        id (UUID): The unique identifier for the category.
        name (str): Display name.
        slug (str): URL-friendly unique name, derived from the name when omitted.
        description (str | None): Description of the category.
        image_url (str | None): Cover image.
        is_active (bool): Whether the category is shown in the storefront.
        sort_order (int): Ascending display order.
    """

    name: str = Field(max_length=255, nullable=False, index=True)
    slug: str = Field(max_length=255, nullable=False, unique=True, index=True)
    description: str | None = Field(default=None, sa_column=Column(TEXT(), nullable=True))
    image_url: str | None = Field(default=None, max_length=2048, nullable=True)
    is_active: bool = Field(default=True, nullable=False)
    sort_order: int = Field(default=0, nullable=False)
