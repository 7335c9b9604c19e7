from sqlalchemy import TEXT, CheckConstraint, Column
from sqlmodel import Field
from src.core.database.mixins import TimestampMixin, UUIDMixin


class Promotion(UUIDMixin, TimestampMixin, table=True):
    """
    A marketing banner shown on the storefront.

    Attributes:
        id (UUID): The unique identifier for the promotion.
        title (str): Headline.
        description (str | None): Body copy.
        image (str | None): Banner image URL.
        banner_text (str | None): Short call-out text.
        discount (int | None): Advertised discount percentage.
        is_active (bool): Whether the banner is shown.
    """

    __table_args__ = (
        CheckConstraint("discount IS NULL OR (discount >= 0 AND discount <= 100)", name="chk_promotions_discount"),
    )

    title: str = Field(max_length=255, nullable=False)
    description: str | None = Field(default=None, sa_column=Column(TEXT(), nullable=True))
    image: str | None = Field(default=None, max_length=2048, nullable=True)
    banner_text: str | None = Field(default=None, max_length=255, nullable=True)
    discount: int | None = Field(default=None, nullable=True)
    is_active: bool = Field(default=True, nullable=False, index=True)
