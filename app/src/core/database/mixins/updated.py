from datetime import datetime

from sqlmodel import TIMESTAMP, Field, SQLModel
from src.core.database.mixins.created import utc_now


class UpdatedDateTimeMixin(SQLModel):
    """
    Mixin that adds a last-update timestamp, refreshed on every UPDATE.

    Attributes:
        updated_datetime (datetime | None): The datetime when the record was last updated.
    """

    updated_datetime: datetime | None = Field(
        default=None,
        nullable=True,
        sa_type=TIMESTAMP(timezone=True),  # type: ignore[assignment]
        sa_column_kwargs={"onupdate": utc_now},
    )
