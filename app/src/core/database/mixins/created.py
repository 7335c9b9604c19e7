from datetime import datetime, timezone

from sqlmodel import TIMESTAMP, Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CreatedDateTimeMixin(SQLModel):
    """
    Mixin that adds a creation timestamp to a model.

    Attributes:
        created_datetime (datetime): The datetime when the record was created.
    """

    created_datetime: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        index=True,
        sa_type=TIMESTAMP(timezone=True),  # type: ignore[assignment]
    )
