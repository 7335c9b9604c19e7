from uuid import UUID, uuid4

import inflection
from sqlalchemy.orm import declared_attr
from sqlmodel import Field, SQLModel


class BaseIDMixin(SQLModel):
    """
    A base mixin for models with a primary key.\n

    Derives the table name from the class name (``OrderItem`` -> ``order_items``).
    """

    @declared_attr  # type: ignore
    def __tablename__(cls) -> str:  # type: ignore
        return inflection.pluralize(inflection.underscore(cls.__name__))


class UUIDMixin(BaseIDMixin):
    """
    A mixin for models with a UUID primary key.

    Attributes:\n
        id (UUID): The primary key field.
    """

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        index=True,
        nullable=False,
    )


class StringIDMixin(BaseIDMixin):
    """
    A mixin for models whose primary key is issued elsewhere, such as the
    identity provider's user id.

    Attributes:\n
        id (str): The primary key field.
    """

    id: str = Field(primary_key=True, index=True, max_length=128)
