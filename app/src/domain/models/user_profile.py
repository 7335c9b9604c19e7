from sqlalchemy import VARCHAR
from sqlmodel import Column, Field
from src.core.database.mixins import StringIDMixin, TimestampMixin
from src.domain.enums import UserRole


class UserProfile(StringIDMixin, TimestampMixin, table=True):
    """
    Storefront profile of an identity-provider user. The id is the provider's user id.

    Attributes:
        id (str): The identity provider's user id.
        email (str | None): Contact email.
        first_name (str | None): Given name.
        last_name (str | None): Family name.
        phone (str | None): Contact phone number.
        avatar_url (str | None): Avatar image URL.
        role (UserRole): USER or ADMIN.
        email_verified (bool): Whether the provider verified the email.
    """

    email: str | None = Field(default=None, max_length=320, nullable=True, index=True)
    first_name: str | None = Field(default=None, max_length=255, nullable=True)
    last_name: str | None = Field(default=None, max_length=255, nullable=True)
    phone: str | None = Field(default=None, max_length=50, nullable=True)
    avatar_url: str | None = Field(default=None, max_length=2048, nullable=True)
    role: UserRole = Field(
        default=UserRole.USER,
        sa_column=Column(VARCHAR(20), nullable=False, default=UserRole.USER),
    )
    email_verified: bool = Field(default=False, nullable=False)

    @property
    def is_admin(self) -> bool:
        return UserRole(self.role).is_admin()
