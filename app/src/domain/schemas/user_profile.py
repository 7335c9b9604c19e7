from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from src.core.helpers.schema import optional
from src.domain.enums import UserRole


class UserProfileBase(BaseModel):
    email: EmailStr | None = None
    first_name: str | None = Field(None, max_length=255)
    last_name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    avatar_url: str | None = Field(None, max_length=2048)


@optional
class UserProfileUpdate(UserProfileBase):
    """
    Fields a user may change on their own profile. ``role`` is honoured
    only when an administrator sends it.
    """

    role: UserRole | None = None


class UserProfileResponse(UserProfileBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str | None = None
    role: UserRole
    email_verified: bool
    is_admin: bool
    created_datetime: datetime


class CustomerCountResponse(BaseModel):
    count: int
