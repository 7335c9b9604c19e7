from pydantic import BaseModel, Field
from src.domain.enums import UserRole


class AuthSessionState(BaseModel):
    """
    Represents the authenticated caller, as carried in the bearer token subject.

    Attributes:
        user_id (str): The identity provider's user id.
        email (str | None): The email the provider holds for the user.
        role (UserRole): USER or ADMIN.
    """

    user_id: str = Field(..., min_length=1, max_length=128)
    email: str | None = None
    role: UserRole = UserRole.USER

    def is_admin(self) -> bool:
        return self.role.is_admin()


class AuthSessionToken(BaseModel):
    """
    Represents an issued bearer token.
    """

    access_token: str
    token_type: str = "bearer"
    expires_in: int
