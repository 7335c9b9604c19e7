from enum import StrEnum


class UserRole(StrEnum):
    """
    Enumeration of storefront roles

    Attributes:
        USER: A shopper.
        ADMIN: Staff with access to catalog and order management.
    """

    USER = "USER"
    ADMIN = "ADMIN"

    def is_admin(self) -> bool:
        return self == UserRole.ADMIN
