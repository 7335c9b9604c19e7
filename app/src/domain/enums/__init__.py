from .order import OrderStatus, PaymentMethod  # noqa: F401
from .user import UserRole  # noqa: F401

__all__ = ["OrderStatus", "PaymentMethod", "UserRole"]
