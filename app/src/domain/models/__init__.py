from .category import Category  # noqa: F401
from .favorite import Favorite  # noqa: F401
from .order import Order  # noqa: F401
from .order_item import OrderItem  # noqa: F401
from .product import Product  # noqa: F401
from .promotion import Promotion  # noqa: F401
from .user_profile import UserProfile  # noqa: F401

__all__ = ["Category", "Favorite", "Order", "OrderItem", "Product", "Promotion", "UserProfile"]
