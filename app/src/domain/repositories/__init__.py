from .base_repository import BaseRepository  # noqa: F401
from .category_repository import CategoryRepository  # noqa: F401
from .favorite_repository import FavoriteRepository  # noqa: F401
from .order_repository import OrderRepository  # noqa: F401
from .product_repository import ProductRepository  # noqa: F401
from .promotion_repository import PromotionRepository  # noqa: F401
from .user_profile_repository import UserProfileRepository  # noqa: F401
