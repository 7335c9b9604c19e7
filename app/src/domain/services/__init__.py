from .cart_service import CartSession  # noqa: F401
from .cart_store import LocalCartStore  # noqa: F401
from .catalog_service import CatalogService  # noqa: F401
from .favorite_service import FavoriteService  # noqa: F401
from .order_service import OrderService, generate_order_number  # noqa: F401
from .order_state_machine import OrderStateMachine  # noqa: F401
from .promotion_service import PromotionService  # noqa: F401
from .security_service import SecurityService, security_service  # noqa: F401
from .storefront_session import FavoritesCache, StorefrontSession  # noqa: F401
from .user_profile_service import UserProfileService  # noqa: F401
