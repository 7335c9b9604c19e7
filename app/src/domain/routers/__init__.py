from .admin.endpoints import router as admin_router  # noqa: F401
from .cart.endpoints import router as cart_router  # noqa: F401
from .catalog.endpoints import router as catalog_router  # noqa: F401
from .favorite.endpoints import router as favorite_router  # noqa: F401
from .health.endpoints import router as health_router  # noqa: F401
from .order.endpoints import router as order_router  # noqa: F401
from .profile.endpoints import router as profile_router  # noqa: F401
from .promotion.endpoints import router as promotion_router  # noqa: F401
