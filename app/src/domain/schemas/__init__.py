from .auth import AuthSessionState, AuthSessionToken  # noqa: F401
from .cart import (  # noqa: F401
    AddToCartRequest,
    CartIdentity,
    CartLineItem,
    CartProductSnapshot,
    CartSnapshot,
    UpdateCartItemRequest,
)
from .category import CategoryCreate, CategoryResponse, CategoryUpdate  # noqa: F401
from .favorite import FavoriteResponse, FavoriteStatusResponse  # noqa: F401
from .order import (  # noqa: F401
    CheckoutContact,
    CheckoutLine,
    CheckoutRequest,
    CheckoutResponse,
    OrderAdminUpdate,
    OrderCancelResponse,
    OrderItemResponse,
    OrderResponse,
)
from .product import ProductCategoryResponse, ProductCreate, ProductResponse, ProductUpdate  # noqa: F401
from .promotion import PromotionCreate, PromotionResponse, PromotionUpdate  # noqa: F401
from .user_profile import CustomerCountResponse, UserProfileResponse, UserProfileUpdate  # noqa: F401
