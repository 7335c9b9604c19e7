from .auth import AuthenticationError, InvalidTokenError  # noqa: F401
from .authz import AdminRequiredError, AuthorizationError  # noqa: F401
from .base import (  # noqa: F401
    ConflictError,
    InternalServerError,
    NotFoundError,
    RateLimitExceededError,
    ServiceError,
    ValidationError,
)
from .database import DatabaseError  # noqa: F401
from .order import (  # noqa: F401
    EmptyCartError,
    InsufficientStockError,
    InvalidCartProductError,
    InvalidOrderTransitionError,
    MissingDeliveryDetailsError,
    OrderCreationError,
    OrderNotCancellableError,
    OrderNotFoundError,
    OrderStatusConflictError,
    StockConflictError,
)

__all__ = [
    "AuthenticationError",
    "InvalidTokenError",
    "AdminRequiredError",
    "AuthorizationError",
    "ConflictError",
    "InternalServerError",
    "NotFoundError",
    "RateLimitExceededError",
    "ServiceError",
    "ValidationError",
    "DatabaseError",
    "EmptyCartError",
    "InsufficientStockError",
    "InvalidCartProductError",
    "InvalidOrderTransitionError",
    "MissingDeliveryDetailsError",
    "OrderCreationError",
    "OrderNotCancellableError",
    "OrderNotFoundError",
    "OrderStatusConflictError",
    "StockConflictError",
]
