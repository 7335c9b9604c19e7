from contextvars import ContextVar

REQUEST_ID_CTX = ContextVar("request_id", default="")

# Proxy headers for client IP detection
DEFAULT_PROXY_HEADERS = [
    "X-Forwarded-For",
    "X-Real-IP",
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Client-IP",
]

DEFAULT_PROXY_COUNT = 1

GUEST_ID_HEADER = "X-Guest-Id"
IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"

CART_GUEST_KEY = "cart_guest"
CART_USER_KEY_TEMPLATE = "cart_{user_id}"
CART_GUEST_KEY_TEMPLATE = "cart_guest_{guest_id}"
