from .exceptions import KeyValueConfigurationError, KeyValueConnectionError, KeyValueError, KeyValueKeyError
from .factory import KeyValueFactory
from .interface import ChangeChannel, ChangeListener, KeyValueProvider
from .schemas import (
    ChangeNotification,
    ChannelConfiguration,
    KeyValueConfiguration,
    KeyValueResponse,
    MemoryKeyValueConfiguration,
    RedisKeyValueConfiguration,
)
from .service import KeyValueService, get_kv_service, setup_kv_service, teardown_kv_service

__all__ = [
    # Core classes
    "KeyValueFactory",
    "KeyValueProvider",
    "ChangeChannel",
    "ChangeListener",
    "KeyValueService",
    # Lifecycle
    "get_kv_service",
    "setup_kv_service",
    "teardown_kv_service",
    # Schemas
    "ChangeNotification",
    "ChannelConfiguration",
    "KeyValueConfiguration",
    "KeyValueResponse",
    "MemoryKeyValueConfiguration",
    "RedisKeyValueConfiguration",
    # Exceptions
    "KeyValueError",
    "KeyValueConnectionError",
    "KeyValueKeyError",
    "KeyValueConfigurationError",
]
