from .memory import MemoryChangeChannel, MemoryKeyValueProvider  # noqa: F401
from .redis import RedisChangeChannel, RedisKeyValueProvider  # noqa: F401

__all__ = ["MemoryChangeChannel", "MemoryKeyValueProvider", "RedisChangeChannel", "RedisKeyValueProvider"]
