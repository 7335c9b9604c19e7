from dataclasses import dataclass, field
from typing import Optional


@dataclass
class KeyValueConfiguration:
    """Base key-value store configuration."""

    key_prefix: str = "autohub"
    default_ttl: Optional[int] = None
    max_key_length: int = 250


@dataclass
class MemoryKeyValueConfiguration(KeyValueConfiguration):
    """In-process store configuration."""

    max_size: int = 10_000


@dataclass
class RedisKeyValueConfiguration(KeyValueConfiguration):
    """Redis store configuration."""

    url: str = "redis://localhost:6379/1"
    socket_timeout: int = 5
    socket_connect_timeout: int = 5
    retry_on_timeout: bool = True
    health_check_interval: int = 30


@dataclass
class ChannelConfiguration:
    """Change channel configuration."""

    channel_prefix: str = "cart-updated"
    url: Optional[str] = None


@dataclass
class KeyValueItem:
    """Stored value with its expiry."""

    value: str
    expires_at: Optional[float] = None


@dataclass
class KeyValueResponse:
    """Response object for store operations."""

    success: bool
    value: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ChangeNotification:
    """
    Signal that the value under ``key`` was rewritten.

    Carries no payload: listeners re-read the whole value.
    """

    key: str
    source_id: Optional[str] = None
    metadata: dict = field(default_factory=dict)
