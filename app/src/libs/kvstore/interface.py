from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from src.libs.kvstore.schemas import ChangeNotification, KeyValueResponse

ChangeListener = Callable[["ChangeNotification"], Awaitable[None]]


class KeyValueProvider(ABC):
    """
    Base abstract class for string key-value stores.

    Values are opaque strings; callers own serialization so that unreadable
    content can be detected and handled by them.
    """

    def __init__(self, config: Any) -> None:
        self.config = config

    @abstractmethod
    async def get(self, key: str) -> "KeyValueResponse":
        """
        Read the value stored under ``key``.

        Returns:
            KeyValueResponse: ``value`` is None when the key is absent
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> "KeyValueResponse":
        """
        Replace the value stored under ``key``.

        Args:
            key (str): The key
            value (str): The serialized value
            ttl (Optional[int]): Expiry in seconds, falls back to the configured default
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> "KeyValueResponse":
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    def _build_key(self, key: str) -> str:
        return f"{self.config.key_prefix}:{key}"

    def _validate_key(self, key: str) -> None:
        """
        Raises:
            KeyValueKeyError: If the key is empty, not a string or too long
        """
        from src.libs.kvstore.exceptions import KeyValueKeyError

        if not key or not isinstance(key, str):
            raise KeyValueKeyError("Key must be a non-empty string")

        if len(self._build_key(key)) > self.config.max_key_length:
            raise KeyValueKeyError(f"Key too long (max {self.config.max_key_length} characters)")


class ChangeChannel(ABC):
    """
    Base abstract class for change broadcast channels.

    A publish on a topic reaches every listener subscribed to that topic,
    including listeners in the publishing process.
    """

    def __init__(self, config: Any) -> None:
        self.config = config

    @abstractmethod
    async def publish(self, notification: "ChangeNotification") -> None:
        pass

    @abstractmethod
    async def subscribe(self, topic: str, listener: ChangeListener) -> None:
        pass

    @abstractmethod
    async def unsubscribe(self, topic: str, listener: ChangeListener) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    def _build_topic(self, topic: str) -> str:
        return f"{self.config.channel_prefix}:{topic}"
