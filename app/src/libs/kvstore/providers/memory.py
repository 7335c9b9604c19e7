import time
from collections import OrderedDict
from threading import RLock
from typing import Optional

from src.core.logging import get_logger
from src.libs.kvstore.exceptions import KeyValueKeyError
from src.libs.kvstore.interface import ChangeChannel, ChangeListener, KeyValueProvider
from src.libs.kvstore.schemas import (
    ChangeNotification,
    ChannelConfiguration,
    KeyValueItem,
    KeyValueResponse,
    MemoryKeyValueConfiguration,
)

logger = get_logger(__name__)


class MemoryKeyValueProvider(KeyValueProvider):
    """
    In-process store. Expired entries are dropped lazily on access and the
    least recently written entry is evicted once ``max_size`` is reached.
    """

    def __init__(self, config: MemoryKeyValueConfiguration) -> None:
        super().__init__(config)
        self.config: MemoryKeyValueConfiguration = config
        self._store: "OrderedDict[str, KeyValueItem]" = OrderedDict()
        self._lock = RLock()

    def _is_expired(self, item: KeyValueItem) -> bool:
        return item.expires_at is not None and time.time() > item.expires_at

    async def get(self, key: str) -> KeyValueResponse:
        try:
            self._validate_key(key)
        except KeyValueKeyError as e:
            return KeyValueResponse(success=False, error=e.message)

        store_key = self._build_key(key)

        with self._lock:
            item = self._store.get(store_key)
            if item is None:
                return KeyValueResponse(success=True)

            if self._is_expired(item):
                del self._store[store_key]
                return KeyValueResponse(success=True)

            return KeyValueResponse(success=True, value=item.value)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> KeyValueResponse:
        try:
            self._validate_key(key)
        except KeyValueKeyError as e:
            return KeyValueResponse(success=False, error=e.message)

        ttl = ttl if ttl is not None else self.config.default_ttl
        store_key = self._build_key(key)

        with self._lock:
            self._store.pop(store_key, None)

            while len(self._store) >= self.config.max_size:
                evicted, _ = self._store.popitem(last=False)
                logger.debug(f"Evicted key {evicted} from memory store")

            self._store[store_key] = KeyValueItem(
                value=value,
                expires_at=time.time() + ttl if ttl and ttl > 0 else None,
            )

        return KeyValueResponse(success=True)

    async def delete(self, key: str) -> KeyValueResponse:
        try:
            self._validate_key(key)
        except KeyValueKeyError as e:
            return KeyValueResponse(success=False, error=e.message)

        with self._lock:
            self._store.pop(self._build_key(key), None)

        return KeyValueResponse(success=True)

    async def exists(self, key: str) -> bool:
        response = await self.get(key)
        return response.success and response.value is not None

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        with self._lock:
            self._store.clear()


class MemoryChangeChannel(ChangeChannel):
    """
    In-process broadcast. Listeners are awaited in subscription order; a
    failing listener is logged and does not prevent delivery to the others.
    """

    def __init__(self, config: ChannelConfiguration) -> None:
        super().__init__(config)
        self._listeners: dict[str, list[ChangeListener]] = {}

    async def publish(self, notification: ChangeNotification) -> None:
        topic = self._build_topic(notification.key)

        for listener in list(self._listeners.get(topic, [])):
            try:
                await listener(notification)
            except Exception as e:
                logger.exception(
                    f"src.libs.kvstore.providers.memory.publish:: Listener failed for topic {topic}: {e}"
                )

    async def subscribe(self, topic: str, listener: ChangeListener) -> None:
        listeners = self._listeners.setdefault(self._build_topic(topic), [])
        if listener not in listeners:
            listeners.append(listener)

    async def unsubscribe(self, topic: str, listener: ChangeListener) -> None:
        full_topic = self._build_topic(topic)
        listeners = self._listeners.get(full_topic, [])

        if listener in listeners:
            listeners.remove(listener)

        if not listeners:
            self._listeners.pop(full_topic, None)

    def listener_count(self, topic: str) -> int:
        return len(self._listeners.get(self._build_topic(topic), []))

    async def close(self) -> None:
        self._listeners.clear()
