import asyncio
import json
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from src.core.logging import get_logger
from src.libs.kvstore.exceptions import KeyValueConnectionError, KeyValueKeyError
from src.libs.kvstore.interface import ChangeChannel, ChangeListener, KeyValueProvider
from src.libs.kvstore.schemas import (
    ChangeNotification,
    ChannelConfiguration,
    KeyValueResponse,
    RedisKeyValueConfiguration,
)

logger = get_logger(__name__)


class RedisKeyValueProvider(KeyValueProvider):
    """
    Redis store over a lazily created connection pool.
    """

    def __init__(self, config: RedisKeyValueConfiguration) -> None:
        super().__init__(config)
        self.config: RedisKeyValueConfiguration = config
        self._client: Optional[redis.Redis] = None

    async def _get_client(self) -> redis.Redis:
        if self._client is None:
            try:
                self._client = redis.Redis.from_url(
                    self.config.url,
                    socket_timeout=self.config.socket_timeout,
                    socket_connect_timeout=self.config.socket_connect_timeout,
                    retry_on_timeout=self.config.retry_on_timeout,
                    health_check_interval=self.config.health_check_interval,
                    decode_responses=True,
                )
                await self._client.ping()
                logger.info("Redis key-value provider connected successfully")
            except RedisError as e:
                self._client = None
                logger.error(f"Failed to connect to Redis: {str(e)}")
                raise KeyValueConnectionError(f"Failed to connect to Redis: {str(e)}")

        return self._client

    async def get(self, key: str) -> KeyValueResponse:
        try:
            self._validate_key(key)
            client = await self._get_client()
            value = await client.get(self._build_key(key))
            return KeyValueResponse(success=True, value=value)
        except (KeyValueKeyError, KeyValueConnectionError) as e:
            logger.error(f"Key-value get failed for key {key}: {e.message}")
            return KeyValueResponse(success=False, error=e.message)
        except RedisError as e:
            logger.error(f"Unexpected error during key-value get for key {key}: {str(e)}")
            return KeyValueResponse(success=False, error=f"Failed to read value: {str(e)}")

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> KeyValueResponse:
        try:
            self._validate_key(key)
            client = await self._get_client()
            ttl = ttl if ttl is not None else self.config.default_ttl

            if ttl and ttl > 0:
                await client.setex(self._build_key(key), ttl, value)
            else:
                await client.set(self._build_key(key), value)

            return KeyValueResponse(success=True)
        except (KeyValueKeyError, KeyValueConnectionError) as e:
            logger.error(f"Key-value set failed for key {key}: {e.message}")
            return KeyValueResponse(success=False, error=e.message)
        except RedisError as e:
            logger.error(f"Unexpected error during key-value set for key {key}: {str(e)}")
            return KeyValueResponse(success=False, error=f"Failed to write value: {str(e)}")

    async def delete(self, key: str) -> KeyValueResponse:
        try:
            self._validate_key(key)
            client = await self._get_client()
            await client.delete(self._build_key(key))
            return KeyValueResponse(success=True)
        except (KeyValueKeyError, KeyValueConnectionError) as e:
            return KeyValueResponse(success=False, error=e.message)
        except RedisError as e:
            logger.error(f"Unexpected error during key-value delete for key {key}: {str(e)}")
            return KeyValueResponse(success=False, error=f"Failed to delete value: {str(e)}")

    async def exists(self, key: str) -> bool:
        response = await self.get(key)
        return response.success and response.value is not None

    async def health_check(self) -> bool:
        try:
            client = await self._get_client()
            return bool(await client.ping())
        except (KeyValueConnectionError, RedisError):
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class RedisChangeChannel(ChangeChannel):
    """
    Redis PUBLISH/SUBSCRIBE broadcast. One reader task per process dispatches
    incoming messages to the local listeners of the matching topic.
    """

    def __init__(self, config: ChannelConfiguration) -> None:
        super().__init__(config)
        self._client: Optional[redis.Redis] = None
        self._pubsub = None
        self._reader: Optional[asyncio.Task] = None
        self._listeners: dict[str, list[ChangeListener]] = {}

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            if not self.config.url:
                raise KeyValueConnectionError("Change channel url is not configured")
            self._client = redis.Redis.from_url(self.config.url, decode_responses=True)
        return self._client

    async def publish(self, notification: ChangeNotification) -> None:
        payload = json.dumps(
            {"key": notification.key, "source_id": notification.source_id, "metadata": notification.metadata}
        )

        try:
            await self._get_client().publish(self._build_topic(notification.key), payload)
        except RedisError as e:
            logger.error(f"src.libs.kvstore.providers.redis.publish:: Failed to publish change: {e}")

    async def subscribe(self, topic: str, listener: ChangeListener) -> None:
        full_topic = self._build_topic(topic)
        listeners = self._listeners.setdefault(full_topic, [])

        if listener in listeners:
            return

        listeners.append(listener)

        if self._pubsub is None:
            self._pubsub = self._get_client().pubsub()

        if len(listeners) == 1:
            await self._pubsub.subscribe(full_topic)

        if self._reader is None or self._reader.done():
            self._reader = asyncio.create_task(self._read_messages())

    async def unsubscribe(self, topic: str, listener: ChangeListener) -> None:
        full_topic = self._build_topic(topic)
        listeners = self._listeners.get(full_topic, [])

        if listener in listeners:
            listeners.remove(listener)

        if not listeners and full_topic in self._listeners:
            del self._listeners[full_topic]
            if self._pubsub is not None:
                await self._pubsub.unsubscribe(full_topic)

    async def _read_messages(self) -> None:
        while self._pubsub is not None:
            try:
                message = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            except asyncio.CancelledError:
                break
            except RedisError as e:
                logger.error(f"src.libs.kvstore.providers.redis._read_messages:: Subscription failed: {e}")
                await asyncio.sleep(1.0)
                continue

            if not message:
                continue

            await self._dispatch(message["channel"], message["data"])

    async def _dispatch(self, topic: str, data: str) -> None:
        try:
            payload = json.loads(data)
            notification = ChangeNotification(
                key=payload["key"],
                source_id=payload.get("source_id"),
                metadata=payload.get("metadata") or {},
            )
        except (TypeError, ValueError, KeyError) as e:
            logger.warning(f"Ignoring malformed change notification on {topic}: {e}")
            return

        for listener in list(self._listeners.get(topic, [])):
            try:
                await listener(notification)
            except Exception as e:
                logger.exception(
                    f"src.libs.kvstore.providers.redis._dispatch:: Listener failed for topic {topic}: {e}"
                )

    async def close(self) -> None:
        if self._reader is not None:
            self._reader.cancel()
            self._reader = None

        if self._pubsub is not None:
            await self._pubsub.aclose()
            self._pubsub = None

        if self._client is not None:
            await self._client.aclose()
            self._client = None

        self._listeners.clear()
