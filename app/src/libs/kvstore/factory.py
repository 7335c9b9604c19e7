from typing import Any

from src.core.config import settings
from src.core.logging import get_logger
from src.libs.kvstore.exceptions import KeyValueConfigurationError
from src.libs.kvstore.interface import ChangeChannel, KeyValueProvider
from src.libs.kvstore.providers.memory import MemoryChangeChannel, MemoryKeyValueProvider
from src.libs.kvstore.providers.redis import RedisChangeChannel, RedisKeyValueProvider
from src.libs.kvstore.schemas import ChannelConfiguration, MemoryKeyValueConfiguration, RedisKeyValueConfiguration

logger = get_logger(__name__)


class KeyValueFactory:
    """
    Builds the store provider and change channel selected by ``CART_STORE_PROVIDER``.
    """

    _providers: dict[str, type[KeyValueProvider]] = {
        "memory": MemoryKeyValueProvider,
        "redis": RedisKeyValueProvider,
    }

    _channels: dict[str, type[ChangeChannel]] = {
        "memory": MemoryChangeChannel,
        "redis": RedisChangeChannel,
    }

    @classmethod
    def create_provider(cls, provider_type: str, config: Any) -> KeyValueProvider:
        """
        Raises:
            KeyValueConfigurationError: If the provider type is not supported
        """
        if provider_type not in cls._providers:
            raise KeyValueConfigurationError(f"Unsupported key-value provider type: {provider_type}")

        return cls._providers[provider_type](config)

    @classmethod
    def create_channel(cls, channel_type: str, config: ChannelConfiguration) -> ChangeChannel:
        if channel_type not in cls._channels:
            raise KeyValueConfigurationError(f"Unsupported change channel type: {channel_type}")

        return cls._channels[channel_type](config)

    @classmethod
    def get_configured_provider(cls) -> KeyValueProvider:
        provider_type = settings.CART_STORE_PROVIDER
        logger.info(f"Creating key-value provider: {provider_type} for environment: {settings.ENVIRONMENT}")

        if provider_type == "memory":
            return cls.create_provider(
                "memory",
                MemoryKeyValueConfiguration(
                    key_prefix=settings.CART_STORE_KEY_PREFIX,
                    default_ttl=settings.CART_STORE_TTL,
                ),
            )

        return cls.create_provider(
            provider_type,
            RedisKeyValueConfiguration(
                key_prefix=settings.CART_STORE_KEY_PREFIX,
                default_ttl=settings.CART_STORE_TTL,
                url=str(settings.CART_STORE_REDIS_URL),
            ),
        )

    @classmethod
    def get_configured_channel(cls) -> ChangeChannel:
        channel_type = settings.CART_STORE_PROVIDER
        config = ChannelConfiguration(
            channel_prefix=f"{settings.CART_STORE_KEY_PREFIX}:{settings.CART_STORE_CHANNEL_PREFIX}",
            url=str(settings.CART_STORE_REDIS_URL) if channel_type == "redis" else None,
        )
        return cls.create_channel(channel_type, config)
