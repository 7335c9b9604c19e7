from typing import Optional

from src.core.logging import get_logger
from src.libs.kvstore.factory import KeyValueFactory
from src.libs.kvstore.interface import ChangeChannel, KeyValueProvider

logger = get_logger(__name__)


class KeyValueService:
    """
    Process-wide pairing of a store provider with its change channel.
    """

    def __init__(
        self,
        provider: Optional[KeyValueProvider] = None,
        channel: Optional[ChangeChannel] = None,
    ) -> None:
        self._provider = provider or KeyValueFactory.get_configured_provider()
        self._channel = channel or KeyValueFactory.get_configured_channel()

    @property
    def provider(self) -> KeyValueProvider:
        return self._provider

    @property
    def channel(self) -> ChangeChannel:
        return self._channel

    async def health_check(self) -> bool:
        return await self._provider.health_check()

    async def close(self) -> None:
        await self._channel.close()
        await self._provider.close()


_kv_service: Optional[KeyValueService] = None


def get_kv_service() -> KeyValueService:
    """Get or create the global key-value service instance."""
    global _kv_service
    if _kv_service is None:
        _kv_service = KeyValueService()
    return _kv_service


async def setup_kv_service() -> KeyValueService:
    kv_service = get_kv_service()

    if await kv_service.health_check():
        logger.info("Key-value store initialized successfully")
    else:
        logger.warning("Key-value store health check failed, cart writes will not be persisted")

    return kv_service


async def teardown_kv_service() -> None:
    global _kv_service
    if _kv_service:
        await _kv_service.close()
        _kv_service = None
