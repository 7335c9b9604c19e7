from limits import RateLimitItem, WindowStats, parse
from limits.aio.storage.base import Storage
from limits.aio.strategies import MovingWindowRateLimiter, RateLimiter
from src.core.config import settings
from src.libs.throttler.limiter_storage import get_limiter_storage


class LimiterConfig:
    """
    Moving-window limiters keyed by ``namespace:client_key``.

    ``namespace_limits`` overrides the default limit per namespace.
    """

    def __init__(
        self,
        environment: str,
        default_limit: str = "100/minute",
        namespace_limits: dict[str, str] | None = None,
    ) -> None:
        self.environment = environment
        self.default_limit = default_limit
        self.namespace_limits = namespace_limits or {}
        self.storage: Storage = get_limiter_storage(environment)
        self.rate_limiters: dict[str, RateLimiter] = {}

    def _limit_for(self, namespace: str, custom_limit: str | None) -> RateLimitItem:
        if custom_limit:
            return parse(custom_limit)
        return parse(self.namespace_limits.get(namespace, self.default_limit))

    def _get_rate_limiter(self, namespace: str) -> RateLimiter:
        if namespace not in self.rate_limiters:
            self.rate_limiters[namespace] = MovingWindowRateLimiter(self.storage)
        return self.rate_limiters[namespace]

    async def hit(self, namespace: str, client_key: str, custom_limit: str | None = None) -> bool:
        """Consume one slot; False when the client is over its limit."""
        rate_limiter = self._get_rate_limiter(namespace)
        return await rate_limiter.hit(self._limit_for(namespace, custom_limit), f"{namespace}:{client_key}")

    async def get_window_stats_with_limit(
        self, namespace: str, client_key: str, custom_limit: str | None = None
    ) -> tuple[WindowStats, int]:
        rate_limiter = self._get_rate_limiter(namespace)
        limit_item = self._limit_for(namespace, custom_limit)
        stats = await rate_limiter.get_window_stats(limit_item, f"{namespace}:{client_key}")
        return stats, limit_item.amount

    async def reset(self) -> None:
        await self.storage.reset()


limiter = LimiterConfig(
    environment=settings.ENVIRONMENT,
    default_limit=f"{settings.RATE_LIMIT_PER_MINUTE}/minute",
    namespace_limits={"autohub_checkout": settings.CHECKOUT_RATE_LIMIT},
)
