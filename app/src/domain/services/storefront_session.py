from collections.abc import Awaitable, Callable

from src.core.logging import get_logger
from src.domain.schemas.cart import CartIdentity
from src.domain.services.cart_service import CartSession
from src.libs.kvstore import ChangeChannel, KeyValueProvider

logger = get_logger(__name__)

FavoritesLoader = Callable[[str], Awaitable[set[str]]]


class FavoritesCache:
    """
    Favorite product ids of the current user, loaded once and kept in sync
    with toggles made through this session.
    """

    def __init__(self, loader: FavoritesLoader | None = None) -> None:
        self._loader = loader
        self._user_id: str | None = None
        self._product_ids: set[str] | None = None

    @property
    def is_loaded(self) -> bool:
        return self._product_ids is not None

    async def get(self, user_id: str | None) -> set[str]:
        if not user_id or self._loader is None:
            return set()

        if self._product_ids is None or self._user_id != user_id:
            self._product_ids = await self._loader(user_id)
            self._user_id = user_id

        return set(self._product_ids)

    async def is_favorited(self, user_id: str | None, product_id: str) -> bool:
        return product_id in await self.get(user_id)

    def mark(self, product_id: str, favorited: bool) -> None:
        if self._product_ids is None:
            return
        if favorited:
            self._product_ids.add(product_id)
        else:
            self._product_ids.discard(product_id)

    def invalidate(self) -> None:
        self._user_id = None
        self._product_ids = None


class StorefrontSession:
    """
    Per-visitor scope holding the cart session and favorites cache.

    Changing identity drops the cached favorites and rebinds the cart to the
    new identity's bucket.
    """

    def __init__(
        self,
        identity: CartIdentity,
        provider: KeyValueProvider,
        channel: ChangeChannel,
        favorites_loader: FavoritesLoader | None = None,
    ) -> None:
        self.cart = CartSession(identity, provider, channel)
        self.favorites = FavoritesCache(favorites_loader)

    @property
    def identity(self) -> CartIdentity:
        return self.cart.identity

    async def open(self, subscribe: bool = True) -> "StorefrontSession":
        if subscribe:
            await self.cart.start()
        else:
            await self.cart.fetch_cart()
        return self

    async def close(self) -> None:
        await self.cart.close()

    async def change_identity(self, identity: CartIdentity) -> None:
        if identity == self.identity:
            return

        logger.debug(f"Storefront identity changed from {self.identity.storage_key} to {identity.storage_key}")
        self.favorites.invalidate()
        await self.cart.switch_identity(identity)

    async def favorite_product_ids(self) -> set[str]:
        return await self.favorites.get(self.identity.user_id)

    async def is_favorited(self, product_id: str) -> bool:
        return await self.favorites.is_favorited(self.identity.user_id, product_id)
