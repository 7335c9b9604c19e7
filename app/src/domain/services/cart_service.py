import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from decimal import Decimal
from typing import TypeVar

from src.core.config import settings
from src.core.exceptions import errors
from src.core.helpers.misc import format_price
from src.core.logging import get_logger
from src.domain.schemas.cart import CartIdentity, CartLineItem, CartProductSnapshot, CartSnapshot
from src.domain.services.cart_store import LocalCartStore
from src.libs.kvstore import ChangeChannel, ChangeNotification, KeyValueProvider

logger = get_logger(__name__)

T = TypeVar("T")


class CartSession:
    """
    Cart operations for one identity, with the loading and error state a
    storefront view renders.

    Every session subscribed to the same storage key re-reads the cart when
    another session writes it.
    """

    def __init__(
        self,
        identity: CartIdentity,
        provider: KeyValueProvider,
        channel: ChangeChannel,
    ) -> None:
        self._store = LocalCartStore(identity, provider, channel)
        self._channel = channel
        self._subscribed_key: str | None = None
        self._changed = asyncio.Event()
        self.loading = False
        self.error: str | None = None

    @property
    def identity(self) -> CartIdentity:
        return self._store.identity

    @property
    def source_id(self) -> str:
        return self._store.source_id

    @property
    def items(self) -> list[CartLineItem]:
        return self._store.items

    @property
    def item_count(self) -> int:
        return self._store.item_count

    @property
    def total(self) -> Decimal:
        return self._store.total

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(
            items=self.items,
            item_count=self.item_count,
            total=self.total,
            currency=settings.CURRENCY_CODE,
            formatted_total=format_price(self.total),
        )

    async def start(self) -> "CartSession":
        """Subscribe to changes of this identity's cart and load it."""
        await self._subscribe()
        await self.fetch_cart()
        return self

    async def close(self) -> None:
        await self._unsubscribe()

    async def fetch_cart(self) -> list[CartLineItem]:
        return await self._run(self._store.load)

    async def add_to_cart(self, product: CartProductSnapshot, quantity: int = 1) -> list[CartLineItem]:
        """
        Add ``quantity`` units of ``product``.

        Raises:
            ValidationError: When the product's known stock cannot cover the merged quantity
        """
        if quantity < 1:
            return self.items

        async def _add() -> list[CartLineItem]:
            existing = self._store.find_product_line(product.id)
            requested = quantity + (existing.quantity if existing else 0)
            self._check_stock(product.stock, requested)
            return await self._store.add(product, quantity)

        return await self._run(_add)

    async def update_quantity(self, line_id: str, quantity: int) -> list[CartLineItem]:
        """
        Set the quantity of a line. Quantities below one are ignored.

        Raises:
            ValidationError: When the line's known stock cannot cover ``quantity``
        """
        if quantity < 1:
            return self.items

        async def _update() -> list[CartLineItem]:
            line = self._store.find_line(line_id)
            if line:
                self._check_stock(line.product.stock, quantity)
            return await self._store.update_quantity(line_id, quantity)

        return await self._run(_update)

    async def remove_from_cart(self, line_id: str) -> list[CartLineItem]:
        return await self._run(lambda: self._store.remove(line_id))

    async def clear_cart(self) -> list[CartLineItem]:
        return await self._run(self._store.clear)

    def clear_error(self) -> None:
        self.error = None

    async def switch_identity(self, identity: CartIdentity) -> list[CartLineItem]:
        """
        Rebind to another identity's cart, e.g. after sign-in or sign-out.
        The previous cart stays in its own bucket; carts are never merged.
        """
        if identity == self.identity:
            return self.items

        was_subscribed = self._subscribed_key is not None
        await self._unsubscribe()
        self._store.rebind(identity)
        if was_subscribed:
            await self._subscribe()

        return await self.fetch_cart()

    async def wait_for_change(self, timeout: float) -> bool:
        """
        Wait until another session changes this cart. Returns False on timeout.
        """
        try:
            await asyncio.wait_for(self._changed.wait(), timeout)
        except TimeoutError:
            return False

        self._changed.clear()
        return True

    async def watch(self, duration: float) -> AsyncIterator[CartSnapshot]:
        """
        Yield the current cart, then the cart again after every change made by
        another session, until ``duration`` seconds have passed. The session
        must be started.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + duration

        yield self.snapshot()

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return
            if await self.wait_for_change(remaining):
                yield self.snapshot()

    def _check_stock(self, stock: int | None, requested: int) -> None:
        if stock is not None and requested > stock:
            raise errors.ValidationError(f"Insufficient stock. Only {stock} available")

    async def _run(self, operation: Callable[[], Awaitable[T]]) -> T:
        self.loading = True
        self.error = None
        try:
            return await operation()
        except errors.ServiceError as se:
            self.error = se.detail
            raise se
        except Exception as e:
            logger.exception(f"src.domain.services.cart_service._run:: Cart operation failed for {self._store.key}: {e}")
            self.error = "Failed to update cart"
            raise
        finally:
            self.loading = False

    async def _on_change(self, notification: ChangeNotification) -> None:
        if notification.source_id == self.source_id:
            return
        await self._store.load()
        self._changed.set()

    async def _subscribe(self) -> None:
        if self._subscribed_key is None:
            self._subscribed_key = self._store.key
            await self._channel.subscribe(self._subscribed_key, self._on_change)

    async def _unsubscribe(self) -> None:
        if self._subscribed_key is not None:
            await self._channel.unsubscribe(self._subscribed_key, self._on_change)
            self._subscribed_key = None
