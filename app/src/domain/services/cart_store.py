import json
import time
from decimal import Decimal
from typing import Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError
from src.core.logging import get_logger
from src.domain.schemas.cart import CartIdentity, CartLineItem, CartProductSnapshot
from src.libs.kvstore import ChangeChannel, ChangeNotification, KeyValueProvider

logger = get_logger(__name__)


class LocalCartStore:
    """
    Persisted cart for one identity.

    The whole cart is written as one JSON array under the identity's storage
    key on every mutation, and a change notification carrying the same key
    is published afterwards. Reads never raise and writes never escalate: a
    failed write is logged while the in-memory collection keeps the mutation.
    """

    def __init__(
        self,
        identity: CartIdentity,
        provider: KeyValueProvider,
        channel: ChangeChannel,
        source_id: str | None = None,
    ) -> None:
        self.identity = identity
        self.provider = provider
        self.channel = channel
        self.source_id = source_id or uuid4().hex
        self._items: list[CartLineItem] = []

    @property
    def key(self) -> str:
        return self.identity.storage_key

    @property
    def items(self) -> list[CartLineItem]:
        return list(self._items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def total(self) -> Decimal:
        return sum((item.line_total for item in self._items), Decimal("0"))

    def find_line(self, line_id: str) -> CartLineItem | None:
        return next((item for item in self._items if item.id == line_id), None)

    def find_product_line(self, product_id: str) -> CartLineItem | None:
        return next((item for item in self._items if item.product_id == product_id), None)

    def rebind(self, identity: CartIdentity) -> None:
        """Point the store at another identity's bucket. Call ``load`` afterwards."""
        self.identity = identity
        self._items = []

    async def load(self) -> list[CartLineItem]:
        """
        Re-read the cart from storage.

        Absent, unreadable or malformed data yields an empty cart. Entries
        missing their product snapshot are rebuilt from flat fields and
        entries that cannot be repaired are dropped.
        """
        try:
            response = await self.provider.get(self.key)
        except Exception as e:
            logger.exception(f"src.domain.services.cart_store.load:: Failed to read cart {self.key}: {e}")
            self._items = []
            return self.items

        if not response.success or not response.value:
            if not response.success:
                logger.warning(f"Cart {self.key} could not be read: {response.error}")
            self._items = []
            return self.items

        try:
            payload = json.loads(response.value)
        except (TypeError, ValueError):
            logger.warning(f"Cart {self.key} holds malformed data, starting empty")
            self._items = []
            return self.items

        if not isinstance(payload, list):
            self._items = []
            return self.items

        self._items = [item for item in (self._normalize_entry(entry) for entry in payload) if item is not None]

        # Legacy lines get their id once; later loads must see the same id.
        if any(isinstance(entry, dict) and not entry.get("id") for entry in payload):
            await self._write()
        return self.items

    async def add(self, product: CartProductSnapshot, quantity: int = 1) -> list[CartLineItem]:
        """
        Add ``quantity`` units of ``product``, merging into the product's
        existing line when there is one. Stock is not checked here.
        """
        if quantity < 1:
            return self.items

        existing = self.find_product_line(product.id)
        if existing:
            updated = existing.model_copy(update={"quantity": existing.quantity + quantity})
            self._items = [updated if item.id == existing.id else item for item in self._items]
        else:
            self._items.append(
                CartLineItem(
                    id=self._new_line_id(product.id),
                    product_id=product.id,
                    quantity=quantity,
                    price=product.price,
                    product=product,
                )
            )

        await self._persist()
        return self.items

    async def update_quantity(self, line_id: str, quantity: int) -> list[CartLineItem]:
        """Set a line's quantity. Quantities below one leave the cart untouched."""
        if quantity < 1:
            return self.items

        self._items = [
            item.model_copy(update={"quantity": quantity}) if item.id == line_id else item for item in self._items
        ]
        await self._persist()
        return self.items

    async def remove(self, line_id: str) -> list[CartLineItem]:
        self._items = [item for item in self._items if item.id != line_id]
        await self._persist()
        return self.items

    async def clear(self) -> list[CartLineItem]:
        self._items = []
        await self._persist()
        return self.items

    def _new_line_id(self, product_id: str) -> str:
        return f"{product_id}-{int(time.time() * 1000)}"

    def _normalize_entry(self, entry: Any) -> CartLineItem | None:
        if not isinstance(entry, dict):
            return None

        entry = dict(entry)
        product = entry.get("product") if isinstance(entry.get("product"), dict) else {}
        product_id = entry.get("product_id") or entry.get("productId") or product.get("id")
        if not product_id:
            return None

        entry["product_id"] = str(product_id)
        entry.setdefault("quantity", 1)
        if entry.get("price") is None:
            entry["price"] = product.get("price", 0)
        if not entry.get("id"):
            entry["id"] = self._new_line_id(entry["product_id"])

        try:
            return CartLineItem.model_validate(entry)
        except PydanticValidationError:
            logger.debug(f"Dropping unreadable line from cart {self.key}")
            return None

    async def _persist(self) -> None:
        if not await self._write():
            return

        try:
            await self.channel.publish(ChangeNotification(key=self.key, source_id=self.source_id))
        except Exception as e:
            logger.exception(f"src.domain.services.cart_store._persist:: Failed to broadcast cart {self.key}: {e}")

    async def _write(self) -> bool:
        payload = json.dumps([item.model_dump(mode="json") for item in self._items])

        try:
            response = await self.provider.set(self.key, payload)
            if not response.success:
                logger.warning(f"Cart {self.key} could not be saved: {response.error}")
                return False
        except Exception as e:
            logger.exception(f"src.domain.services.cart_store._write:: Failed to save cart {self.key}: {e}")
            return False
        return True
