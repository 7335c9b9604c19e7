import json
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from src.domain.schemas import CartIdentity, CartProductSnapshot
from src.domain.services.cart_store import LocalCartStore
from src.libs.kvstore import ChangeNotification, KeyValueResponse


def brake_pads(stock: int | None = 5) -> CartProductSnapshot:
    return CartProductSnapshot(id="prod-brake-pads", name="Brake Pads", price=Decimal("1200"), stock=stock)


def oil_filter() -> CartProductSnapshot:
    return CartProductSnapshot(id="prod-oil-filter", name="Oil Filter", price=Decimal("450"), stock=20)


class TestCartIdentity:
    """Test cases for the storage key of a cart identity"""

    def test_signed_in_user_key(self):
        assert CartIdentity(user_id="u1").storage_key == "cart_u1"

    def test_guest_with_id_key(self):
        identity = CartIdentity(guest_id="g1")

        assert identity.storage_key == "cart_guest_g1"
        assert identity.is_guest()

    def test_anonymous_guest_key(self):
        assert CartIdentity().storage_key == "cart_guest"

    def test_user_id_wins_over_guest_id(self):
        identity = CartIdentity(user_id="u1", guest_id="g1")

        assert identity.storage_key == "cart_u1"
        assert not identity.is_guest()


class TestLocalCartStore:
    """Test cases for LocalCartStore"""

    @pytest.fixture
    def store(self, kv_provider, change_channel) -> LocalCartStore:
        return LocalCartStore(CartIdentity(user_id="u1"), kv_provider, change_channel)

    async def test_add_creates_line_with_snapshot_price(self, store):
        """Test that adding a new product creates one line priced from the snapshot."""
        items = await store.add(brake_pads(), 2)

        assert len(items) == 1
        assert items[0].product_id == "prod-brake-pads"
        assert items[0].quantity == 2
        assert items[0].price == Decimal("1200")
        assert items[0].id.startswith("prod-brake-pads-")
        assert store.item_count == 2
        assert store.total == Decimal("2400")

    async def test_add_merges_into_existing_line(self, store):
        """Test that adding the same product twice keeps a single line."""
        await store.add(brake_pads(), 1)
        first_line_id = store.items[0].id

        items = await store.add(brake_pads(), 2)

        assert len(items) == 1
        assert items[0].id == first_line_id
        assert items[0].quantity == 3

    async def test_add_ignores_quantity_below_one(self, store, kv_provider):
        """Test that non-positive quantities leave the cart and storage untouched."""
        items = await store.add(brake_pads(), 0)

        assert items == []
        assert (await kv_provider.get("cart_u1")).value is None

    async def test_update_quantity(self, store):
        await store.add(brake_pads(), 1)
        line_id = store.items[0].id

        items = await store.update_quantity(line_id, 4)

        assert items[0].quantity == 4

    async def test_update_quantity_below_one_is_ignored(self, store):
        """Test that a quantity below one does not remove or change the line."""
        await store.add(brake_pads(), 2)
        line_id = store.items[0].id

        items = await store.update_quantity(line_id, 0)

        assert len(items) == 1
        assert items[0].quantity == 2

    async def test_remove_and_clear(self, store):
        await store.add(brake_pads(), 1)
        await store.add(oil_filter(), 1)

        items = await store.remove(store.items[0].id)
        assert [item.product_id for item in items] == ["prod-oil-filter"]

        assert await store.clear() == []
        assert store.total == Decimal("0")

    async def test_mutations_persist_whole_cart(self, store, kv_provider):
        """Test that every mutation rewrites the whole cart under the identity key."""
        await store.add(brake_pads(), 2)
        await store.add(oil_filter(), 1)

        stored = json.loads((await kv_provider.get("cart_u1")).value)

        assert [entry["product_id"] for entry in stored] == ["prod-brake-pads", "prod-oil-filter"]
        assert stored[0]["product"]["name"] == "Brake Pads"

    async def test_load_round_trip(self, store, kv_provider, change_channel):
        """Test that a second store for the same identity reads what the first wrote."""
        await store.add(brake_pads(), 2)

        other = LocalCartStore(CartIdentity(user_id="u1"), kv_provider, change_channel)
        items = await other.load()

        assert len(items) == 1
        assert items[0].quantity == 2
        assert items[0].product.name == "Brake Pads"

    async def test_load_empty_when_absent(self, store):
        assert await store.load() == []

    async def test_load_malformed_json_yields_empty_cart(self, store, kv_provider):
        await kv_provider.set("cart_u1", "{not json")

        assert await store.load() == []

    async def test_load_non_list_payload_yields_empty_cart(self, store, kv_provider):
        await kv_provider.set("cart_u1", json.dumps({"items": []}))

        assert await store.load() == []

    async def test_load_repairs_entries_without_snapshot(self, store, kv_provider):
        """Test that legacy entries with flat fields are rebuilt and broken ones dropped."""
        payload = [
            {"id": "line-1", "productId": "prod-a", "quantity": 2, "price": 300, "product": {"id": "prod-a"}},
            {"product_id": "prod-b", "quantity": 1, "product": {"id": "prod-b", "name": "Wiper", "price": "800"}},
            {"quantity": 1},
            "garbage",
            {"product_id": "prod-c", "quantity": 0, "price": 10, "product": {"id": "prod-c"}},
        ]
        await kv_provider.set("cart_u1", json.dumps(payload))

        items = await store.load()

        assert [item.product_id for item in items] == ["prod-a", "prod-b"]
        assert items[0].id == "line-1"
        assert items[1].price == Decimal("800")
        assert items[1].id.startswith("prod-b-")

    async def test_load_keeps_line_id_given_to_legacy_entry(self, store, kv_provider, change_channel):
        """Test that an id assigned to a legacy line is written back and reused on the next load."""
        payload = [{"product_id": "prod-b", "quantity": 1, "price": 800, "product": {"id": "prod-b"}}]
        await kv_provider.set("cart_u1", json.dumps(payload))
        listener = AsyncMock()
        await change_channel.subscribe("cart_u1", listener)

        line_id = (await store.load())[0].id

        stored = json.loads((await kv_provider.get("cart_u1")).value)
        assert stored[0]["id"] == line_id
        listener.assert_not_awaited()

        other = LocalCartStore(CartIdentity(user_id="u1"), kv_provider, change_channel)
        with patch.object(LocalCartStore, "_new_line_id", return_value="prod-b-fresh"):
            items = await other.load()

        assert items[0].id == line_id
        assert (await store.update_quantity(line_id, 3))[0].quantity == 3

    async def test_load_swallows_provider_errors(self, store, kv_provider):
        with patch.object(kv_provider, "get", AsyncMock(side_effect=RuntimeError("store down"))):
            assert await store.load() == []

    @patch("src.domain.services.cart_store.logger")
    async def test_write_failure_keeps_in_memory_mutation(self, mock_logger, store, kv_provider, change_channel):
        """Test that a failed write is logged, not raised, and nothing is broadcast."""
        listener = AsyncMock()
        await change_channel.subscribe("cart_u1", listener)

        with patch.object(kv_provider, "set", AsyncMock(side_effect=RuntimeError("quota exceeded"))):
            items = await store.add(brake_pads(), 1)

        assert len(items) == 1
        mock_logger.exception.assert_called_once()
        listener.assert_not_awaited()

    async def test_unsuccessful_write_response_is_not_broadcast(self, store, kv_provider, change_channel):
        listener = AsyncMock()
        await change_channel.subscribe("cart_u1", listener)

        with patch.object(kv_provider, "set", AsyncMock(return_value=KeyValueResponse(success=False, error="full"))):
            await store.add(brake_pads(), 1)

        assert store.item_count == 1
        listener.assert_not_awaited()

    async def test_mutation_broadcasts_change(self, store, change_channel):
        """Test that a successful write publishes the storage key with the writer's source id."""
        listener = AsyncMock()
        await change_channel.subscribe("cart_u1", listener)

        await store.add(brake_pads(), 1)

        listener.assert_awaited_once()
        notification = listener.await_args.args[0]
        assert isinstance(notification, ChangeNotification)
        assert notification.key == "cart_u1"
        assert notification.source_id == store.source_id

    async def test_rebind_switches_bucket(self, store, kv_provider, change_channel):
        await store.add(brake_pads(), 1)

        store.rebind(CartIdentity(guest_id="g1"))

        assert store.key == "cart_guest_g1"
        assert store.items == []
        assert await store.load() == []
        assert (await kv_provider.get("cart_u1")).value is not None
