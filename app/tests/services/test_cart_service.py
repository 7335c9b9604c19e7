from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from src.core.exceptions import errors
from src.domain.schemas import CartIdentity, CartProductSnapshot
from src.domain.services.cart_service import CartSession


def brake_pads(stock: int | None = 5) -> CartProductSnapshot:
    return CartProductSnapshot(id="prod-brake-pads", name="Brake Pads", price=Decimal("1200"), stock=stock)


class TestCartSession:
    """Test cases for CartSession"""

    @pytest.fixture
    async def session(self, kv_provider, change_channel):
        cart = await CartSession(CartIdentity(user_id="u1"), kv_provider, change_channel).start()
        yield cart
        await cart.close()

    async def test_start_loads_existing_cart(self, kv_provider, change_channel):
        first = CartSession(CartIdentity(user_id="u1"), kv_provider, change_channel)
        await first.add_to_cart(brake_pads(), 2)

        second = await CartSession(CartIdentity(user_id="u1"), kv_provider, change_channel).start()

        assert second.item_count == 2
        assert second.loading is False
        await second.close()

    async def test_add_within_stock(self, session):
        items = await session.add_to_cart(brake_pads(stock=5), 3)

        assert items[0].quantity == 3
        assert session.error is None

    async def test_add_rejects_merged_quantity_over_stock(self, session):
        """Test that the stock ceiling applies to the merged quantity, not the increment."""
        await session.add_to_cart(brake_pads(stock=5), 4)

        with pytest.raises(errors.ValidationError) as exc_info:
            await session.add_to_cart(brake_pads(stock=5), 2)

        assert exc_info.value.detail == "Insufficient stock. Only 5 available"
        assert session.error == "Insufficient stock. Only 5 available"
        assert session.items[0].quantity == 4
        assert session.loading is False

    async def test_add_without_known_stock_is_not_capped(self, session):
        items = await session.add_to_cart(brake_pads(stock=None), 50)

        assert items[0].quantity == 50

    async def test_add_ignores_quantity_below_one(self, session):
        assert await session.add_to_cart(brake_pads(), 0) == []

    async def test_update_quantity_checks_line_stock(self, session):
        await session.add_to_cart(brake_pads(stock=5), 1)
        line_id = session.items[0].id

        with pytest.raises(errors.ValidationError):
            await session.update_quantity(line_id, 6)

        assert session.items[0].quantity == 1

        items = await session.update_quantity(line_id, 5)
        assert items[0].quantity == 5

    async def test_update_quantity_below_one_is_ignored(self, session):
        await session.add_to_cart(brake_pads(), 2)

        items = await session.update_quantity(session.items[0].id, -1)

        assert items[0].quantity == 2

    async def test_successful_operation_clears_previous_error(self, session):
        await session.add_to_cart(brake_pads(stock=1), 1)
        with pytest.raises(errors.ValidationError):
            await session.add_to_cart(brake_pads(stock=1), 1)

        await session.remove_from_cart(session.items[0].id)

        assert session.error is None
        assert session.items == []

    async def test_clear_error(self, session):
        session.error = "boom"

        session.clear_error()

        assert session.error is None

    async def test_unexpected_failure_records_generic_error(self, session):
        with patch.object(session._store, "clear", AsyncMock(side_effect=RuntimeError("boom"))):
            with pytest.raises(RuntimeError):
                await session.clear_cart()

        assert session.error == "Failed to update cart"
        assert session.loading is False

    async def test_snapshot(self, session):
        await session.add_to_cart(brake_pads(), 2)

        snapshot = session.snapshot()

        assert snapshot.item_count == 2
        assert snapshot.total == Decimal("2400")
        assert snapshot.currency == "UGX"
        assert "2,400" in snapshot.formatted_total

    async def test_sessions_on_same_key_stay_in_sync(self, session, kv_provider, change_channel):
        """Test that a write in one session is picked up by another subscribed to the same cart."""
        other = await CartSession(CartIdentity(user_id="u1"), kv_provider, change_channel).start()

        await session.add_to_cart(brake_pads(), 2)
        assert other.item_count == 2

        await other.clear_cart()
        assert session.items == []

        await other.close()

    async def test_session_ignores_own_notifications(self, session):
        with patch.object(session._store, "load", AsyncMock()) as mock_load:
            await session.add_to_cart(brake_pads(), 1)

        mock_load.assert_not_awaited()

    async def test_sessions_on_other_keys_are_isolated(self, session, kv_provider, change_channel):
        guest = await CartSession(CartIdentity(guest_id="g1"), kv_provider, change_channel).start()

        await session.add_to_cart(brake_pads(), 2)

        assert guest.items == []
        await guest.close()

    async def test_wait_for_change_times_out_without_other_writers(self, session):
        await session.add_to_cart(brake_pads(), 1)

        assert await session.wait_for_change(0.01) is False

    async def test_watch_yields_current_cart_then_changes(self, session, kv_provider, change_channel):
        other = CartSession(CartIdentity(user_id="u1"), kv_provider, change_channel)
        watcher = session.watch(1)

        first = await anext(watcher)
        assert first.item_count == 0

        await other.add_to_cart(brake_pads(), 3)
        second = await anext(watcher)
        assert second.item_count == 3

        await watcher.aclose()

    async def test_watch_ends_after_duration(self, session):
        snapshots = [snapshot async for snapshot in session.watch(0.01)]

        assert len(snapshots) == 1

    async def test_close_unsubscribes(self, kv_provider, change_channel):
        cart = await CartSession(CartIdentity(user_id="u9"), kv_provider, change_channel).start()
        assert change_channel.listener_count("cart_u9") == 1

        await cart.close()

        assert change_channel.listener_count("cart_u9") == 0

    async def test_switch_identity_rebinds_without_merging(self, session, kv_provider, change_channel):
        """Test that signing out moves the session to the guest bucket and leaves both carts intact."""
        await session.add_to_cart(brake_pads(), 2)

        items = await session.switch_identity(CartIdentity(guest_id="g1"))

        assert items == []
        assert session.identity.storage_key == "cart_guest_g1"
        assert change_channel.listener_count("cart_u1") == 0
        assert change_channel.listener_count("cart_guest_g1") == 1

        await session.switch_identity(CartIdentity(user_id="u1"))
        assert session.item_count == 2

    async def test_switch_to_same_identity_is_noop(self, session):
        await session.add_to_cart(brake_pads(), 1)

        with patch.object(session._store, "load", AsyncMock()) as mock_load:
            await session.switch_identity(CartIdentity(user_id="u1"))

        mock_load.assert_not_awaited()
