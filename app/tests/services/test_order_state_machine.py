from unittest.mock import patch

import pytest
from src.core.exceptions import errors
from src.domain.enums import OrderStatus
from src.domain.services.order_state_machine import OrderStateMachine


class TestOrderStateMachine:
    """Test cases for OrderStateMachine"""

    def setup_method(self):
        self.machine = OrderStateMachine()

    def test_next_statuses_from_cash_on_delivery(self):
        assert self.machine.get_valid_next_statuses(OrderStatus.CASH_ON_DELIVERY) == {
            OrderStatus.OUT_FOR_DELIVERY,
            OrderStatus.PAID,
            OrderStatus.CANCELLED,
        }

    @pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_terminal_statuses_have_no_successors(self, status):
        assert self.machine.get_valid_next_statuses(status) == set()
        assert status.is_terminal()

    def test_accepts_string_statuses(self):
        assert self.machine.is_valid_transition("OUT_FOR_DELIVERY", "DELIVERED")
        assert not self.machine.is_valid_transition("DELIVERED", "PENDING")

    @pytest.mark.parametrize(
        "status, allowed",
        [
            (OrderStatus.PENDING, True),
            (OrderStatus.CASH_ON_DELIVERY, True),
            (OrderStatus.PAID, False),
            (OrderStatus.OUT_FOR_DELIVERY, False),
            (OrderStatus.DELIVERED, False),
            (OrderStatus.CANCELLED, False),
        ],
    )
    def test_customer_cancellation_window(self, status, allowed):
        assert self.machine.can_customer_cancel(status) is allowed

    def test_validate_allowed_transition(self):
        assert self.machine.validate_transition(OrderStatus.CASH_ON_DELIVERY, OrderStatus.OUT_FOR_DELIVERY) is True

    def test_validate_same_status_is_noop(self):
        assert self.machine.validate_transition(OrderStatus.PAID, OrderStatus.PAID) is False

    def test_strict_machine_rejects_invalid_transition(self):
        with pytest.raises(errors.InvalidOrderTransitionError) as exc_info:
            self.machine.validate_transition(OrderStatus.DELIVERED, OrderStatus.PENDING)

        assert "DELIVERED" in exc_info.value.detail
        assert "PENDING" in exc_info.value.detail

    @patch("src.domain.services.order_state_machine.logger")
    def test_lenient_machine_logs_out_of_band_transition(self, mock_logger):
        machine = OrderStateMachine(strict=False)

        assert machine.validate_transition(OrderStatus.DELIVERED, OrderStatus.PENDING, order_ref="ORD-1") is True

        mock_logger.warning.assert_called_once()
        assert "out-of-band" in mock_logger.warning.call_args.args[0]
