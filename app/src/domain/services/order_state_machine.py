from dataclasses import dataclass

from src.core.exceptions import errors
from src.core.logging import get_logger
from src.domain.enums import OrderStatus

logger = get_logger(__name__)


@dataclass(frozen=True)
class OrderStatusTransition:
    from_status: OrderStatus
    to_status: OrderStatus
    customer_allowed: bool = False
    description: str = ""


class OrderStateMachine:
    """
    Finite state machine for order status changes.

    Valid transitions:
    - PENDING -> CASH_ON_DELIVERY | PAID | CANCELLED
    - CASH_ON_DELIVERY -> OUT_FOR_DELIVERY | PAID | CANCELLED
    - PAID -> OUT_FOR_DELIVERY | DELIVERED | CANCELLED
    - OUT_FOR_DELIVERY -> DELIVERED

    DELIVERED and CANCELLED are final. Customers may only cancel, and only
    before the order has been paid or dispatched.

    With ``strict`` off, a transition outside the table is logged as an
    out-of-band change and allowed.
    """

    VALID_TRANSITIONS: tuple[OrderStatusTransition, ...] = (
        OrderStatusTransition(
            OrderStatus.PENDING, OrderStatus.CASH_ON_DELIVERY, description="Order confirmed for cash on delivery"
        ),
        OrderStatusTransition(OrderStatus.PENDING, OrderStatus.PAID, description="Payment received"),
        OrderStatusTransition(
            OrderStatus.PENDING, OrderStatus.CANCELLED, customer_allowed=True, description="Order cancelled"
        ),
        OrderStatusTransition(
            OrderStatus.CASH_ON_DELIVERY, OrderStatus.OUT_FOR_DELIVERY, description="Handed to the rider"
        ),
        OrderStatusTransition(OrderStatus.CASH_ON_DELIVERY, OrderStatus.PAID, description="Payment received"),
        OrderStatusTransition(
            OrderStatus.CASH_ON_DELIVERY, OrderStatus.CANCELLED, customer_allowed=True, description="Order cancelled"
        ),
        OrderStatusTransition(OrderStatus.PAID, OrderStatus.OUT_FOR_DELIVERY, description="Handed to the rider"),
        OrderStatusTransition(OrderStatus.PAID, OrderStatus.DELIVERED, description="Collected or delivered"),
        OrderStatusTransition(OrderStatus.PAID, OrderStatus.CANCELLED, description="Paid order cancelled by admin"),
        OrderStatusTransition(OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, description="Delivered"),
    )

    def __init__(self, strict: bool = True) -> None:
        self.strict = strict
        self._transitions = {(t.from_status, t.to_status): t for t in self.VALID_TRANSITIONS}

    def get_valid_next_statuses(self, current: OrderStatus | str) -> set[OrderStatus]:
        current = OrderStatus(current)
        return {t.to_status for t in self.VALID_TRANSITIONS if t.from_status == current}

    def is_valid_transition(self, current: OrderStatus | str, target: OrderStatus | str) -> bool:
        return (OrderStatus(current), OrderStatus(target)) in self._transitions

    def can_customer_cancel(self, current: OrderStatus | str) -> bool:
        transition = self._transitions.get((OrderStatus(current), OrderStatus.CANCELLED))
        return transition is not None and transition.customer_allowed

    def validate_transition(self, current: OrderStatus | str, target: OrderStatus | str, order_ref: str = "") -> bool:
        """
        Check a requested status change.

        Returns:
            bool: False when ``target`` equals the current status (nothing to do), True otherwise

        Raises:
            InvalidOrderTransitionError: When the transition is not allowed and the machine is strict
        """
        current, target = OrderStatus(current), OrderStatus(target)

        if current == target:
            return False

        if self.is_valid_transition(current, target):
            logger.info(
                f"Order {order_ref} status {current} -> {target}: {self._transitions[(current, target)].description}"
            )
            return True

        if self.strict:
            raise errors.InvalidOrderTransitionError(f"Cannot change order status from {current} to {target}")

        logger.warning(
            f"Order {order_ref} out-of-band status change {current} -> {target}",
            extra={"event_type": "order_out_of_band_transition", "from_status": current, "to_status": target},
        )
        return True
