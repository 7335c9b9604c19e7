from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.config import settings
from src.core.database.transaction import Transaction
from src.core.exceptions import errors
from src.core.logging import get_logger
from src.domain.enums import OrderStatus, PaymentMethod
from src.domain.models.order import Order
from src.domain.models.order_item import OrderItem
from src.domain.repositories.order_repository import OrderRepository
from src.domain.repositories.product_repository import ProductRepository
from src.domain.schemas import AuthSessionState, CheckoutRequest, CheckoutResponse, OrderAdminUpdate
from src.domain.services.order_state_machine import OrderStateMachine

logger = get_logger(__name__)


def generate_order_number(now: datetime | None = None) -> str:
    """
    Build an order number such as ``ORD-20250114-3F2A9C01BD``.
    """
    now = now or datetime.now(UTC)
    return f"{settings.ORDER_NUMBER_PREFIX}-{now:%Y%m%d}-{uuid4().hex[:10].upper()}"


class OrderService:
    """
    Service for placing orders and moving them through their lifecycle.
    """

    def __init__(self, session: AsyncSession, state_machine: OrderStateMachine | None = None):
        self.session = session
        self.order_repository = OrderRepository(session=self.session)
        self.product_repository = ProductRepository(session=self.session)
        self.state_machine = state_machine or OrderStateMachine(strict=settings.ORDER_STRICT_STATUS_TRANSITIONS)

    async def checkout(
        self,
        auth_state: AuthSessionState,
        data: CheckoutRequest,
        idempotency_key: str | None = None,
    ) -> CheckoutResponse:
        """
        Turn a cart snapshot into a cash-on-delivery order.

        Prices and stock always come from the product ledger. The order, its
        lines and the stock decrements are written in one transaction, and a
        decrement that no longer finds enough stock aborts all of it.

        Args:
            auth_state (AuthSessionState): The customer placing the order
            data (CheckoutRequest): Lines, contact and delivery details
            idempotency_key (str | None): Key of a retried submission

        Returns:
            CheckoutResponse: The order confirmation

        Raises:
            ValidationError: If the cart is empty, details are missing, a product is invalid or stock is short
            StockConflictError: If stock ran out while the order was being written
            OrderCreationError: If the order could not be persisted
        """
        if idempotency_key:
            existing = await self.order_repository.find_by_idempotency_key(auth_state.user_id, idempotency_key)
            if existing:
                logger.info(f"Returning existing order {existing.order_number} for idempotency key")
                return self._to_confirmation(existing)

        quantities = self._validate_request(data)
        products = await self.product_repository.get_active_by_ids(quantities.keys())

        if len(products) != len(quantities):
            raise errors.InvalidCartProductError()

        if any(not products[product_id].has_stock_for(quantity) for product_id, quantity in quantities.items()):
            raise errors.InsufficientStockError()

        products_total = sum(
            (products[product_id].price * quantity for product_id, quantity in quantities.items()),
            Decimal("0"),
        )
        transport_fee = Decimal("0")
        service_fee = Decimal("0")
        location = data.delivery_location.strip()

        try:
            async with Transaction(self.session):
                order = await self.order_repository.create(
                    {
                        "order_number": generate_order_number(),
                        "user_id": auth_state.user_id,
                        "email": data.contact.email or auth_state.email,
                        "phone": data.contact.phone.strip(),
                        "location_name": location,
                        "address": location,
                        "latitude": data.latitude,
                        "longitude": data.longitude,
                        "transport_fee": transport_fee,
                        "service_fee": service_fee,
                        "products_total": products_total,
                        "total_amount": products_total + transport_fee + service_fee,
                        "payment_method": PaymentMethod.COD,
                        "status": OrderStatus.CASH_ON_DELIVERY,
                        "idempotency_key": idempotency_key,
                    }
                )

                await self.order_repository.add_items(
                    order,
                    [
                        OrderItem(
                            order_id=order.id,
                            product_id=product_id,
                            quantity=quantity,
                            price=products[product_id].price,
                        )
                        for product_id, quantity in quantities.items()
                    ]
                )

                for product_id, quantity in quantities.items():
                    if not await self.product_repository.decrement_stock(product_id, quantity):
                        logger.warning(f"Stock for product {product_id} changed during checkout, aborting order")
                        raise errors.StockConflictError()

        except errors.StockConflictError as sce:
            raise sce
        except errors.DatabaseError as de:
            logger.exception(f"src.domain.services.order_service.checkout:: Failed to persist order: {de}")
            raise errors.OrderCreationError() from de

        logger.info(
            f"Order {order.order_number} placed",
            extra={"event_type": "order_placed", "order_id": str(order.id), "total_amount": str(order.total_amount)},
        )
        return self._to_confirmation(order)

    async def get_orders_for_user(self, user_id: str) -> list[Order]:
        return await self.order_repository.find_for_user(user_id)

    async def get_all_orders(self) -> list[Order]:
        return await self.order_repository.find_recent()

    async def get_order(self, order_id: UUID, auth_state: AuthSessionState) -> Order:
        """
        Get an order its owner or an administrator may see.

        Raises:
            OrderNotFoundError: If the order does not exist
            AuthorizationError: If the caller is neither the owner nor an administrator
        """
        order = await self.order_repository.find_one_by(order_id)
        if not order:
            raise errors.OrderNotFoundError()

        if not (auth_state.is_admin() or order.is_owned_by(auth_state.user_id)):
            raise errors.AuthorizationError(detail="You can only view your own orders")

        return order

    async def cancel_order(self, order_id: UUID, auth_state: AuthSessionState) -> Order:
        """
        Cancel an order on behalf of its owner and give its stock back.

        Raises:
            OrderNotFoundError: If the order does not exist
            AuthorizationError: If the caller does not own the order
            OrderNotCancellableError: If the order is past the cancellable stages,
                including when another request cancelled it first
        """
        order = await self.order_repository.find_one_by(order_id)
        if not order:
            raise errors.OrderNotFoundError()

        if not order.is_owned_by(auth_state.user_id):
            raise errors.AuthorizationError(detail="You can only cancel your own orders")

        if not self.state_machine.can_customer_cancel(order.status):
            raise errors.OrderNotCancellableError()

        try:
            async with Transaction(self.session):
                if not await self._apply_status(order, OrderStatus.CANCELLED):
                    raise errors.OrderNotCancellableError()
        except errors.DatabaseError as de:
            logger.exception(f"src.domain.services.order_service.cancel_order:: Failed to cancel order {order_id}: {de}")
            raise errors.ServiceError("Failed to cancel order") from de

        return order

    async def update_order(self, order_id: UUID, data: OrderAdminUpdate) -> Order:
        """
        Apply an administrator's change of status, delivery location or phone.

        Raises:
            OrderNotFoundError: If the order does not exist
            InvalidOrderTransitionError: If the status change is not allowed
            OrderStatusConflictError: If another request changed the status first
            StockConflictError: If a cancelled order is reopened without enough stock left
        """
        order = await self.order_repository.find_one_by(order_id)
        if not order:
            raise errors.OrderNotFoundError()

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        target_status = changes.pop("status", None)
        if "location_name" in changes:
            changes["address"] = changes["location_name"]

        status_changes = target_status is not None and self.state_machine.validate_transition(
            order.status, target_status, order_ref=order.order_number
        )

        try:
            async with Transaction(self.session):
                if status_changes and not await self._apply_status(order, OrderStatus(target_status)):
                    raise errors.OrderStatusConflictError()
                if changes:
                    order = await self.order_repository.update_entity(order, changes)
        except errors.DatabaseError as de:
            logger.exception(f"src.domain.services.order_service.update_order:: Failed to update order {order_id}: {de}")
            raise errors.ServiceError("Failed to update order") from de

        return order

    async def _apply_status(self, order: Order, status: OrderStatus) -> bool:
        """
        Write the new status and move stock with it: cancelling gives the
        stock back, reopening a cancelled order takes it again.

        Returns False, with nothing written, when the stored status no longer
        matches the one read.
        """
        current = OrderStatus(order.status)
        items = list(order.items)
        values: dict = {}

        if status == OrderStatus.CANCELLED:
            values["cancelled_datetime"] = datetime.now(UTC)
        elif current == OrderStatus.CANCELLED:
            values["cancelled_datetime"] = None

        if not await self.order_repository.change_status(order, current, status, **values):
            logger.warning(f"Order {order.order_number} left {current} before it could move to {status}")
            return False

        if status == OrderStatus.CANCELLED:
            for item in items:
                await self.product_repository.restore_stock(item.product_id, item.quantity)
            logger.info(f"Order {order.order_number} cancelled, restored stock for {len(items)} line(s)")
        elif current == OrderStatus.CANCELLED:
            for item in items:
                if not await self.product_repository.decrement_stock(item.product_id, item.quantity):
                    raise errors.StockConflictError(detail="Not enough stock left to reopen this order")
            logger.info(f"Order {order.order_number} reopened as {status}, took stock for {len(items)} line(s)")

        return True

    def _validate_request(self, data: CheckoutRequest) -> dict[UUID, int]:
        if not data.lines:
            raise errors.EmptyCartError()

        if not data.contact.phone.strip() or not data.delivery_location.strip():
            raise errors.MissingDeliveryDetailsError()

        quantities: dict[UUID, int] = {}
        for line in data.lines:
            quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity

        return quantities

    def _to_confirmation(self, order: Order) -> CheckoutResponse:
        return CheckoutResponse(
            order_id=order.id,
            order_number=order.order_number,
            products_total=order.products_total,
            transport_fee=order.transport_fee,
            service_fee=order.service_fee,
            total_amount=order.total_amount,
            payment_method=PaymentMethod(order.payment_method),
            status=OrderStatus(order.status),
        )
