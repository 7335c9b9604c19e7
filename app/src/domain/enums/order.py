from enum import StrEnum


class OrderStatus(StrEnum):
    """
    Enumeration of Order status options

    Attributes:
        PENDING: Order recorded, awaiting confirmation.
        CASH_ON_DELIVERY: Confirmed, to be paid in cash when delivered.
        PAID: Payment received.
        OUT_FOR_DELIVERY: Handed to the rider.
        DELIVERED: Received by the customer. Terminal.
        CANCELLED: Cancelled by the customer or an administrator. Terminal.
    """

    PENDING = "PENDING"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"
    PAID = "PAID"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    def is_customer_cancellable(self) -> bool:
        return self in (OrderStatus.PENDING, OrderStatus.CASH_ON_DELIVERY)


class PaymentMethod(StrEnum):
    """
    Enumeration of payment methods

    Attributes:
        COD: Cash on delivery, the only method offered.
    """

    COD = "COD"
