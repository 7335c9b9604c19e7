from fastapi import status

from .base import ConflictError, ServiceError, ValidationError


class EmptyCartError(ValidationError):
    """
    This error is raised when a checkout is submitted without any line items.
    """

    title = "Empty Cart"
    detail = "Cart is empty"


class MissingDeliveryDetailsError(ValidationError):
    """
    This error is raised when a checkout lacks a phone number or a delivery location.
    """

    title = "Missing Delivery Details"
    detail = "Phone number and delivery location are required"


class InvalidCartProductError(ValidationError):
    """
    This error is raised when a cart references a product that does not exist or is not active.
    """

    title = "Invalid Product"
    detail = "Invalid product in cart"


class InsufficientStockError(ValidationError):
    """
    This error is raised when a requested quantity exceeds the available stock.
    """

    title = "Insufficient Stock"
    detail = "Insufficient stock for one or more items"


class StockConflictError(ConflictError):
    """
    This error is raised when stock was taken by a concurrent checkout between
    validation and the decrement.
    """

    type_ = "stock_conflict_error"
    title = "Stock Changed"
    detail = "Insufficient stock for one or more items"


class OrderNotFoundError(ServiceError):
    """
    This error is raised when an order is not found in the system.
    """

    type_ = "order_not_found_error"
    title = "Order Not Found"
    detail = "Order not found"
    status = status.HTTP_404_NOT_FOUND


class OrderNotCancellableError(ValidationError):
    """
    This error is raised when a customer tries to cancel an order past the cancellable stages.
    """

    title = "Order Not Cancellable"
    detail = "Order cannot be cancelled at this stage"


class InvalidOrderTransitionError(ValidationError):
    """
    This error is raised when an order status change is not an allowed transition.
    """

    title = "Invalid Status Transition"
    detail = "The order cannot move to the requested status"


class OrderCreationError(ServiceError):
    """
    This error is raised when an order could not be persisted.
    """

    title = "Order Creation Failed"
    detail = "Failed to create order"
    status = status.HTTP_500_INTERNAL_SERVER_ERROR


class OrderStatusConflictError(ConflictError):
    """
    This error is raised when an order's status was changed by another request
    between reading the order and writing the new status.
    """

    type_ = "order_status_conflict_error"
    title = "Order Changed"
    detail = "The order status was changed by another request. Please reload and try again."
