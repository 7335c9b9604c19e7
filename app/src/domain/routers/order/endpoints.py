from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Header, Path, Query, status
from fastapi_problem.error import StatusProblem
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.constants import IDEMPOTENCY_KEY_HEADER
from src.core.database.session import get_db_session
from src.core.dependencies import checkout_rate_limit, require_admin, require_auth_state, resolve_role
from src.core.exceptions import errors
from src.core.helpers.misc import format_price
from src.core.helpers.response import IResponseBase, build_json_response
from src.core.logging import get_logger
from src.domain.schemas import (
    AuthSessionState,
    CheckoutRequest,
    CheckoutResponse,
    OrderAdminUpdate,
    OrderCancelResponse,
    OrderResponse,
)
from src.domain.services.order_service import OrderService

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/",
    response_model=IResponseBase[list[OrderResponse]],
    operation_id="list_orders",
)
async def list_orders(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(resolve_role)],
    scope: Annotated[Literal["me", "all"], Query(description="`me` for the caller's orders, `all` for administrators")] = "all",
) -> IResponseBase[list[OrderResponse]]:
    """
    List orders, newest first.

    Customers pass `scope=me` to get their own orders; every order is listed
    for administrators.
    """
    try:
        order_service = OrderService(session)

        if scope == "me":
            orders = await order_service.get_orders_for_user(auth_state.user_id)
        else:
            await require_admin(auth_state)
            orders = await order_service.get_all_orders()

        return build_json_response(
            data=[OrderResponse.model_validate(order) for order in orders],
            message="Orders retrieved successfully",
            meta={"count": len(orders)},
        )
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.order.endpoints.list_orders:: Error listing orders: {e}")
        raise errors.ServiceError(detail="Failed to fetch orders") from e


@router.post(
    "/checkout",
    dependencies=[checkout_rate_limit],
    response_model=IResponseBase[CheckoutResponse],
    status_code=status.HTTP_201_CREATED,
    operation_id="checkout",
)
async def checkout(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_auth_state)],
    checkout_data: Annotated[CheckoutRequest, Body(...)],
    idempotency_key: Annotated[str | None, Header(alias=IDEMPOTENCY_KEY_HEADER, max_length=255)] = None,
) -> IResponseBase[CheckoutResponse]:
    """
    Place a cash-on-delivery order for a cart snapshot

    Prices and stock are taken from the catalog, never from the request. The
    client clears its cart once this succeeds.
    """
    try:
        confirmation = await OrderService(session).checkout(auth_state, checkout_data, idempotency_key=idempotency_key)

        return build_json_response(
            data=confirmation,
            message="Order placed successfully",
            meta={"formatted_total": format_price(confirmation.total_amount)},
        )
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.order.endpoints.checkout:: Error placing order: {e}")
        raise errors.OrderCreationError() from e


@router.get(
    "/{order_id}",
    response_model=IResponseBase[OrderResponse],
    operation_id="get_order",
)
async def get_order(
    order_id: Annotated[UUID, Path(..., description="The ID of the order to retrieve")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(resolve_role)],
) -> IResponseBase[OrderResponse]:
    """
    Get an order with its lines. Only its owner and administrators may see it.
    """
    try:
        order = await OrderService(session).get_order(order_id, auth_state)

        return build_json_response(data=OrderResponse.model_validate(order), message="Order retrieved successfully")
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.order.endpoints.get_order:: Error getting order {order_id}: {e}")
        raise errors.ServiceError(detail="Failed to fetch order") from e


@router.put(
    "/{order_id}",
    response_model=IResponseBase[OrderResponse],
    operation_id="update_order",
)
async def update_order(
    order_id: Annotated[UUID, Path(..., description="The ID of the order to update")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
    update_data: Annotated[OrderAdminUpdate, Body(...)],
) -> IResponseBase[OrderResponse]:
    """
    Change an order's status, delivery location or phone

    Status changes must follow the order lifecycle.
    """
    try:
        order = await OrderService(session).update_order(order_id, update_data)

        return build_json_response(data=OrderResponse.model_validate(order), message="Order updated successfully")
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.order.endpoints.update_order:: Error updating order {order_id}: {e}")
        raise errors.ServiceError(detail="Failed to update order") from e


@router.post(
    "/{order_id}/cancel",
    response_model=IResponseBase[OrderCancelResponse],
    operation_id="cancel_order",
)
async def cancel_order(
    order_id: Annotated[UUID, Path(..., description="The ID of the order to cancel")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_auth_state)],
) -> IResponseBase[OrderCancelResponse]:
    """
    Cancel one of the caller's orders while it is still pending or awaiting cash on delivery
    """
    try:
        order = await OrderService(session).cancel_order(order_id, auth_state)

        return build_json_response(
            data=OrderCancelResponse(id=order.id, status=order.status, cancelled_at=order.cancelled_datetime),
            message="Order cancelled successfully",
        )
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.order.endpoints.cancel_order:: Error cancelling order {order_id}: {e}")
        raise errors.ServiceError(detail="Failed to cancel order") from e
