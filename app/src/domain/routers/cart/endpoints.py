from typing import Annotated

from fastapi import APIRouter, Body, Depends, Path, Query, status
from fastapi.responses import StreamingResponse
from fastapi_problem.error import StatusProblem
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.database.session import get_db_session
from src.core.dependencies import get_key_value_service, get_storefront_session, resolve_cart_identity
from src.core.exceptions import errors
from src.core.helpers.response import IResponseBase, build_json_response
from src.core.logging import get_logger
from src.domain.schemas import AddToCartRequest, CartIdentity, CartSnapshot, UpdateCartItemRequest
from src.domain.services import CatalogService, StorefrontSession
from src.libs.kvstore import KeyValueService

logger = get_logger(__name__)

router = APIRouter()

CART_EVENTS_RETRY_MS = 3000


@router.get(
    "/",
    response_model=IResponseBase[CartSnapshot],
    operation_id="get_cart",
)
async def get_cart(
    storefront: Annotated[StorefrontSession, Depends(get_storefront_session)],
) -> IResponseBase[CartSnapshot]:
    """
    Get the caller's cart.

    Signed-in callers get their own cart; guests are identified by the
    `X-Guest-Id` header, which is issued on the first request.
    """
    try:
        return build_json_response(data=storefront.cart.snapshot(), message="Cart retrieved successfully")
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.cart.endpoints.get_cart:: Error getting cart: {e}")
        raise errors.ServiceError(detail="Failed to fetch cart") from e


@router.post(
    "/items",
    status_code=status.HTTP_200_OK,
    response_model=IResponseBase[CartSnapshot],
    operation_id="add_to_cart",
)
async def add_to_cart(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    storefront: Annotated[StorefrontSession, Depends(get_storefront_session)],
    add_data: Annotated[AddToCartRequest, Body(..., description="Product and quantity to add")],
) -> IResponseBase[CartSnapshot]:
    """
    Add a product to the cart.

    Adding a product already in the cart raises that line's quantity. The
    merged quantity may not exceed the product's stock.
    """
    try:
        product = await CatalogService(session).get_cart_snapshot(add_data.product_id)
        await storefront.cart.add_to_cart(product, add_data.quantity)

        return build_json_response(data=storefront.cart.snapshot(), message="Item added to cart successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.cart.endpoints.add_to_cart:: Error adding item to cart: {e}")
        raise errors.ServiceError(detail="Failed to add item to cart") from e


@router.put(
    "/items/{line_id}",
    response_model=IResponseBase[CartSnapshot],
    operation_id="update_cart_item",
)
async def update_cart_item(
    line_id: Annotated[str, Path(..., description="The ID of the cart line to update")],
    storefront: Annotated[StorefrontSession, Depends(get_storefront_session)],
    update_data: Annotated[UpdateCartItemRequest, Body(..., description="New quantity for the line")],
) -> IResponseBase[CartSnapshot]:
    """
    Set the quantity of a cart line. Quantities below one leave the cart unchanged.
    """
    try:
        await storefront.cart.update_quantity(line_id, update_data.quantity)

        return build_json_response(data=storefront.cart.snapshot(), message="Cart item updated successfully")
    except errors.ServiceError as se:
        raise se
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.cart.endpoints.update_cart_item:: Error updating cart line {line_id}: {e}")
        raise errors.ServiceError(detail="Failed to update cart item") from e


@router.delete(
    "/items/{line_id}",
    response_model=IResponseBase[CartSnapshot],
    operation_id="remove_cart_item",
)
async def remove_cart_item(
    line_id: Annotated[str, Path(..., description="The ID of the cart line to remove")],
    storefront: Annotated[StorefrontSession, Depends(get_storefront_session)],
) -> IResponseBase[CartSnapshot]:
    try:
        await storefront.cart.remove_from_cart(line_id)

        return build_json_response(data=storefront.cart.snapshot(), message="Cart item removed successfully")
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.cart.endpoints.remove_cart_item:: Error removing cart line {line_id}: {e}")
        raise errors.ServiceError(detail="Failed to remove cart item") from e


@router.delete(
    "/",
    response_model=IResponseBase[CartSnapshot],
    operation_id="clear_cart",
)
async def clear_cart(
    storefront: Annotated[StorefrontSession, Depends(get_storefront_session)],
) -> IResponseBase[CartSnapshot]:
    """
    Empty the cart, as done after a successful checkout.
    """
    try:
        await storefront.cart.clear_cart()

        return build_json_response(data=storefront.cart.snapshot(), message="Cart cleared successfully")
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.cart.endpoints.clear_cart:: Error clearing cart: {e}")
        raise errors.ServiceError(detail="Failed to clear cart") from e


@router.get(
    "/events",
    response_class=StreamingResponse,
    operation_id="stream_cart_events",
)
async def stream_cart_events(
    identity: Annotated[CartIdentity, Depends(resolve_cart_identity)],
    kv_service: Annotated[KeyValueService, Depends(get_key_value_service)],
    timeout: Annotated[float, Query(gt=0, le=60, description="Seconds to keep the stream open")] = 25,
) -> StreamingResponse:
    """
    Stream the caller's cart as server-sent events.

    The current cart is sent first, then again whenever another tab or device
    of the same shopper changes it. The stream ends after `timeout` seconds
    with a retry hint, so EventSource clients reconnect on their own.
    """
    storefront = await StorefrontSession(identity, kv_service.provider, kv_service.channel).open(subscribe=True)

    async def event_stream():
        try:
            async for snapshot in storefront.cart.watch(timeout):
                yield f"event: cart\ndata: {snapshot.model_dump_json()}\n\n"
            yield f"retry: {CART_EVENTS_RETRY_MS}\n\n"
        except Exception as e:
            logger.exception(f"src.domain.routers.cart.endpoints.stream_cart_events:: Cart stream failed: {e}")
            raise
        finally:
            await storefront.close()

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
