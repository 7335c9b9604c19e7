from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from fastapi_problem.error import StatusProblem
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.database.session import get_db_session
from src.core.dependencies import get_storefront_session, require_auth_state
from src.core.exceptions import errors
from src.core.helpers.response import IResponseBase, build_json_response
from src.core.logging import get_logger
from src.domain.schemas import AuthSessionState, FavoriteResponse, FavoriteStatusResponse
from src.domain.services import FavoriteService, StorefrontSession

logger = get_logger(__name__)


router = APIRouter()


@router.get(
    "/",
    response_model=IResponseBase[list[FavoriteResponse]],
    operation_id="list_favorites",
)
async def list_favorites(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_auth_state)],
) -> IResponseBase[list[FavoriteResponse]]:
    """
    List the products the caller has saved, most recent first.
    """
    try:
        favorites = await FavoriteService(session).list_favorites(auth_state.user_id)

        return build_json_response(
            data=[FavoriteResponse.model_validate(favorite) for favorite in favorites],
            message="Favorites retrieved successfully",
        )
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.favorite.endpoints.list_favorites:: Error listing favorites: {e}")
        raise errors.ServiceError(detail="Failed to retrieve favorites") from e


@router.get(
    "/ids",
    response_model=IResponseBase[list[str]],
    operation_id="list_favorite_product_ids",
)
async def list_favorite_product_ids(
    storefront: Annotated[StorefrontSession, Depends(get_storefront_session)],
) -> IResponseBase[list[str]]:
    """
    Ids of the products the caller has saved, for marking product cards.
    Anonymous callers get an empty list.
    """
    try:
        product_ids = await storefront.favorite_product_ids()

        return build_json_response(data=sorted(product_ids))
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(
            f"src.domain.routers.favorite.endpoints.list_favorite_product_ids:: Error listing favorite ids: {e}"
        )
        raise errors.ServiceError(detail="Failed to retrieve favorites") from e


@router.get(
    "/check/{product_id}",
    response_model=IResponseBase[FavoriteStatusResponse],
    operation_id="check_favorite",
)
async def check_favorite(
    product_id: Annotated[UUID, Path(..., description="The ID of the product")],
    storefront: Annotated[StorefrontSession, Depends(get_storefront_session)],
) -> IResponseBase[FavoriteStatusResponse]:
    """
    Whether the caller saved a product. Anonymous callers always get false.
    """
    try:
        is_favorited = await storefront.is_favorited(str(product_id))

        return build_json_response(data=FavoriteStatusResponse(is_favorited=is_favorited))
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.favorite.endpoints.check_favorite:: Error checking favorite: {e}")
        raise errors.ServiceError(detail="Failed to check favorite") from e


@router.post(
    "/{product_id}",
    response_model=IResponseBase[FavoriteResponse],
    status_code=status.HTTP_201_CREATED,
    operation_id="add_favorite",
)
async def add_favorite(
    product_id: Annotated[UUID, Path(..., description="The ID of the product")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_auth_state)],
    storefront: Annotated[StorefrontSession, Depends(get_storefront_session)],
) -> IResponseBase[FavoriteResponse]:
    try:
        favorite = await FavoriteService(session).add_favorite(auth_state.user_id, product_id)
        storefront.favorites.mark(str(product_id), True)

        return build_json_response(data=FavoriteResponse.model_validate(favorite), message="Added to favorites")
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.favorite.endpoints.add_favorite:: Error adding favorite: {e}")
        raise errors.ServiceError(detail="Failed to add favorite") from e


@router.delete(
    "/{product_id}",
    response_model=IResponseBase[FavoriteStatusResponse],
    operation_id="remove_favorite",
)
async def remove_favorite(
    product_id: Annotated[UUID, Path(..., description="The ID of the product")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_auth_state)],
    storefront: Annotated[StorefrontSession, Depends(get_storefront_session)],
) -> IResponseBase[FavoriteStatusResponse]:
    try:
        await FavoriteService(session).remove_favorite(auth_state.user_id, product_id)
        storefront.favorites.mark(str(product_id), False)

        return build_json_response(
            data=FavoriteStatusResponse(is_favorited=await storefront.is_favorited(str(product_id))),
            message="Removed from favorites",
        )
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.favorite.endpoints.remove_favorite:: Error removing favorite: {e}")
        raise errors.ServiceError(detail="Failed to remove favorite") from e
