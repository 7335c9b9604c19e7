from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, status
from fastapi_problem.error import StatusProblem
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.database.session import get_db_session
from src.core.dependencies import require_admin
from src.core.exceptions import errors
from src.core.helpers.response import IResponseBase, build_json_response
from src.core.logging import get_logger
from src.domain.schemas import AuthSessionState, PromotionCreate, PromotionResponse, PromotionUpdate
from src.domain.services.promotion_service import PromotionService

logger = get_logger(__name__)


router = APIRouter()


@router.get(
    "/",
    response_model=IResponseBase[list[PromotionResponse]],
    operation_id="list_promotions",
)
async def list_promotions(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> IResponseBase[list[PromotionResponse]]:
    """
    List active promotions, newest first.
    """
    try:
        promotions = await PromotionService(session).list_active()

        return build_json_response(
            data=[PromotionResponse.model_validate(promotion) for promotion in promotions],
            message="Promotions retrieved successfully",
        )
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.promotion.endpoints.list_promotions:: Error listing promotions: {e}")
        raise errors.ServiceError(detail="Failed to retrieve promotions") from e


@router.get(
    "/{promotion_id}",
    response_model=IResponseBase[PromotionResponse],
    operation_id="get_promotion",
)
async def get_promotion(
    promotion_id: Annotated[UUID, Path(..., description="The ID of the promotion")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> IResponseBase[PromotionResponse]:
    try:
        promotion = await PromotionService(session).get_promotion(promotion_id)

        return build_json_response(
            data=PromotionResponse.model_validate(promotion), message="Promotion retrieved successfully"
        )
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(
            f"src.domain.routers.promotion.endpoints.get_promotion:: Error getting promotion {promotion_id}: {e}"
        )
        raise errors.ServiceError(detail="Failed to retrieve promotion") from e


@router.post(
    "/",
    response_model=IResponseBase[PromotionResponse],
    status_code=status.HTTP_201_CREATED,
    operation_id="create_promotion",
)
async def create_promotion(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
    promotion_data: Annotated[PromotionCreate, Body(...)],
) -> IResponseBase[PromotionResponse]:
    try:
        promotion = await PromotionService(session).create_promotion(promotion_data)

        return build_json_response(
            data=PromotionResponse.model_validate(promotion), message="Promotion created successfully"
        )
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.promotion.endpoints.create_promotion:: Error creating promotion: {e}")
        raise errors.ServiceError(detail="Failed to create promotion") from e


@router.put(
    "/{promotion_id}",
    response_model=IResponseBase[PromotionResponse],
    operation_id="update_promotion",
)
async def update_promotion(
    promotion_id: Annotated[UUID, Path(..., description="The ID of the promotion")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
    promotion_data: Annotated[PromotionUpdate, Body(...)],
) -> IResponseBase[PromotionResponse]:
    try:
        promotion = await PromotionService(session).update_promotion(promotion_id, promotion_data)

        return build_json_response(
            data=PromotionResponse.model_validate(promotion), message="Promotion updated successfully"
        )
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(
            f"src.domain.routers.promotion.endpoints.update_promotion:: Error updating promotion {promotion_id}: {e}"
        )
        raise errors.ServiceError(detail="Failed to update promotion") from e


@router.delete(
    "/{promotion_id}",
    response_model=IResponseBase[None],
    operation_id="delete_promotion",
)
async def delete_promotion(
    promotion_id: Annotated[UUID, Path(..., description="The ID of the promotion")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
) -> IResponseBase[None]:
    try:
        await PromotionService(session).delete_promotion(promotion_id)

        return build_json_response(data=None, message="Promotion deleted successfully")
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(
            f"src.domain.routers.promotion.endpoints.delete_promotion:: Error deleting promotion {promotion_id}: {e}"
        )
        raise errors.ServiceError(detail="Failed to delete promotion") from e
