from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi_problem.error import StatusProblem
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.database.session import get_db_session
from src.core.dependencies import require_admin
from src.core.exceptions import errors
from src.core.helpers.response import IResponseBase, build_json_response
from src.core.logging import get_logger
from src.domain.schemas import AuthSessionState, CustomerCountResponse
from src.domain.services.user_profile_service import UserProfileService

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/customers/count",
    response_model=IResponseBase[CustomerCountResponse],
    operation_id="count_customers",
)
async def count_customers(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(require_admin)],  # noqa: ARG001
) -> IResponseBase[CustomerCountResponse]:
    """
    Number of customer profiles, administrators excluded.
    """
    try:
        count = await UserProfileService(session).count_customers()

        return build_json_response(data=CustomerCountResponse(count=count))
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.admin.endpoints.count_customers:: Error counting customers: {e}")
        raise errors.ServiceError(detail="Failed to count customers") from e
