from typing import Annotated

from fastapi import APIRouter, Body, Depends, Path
from fastapi_problem.error import StatusProblem
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.database.session import get_db_session
from src.core.dependencies import resolve_role
from src.core.exceptions import errors
from src.core.helpers.response import IResponseBase, build_json_response
from src.core.logging import get_logger
from src.domain.schemas import AuthSessionState, UserProfileResponse, UserProfileUpdate
from src.domain.services.user_profile_service import UserProfileService

logger = get_logger(__name__)


router = APIRouter()


@router.get(
    "/{profile_id}",
    response_model=IResponseBase[UserProfileResponse],
    operation_id="get_profile",
)
async def get_profile(
    profile_id: Annotated[str, Path(..., max_length=128, description="The user id of the profile")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(resolve_role)],
) -> IResponseBase[UserProfileResponse]:
    """
    Get a profile. Users may read their own profile, administrators any profile.
    """
    try:
        profile = await UserProfileService(session).get_profile(profile_id, auth_state)

        return build_json_response(data=UserProfileResponse.model_validate(profile), message="Profile retrieved")
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(f"src.domain.routers.profile.endpoints.get_profile:: Error getting profile {profile_id}: {e}")
        raise errors.ServiceError(detail="Failed to retrieve profile") from e


@router.put(
    "/{profile_id}",
    response_model=IResponseBase[UserProfileResponse],
    operation_id="update_profile",
)
async def update_profile(
    profile_id: Annotated[str, Path(..., max_length=128, description="The user id of the profile")],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    auth_state: Annotated[AuthSessionState, Depends(resolve_role)],
    profile_data: Annotated[UserProfileUpdate, Body(...)],
) -> IResponseBase[UserProfileResponse]:
    try:
        profile = await UserProfileService(session).update_profile(profile_id, profile_data, auth_state)

        return build_json_response(data=UserProfileResponse.model_validate(profile), message="Profile updated")
    except StatusProblem as sp:
        raise sp
    except Exception as e:
        logger.exception(
            f"src.domain.routers.profile.endpoints.update_profile:: Error updating profile {profile_id}: {e}"
        )
        raise errors.ServiceError(detail="Failed to update profile") from e
