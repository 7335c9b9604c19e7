from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.exceptions import errors
from src.core.logging import get_logger
from src.domain.enums import UserRole
from src.domain.models.user_profile import UserProfile
from src.domain.repositories.user_profile_repository import UserProfileRepository
from src.domain.schemas import AuthSessionState, UserProfileUpdate

logger = get_logger(__name__)


class UserProfileService:
    """Service for storefront profiles of identity-provider users."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_profile_repository = UserProfileRepository(session)

    async def get_role(self, user_id: str) -> UserRole | None:
        profile = await self.user_profile_repository.find_one_by(user_id)
        return UserRole(profile.role) if profile else None

    async def get_profile(self, profile_id: str, auth_state: AuthSessionState) -> UserProfile:
        """
        Get a profile. Callers reading their own profile for the first time
        get one created from their token.

        Raises:
            AuthorizationError: If a non-admin reads another user's profile
            NotFoundError: If an admin reads a profile that does not exist
        """
        self._ensure_access(profile_id, auth_state)

        profile = await self.user_profile_repository.find_one_by(profile_id)
        if profile:
            return profile

        if profile_id != auth_state.user_id:
            raise errors.NotFoundError(detail="Profile not found")

        try:
            return await self.user_profile_repository.create(
                {"id": auth_state.user_id, "email": auth_state.email, "role": auth_state.role}
            )
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.user_profile_service.get_profile:: error while creating profile: {e}")
            raise errors.ServiceError(detail="Failed to load profile") from e

    async def update_profile(
        self, profile_id: str, data: UserProfileUpdate, auth_state: AuthSessionState
    ) -> UserProfile:
        """
        Raises:
            AuthorizationError: If a non-admin updates another user's profile or their own role
        """
        profile = await self.get_profile(profile_id, auth_state)
        changes = data.model_dump(exclude_unset=True)

        if "role" in changes:
            if not auth_state.is_admin():
                raise errors.AuthorizationError(detail="Only administrators can change roles")
            if changes["role"] is None:
                changes.pop("role")

        try:
            return await self.user_profile_repository.update_entity(profile, changes)
        except errors.DatabaseError as e:
            logger.exception(f"src.domain.services.user_profile_service.update_profile:: error while updating profile: {e}")
            raise errors.ServiceError(detail="Failed to update profile") from e

    async def count_customers(self) -> int:
        return await self.user_profile_repository.count(role=UserRole.USER)

    def _ensure_access(self, profile_id: str, auth_state: AuthSessionState) -> None:
        if profile_id != auth_state.user_id and not auth_state.is_admin():
            raise errors.AuthorizationError(detail="You can only access your own profile")
