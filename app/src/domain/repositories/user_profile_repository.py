from __future__ import annotations

from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession
from src.domain.models.user_profile import UserProfile
from src.domain.repositories.base_repository import BaseRepository
from src.domain.schemas.user_profile import UserProfileUpdate


class UserProfileRepository(BaseRepository[UserProfile, Any, UserProfileUpdate]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(UserProfile, session)
