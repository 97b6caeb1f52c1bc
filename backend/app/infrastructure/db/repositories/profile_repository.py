"""
Profile Repository for SalesAI Trainer

Resolves the application profile behind an authenticated Supabase user.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models.profile import Profile
from app.infrastructure.db.repositories.base_repository import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile lookups."""

    def __init__(self, session: AsyncSession):
        super().__init__(Profile, session)

    async def get_by_auth_id(self, auth_id: UUID) -> Optional[Profile]:
        """
        Get a profile by the authenticated user's ID.

        Args:
            auth_id: The auth user's UUID (not profile ID)

        Returns:
            Profile or None if not found
        """
        stmt = select(Profile).where(Profile.auth_id == auth_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
