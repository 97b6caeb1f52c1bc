"""
Practice Session Repository

Data access for voice practice sessions, including the conditional
active -> completed transition and the dashboard history queries.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import SessionStatus
from app.infrastructure.db.models.session import PracticeSession
from app.infrastructure.db.repositories.base_repository import BaseRepository


class SessionRepository(BaseRepository[PracticeSession]):
    """Repository for PracticeSession rows."""

    def __init__(self, session: AsyncSession):
        super().__init__(PracticeSession, session)

    async def get_owned(
        self,
        session_id: UUID,
        profile_id: UUID
    ) -> Optional[PracticeSession]:
        """
        Get a session only if it belongs to the given profile.

        A foreign session and a missing session look the same to callers.
        """
        stmt = select(PracticeSession).where(
            PracticeSession.id == session_id,
            PracticeSession.profile_id == profile_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def complete(
        self,
        session_id: UUID,
        values: Dict[str, Any]
    ) -> Optional[PracticeSession]:
        """
        Mark an active session completed.

        The UPDATE is guarded by status = 'active', so at most one concurrent
        caller wins; the others get None. A copy of the row already loaded
        in this session is refreshed with the new values.

        Args:
            session_id: Session to complete
            values: Column values to set alongside the status change

        Returns:
            Updated session or None if it was no longer active
        """
        stmt = (
            update(PracticeSession)
            .where(
                PracticeSession.id == session_id,
                PracticeSession.status == SessionStatus.ACTIVE.value,
            )
            .values(status=SessionStatus.COMPLETED.value, **values)
            .returning(PracticeSession)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_created_since(self, profile_id: UUID, since: datetime) -> int:
        """Count sessions a profile started at or after `since`."""
        stmt = (
            select(func.count())
            .select_from(PracticeSession)
            .where(
                PracticeSession.profile_id == profile_id,
                PracticeSession.created_at >= since,
            )
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def count_completed_since(self, profile_id: UUID, since: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(PracticeSession)
            .where(
                PracticeSession.profile_id == profile_id,
                PracticeSession.status == SessionStatus.COMPLETED.value,
                PracticeSession.ended_at >= since,
            )
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def get_completed_history(
        self,
        profile_id: UUID,
        limit: int = 100
    ) -> List[Tuple[Optional[float], datetime]]:
        """
        Scores and creation times of the most recent completed sessions.

        Returns:
            (overall_score, created_at) pairs, newest first
        """
        stmt = (
            select(PracticeSession.overall_score, PracticeSession.created_at)
            .where(
                PracticeSession.profile_id == profile_id,
                PracticeSession.status == SessionStatus.COMPLETED.value,
            )
            .order_by(PracticeSession.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [(row.overall_score, row.created_at) for row in result.all()]

    async def get_recent(
        self,
        profile_id: UUID,
        limit: int = 10
    ) -> List[PracticeSession]:
        """Most recent sessions of any status, newest first."""
        stmt = (
            select(PracticeSession)
            .where(PracticeSession.profile_id == profile_id)
            .order_by(PracticeSession.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
