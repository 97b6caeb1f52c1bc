"""
Usage Ledger Repository

Append-only access to salesai_usage plus the monthly aggregation used by
the dashboard.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models.usage import UsageRecord
from app.infrastructure.db.repositories.base_repository import BaseRepository


class UsageRepository(BaseRepository[UsageRecord]):
    """Repository for usage ledger rows."""

    def __init__(self, session: AsyncSession):
        super().__init__(UsageRecord, session)

    async def sum_minutes_since(self, profile_id: UUID, since: datetime) -> int:
        """
        Total minutes a profile consumed since `since`.

        Returns:
            Sum of minutes_used, 0 when there are no rows
        """
        stmt = (
            select(func.coalesce(func.sum(UsageRecord.minutes_used), 0))
            .where(
                UsageRecord.profile_id == profile_id,
                UsageRecord.created_at >= since,
            )
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())
