"""
Subscription Repository

Data access layer for subscription persistence.
Minute increments are a single SQL expression update so concurrent session
completions cannot lose each other's minutes.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import SubscriptionStatus
from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.models.subscription import Subscription
from app.infrastructure.db.repositories.base_repository import BaseRepository


logger = logging.getLogger(__name__)


class SubscriptionRepository(BaseRepository[Subscription]):
    """Repository for subscription data access."""

    def __init__(self, session: AsyncSession):
        super().__init__(Subscription, session)

    # =========================================================================
    # Query Methods
    # =========================================================================

    async def get_active_for_profile(self, profile_id: UUID) -> Optional[Subscription]:
        """
        Get the most recent active subscription of a profile.

        Args:
            profile_id: Internal profile ID

        Returns:
            Subscription or None
        """
        stmt = (
            select(Subscription)
            .where(
                Subscription.profile_id == profile_id,
                Subscription.status == SubscriptionStatus.ACTIVE.value,
            )
            .order_by(Subscription.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    # =========================================================================
    # Command Methods
    # =========================================================================

    async def increment_minutes(self, subscription_id: UUID, minutes: int) -> Optional[int]:
        """
        Atomically add minutes to a subscription's used counter.

        Args:
            subscription_id: Subscription to charge
            minutes: Whole minutes to add (never negative)

        Returns:
            The new minutes_used value, or None if the row is gone
        """
        if minutes < 0:
            raise ValueError("minutes must not be negative")

        stmt = (
            update(Subscription)
            .where(Subscription.id == subscription_id)
            .values(
                minutes_used=Subscription.minutes_used + minutes,
                updated_at=utcnow(),
            )
            .returning(Subscription.minutes_used)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        new_total = result.scalar_one_or_none()

        if new_total is not None:
            logger.info(f"Subscription {subscription_id} minutes_used -> {new_total}")
        return new_total
