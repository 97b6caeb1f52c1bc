"""
Session Lifecycle and Dashboard Services

Business rules for voice practice sessions:
- create: profile lookup, minute-limit gate, insert, audit
- end: ownership + state check, billing, subscription charge, ledger, audit
- dashboard: minutes left, sessions today, average score, streak

Services receive repositories that share one request-scoped database session,
so every write of an operation commits or rolls back together.
"""

import json
import logging
import math
import random
from datetime import datetime, tzinfo
from typing import List, Optional
from uuid import UUID, uuid4

from app.domain.models import (
    AuditAction,
    CompletedSessionSummary,
    DashboardStats,
    PeriodUsage,
    ProcessingStatus,
    RecentSession,
    SessionCreateRequest,
    SessionEndRequest,
    SessionStatus,
    SessionSummary,
    SubscriptionInfo,
    SubscriptionStatus,
    SubscriptionSummaryResponse,
    SubscriptionTier,
)
from app.domain.usage import (
    DEFAULT_TIER,
    MINUTE_RATE,
    average_score,
    day_start,
    has_minutes_remaining,
    local_date,
    minute_cost,
    minutes_allowance,
    minutes_for_duration,
    minutes_left,
    month_start,
    streak_days,
)
from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.models.profile import Profile
from app.infrastructure.db.models.session import PracticeSession
from app.infrastructure.db.models.subscription import Subscription
from app.infrastructure.db.models.usage import UsageRecord
from app.infrastructure.db.repositories import (
    AuditLogRepository,
    ProfileRepository,
    SessionRepository,
    SubscriptionRepository,
    UsageRepository,
)
from app.infrastructure.exceptions import (
    InvalidStateError,
    LimitReachedError,
    NotFoundError,
)


logger = logging.getLogger(__name__)

HISTORY_WINDOW = 100


async def _require_profile(profiles: ProfileRepository, user_id: UUID) -> Profile:
    profile = await profiles.get_by_auth_id(user_id)
    if not profile:
        raise NotFoundError(
            "User profile not found",
            operation="read",
            table="salesai_profiles",
        )
    return profile


def _tier_of(subscription: Optional[Subscription]) -> SubscriptionTier:
    if subscription is None:
        return DEFAULT_TIER
    try:
        return SubscriptionTier(subscription.tier)
    except ValueError:
        return DEFAULT_TIER


# =============================================================================
# Session Lifecycle
# =============================================================================

class SessionService:
    """
    Creates and completes voice practice sessions for an authenticated user.

    Args:
        profiles: Profile lookups
        sessions: Session rows
        subscriptions: Minute allowance and counter
        usage: Usage ledger
        audit: Audit trail
        rate: Price per started minute
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        sessions: SessionRepository,
        subscriptions: SubscriptionRepository,
        usage: UsageRepository,
        audit: AuditLogRepository,
        rate: float = MINUTE_RATE,
    ):
        self._profiles = profiles
        self._sessions = sessions
        self._subscriptions = subscriptions
        self._usage = usage
        self._audit = audit
        self._rate = rate

    async def create_session(
        self,
        user_id: UUID,
        request: SessionCreateRequest
    ) -> SessionSummary:
        """
        Start a new practice session.

        The minute limit is only checked here; a session that runs past the
        allowance still completes and is billed in full.

        Raises:
            NotFoundError: No profile for the user
            LimitReachedError: Active subscription has no minutes left
        """
        profile = await _require_profile(self._profiles, user_id)

        subscription = await self._subscriptions.get_active_for_profile(profile.id)
        if subscription and not has_minutes_remaining(subscription):
            raise LimitReachedError(
                minutes_used=subscription.minutes_used,
                minutes_limit=subscription.minutes_limit,
            )

        session = await self._sessions.add(
            PracticeSession(
                profile_id=profile.id,
                company_id=request.company_id or profile.company_id,
                title=request.title,
                status=SessionStatus.ACTIVE.value,
                processing_status=ProcessingStatus.READY.value,
            )
        )

        await self._audit.record_session_event(
            user_id=user_id,
            company_id=profile.company_id,
            action=AuditAction.CREATE,
            details={"session_id": str(session.id), "title": request.title},
        )

        logger.info(f"Created session {session.id} for profile {profile.id}")
        return SessionSummary(
            id=session.id,
            title=session.title,
            status=SessionStatus(session.status),
            started_at=session.started_at,
            processing_status=session.processing_status,
        )

    async def end_session(
        self,
        user_id: UUID,
        request: SessionEndRequest
    ) -> CompletedSessionSummary:
        """
        Complete an active session and charge its minutes.

        Raises:
            NotFoundError: No profile, or the session is missing or not owned
            InvalidStateError: Session is not active
        """
        profile = await _require_profile(self._profiles, user_id)

        session = await self._sessions.get_owned(request.session_id, profile.id)
        if not session:
            raise NotFoundError(
                "Session not found or access denied",
                operation="read",
                table="salesai_sessions",
            )

        if session.status != SessionStatus.ACTIVE.value:
            raise InvalidStateError(
                "Session is not active",
                current_state=session.status,
                expected_state=SessionStatus.ACTIVE.value,
            )

        minutes_used = minutes_for_duration(request.duration_seconds)
        cost = minute_cost(minutes_used, self._rate)
        ended_at = utcnow()

        updated = await self._sessions.complete(
            session.id,
            {
                "ended_at": ended_at,
                "duration_seconds": request.duration_seconds,
                "transcript": request.transcript,
                "audio_quality": request.audio_quality,
                "audio_file_url": str(request.audio_file_url) if request.audio_file_url else None,
                "audio_file_size": request.audio_file_size,
                "minute_cost": cost,
                "processing_status": ProcessingStatus.ANALYZING.value,
            },
        )
        if updated is None:
            # Another request completed it between the read and the update
            raise InvalidStateError(
                "Session is not active",
                expected_state=SessionStatus.ACTIVE.value,
            )

        subscription = await self._subscriptions.get_active_for_profile(profile.id)
        if subscription:
            await self._subscriptions.increment_minutes(subscription.id, minutes_used)
            await self._usage.add(
                UsageRecord(
                    profile_id=profile.id,
                    company_id=profile.company_id,
                    session_id=session.id,
                    minutes_used=minutes_used,
                    period_start=subscription.current_period_start,
                    period_end=subscription.current_period_end,
                )
            )
        else:
            logger.info(f"No active subscription for profile {profile.id}; usage not recorded")

        await self._audit.record_session_event(
            user_id=user_id,
            company_id=profile.company_id,
            action=AuditAction.COMPLETE,
            details={
                "session_id": str(session.id),
                "duration_seconds": request.duration_seconds,
                "minutes_used": minutes_used,
                "minute_cost": cost,
            },
        )

        logger.info(
            f"Completed session {session.id}: {minutes_used} min, cost {cost}"
        )
        return CompletedSessionSummary(
            id=session.id,
            status=SessionStatus.COMPLETED,
            ended_at=ended_at,
            duration_seconds=request.duration_seconds,
            minute_cost=cost,
            minutes_used=minutes_used,
        )


# =============================================================================
# Demo Mode
# =============================================================================

def demo_session(request: SessionCreateRequest) -> SessionSummary:
    """Stub session for visitors without an account; nothing is stored."""
    return SessionSummary(
        id=uuid4(),
        title=request.title or "Demo Voice Training Session",
        status=SessionStatus.ACTIVE,
        started_at=utcnow(),
        processing_status=ProcessingStatus.READY.value,
        is_demo=True,
    )


def demo_completion(request: SessionEndRequest) -> CompletedSessionSummary:
    """Mock completion for demo sessions: free, with a random 3.5-5.5 score."""
    return CompletedSessionSummary(
        id=request.session_id,
        status=SessionStatus.COMPLETED,
        ended_at=utcnow(),
        duration_seconds=request.duration_seconds,
        minute_cost=0,
        minutes_used=minutes_for_duration(request.duration_seconds),
        score=round(random.uniform(3.5, 5.5), 1),
        is_demo=True,
    )


def demo_stats(error: Optional[str] = None) -> DashboardStats:
    return DashboardStats(
        minutes_left=minutes_allowance(None),
        sessions_today=0,
        progress_score=0,
        streak_days=0,
        total_minutes_used=0,
        total_sessions=0,
        average_score=0,
        is_demo=True,
        error=error,
    )


def demo_recent_sessions() -> List[RecentSession]:
    return [
        RecentSession(
            id="demo-1",
            title="Demo Session - Please Login",
            duration=0,
            score=0,
            date=utcnow(),
            status="demo",
            improvement=0,
            feedback="Please login to see your real session data",
            topics=["Demo mode - login required"],
        )
    ]


def demo_subscription_summary() -> SubscriptionSummaryResponse:
    allowance = minutes_allowance(None)
    return SubscriptionSummaryResponse(
        subscription=None,
        usage=PeriodUsage(
            minutes_used=0,
            minutes_included=allowance,
            minutes_remaining=allowance,
            sessions_completed=0,
        ),
        is_demo=True,
    )


# =============================================================================
# Dashboard
# =============================================================================

def format_recent_session(session: PracticeSession) -> RecentSession:
    """Shape a session row for the dashboard's recent sessions list."""
    topics: List[str] = []
    if session.conversation_log:
        try:
            log = json.loads(session.conversation_log)
        except ValueError:
            logger.warning(f"Unreadable conversation_log on session {session.id}")
            log = None
        if isinstance(log, dict) and log.get("topics"):
            raw = log["topics"]
            topics = [str(t) for t in raw] if isinstance(raw, list) else [str(raw)]

    if not topics:
        fallback = session.scenario_topic or session.session_type
        topics = [fallback] if fallback else []

    if session.scenario_topic:
        title = session.scenario_topic
    elif session.session_type:
        title = f"{session.session_type} Training"
    else:
        title = session.title

    return RecentSession(
        id=str(session.id),
        title=title,
        duration=math.floor((session.duration_seconds or 0) / 60),
        score=session.overall_score or 0,
        date=session.created_at,
        status=session.status,
        improvement=0,
        feedback=session.feedback_summary or "Session analysis pending...",
        topics=topics,
    )


class DashboardService:
    """
    Read-only aggregation of a user's practice history.

    Args:
        tz: Timezone whose calendar days define "today" and the streak
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        sessions: SessionRepository,
        subscriptions: SubscriptionRepository,
        usage: UsageRepository,
        tz: tzinfo,
    ):
        self._profiles = profiles
        self._sessions = sessions
        self._subscriptions = subscriptions
        self._usage = usage
        self._tz = tz

    def _now(self) -> datetime:
        return datetime.now(self._tz)

    async def get_stats(self, user_id: UUID, now: Optional[datetime] = None) -> DashboardStats:
        """
        Compute dashboard statistics.

        Raises:
            NotFoundError: No profile for the user
        """
        now = (now or self._now()).astimezone(self._tz)
        profile = await _require_profile(self._profiles, user_id)

        subscription = await self._subscriptions.get_active_for_profile(profile.id)
        tier = _tier_of(subscription)
        allowance = minutes_allowance(tier.value)

        used_this_month = await self._usage.sum_minutes_since(profile.id, month_start(now))
        sessions_today = await self._sessions.count_created_since(profile.id, day_start(now))

        history = await self._sessions.get_completed_history(profile.id, HISTORY_WINDOW)
        avg = average_score(score for score, _ in history)
        streak = streak_days(
            (local_date(created_at, self._tz) for _, created_at in history),
            now.date(),
        )

        return DashboardStats(
            minutes_left=minutes_left(allowance, used_this_month),
            sessions_today=sessions_today,
            progress_score=avg,
            streak_days=streak,
            total_minutes_used=used_this_month,
            total_sessions=len(history),
            average_score=avg,
            subscription_tier=tier,
            is_demo=False,
        )

    async def get_recent_sessions(self, user_id: UUID, limit: int = 10) -> List[RecentSession]:
        """
        Recent sessions for the dashboard list.

        Returns an empty list when the user has no profile yet.
        """
        profile = await self._profiles.get_by_auth_id(user_id)
        if not profile:
            logger.warning(f"User profile not found for {user_id}")
            return []

        sessions = await self._sessions.get_recent(profile.id, limit)
        return [format_recent_session(session) for session in sessions]

    async def get_subscription_summary(
        self,
        user_id: UUID,
        now: Optional[datetime] = None
    ) -> SubscriptionSummaryResponse:
        """
        Active subscription and its usage for the current billing period.

        Without a subscription the calendar month and starter allowance apply.

        Raises:
            NotFoundError: No profile for the user
        """
        now = (now or self._now()).astimezone(self._tz)
        profile = await _require_profile(self._profiles, user_id)
        subscription = await self._subscriptions.get_active_for_profile(profile.id)

        if subscription:
            period_start = subscription.current_period_start or month_start(now)
            used = subscription.minutes_used or 0
            included = subscription.minutes_limit or 0
            info = SubscriptionInfo(
                id=subscription.id,
                status=SubscriptionStatus(subscription.status),
                tier=_tier_of(subscription),
                plan_id=subscription.plan_id,
                plan_name=subscription.plan_name,
                current_period_start=subscription.current_period_start,
                current_period_end=subscription.current_period_end,
                cancel_at_period_end=subscription.cancel_at_period_end,
            )
        else:
            period_start = month_start(now)
            used = await self._usage.sum_minutes_since(profile.id, period_start)
            included = minutes_allowance(None)
            info = None

        completed = await self._sessions.count_completed_since(profile.id, period_start)

        return SubscriptionSummaryResponse(
            subscription=info,
            usage=PeriodUsage(
                minutes_used=used,
                minutes_included=included,
                minutes_remaining=minutes_left(included, used),
                sessions_completed=completed,
            ),
            is_demo=False,
        )
