"""
Usage Accounting

Minute billing and dashboard arithmetic for voice practice sessions.
Pure functions only; services in app.domain.services feed them rows.
"""

import math
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, Optional, Protocol

from app.domain.models import SubscriptionTier


MINUTE_RATE = 0.1  # Currency units per started minute

TIER_MINUTES = {
    SubscriptionTier.STARTER: 100,
    SubscriptionTier.PROFESSIONAL: 500,
    SubscriptionTier.TEAM: 1500,
    SubscriptionTier.ENTERPRISE: 999999,
}

DEFAULT_TIER = SubscriptionTier.STARTER


class MinuteCounter(Protocol):
    minutes_used: int
    minutes_limit: int


def minutes_for_duration(duration_seconds: float) -> int:
    """Billable minutes for a session; any started minute counts in full."""
    if duration_seconds <= 0:
        raise ValueError("duration_seconds must be positive")
    return math.ceil(duration_seconds / 60)


def minute_cost(minutes: int, rate: float = MINUTE_RATE) -> float:
    """Monetary cost of `minutes` at `rate`, rounded to cents."""
    return round(minutes * rate, 2)


def minutes_allowance(tier: Optional[str]) -> int:
    """
    Monthly minute allowance for a subscription tier.

    Unknown or missing tiers get the starter allowance.
    """
    try:
        return TIER_MINUTES[SubscriptionTier(tier)]
    except ValueError:
        return TIER_MINUTES[DEFAULT_TIER]


def minutes_left(allowance: int, used: int) -> int:
    return max(0, allowance - used)


def has_minutes_remaining(subscription: MinuteCounter) -> bool:
    """Check if a subscription can start another session."""
    return (subscription.minutes_used or 0) < (subscription.minutes_limit or 0)


def average_score(scores: Iterable[Optional[float]]) -> float:
    """Mean of session scores (missing scores count as zero), one decimal."""
    values = [score or 0 for score in scores]
    if not values:
        return 0.0
    return round(sum(values) / len(values), 1)


def local_date(moment: datetime, tz: tzinfo) -> date:
    """Calendar date of `moment` in `tz`; naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


def streak_days(session_dates: Iterable[date], today: date) -> int:
    """
    Consecutive practice days ending today or yesterday.

    Args:
        session_dates: Local calendar dates of completed sessions (any order,
            duplicates allowed)
        today: Current local date

    Returns:
        Number of consecutive days, 0 if the latest session is older than
        yesterday
    """
    unique_dates = sorted(set(session_dates), reverse=True)
    if not unique_dates:
        return 0

    if unique_dates[0] not in (today, today - timedelta(days=1)):
        return 0

    streak = 1
    for newer, older in zip(unique_dates, unique_dates[1:]):
        if (newer - older).days != 1:
            break
        streak += 1
    return streak


def month_start(now: datetime) -> datetime:
    """First instant of the calendar month containing `now` (same tzinfo)."""
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def day_start(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)
