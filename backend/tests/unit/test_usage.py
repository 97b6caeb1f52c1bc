"""
Unit tests for usage accounting arithmetic.

Covers minute rounding, cost, tier allowances, averages and the
practice streak.
"""

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from app.domain.usage import (
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


class TestMinuteBilling:
    """Any started minute is billed in full."""

    @pytest.mark.parametrize(
        "seconds, expected",
        [(1, 1), (59.5, 1), (60, 1), (61, 2), (90, 2), (3600, 60)],
    )
    def test_minutes_round_up(self, seconds, expected):
        assert minutes_for_duration(seconds) == expected

    @pytest.mark.parametrize("seconds", [0, -5])
    def test_non_positive_duration_rejected(self, seconds):
        with pytest.raises(ValueError):
            minutes_for_duration(seconds)

    def test_cost_is_rounded_to_cents(self):
        assert minute_cost(2) == 0.2
        assert minute_cost(3) == 0.3
        assert minute_cost(7, rate=0.15) == 1.05

    def test_ninety_seconds_costs_two_minutes(self):
        minutes = minutes_for_duration(90)
        assert (minutes, minute_cost(minutes)) == (2, 0.2)


class TestAllowance:

    @pytest.mark.parametrize(
        "tier, expected",
        [
            ("starter", 100),
            ("professional", 500),
            ("team", 1500),
            ("enterprise", 999999),
        ],
    )
    def test_known_tiers(self, tier, expected):
        assert minutes_allowance(tier) == expected

    def test_unknown_or_missing_tier_defaults_to_starter(self):
        assert minutes_allowance("platinum") == 100
        assert minutes_allowance(None) == 100

    def test_minutes_left_never_negative(self):
        assert minutes_left(100, 40) == 60
        assert minutes_left(100, 100) == 0
        assert minutes_left(100, 250) == 0

    def test_has_minutes_remaining(self):
        assert has_minutes_remaining(SimpleNamespace(minutes_used=99, minutes_limit=100))
        assert not has_minutes_remaining(SimpleNamespace(minutes_used=100, minutes_limit=100))
        assert not has_minutes_remaining(SimpleNamespace(minutes_used=120, minutes_limit=100))


class TestAverageScore:

    def test_empty_history_is_zero(self):
        assert average_score([]) == 0.0

    def test_missing_scores_count_as_zero(self):
        assert average_score([4.0, None, 5.0]) == 3.0

    def test_rounded_to_one_decimal(self):
        assert average_score([4.0, 4.5, 4.2]) == 4.2


class TestStreak:
    """Consecutive local practice days ending today or yesterday."""

    TODAY = date(2026, 10, 19)

    def days_ago(self, *offsets):
        return [self.TODAY - timedelta(days=n) for n in offsets]

    def test_no_sessions(self):
        assert streak_days([], self.TODAY) == 0

    def test_today_only(self):
        assert streak_days(self.days_ago(0), self.TODAY) == 1

    def test_consecutive_days_ending_today(self):
        assert streak_days(self.days_ago(0, 1, 2), self.TODAY) == 3

    def test_streak_may_end_yesterday(self):
        assert streak_days(self.days_ago(1, 2), self.TODAY) == 2

    def test_latest_session_two_days_ago_breaks_streak(self):
        assert streak_days(self.days_ago(2, 3, 4), self.TODAY) == 0

    def test_gap_stops_counting(self):
        assert streak_days(self.days_ago(0, 1, 3, 4), self.TODAY) == 2

    def test_duplicates_and_order_do_not_matter(self):
        dates = self.days_ago(2, 0, 1, 0, 1)
        assert streak_days(dates, self.TODAY) == 3


class TestCalendarHelpers:

    def test_local_date_uses_timezone(self):
        moment = datetime(2026, 3, 1, 2, 0, tzinfo=timezone.utc)
        assert local_date(moment, ZoneInfo("America/New_York")) == date(2026, 2, 28)
        assert local_date(moment, timezone.utc) == date(2026, 3, 1)

    def test_naive_datetime_treated_as_utc(self):
        assert local_date(datetime(2026, 3, 1, 2, 0), ZoneInfo("America/New_York")) == date(2026, 2, 28)

    def test_month_and_day_start(self):
        now = datetime(2026, 10, 19, 15, 42, 7, 123, tzinfo=timezone.utc)
        assert month_start(now) == datetime(2026, 10, 1, tzinfo=timezone.utc)
        assert day_start(now) == datetime(2026, 10, 19, tzinfo=timezone.utc)
