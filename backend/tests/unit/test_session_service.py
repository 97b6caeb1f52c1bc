"""
Unit tests for SessionService.

Repositories are AsyncMocks; these tests pin the business rules of
session creation and completion, not SQL.
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from unittest.mock import AsyncMock

from app.domain.models import (
    AuditAction,
    SessionCreateRequest,
    SessionEndRequest,
    SessionStatus,
)
from app.domain.services import SessionService, demo_completion, demo_session
from app.infrastructure.db.models import PracticeSession, Profile, Subscription, UsageRecord
from app.infrastructure.exceptions import InvalidStateError, LimitReachedError, NotFoundError


USER_ID = uuid4()


@pytest.fixture
def profile():
    return Profile(auth_id=USER_ID, email="rep@example.com", company_id=uuid4())


@pytest.fixture
def repos(profile):
    profiles = AsyncMock()
    profiles.get_by_auth_id.return_value = profile

    sessions = AsyncMock()
    sessions.add.side_effect = lambda obj: obj

    subscriptions = AsyncMock()
    subscriptions.get_active_for_profile.return_value = None

    return {
        "profiles": profiles,
        "sessions": sessions,
        "subscriptions": subscriptions,
        "usage": AsyncMock(),
        "audit": AsyncMock(),
    }


@pytest.fixture
def service(repos):
    return SessionService(**repos, rate=0.1)


def active_session(profile, **overrides):
    values = dict(profile_id=profile.id, title="Cold call", status="active")
    values.update(overrides)
    return PracticeSession(**values)


def completed_copy(session, duration_seconds):
    return PracticeSession(
        id=session.id,
        profile_id=session.profile_id,
        title=session.title,
        status="completed",
        ended_at=datetime.now(timezone.utc),
        duration_seconds=duration_seconds,
    )


class TestCreateSession:

    @pytest.mark.asyncio
    async def test_creates_active_session_and_audits(self, service, repos, profile):
        summary = await service.create_session(USER_ID, SessionCreateRequest(title="Cold call"))

        assert summary.title == "Cold call"
        assert summary.status == SessionStatus.ACTIVE
        assert summary.processing_status == "ready"
        assert summary.is_demo is False

        inserted = repos["sessions"].add.await_args.args[0]
        assert inserted.profile_id == profile.id
        assert inserted.company_id == profile.company_id

        audit_kwargs = repos["audit"].record_session_event.await_args.kwargs
        assert audit_kwargs["action"] == AuditAction.CREATE
        assert audit_kwargs["details"]["session_id"] == str(summary.id)

    @pytest.mark.asyncio
    async def test_request_company_overrides_profile_company(self, service, repos):
        company_id = uuid4()
        await service.create_session(
            USER_ID, SessionCreateRequest(title="Demo call", company_id=company_id)
        )
        assert repos["sessions"].add.await_args.args[0].company_id == company_id

    @pytest.mark.asyncio
    async def test_missing_profile_is_not_found(self, service, repos):
        repos["profiles"].get_by_auth_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.create_session(USER_ID, SessionCreateRequest(title="x"))

        repos["sessions"].add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_limit_reached_inserts_nothing(self, service, repos, profile):
        repos["subscriptions"].get_active_for_profile.return_value = Subscription(
            profile_id=profile.id, minutes_used=100, minutes_limit=100
        )

        with pytest.raises(LimitReachedError) as exc_info:
            await service.create_session(USER_ID, SessionCreateRequest(title="x"))

        assert exc_info.value.status_code == 400
        assert exc_info.value.details == {"minutes_used": 100, "minutes_limit": 100}
        repos["sessions"].add.assert_not_awaited()
        repos["audit"].record_session_event.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_subscription_with_minutes_left_allows_create(self, service, repos, profile):
        repos["subscriptions"].get_active_for_profile.return_value = Subscription(
            profile_id=profile.id, minutes_used=99, minutes_limit=100
        )
        await service.create_session(USER_ID, SessionCreateRequest(title="x"))
        repos["sessions"].add.assert_awaited_once()


class TestEndSession:

    @pytest.mark.asyncio
    async def test_ninety_seconds_bills_two_minutes(self, service, repos, profile):
        session = active_session(profile)
        subscription = Subscription(
            profile_id=profile.id,
            minutes_used=10,
            minutes_limit=100,
            current_period_start=datetime(2026, 10, 1, tzinfo=timezone.utc),
            current_period_end=datetime(2026, 11, 1, tzinfo=timezone.utc),
        )
        repos["sessions"].get_owned.return_value = session
        repos["sessions"].complete.return_value = completed_copy(session, 90)
        repos["subscriptions"].get_active_for_profile.return_value = subscription

        summary = await service.end_session(
            USER_ID, SessionEndRequest(session_id=session.id, duration_seconds=90)
        )

        assert summary.minutes_used == 2
        assert summary.minute_cost == 0.2
        assert summary.status == SessionStatus.COMPLETED

        completed_values = repos["sessions"].complete.await_args.args[1]
        assert completed_values["minute_cost"] == 0.2
        assert completed_values["processing_status"] == "analyzing"

        repos["subscriptions"].increment_minutes.assert_awaited_once_with(subscription.id, 2)

        ledger_row = repos["usage"].add.await_args.args[0]
        assert isinstance(ledger_row, UsageRecord)
        assert ledger_row.session_id == session.id
        assert ledger_row.minutes_used == 2
        assert ledger_row.period_start == subscription.current_period_start

        audit_kwargs = repos["audit"].record_session_event.await_args.kwargs
        assert audit_kwargs["action"] == AuditAction.COMPLETE
        assert audit_kwargs["details"]["minutes_used"] == 2

    @pytest.mark.asyncio
    async def test_summary_does_not_depend_on_returned_row(self, service, repos, profile):
        # The UPDATE can hand back the very object get_owned loaded
        session = active_session(profile)
        repos["sessions"].get_owned.return_value = session
        repos["sessions"].complete.return_value = session

        summary = await service.end_session(
            USER_ID, SessionEndRequest(session_id=session.id, duration_seconds=61)
        )

        assert summary.id == session.id
        assert summary.status == SessionStatus.COMPLETED
        assert summary.duration_seconds == 61
        assert summary.ended_at is not None
        assert summary.minutes_used == 2
        assert summary.minute_cost == 0.2

    @pytest.mark.asyncio
    async def test_without_subscription_no_usage_row(self, service, repos, profile):
        session = active_session(profile)
        repos["sessions"].get_owned.return_value = session
        repos["sessions"].complete.return_value = completed_copy(session, 30)

        summary = await service.end_session(
            USER_ID, SessionEndRequest(session_id=session.id, duration_seconds=30)
        )

        assert summary.minutes_used == 1
        assert summary.minute_cost == 0.1
        repos["subscriptions"].increment_minutes.assert_not_awaited()
        repos["usage"].add.assert_not_awaited()
        repos["audit"].record_session_event.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_foreign_session_is_not_found(self, service, repos):
        repos["sessions"].get_owned.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await service.end_session(
                USER_ID, SessionEndRequest(session_id=uuid4(), duration_seconds=60)
            )

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Session not found or access denied"
        repos["sessions"].complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_already_completed_session_rejected(self, service, repos, profile):
        repos["sessions"].get_owned.return_value = active_session(profile, status="completed")

        with pytest.raises(InvalidStateError) as exc_info:
            await service.end_session(
                USER_ID, SessionEndRequest(session_id=uuid4(), duration_seconds=60)
            )

        assert exc_info.value.details["current_state"] == "completed"
        repos["sessions"].complete.assert_not_awaited()
        repos["subscriptions"].increment_minutes.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_completion_race_charges_nothing(self, service, repos, profile):
        repos["sessions"].get_owned.return_value = active_session(profile)
        repos["sessions"].complete.return_value = None

        with pytest.raises(InvalidStateError):
            await service.end_session(
                USER_ID, SessionEndRequest(session_id=uuid4(), duration_seconds=60)
            )

        repos["subscriptions"].increment_minutes.assert_not_awaited()
        repos["usage"].add.assert_not_awaited()


class TestDemoHelpers:

    def test_demo_session_is_not_persisted_shape(self):
        first = demo_session(SessionCreateRequest(title="Try it"))
        second = demo_session(SessionCreateRequest(title="Try it"))

        assert first.is_demo is True
        assert first.status == SessionStatus.ACTIVE
        assert first.id != second.id

    def test_demo_completion_is_free(self):
        summary = demo_completion(SessionEndRequest(session_id=uuid4(), duration_seconds=125))

        assert summary.minute_cost == 0
        assert summary.minutes_used == 3
        assert 3.5 <= summary.score <= 5.5
        assert summary.is_demo is True
