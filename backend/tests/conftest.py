"""
Test configuration and fixtures for SalesAI Trainer.

Provides shared fixtures for unit and integration tests.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional
from uuid import UUID

import jwt
import pytest
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from app.config.settings import Settings


TEST_SUPABASE_URL = "https://test.supabase.co"
TEST_JWT_SECRET = "test-jwt-secret-for-hs256-signing-0123456789"
TEST_USER_ID = UUID("aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee")


def make_token(
    user_id: Optional[str] = str(TEST_USER_ID),
    secret: str = TEST_JWT_SECRET,
    expires_in: int = 3600,
    **claims,
) -> str:
    """Sign an HS256 access token shaped like Supabase's."""
    payload = {
        "aud": "authenticated",
        "iss": f"{TEST_SUPABASE_URL}/auth/v1",
        "exp": int(time.time()) + expires_in,
        **claims,
    }
    if user_id is not None:
        payload["sub"] = user_id
    return jwt.encode(payload, secret, algorithm="HS256")


class FakeDatabaseManager:
    """Stands in for DatabaseManager; hands out one AsyncMock session."""

    is_configured = True

    def __init__(self):
        self.db_session = AsyncMock()
        self.sessions_opened = 0

    @asynccontextmanager
    async def session(self):
        self.sessions_opened += 1
        yield self.db_session

    async def ping(self):
        return None

    async def close(self):
        return None


# =============================================================================
# Settings / App Fixtures
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        supabase_url=TEST_SUPABASE_URL,
        supabase_jwt_secret=TEST_JWT_SECRET,
        database_url=None,
        supabase_password=None,
        elevenlabs_api_key="sk_test_key",
        elevenlabs_agent_id="agent_test",
        analysis_provider="mock",
        analysis_delay_seconds=0,
        environment="development",
    )


@pytest.fixture
def fake_db() -> FakeDatabaseManager:
    return FakeDatabaseManager()


@pytest.fixture
def app(settings, fake_db):
    """FastAPI application wired to the fake database."""
    from app.main import create_app

    application = create_app(settings)
    application.state.db = fake_db
    return application


@pytest.fixture
def client(app):
    """Get synchronous test client."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_headers():
    """Authorization header carrying a valid token for TEST_USER_ID."""
    return {"Authorization": f"Bearer {make_token()}"}
