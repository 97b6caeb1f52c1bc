"""
Security Test Suite: JWT Authentication

Tests that the request-context dependency in dependencies.py correctly:
- Falls back to demo mode when no Authorization header is sent
- Rejects malformed, expired and wrongly signed tokens with 401
- Rejects tokens for another issuer or audience
- Accepts properly signed HS256 tokens
"""

from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.dependencies import (
    AuthenticatedContext,
    ContextDep,
    DemoContext,
    TokenVerifier,
)
from conftest import TEST_USER_ID, make_token


# ---------------------------------------------------------------------------
# Minimal app that uses the real dependency
# ---------------------------------------------------------------------------

@pytest.fixture
def client(settings):
    test_app = FastAPI()
    test_app.state.token_verifier = TokenVerifier(settings)

    @test_app.get("/whoami")
    async def whoami(context: ContextDep):
        if isinstance(context, DemoContext):
            return {"mode": "demo"}
        return {"mode": "authenticated", "user_id": str(context.user_id)}

    return TestClient(test_app, raise_server_exceptions=False)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Tests: demo mode
# ---------------------------------------------------------------------------


class TestDemoMode:

    def test_no_auth_header_is_demo(self, client):
        resp = client.get("/whoami")
        assert resp.status_code == 200
        assert resp.json() == {"mode": "demo"}


# ---------------------------------------------------------------------------
# Tests: rejection scenarios
# ---------------------------------------------------------------------------


class TestJWTRejection:
    """Verify that invalid JWTs are rejected with 401, never downgraded to demo."""

    def test_malformed_scheme(self, client):
        resp = client.get("/whoami", headers={"Authorization": "Basic abc123"})
        assert resp.status_code == 401

    def test_garbage_token(self, client):
        resp = client.get("/whoami", headers=bearer("not.a.jwt"))
        assert resp.status_code == 401

    def test_raw_uuid_rejected(self, client):
        resp = client.get("/whoami", headers=bearer(str(TEST_USER_ID)))
        assert resp.status_code == 401

    def test_wrong_secret(self, client):
        token = make_token(secret="another-secret-that-is-long-enough-000000")
        resp = client.get("/whoami", headers=bearer(token))
        assert resp.status_code == 401

    def test_expired_token(self, client):
        resp = client.get("/whoami", headers=bearer(make_token(expires_in=-60)))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token has expired"

    def test_wrong_issuer(self, client):
        token = make_token(iss="https://other.supabase.co/auth/v1")
        resp = client.get("/whoami", headers=bearer(token))
        assert resp.status_code == 401

    def test_wrong_audience(self, client):
        token = make_token(aud="anon")
        resp = client.get("/whoami", headers=bearer(token))
        assert resp.status_code == 401

    def test_missing_subject(self, client):
        resp = client.get("/whoami", headers=bearer(make_token(user_id=None)))
        assert resp.status_code == 401

    def test_non_uuid_subject(self, client):
        resp = client.get("/whoami", headers=bearer(make_token(user_id="service-account")))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid token: missing user ID"


# ---------------------------------------------------------------------------
# Tests: acceptance scenarios
# ---------------------------------------------------------------------------


class TestJWTAcceptance:

    def test_valid_hs256_token(self, client):
        resp = client.get("/whoami", headers=bearer(make_token()))
        assert resp.status_code == 200
        assert resp.json() == {"mode": "authenticated", "user_id": str(TEST_USER_ID)}

    def test_verifier_returns_uuid(self, settings):
        verifier = TokenVerifier(settings)
        assert verifier.verify(make_token()) == TEST_USER_ID
        assert isinstance(verifier.verify(make_token()), UUID)

    def test_context_is_hashable_value(self):
        assert AuthenticatedContext(TEST_USER_ID) == AuthenticatedContext(TEST_USER_ID)
