"""
API Dependencies

FastAPI dependency injection for authentication, request mode and services.

Everything long-lived (settings, database manager, token verifier, vendor
clients) is built once in app.main.create_app and read from app.state here.

Security: JWT tokens are verified cryptographically using Supabase JWKS (ES256)
with HS256 fallback via the JWT secret. Never decode without verification.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Optional, Union
from uuid import UUID
from zoneinfo import ZoneInfo

import jwt
from jwt import PyJWKClient
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import Settings
from app.domain.services import DashboardService, SessionService
from app.infrastructure.ai.analysis_service import AnalysisService
from app.infrastructure.db.database import DatabaseManager
from app.infrastructure.db.repositories import (
    AuditLogRepository,
    ProfileRepository,
    SessionRepository,
    SubscriptionRepository,
    UsageRepository,
)
from app.infrastructure.voice.elevenlabs_service import ElevenLabsService


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


# =============================================================================
# Token Verification
# =============================================================================

class TokenVerifier:
    """
    Verifies Supabase access tokens.

    Verification strategies:
      1. JWKS (ES256): current Supabase signing, supports key rotation.
      2. HS256 with ``SUPABASE_JWT_SECRET``: legacy Supabase signing.

    PyJWKClient caches keys internally and refreshes ~every 10 min, so one
    verifier is shared by the whole application.
    """

    AUDIENCE = "authenticated"

    def __init__(self, settings: Settings):
        self._issuer = settings.supabase_issuer
        self._jwt_secret = settings.supabase_jwt_secret
        self._jwks_client: Optional[PyJWKClient] = None
        if self._issuer:
            self._jwks_client = PyJWKClient(
                f"{self._issuer}/.well-known/jwks.json", cache_keys=True
            )

    def _decode_with_jwks(self, token: str) -> dict:
        """Verify JWT using Supabase JWKS endpoint (ES256 asymmetric keys)."""
        signing_key = self._jwks_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["ES256"],
            issuer=self._issuer,
            audience=self.AUDIENCE,
            options={"require": ["exp", "sub", "iss"]},
        )

    def _decode_with_secret(self, token: str) -> dict:
        """Verify JWT using HS256 symmetric secret (legacy Supabase signing)."""
        return jwt.decode(
            token,
            self._jwt_secret,
            algorithms=["HS256"],
            issuer=self._issuer,
            audience=self.AUDIENCE,
            options={"require": ["exp", "sub", "iss"]},
        )

    def verify(self, token: str) -> UUID:
        """
        Verify a bearer token and return the auth user id.

        The token's own ``alg`` header picks the strategy: ES256 tokens are
        checked against JWKS, HS256 tokens against the JWT secret. Anything
        else (including ``none``) is rejected.

        Raises:
            HTTPException 401: token expired, invalid, or without a user id
        """
        try:
            algorithm = jwt.get_unverified_header(token).get("alg")
        except jwt.InvalidTokenError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authorization token",
            )

        payload: Optional[dict] = None
        try:
            if algorithm == "ES256" and self._jwks_client is not None:
                payload = self._decode_with_jwks(token)
            elif algorithm == "HS256" and self._jwt_secret:
                payload = self._decode_with_secret(token)
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
            )
        except (jwt.exceptions.PyJWKClientError, jwt.InvalidTokenError) as e:
            logger.warning("JWT verification failed (%s): %s", algorithm, e)

        if payload is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authorization token",
            )

        try:
            return UUID(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token: missing user ID",
            )


# =============================================================================
# Application State
# =============================================================================

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db_manager(request: Request) -> DatabaseManager:
    return request.app.state.db


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def get_elevenlabs_service(request: Request) -> ElevenLabsService:
    return request.app.state.elevenlabs


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis


# =============================================================================
# Request Context (Authenticated | Demo)
# =============================================================================

@dataclass(frozen=True)
class AuthenticatedContext:
    """Caller presented a valid Supabase token."""
    user_id: UUID


@dataclass(frozen=True)
class DemoContext:
    """Caller presented no token; responses are stubs and nothing is stored."""


RequestContext = Union[AuthenticatedContext, DemoContext]


async def get_request_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> RequestContext:
    """
    Resolve the request mode.

    No Authorization header means demo mode. A header that is present but
    does not verify is rejected with 401 rather than downgraded to demo.
    """
    if credentials:
        return AuthenticatedContext(user_id=verifier.verify(credentials.credentials))

    if request.headers.get("authorization"):
        # Present but not "Bearer <token>"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header",
        )
    return DemoContext()


ContextDep = Annotated[RequestContext, Depends(get_request_context)]


# =============================================================================
# Service Builders
# =============================================================================
# Routes open one transactional session per operation with
# ``async with db.session() as session`` and build services on it, so the
# commit finishes before the response is sent.

def build_session_service(session: AsyncSession, settings: Settings) -> SessionService:
    """Build a SessionService whose repositories share `session`."""
    return SessionService(
        profiles=ProfileRepository(session),
        sessions=SessionRepository(session),
        subscriptions=SubscriptionRepository(session),
        usage=UsageRepository(session),
        audit=AuditLogRepository(session),
        rate=settings.minute_rate,
    )


def build_dashboard_service(session: AsyncSession, settings: Settings) -> DashboardService:
    """Build a read-only DashboardService on `session`."""
    return DashboardService(
        profiles=ProfileRepository(session),
        sessions=SessionRepository(session),
        subscriptions=SubscriptionRepository(session),
        usage=UsageRepository(session),
        tz=ZoneInfo(settings.stats_timezone),
    )
