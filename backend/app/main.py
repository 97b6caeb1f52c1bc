"""
SalesAI Trainer - FastAPI Application

Main entry point for the backend API.
Provides endpoints for practice sessions, the dashboard and subscriptions.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.dependencies import TokenVerifier
from app.api.routes import dashboard, sessions, subscriptions
from app.config.settings import Settings, get_settings
from app.infrastructure.ai.analysis_service import AnalysisService
from app.infrastructure.db.database import DatabaseManager
from app.infrastructure.exceptions import DatabaseError, SalesAIError, ValidationError
from app.infrastructure.voice.elevenlabs_service import ElevenLabsService


logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings
    db: DatabaseManager = app.state.db

    # Startup
    logger.info(f"SalesAI Trainer Backend starting in {settings.environment} mode...")

    if db.is_configured:
        try:
            await db.ping()
            logger.info("Database connection pool initialized")
        except Exception as e:
            logger.warning(f"Database check failed, continuing: {e}")
    else:
        logger.warning("Database not configured; only demo mode is available")

    if not settings.elevenlabs_configured:
        logger.warning("ElevenLabs credentials missing; signed URL endpoint will fail")

    yield

    # Shutdown
    await db.close()
    logger.info("SalesAI Trainer Backend shutting down...")


# ============================================================================
# Exception Handlers
# ============================================================================

async def salesai_error_handler(request: Request, exc: SalesAIError):
    """Map application errors to their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies and parameters."""
    error = ValidationError(
        "Invalid request data",
        details={"errors": jsonable_encoder(exc.errors())},
    )
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_dict(),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Handle database failures that escaped the repositories."""
    logger.error(f"Database error on {request.url.path}: {exc}")
    error = DatabaseError("Database operation failed", original_error=exc)
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_dict(),
    )


# ============================================================================
# Application Factory
# ============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Every long-lived collaborator is created here and stored on app.state,
    where the dependencies in app.api.dependencies pick them up.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="SalesAI Trainer",
        description="Voice sales-training backend: sessions, usage and dashboard",
        version="1.0.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.state.settings = settings
    app.state.db = DatabaseManager(settings)
    app.state.token_verifier = TokenVerifier(settings)
    app.state.elevenlabs = ElevenLabsService(settings)
    app.state.analysis = AnalysisService(settings)

    # CORS configuration from Settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SalesAIError, salesai_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "salesai-trainer"}

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "SalesAI Trainer API",
            "version": "1.0.0",
            "docs": "/docs",
        }

    app.include_router(sessions.router, prefix="/api", tags=["Sessions"])
    app.include_router(dashboard.router, prefix="/api", tags=["Dashboard"])
    app.include_router(subscriptions.router, prefix="/api", tags=["Subscriptions"])

    return app


app = create_app()
