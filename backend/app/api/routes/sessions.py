"""
Session API Routes

Endpoints for the voice practice session lifecycle:
create, end, the ElevenLabs signed URL and transcript analysis.
"""

import logging

from fastapi import APIRouter, Body, Depends

from app.api.dependencies import (
    ContextDep,
    DemoContext,
    build_session_service,
    get_analysis_service,
    get_app_settings,
    get_db_manager,
    get_elevenlabs_service,
)
from app.config.settings import Settings
from app.domain.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    SessionCreateRequest,
    SessionCreateResponse,
    SessionEndRequest,
    SessionEndResponse,
    SignedUrlResponse,
)
from app.domain.services import demo_completion, demo_session
from app.infrastructure.ai.analysis_service import AnalysisService
from app.infrastructure.db.database import DatabaseManager
from app.infrastructure.voice.elevenlabs_service import ElevenLabsService


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/session")


@router.post("/create", response_model=SessionCreateResponse)
async def create_session(
    request: SessionCreateRequest,
    context: ContextDep,
    db: DatabaseManager = Depends(get_db_manager),
    settings: Settings = Depends(get_app_settings),
):
    """
    Start a practice session.

    Without a token a stub session is returned and nothing is stored.
    """
    if isinstance(context, DemoContext):
        logger.info("Creating demo session")
        return SessionCreateResponse(session=demo_session(request))

    async with db.session() as session:
        service = build_session_service(session, settings)
        summary = await service.create_session(context.user_id, request)

    return SessionCreateResponse(session=summary)


@router.post("/end", response_model=SessionEndResponse)
async def end_session(
    request: SessionEndRequest,
    context: ContextDep,
    db: DatabaseManager = Depends(get_db_manager),
    settings: Settings = Depends(get_app_settings),
):
    """
    Complete an active session and charge its minutes.

    The session update, subscription increment, usage row and audit entry
    are committed together or not at all.
    """
    if isinstance(context, DemoContext):
        logger.info(f"Ending demo session {request.session_id}")
        return SessionEndResponse(session=demo_completion(request))

    async with db.session() as session:
        service = build_session_service(session, settings)
        summary = await service.end_session(context.user_id, request)

    return SessionEndResponse(session=summary)


@router.get("/elevenlabs-signed-url", response_model=SignedUrlResponse)
async def get_elevenlabs_signed_url(
    elevenlabs: ElevenLabsService = Depends(get_elevenlabs_service),
):
    """Short-lived URL the browser SDK uses to open the voice channel."""
    signed = await elevenlabs.get_signed_url()
    return SignedUrlResponse(signed_url=signed.signed_url, agent_id=signed.agent_id)


@router.post("/{session_id}/analyze", response_model=AnalyzeResponse)
async def analyze_session(
    session_id: str,
    request: AnalyzeRequest = Body(...),
    analysis: AnalysisService = Depends(get_analysis_service),
):
    """Score a transcript. The result is returned, not stored."""
    report = await analysis.analyze(session_id, request.transcript)
    return AnalyzeResponse(analysis=report, message=analysis.message)
