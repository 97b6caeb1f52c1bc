"""
Dashboard API Routes

Read-only statistics and recent-session listing.

Both endpoints degrade instead of failing: if the database cannot be reached
the caller gets safe defaults and the error is logged server-side.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import (
    ContextDep,
    DemoContext,
    build_dashboard_service,
    get_app_settings,
    get_db_manager,
)
from app.config.settings import Settings
from app.domain.models import DashboardStats, RecentSession
from app.domain.services import demo_recent_sessions, demo_stats
from app.infrastructure.db.database import DatabaseManager
from app.infrastructure.exceptions import NotFoundError


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/dashboard")


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    context: ContextDep,
    db: DatabaseManager = Depends(get_db_manager),
    settings: Settings = Depends(get_app_settings),
):
    """
    Minutes left, sessions today, average score and practice streak.

    Returns 404 when the user has no profile.
    """
    if isinstance(context, DemoContext):
        return demo_stats()

    try:
        async with db.session() as session:
            service = build_dashboard_service(session, settings)
            return await service.get_stats(context.user_id)
    except NotFoundError:
        raise
    except Exception as e:
        logger.error(f"Failed to load dashboard stats for {context.user_id}: {e}")
        return demo_stats(error="Could not load real stats")


@router.get("/recent-sessions", response_model=List[RecentSession])
async def get_recent_sessions(
    context: ContextDep,
    limit: int = Query(10, ge=1, le=50, description="Number of sessions to return"),
    db: DatabaseManager = Depends(get_db_manager),
    settings: Settings = Depends(get_app_settings),
):
    """Most recent sessions, newest first."""
    if isinstance(context, DemoContext):
        return demo_recent_sessions()

    try:
        async with db.session() as session:
            service = build_dashboard_service(session, settings)
            return await service.get_recent_sessions(context.user_id, limit)
    except Exception as e:
        logger.error(f"Failed to load recent sessions for {context.user_id}: {e}")
        return []
