"""
Subscription API Routes

Read-only view of the caller's plan and current-period usage.
Plan changes go through the billing provider and are not exposed here.
"""

import logging

from fastapi import APIRouter, Depends

from app.api.dependencies import (
    ContextDep,
    DemoContext,
    build_dashboard_service,
    get_app_settings,
    get_db_manager,
)
from app.config.settings import Settings
from app.domain.models import SubscriptionSummaryResponse
from app.domain.services import demo_subscription_summary
from app.infrastructure.db.database import DatabaseManager
from app.infrastructure.exceptions import NotFoundError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user")


@router.get("/subscription", response_model=SubscriptionSummaryResponse)
async def get_subscription(
    context: ContextDep,
    db: DatabaseManager = Depends(get_db_manager),
    settings: Settings = Depends(get_app_settings),
):
    """
    Get the active subscription and usage for the current period.

    Returns ``subscription: null`` with the starter allowance when the user
    has no active plan, and the starter defaults when the database cannot
    be read.
    """
    if isinstance(context, DemoContext):
        return demo_subscription_summary()

    try:
        async with db.session() as session:
            service = build_dashboard_service(session, settings)
            return await service.get_subscription_summary(context.user_id)
    except NotFoundError:
        raise
    except Exception as e:
        logger.error(f"Failed to load subscription for {context.user_id}: {e}")
        return demo_subscription_summary()
