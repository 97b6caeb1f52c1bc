#!/usr/bin/env python3
"""
Trainee Seed Script

Creates the profile and starter subscription a Supabase auth user needs
before the session endpoints accept them. Safe to re-run: an existing
profile or active subscription is left untouched.

Usage:
    python -m scripts.seed_trainee --auth-id <uuid> --email rep@example.com
    python -m scripts.seed_trainee --auth-id <uuid> --email rep@example.com --tier team
    python -m scripts.seed_trainee --create-tables ...   # local databases only
"""

import asyncio
import argparse
import logging
from datetime import timedelta
from uuid import UUID

# Add parent directory to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config.settings import get_settings
from app.domain.models import SubscriptionStatus, SubscriptionTier
from app.domain.usage import minutes_allowance, month_start
from app.infrastructure.db.database import DatabaseManager
from app.infrastructure.db.models import Profile, Subscription
from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.repositories import ProfileRepository, SubscriptionRepository

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def seed_trainee(
    auth_id: UUID,
    email: str,
    tier: SubscriptionTier = SubscriptionTier.STARTER,
    create_tables: bool = False,
) -> dict:
    """
    Ensure a profile and an active subscription exist for `auth_id`.

    Returns:
        Dict with the profile id and what was created
    """
    stats = {"profile_created": False, "subscription_created": False}
    db = DatabaseManager(get_settings())

    try:
        if create_tables:
            await db.create_tables()
            logger.info("Tables created from model metadata")

        async with db.session() as session:
            profiles = ProfileRepository(session)
            subscriptions = SubscriptionRepository(session)

            profile = await profiles.get_by_auth_id(auth_id)
            if profile:
                logger.info(f"Profile already exists: {profile.id}")
            else:
                profile = await profiles.add(Profile(auth_id=auth_id, email=email))
                stats["profile_created"] = True
                logger.info(f"Created profile {profile.id} for {email}")

            if await subscriptions.get_active_for_profile(profile.id):
                logger.info("Active subscription already exists, skipping")
            else:
                period_start = month_start(utcnow())
                await subscriptions.add(
                    Subscription(
                        profile_id=profile.id,
                        plan_id=tier.value,
                        plan_name=f"{tier.value.title()} Plan",
                        tier=tier.value,
                        status=SubscriptionStatus.ACTIVE.value,
                        minutes_limit=minutes_allowance(tier.value),
                        minutes_used=0,
                        current_period_start=period_start,
                        current_period_end=period_start + timedelta(days=31),
                    )
                )
                stats["subscription_created"] = True
                logger.info(f"Created {tier.value} subscription")

            stats["profile_id"] = str(profile.id)
    finally:
        await db.close()

    return stats


def main():
    parser = argparse.ArgumentParser(description="Seed a trainee profile and subscription")
    parser.add_argument("--auth-id", type=UUID, required=True, help="Supabase auth user id")
    parser.add_argument("--email", required=True, help="Trainee email")
    parser.add_argument(
        "--tier",
        choices=[t.value for t in SubscriptionTier],
        default=SubscriptionTier.STARTER.value,
        help="Subscription tier (default: starter)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables from models first (use Alembic for shared databases)",
    )
    args = parser.parse_args()

    result = asyncio.run(
        seed_trainee(args.auth_id, args.email, SubscriptionTier(args.tier), args.create_tables)
    )
    logger.info(f"Seed complete: {result}")


if __name__ == "__main__":
    main()
