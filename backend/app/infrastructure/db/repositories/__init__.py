"""
Repository Layer for SalesAI Trainer

Exports all repository classes for dependency injection.
"""

from app.infrastructure.db.repositories.base_repository import BaseRepository
from app.infrastructure.db.repositories.profile_repository import ProfileRepository
from app.infrastructure.db.repositories.session_repository import SessionRepository
from app.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
)
from app.infrastructure.db.repositories.usage_repository import UsageRepository
from app.infrastructure.db.repositories.audit_log_repository import AuditLogRepository


__all__ = [
    # Base
    "BaseRepository",
    # Repositories
    "ProfileRepository",
    "SessionRepository",
    "SubscriptionRepository",
    "UsageRepository",
    "AuditLogRepository",
]
