"""
SQLModel ORM Models for SalesAI Trainer

Exports all database models for Alembic autogenerate and application use.
Import models here to register them with SQLModel.metadata.
"""

from app.infrastructure.db.models.base import (
    TABLE_PREFIX,
    CreatedAtMixin,
    TimestampMixin,
    UUIDMixin,
)
from app.infrastructure.db.models.profile import Profile
from app.infrastructure.db.models.session import PracticeSession
from app.infrastructure.db.models.subscription import Subscription
from app.infrastructure.db.models.usage import UsageRecord
from app.infrastructure.db.models.audit_log import AuditLog


__all__ = [
    # Base
    "TABLE_PREFIX",
    "CreatedAtMixin",
    "TimestampMixin",
    "UUIDMixin",
    # Tables
    "Profile",
    "PracticeSession",
    "Subscription",
    "UsageRecord",
    "AuditLog",
]
