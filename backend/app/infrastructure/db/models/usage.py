"""
Usage Ledger Model

One immutable row per completed session that consumed subscription minutes.
Audit trail for Subscription.minutes_used, not its source of truth.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, Index
from sqlmodel import Field

from app.infrastructure.db.models.base import (
    TABLE_PREFIX,
    CreatedAtMixin,
    UUIDMixin,
)


class UsageRecord(UUIDMixin, CreatedAtMixin, table=True):
    """Minutes consumed by a session within a billing period."""

    __tablename__ = f"{TABLE_PREFIX}usage"
    __table_args__ = (
        Index("ix_salesai_usage_profile_created", "profile_id", "created_at"),
    )

    profile_id: UUID = Field(..., foreign_key=f"{TABLE_PREFIX}profiles.id")
    company_id: Optional[UUID] = Field(default=None)
    session_id: UUID = Field(
        ...,
        foreign_key=f"{TABLE_PREFIX}sessions.id",
        unique=True,
        description="One ledger row per session"
    )
    minutes_used: int = Field(..., ge=1)
    period_start: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    period_end: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
