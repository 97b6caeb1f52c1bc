"""
Subscription Database Model

SQLModel table for subscription data persistence.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import Column, DateTime, Index, Integer, String
from sqlmodel import Field

from app.domain.models import SubscriptionStatus, SubscriptionTier
from app.infrastructure.db.models.base import (
    TABLE_PREFIX,
    TimestampMixin,
    UUIDMixin,
)


class Subscription(UUIDMixin, TimestampMixin, table=True):
    """
    Subscription table for storing billing and minute allowance.

    Maps to the 'salesai_subscriptions' table in PostgreSQL.
    """

    __tablename__ = f"{TABLE_PREFIX}subscriptions"
    __table_args__ = (
        Index("ix_salesai_subscriptions_profile_status", "profile_id", "status"),
    )

    profile_id: UUID = Field(
        ...,
        foreign_key=f"{TABLE_PREFIX}profiles.id",
        description="Subscribed profile"
    )
    company_id: Optional[UUID] = Field(default=None, index=True)

    # Stripe IDs
    stripe_customer_id: Optional[str] = Field(default=None, index=True)
    stripe_subscription_id: Optional[str] = Field(default=None, unique=True)

    # Plan details
    plan_id: str = Field(default=SubscriptionTier.STARTER.value, max_length=100)
    plan_name: str = Field(default="Starter Plan", max_length=100)
    tier: str = Field(
        default=SubscriptionTier.STARTER.value,
        sa_column=Column(String(20), nullable=False, server_default="starter"),
    )
    status: str = Field(
        default=SubscriptionStatus.ACTIVE.value,
        sa_column=Column(String(20), nullable=False, server_default="active"),
    )

    # Usage tracking
    minutes_limit: int = Field(
        default=100,
        sa_column=Column(Integer, nullable=False, server_default="100"),
    )
    minutes_used: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default="0"),
    )

    # Billing period dates
    current_period_start: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    current_period_end: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    cancel_at_period_end: bool = Field(default=False)
    canceled_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
