"""
Session SQLModel for SalesAI Trainer

One voice practice conversation. Created 'active' by the create handler,
completed exactly once by the end handler.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import Column, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field

from app.domain.models import ProcessingStatus, SessionStatus
from app.infrastructure.db.models.base import (
    TABLE_PREFIX,
    TimestampMixin,
    UUIDMixin,
    utcnow,
)


class PracticeSession(UUIDMixin, TimestampMixin, table=True):
    """
    Voice session table model.

    Named PracticeSession to avoid confusion with the SQLAlchemy AsyncSession.
    """

    __tablename__ = f"{TABLE_PREFIX}sessions"
    __table_args__ = (
        Index("ix_salesai_sessions_profile_created", "profile_id", "created_at"),
    )

    profile_id: UUID = Field(
        ...,
        foreign_key=f"{TABLE_PREFIX}profiles.id",
        index=True,
        description="Owner of the session"
    )
    company_id: Optional[UUID] = Field(default=None, index=True)

    title: str = Field(..., max_length=255)
    status: str = Field(
        default=SessionStatus.ACTIVE.value,
        sa_column=Column(String(20), nullable=False, server_default="active"),
    )
    processing_status: str = Field(
        default=ProcessingStatus.READY.value,
        sa_column=Column(String(30), nullable=False, server_default="ready"),
    )

    # Lifecycle
    started_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    ended_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    duration_seconds: Optional[float] = Field(default=None)
    minute_cost: Optional[float] = Field(default=None)

    # Recording
    audio_quality: Optional[dict] = Field(default=None, sa_column=Column(JSONB))
    audio_file_url: Optional[str] = Field(default=None, sa_column=Column(Text))
    audio_file_size: Optional[int] = Field(default=None)

    # Conversation and analysis
    transcript: Optional[str] = Field(default=None, sa_column=Column(Text))
    overall_score: Optional[float] = Field(default=None)
    session_type: Optional[str] = Field(default=None, max_length=50)
    scenario_topic: Optional[str] = Field(default=None, max_length=255)
    feedback_summary: Optional[str] = Field(default=None, sa_column=Column(Text))
    conversation_log: Optional[str] = Field(
        default=None,
        sa_column=Column(Text),
        description="JSON document; may carry a 'topics' list"
    )
    analytics_summary: Optional[dict] = Field(default=None, sa_column=Column(JSONB))
