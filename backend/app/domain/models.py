"""
Domain Models for SalesAI Trainer

Pure Python/Pydantic models with no framework dependencies.
One declarative schema per request type; every handler validates through these.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator
import uuid


class SessionStatus(str, Enum):
    """Session lifecycle status."""
    ACTIVE = "active"
    COMPLETED = "completed"
    ANALYZED = "analyzed"
    ARCHIVED = "archived"


class ProcessingStatus(str, Enum):
    """Post-call processing state of a session."""
    READY = "ready"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    FAILED = "failed"


class SubscriptionTier(str, Enum):
    """Subscription tier levels."""
    STARTER = "starter"
    PROFESSIONAL = "professional"
    TEAM = "team"
    ENTERPRISE = "enterprise"


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status."""
    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    INCOMPLETE = "incomplete"


class ProfileRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AuditAction(str, Enum):
    """Actions recorded in the audit log."""
    CREATE = "create"
    COMPLETE = "complete"


# =============================================================================
# Session Requests
# =============================================================================

class SessionCreateRequest(BaseModel):
    """Request to start a voice practice session."""
    title: str = Field(..., min_length=1, max_length=255, description="Session title")
    company_id: Optional[uuid.UUID] = Field(None, description="Company to bill the session to")


class SessionEndRequest(BaseModel):
    """Request to complete an active voice practice session."""
    session_id: uuid.UUID
    duration_seconds: float = Field(..., gt=0, description="Elapsed call time in seconds")
    audio_quality: Optional[Dict[str, Any]] = None
    audio_file_url: Optional[AnyHttpUrl] = None
    audio_file_size: Optional[int] = Field(None, gt=0, description="Audio size in bytes")
    transcript: Optional[str] = None


class AnalyzeRequest(BaseModel):
    """Transcript lines to analyze."""
    transcript: List[str]

    @field_validator("transcript", mode="before")
    @classmethod
    def validate_is_list(cls, v: Any) -> Any:
        if not isinstance(v, list):
            raise ValueError("Transcript is required and must be an array")
        return v


# =============================================================================
# Session Responses
# =============================================================================

class SessionSummary(BaseModel):
    """Public fields of a newly created session."""
    id: uuid.UUID
    title: str
    status: SessionStatus
    started_at: Optional[datetime] = None
    processing_status: str
    is_demo: bool = False


class SessionCreateResponse(BaseModel):
    session: SessionSummary


class CompletedSessionSummary(BaseModel):
    """Public fields of a completed session, including billing."""
    id: uuid.UUID
    status: SessionStatus
    ended_at: Optional[datetime] = None
    duration_seconds: float
    minute_cost: float
    minutes_used: int
    score: Optional[float] = None
    is_demo: bool = False


class SessionEndResponse(BaseModel):
    session: CompletedSessionSummary


# =============================================================================
# Dashboard Responses
# =============================================================================

class DashboardStats(BaseModel):
    """Aggregated statistics for the dashboard header cards."""
    minutes_left: int
    sessions_today: int
    progress_score: float
    streak_days: int
    total_minutes_used: int
    total_sessions: int
    average_score: float
    subscription_tier: SubscriptionTier = SubscriptionTier.STARTER
    is_demo: bool = False
    error: Optional[str] = None


class RecentSession(BaseModel):
    """One row of the dashboard's recent sessions list."""
    id: str
    title: str
    duration: int
    score: float
    date: datetime
    status: str
    improvement: float = 0
    feedback: str
    topics: List[str]


# =============================================================================
# Subscription Responses
# =============================================================================

class SubscriptionInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    status: SubscriptionStatus
    tier: SubscriptionTier
    plan_id: Optional[str] = None
    plan_name: Optional[str] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False


class PeriodUsage(BaseModel):
    minutes_used: int
    minutes_included: int
    minutes_remaining: int
    sessions_completed: int


class SubscriptionSummaryResponse(BaseModel):
    """Current subscription with usage for the billing period."""
    subscription: Optional[SubscriptionInfo] = None
    usage: PeriodUsage
    is_demo: bool = False


# =============================================================================
# Voice / Analysis Responses
# =============================================================================

class SignedUrlResponse(BaseModel):
    """Short-lived ElevenLabs connection credential for the browser SDK."""
    model_config = ConfigDict(populate_by_name=True)

    signed_url: str = Field(..., alias="signedUrl")
    agent_id: str = Field(..., alias="agentId")


class AnalysisMetrics(BaseModel):
    confidence: int
    clarity: int
    pace: int
    engagement: int


class AnalysisBreakdown(BaseModel):
    strengths: List[str]
    improvements: List[str]
    recommendations: List[str]


class DetailedInsights(BaseModel):
    opening_effectiveness: float
    rapport_building: float
    needs_discovery: float
    value_presentation: float
    objection_handling: float
    closing_attempt: float


class AnalysisReport(BaseModel):
    """Structured performance report for one practice call."""
    overall_score: float
    feedback: str
    metrics: AnalysisMetrics
    analysis: AnalysisBreakdown
    detailed_insights: DetailedInsights
    improvement_trend: str
    next_focus_areas: List[str]


class SessionAnalysis(AnalysisReport):
    session_id: str
    analyzed_at: datetime
    transcript_length: int
    processing_time: str


class AnalyzeResponse(BaseModel):
    success: bool = True
    analysis: SessionAnalysis
    message: str
