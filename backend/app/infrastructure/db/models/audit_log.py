"""
Audit Log Model

Append-only trail of notable actions (session created/completed).
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field

from app.infrastructure.db.models.base import (
    TABLE_PREFIX,
    CreatedAtMixin,
    UUIDMixin,
)


class AuditLog(UUIDMixin, CreatedAtMixin, table=True):
    """Audit log entry written by the session lifecycle handlers."""

    __tablename__ = f"{TABLE_PREFIX}audit_logs"

    user_id: UUID = Field(..., index=True, description="Auth user who acted")
    company_id: Optional[UUID] = Field(default=None)
    event_type: str = Field(..., sa_column=Column(String(50), nullable=False))
    resource: str = Field(..., sa_column=Column(String(50), nullable=False))
    action: str = Field(..., sa_column=Column(String(50), nullable=False))
    details: Optional[dict] = Field(default=None, sa_column=Column(JSONB))
