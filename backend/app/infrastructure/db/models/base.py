"""
Base Model for SQLModel ORM

Provides common fields and behavior for all database models.
Every SalesAI table is keyed by UUID and carries a creation timestamp.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


TABLE_PREFIX = "salesai_"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UUIDMixin(SQLModel):
    """Mixin providing UUID primary key."""

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
        description="Unique identifier (UUID v4)"
    )


class CreatedAtMixin(SQLModel):
    """Mixin for append-only rows (ledger, audit)."""

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
        description="Record creation timestamp (UTC)"
    )


class TimestampMixin(CreatedAtMixin):
    """
    Mixin providing timestamp fields for mutable rows.
    """

    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
        sa_column_kwargs={"onupdate": utcnow},
        description="Last update timestamp (UTC)"
    )
