"""
Profile SQLModel for SalesAI Trainer

Application-level identity of a trainee, linked one-to-one to a Supabase
auth user through auth_id.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import Column, String
from sqlmodel import Field

from app.domain.models import ProfileRole
from app.infrastructure.db.models.base import (
    TABLE_PREFIX,
    TimestampMixin,
    UUIDMixin,
)


class Profile(UUIDMixin, TimestampMixin, table=True):
    """
    Profile database table model.

    Table name matches existing Supabase table 'salesai_profiles'.
    """

    __tablename__ = f"{TABLE_PREFIX}profiles"

    # Reference to auth.users
    auth_id: UUID = Field(
        ...,
        unique=True,
        index=True,
        description="Supabase auth user id"
    )
    company_id: Optional[UUID] = Field(
        default=None,
        index=True,
        description="Company the trainee belongs to"
    )

    email: str = Field(..., max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    position: Optional[str] = Field(default=None, max_length=100)
    role: str = Field(
        default=ProfileRole.USER.value,
        sa_column=Column(String(20), nullable=False, server_default="user"),
    )
