"""
Audit Log Repository

Write-only access to the audit trail.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import AuditAction
from app.infrastructure.db.models.audit_log import AuditLog
from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.repositories.base_repository import BaseRepository


logger = logging.getLogger(__name__)


class AuditLogRepository(BaseRepository[AuditLog]):
    """Repository for audit log entries."""

    def __init__(self, session: AsyncSession):
        super().__init__(AuditLog, session)

    async def record_session_event(
        self,
        user_id: UUID,
        company_id: Optional[UUID],
        action: AuditAction,
        details: Dict[str, Any],
    ) -> AuditLog:
        """Append a session lifecycle entry."""
        entry = AuditLog(
            user_id=user_id,
            company_id=company_id,
            event_type="session",
            resource="sessions",
            action=action.value,
            details={**details, "timestamp": utcnow().isoformat()},
        )
        self._session.add(entry)
        await self._session.flush()
        logger.debug(f"[AUDIT] session {action.value}: {details.get('session_id')}")
        return entry
