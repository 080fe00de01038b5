"""Repository for AuditLog entity."""

from uuid import UUID

from sqlmodel import select

from src.teamledger.models import AuditLog
from src.teamledger.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """Repository for audit logs."""

    model = AuditLog

    async def list_by_organization(
        self,
        organization_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
        action: str | None = None,
    ) -> tuple[list[AuditLog], str | None, bool]:
        """List audit logs for an organization with cursor pagination.

        Returns:
            Tuple of (logs, next_cursor, has_more)
        """
        query = select(AuditLog).where(AuditLog.organization_id == organization_id)
        if action:
            query = query.where(AuditLog.action == action)
        return await self.paginate(query, cursor, limit, AuditLog.created_at)
