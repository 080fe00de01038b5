"""Audit logging service - records membership and organization changes."""

import contextlib
from typing import Any
from uuid import UUID

from asgi_correlation_id import correlation_id
from sqlalchemy.ext.asyncio import AsyncSession

from src.teamledger.core.logging import get_logger
from src.teamledger.models import AuditAction, AuditLog
from src.teamledger.repositories import AuditLogRepository

logger = get_logger(__name__)


class AuditService:
    """Service for recording audit logs.

    Fire-and-forget: called after the business change is committed, and a
    logging failure never undoes or blocks that change.
    """

    def __init__(self, audit_repo: AuditLogRepository, session: AsyncSession):
        self.audit_repo = audit_repo
        self.session = session

    async def log_action(
        self,
        organization_id: UUID,
        action: AuditAction,
        entity_type: str,
        entity_id: UUID | None = None,
        user_id: UUID | None = None,
        previous_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
    ) -> AuditLog | None:
        """Record an audit log entry.

        Returns:
            The created AuditLog, or None if logging failed
        """
        try:
            audit_log = AuditLog(
                organization_id=organization_id,
                user_id=user_id,
                action=action.value,
                entity_type=entity_type,
                entity_id=entity_id,
                previous_data=previous_data,
                new_data=new_data,
                request_id=correlation_id.get(),
            )
            self.audit_repo.add(audit_log)
            await self.session.commit()

            logger.debug(
                "Audit log recorded",
                action=audit_log.action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id else None,
            )
            return audit_log

        except Exception as e:
            logger.warning(
                "Failed to record audit log",
                action=action.value,
                entity_type=entity_type,
                error=str(e),
            )
            with contextlib.suppress(Exception):
                await self.session.rollback()
            return None

    async def list_logs(
        self,
        organization_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
        action: str | None = None,
    ) -> tuple[list[AuditLog], str | None, bool]:
        return await self.audit_repo.list_by_organization(
            organization_id=organization_id,
            cursor=cursor,
            limit=limit,
            action=action,
        )
