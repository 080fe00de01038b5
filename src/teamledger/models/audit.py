"""Audit log model for organization-scoped membership and ownership changes."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from src.teamledger.models.base import utc_now

# JSONB on PostgreSQL, plain JSON elsewhere
JSONVariant = JSON().with_variant(JSONB(), "postgresql")


class AuditAction(str, Enum):
    """Audit action types for type-safe logging."""

    # Organization
    ORG_CREATE = "org.create"
    ORG_UPDATE = "org.update"
    ORG_DELETE = "org.delete"
    ORG_TRANSFER_OWNERSHIP = "org.transfer_ownership"

    # Membership
    MEMBER_INVITE = "member.invite"
    MEMBER_JOIN = "member.join"
    MEMBER_LEAVE = "member.leave"
    MEMBER_REMOVE = "member.remove"
    MEMBER_ROLE_CHANGE = "member.role_change"


class AuditLog(SQLModel, table=True):
    """Audit trail entry, readable by roles holding audit:read."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_org_created", "organization_id", "created_at"),
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    organization_id: UUID = Field(foreign_key="organizations.id", index=True)
    user_id: UUID | None = Field(foreign_key="users.id", default=None, index=True)

    action: str = Field(max_length=50)  # AuditAction value
    entity_type: str = Field(max_length=50)  # "organization", "membership", "invite"
    entity_id: UUID | None = Field(default=None)

    previous_data: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSONVariant, nullable=True),
    )
    new_data: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSONVariant, nullable=True),
    )

    request_id: str | None = Field(max_length=36, default=None)
    created_at: datetime = Field(default_factory=utc_now)
