"""Organization and membership models."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from src.teamledger.core.validators import MAX_SLUG_BASE_LENGTH, SLUG_SUFFIX_LENGTH
from src.teamledger.models.base import utc_now
from src.teamledger.models.enums import Role


class Organization(SQLModel, table=True):
    """Tenant boundary. Soft-deleted via deleted_at."""

    __tablename__ = "organizations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100)
    slug: str = Field(
        max_length=MAX_SLUG_BASE_LENGTH + SLUG_SUFFIX_LENGTH + 1, unique=True, index=True
    )
    owner_id: UUID = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = Field(default=None)


class OrganizationMember(SQLModel, table=True):
    """(user, organization, role). At most one row per pair."""

    __tablename__ = "organization_members"
    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", name="uq_organization_members_user_org"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    organization_id: UUID = Field(foreign_key="organizations.id", index=True)
    role: str = Field(default=Role.MEMBER.value, max_length=20)
    joined_at: datetime = Field(default_factory=utc_now)
