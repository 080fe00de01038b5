"""Authentication-related models - one-time codes, refresh tokens and invites."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.teamledger.models.base import utc_now
from src.teamledger.models.enums import InviteStatus, OtpType, Role


class OtpCode(SQLModel, table=True):
    """One-time code sent by email. Only the hash is stored."""

    __tablename__ = "otp_codes"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, index=True)
    code_hash: str = Field(max_length=64)
    type: str = Field(default=OtpType.EMAIL_VERIFICATION.value, max_length=30)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)
    used_at: datetime | None = Field(default=None)


class RefreshToken(SQLModel, table=True):
    """Issued refresh token, tracked by hash for rotation and revocation."""

    __tablename__ = "refresh_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    token_hash: str = Field(max_length=64, unique=True, index=True)
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)
    revoked_at: datetime | None = Field(default=None)

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None


class OrganizationInvite(SQLModel, table=True):
    """Invitation to join an organization. The plaintext token only travels by email."""

    __tablename__ = "organization_invites"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    organization_id: UUID = Field(foreign_key="organizations.id", index=True)
    email: str = Field(max_length=255, index=True)
    role: str = Field(default=Role.MEMBER.value, max_length=20)
    token_hash: str = Field(max_length=64, unique=True, index=True)
    invited_by_id: UUID = Field(foreign_key="users.id", index=True)
    status: str = Field(default=InviteStatus.PENDING.value, max_length=20)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)
    responded_at: datetime | None = Field(default=None)

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= utc_now()
