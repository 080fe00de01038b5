"""Invite schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.teamledger.models import Role


class InviteCreateRequest(BaseModel):
    """Request to invite an email address into the current organization."""

    email: EmailStr
    role: Role = Role.MEMBER

    @field_validator("role")
    @classmethod
    def role_below_owner(cls, v: Role) -> Role:
        if v is Role.OWNER:
            raise ValueError("Invites cannot grant the owner role")
        return v


class InviteRead(BaseModel):
    """Invite as seen by organization members. Never exposes the token."""

    id: UUID
    organization_id: UUID
    email: str
    role: str
    status: str
    invited_by_id: UUID
    created_at: datetime
    expires_at: datetime

    model_config = {"from_attributes": True}


class InviteDetailsResponse(BaseModel):
    """Public info about an invite (for the accept page)."""

    email: str
    organization_id: UUID
    organization_name: str
    role: Role
    inviter_name: str
    is_registered: bool = Field(description="Whether to offer sign-in rather than signup")
    expires_at: datetime


class InviteTokenRequest(BaseModel):
    token: str = Field(min_length=16, max_length=128)


class AcceptInviteResponse(BaseModel):
    message: str = "Invite accepted"
    organization_id: UUID
