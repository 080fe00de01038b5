from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.teamledger.models import Role


class OrganizationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class OrganizationUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class OrganizationRead(BaseModel):
    id: UUID
    name: str
    slug: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrganizationWithRoleRead(OrganizationRead):
    role: Role


class TransferOwnershipRequest(BaseModel):
    new_owner_id: UUID = Field(description="User id of an existing member")


class MemberRead(BaseModel):
    """Membership row joined with its user. `id` is the membership id."""

    id: UUID
    user_id: UUID
    email: EmailStr
    name: str
    role: Role
    joined_at: datetime


class MemberRoleUpdate(BaseModel):
    role: Role
