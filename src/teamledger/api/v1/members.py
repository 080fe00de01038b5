"""Membership endpoints for the organization named by X-Organization-ID."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from src.teamledger.api.dependencies import MembershipServiceDep, require_permissions
from src.teamledger.core.permissions import Permission
from src.teamledger.schemas.auth import MessageResponse
from src.teamledger.schemas.organization import MemberRead, MemberRoleUpdate
from src.teamledger.services.authorization import OrganizationContext
from src.teamledger.services.membership_service import MemberWithUser

router = APIRouter(prefix="/members", tags=["members"])


def _member_read(item: MemberWithUser) -> MemberRead:
    return MemberRead(
        id=item.membership.id,
        user_id=item.user.id,
        email=item.user.email,
        name=item.user.name,
        role=item.membership.role,
        joined_at=item.membership.joined_at,
    )


@router.get("", response_model=list[MemberRead])
async def list_members(
    context: Annotated[
        OrganizationContext, Depends(require_permissions(Permission.ORG_READ))
    ],
    service: MembershipServiceDep,
) -> list[MemberRead]:
    items = await service.list_members(context.organization_id)
    return [_member_read(item) for item in items]


@router.get("/{member_id}", response_model=MemberRead)
async def get_member(
    member_id: UUID,
    context: Annotated[
        OrganizationContext, Depends(require_permissions(Permission.ORG_READ))
    ],
    service: MembershipServiceDep,
) -> MemberRead:
    item = await service.get_member(context.organization_id, member_id)
    return _member_read(item)


@router.patch(
    "/{member_id}/role",
    response_model=MessageResponse,
    responses={
        400: {"description": "Cannot change your own role"},
        403: {"description": "Target or new role at or above your level"},
        404: {"description": "Member not found"},
    },
)
async def update_member_role(
    member_id: UUID,
    data: MemberRoleUpdate,
    context: Annotated[
        OrganizationContext, Depends(require_permissions(Permission.ORG_MANAGE_ROLES))
    ],
    service: MembershipServiceDep,
) -> MessageResponse:
    await service.update_member_role(
        context.organization_id, member_id, data.role, context.user_id, context.role
    )
    return MessageResponse(message="Member role updated")


@router.delete("/{member_id}", response_model=MessageResponse)
async def remove_member(
    member_id: UUID,
    context: Annotated[
        OrganizationContext, Depends(require_permissions(Permission.ORG_REMOVE_MEMBER))
    ],
    service: MembershipServiceDep,
) -> MessageResponse:
    await service.remove_member(context.organization_id, member_id, context.user_id, context.role)
    return MessageResponse(message="Member removed")
