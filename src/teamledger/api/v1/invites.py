"""Invite endpoints.

Creating and listing invites happen in organization context. Inspecting an
invite by token is public; accepting or declining needs a signed-in user
whose email matches the invite.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from starlette.requests import Request

from src.teamledger.api.dependencies import (
    CurrentIdentity,
    InviteServiceDep,
    require_permissions,
)
from src.teamledger.core.config import get_settings
from src.teamledger.core.permissions import Permission
from src.teamledger.core.rate_limit import limiter
from src.teamledger.schemas.auth import MessageResponse
from src.teamledger.schemas.invite import (
    AcceptInviteResponse,
    InviteCreateRequest,
    InviteDetailsResponse,
    InviteRead,
    InviteTokenRequest,
)
from src.teamledger.services.authorization import OrganizationContext

router = APIRouter(prefix="/invites", tags=["invites"])


def _auth_limit() -> str:
    return get_settings().auth_rate_limit


@router.post(
    "",
    response_model=InviteRead,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Already a member or invite already pending"}},
)
async def create_invite(
    data: InviteCreateRequest,
    context: Annotated[
        OrganizationContext, Depends(require_permissions(Permission.ORG_INVITE))
    ],
    service: InviteServiceDep,
) -> InviteRead:
    invite = await service.invite_user(
        context.organization_id, data.email, data.role, context.user_id
    )
    return InviteRead.model_validate(invite)


@router.get("", response_model=list[InviteRead])
async def list_organization_invites(
    context: Annotated[
        OrganizationContext, Depends(require_permissions(Permission.ORG_INVITE))
    ],
    service: InviteServiceDep,
) -> list[InviteRead]:
    invites = await service.list_organization_invites(context.organization_id)
    return [InviteRead.model_validate(invite) for invite in invites]


@router.get("/pending", response_model=list[InviteRead])
async def list_my_pending_invites(
    identity: CurrentIdentity, service: InviteServiceDep
) -> list[InviteRead]:
    invites = await service.list_pending_invites(identity.email)
    return [InviteRead.model_validate(invite) for invite in invites]


@router.post("/accept", response_model=AcceptInviteResponse)
async def accept_invite(
    data: InviteTokenRequest, identity: CurrentIdentity, service: InviteServiceDep
) -> AcceptInviteResponse:
    organization_id = await service.accept_invite(data.token, identity.user_id)
    return AcceptInviteResponse(organization_id=organization_id)


@router.post("/decline", response_model=MessageResponse)
async def decline_invite(
    data: InviteTokenRequest, identity: CurrentIdentity, service: InviteServiceDep
) -> MessageResponse:
    await service.decline_invite(data.token, identity.user_id)
    return MessageResponse(message="Invite declined")


@router.get("/{token}", response_model=InviteDetailsResponse)
@limiter.limit(_auth_limit)
async def get_invite_details(
    request: Request, token: str, service: InviteServiceDep
) -> InviteDetailsResponse:
    details = await service.get_invite_details(token)
    return InviteDetailsResponse(
        email=details.email,
        organization_id=details.organization_id,
        organization_name=details.organization_name,
        role=details.role,
        inviter_name=details.inviter_name,
        is_registered=details.is_registered,
        expires_at=details.expires_at,
    )
