"""Organization endpoints.

Routes under /current act on the organization named by the
X-Organization-ID header.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.teamledger.api.dependencies import (
    AuditServiceDep,
    CurrentIdentity,
    CurrentOrganization,
    OrganizationServiceDep,
    require_permissions,
)
from src.teamledger.core.permissions import Permission
from src.teamledger.schemas.audit import AuditLogRead
from src.teamledger.schemas.auth import MessageResponse
from src.teamledger.schemas.organization import (
    OrganizationCreate,
    OrganizationRead,
    OrganizationUpdate,
    OrganizationWithRoleRead,
    TransferOwnershipRequest,
)
from src.teamledger.schemas.pagination import PaginatedResponse
from src.teamledger.services.authorization import OrganizationContext
from src.teamledger.services.organization_service import OrganizationWithRole

router = APIRouter(prefix="/organizations", tags=["organizations"])

CursorQuery = Annotated[str | None, Query(description="Pagination cursor")]
LimitQuery = Annotated[int, Query(ge=1, le=100, description="Items per page")]
ActionQuery = Annotated[str | None, Query(description="Filter by action type")]


def _with_role(item: OrganizationWithRole) -> OrganizationWithRoleRead:
    return OrganizationWithRoleRead.model_validate(
        {**item.organization.model_dump(), "role": item.role}
    )


@router.post("", response_model=OrganizationRead, status_code=status.HTTP_201_CREATED)
async def create_organization(
    data: OrganizationCreate, identity: CurrentIdentity, service: OrganizationServiceDep
) -> OrganizationRead:
    organization = await service.create(identity.user_id, data.name)
    return OrganizationRead.model_validate(organization)


@router.get("", response_model=list[OrganizationWithRoleRead])
async def list_my_organizations(
    identity: CurrentIdentity, service: OrganizationServiceDep
) -> list[OrganizationWithRoleRead]:
    items = await service.list_user_organizations(identity.user_id)
    return [_with_role(item) for item in items]


@router.get("/current", response_model=OrganizationWithRoleRead)
async def get_current_organization(
    context: Annotated[
        OrganizationContext, Depends(require_permissions(Permission.ORG_READ))
    ],
    service: OrganizationServiceDep,
) -> OrganizationWithRoleRead:
    item = await service.get(context.organization_id, context.user_id)
    return _with_role(item)


@router.patch("/current", response_model=OrganizationRead)
async def update_current_organization(
    data: OrganizationUpdate,
    context: Annotated[
        OrganizationContext, Depends(require_permissions(Permission.ORG_UPDATE))
    ],
    service: OrganizationServiceDep,
) -> OrganizationRead:
    organization = await service.update(context.organization_id, context.user_id, data.name)
    return OrganizationRead.model_validate(organization)


@router.delete("/current", response_model=MessageResponse)
async def delete_current_organization(
    context: Annotated[
        OrganizationContext, Depends(require_permissions(Permission.ORG_DELETE))
    ],
    service: OrganizationServiceDep,
) -> MessageResponse:
    await service.delete(context.organization_id, context.user_id)
    return MessageResponse(message="Organization deleted")


@router.post(
    "/current/leave",
    response_model=MessageResponse,
    responses={400: {"description": "The owner must transfer ownership first"}},
)
async def leave_current_organization(
    context: CurrentOrganization, service: OrganizationServiceDep
) -> MessageResponse:
    await service.leave(context.organization_id, context.user_id)
    return MessageResponse(message="You have left the organization")


@router.post("/current/transfer-ownership", response_model=OrganizationRead)
async def transfer_ownership(
    data: TransferOwnershipRequest,
    context: Annotated[
        OrganizationContext,
        Depends(require_permissions(Permission.ORG_TRANSFER_OWNERSHIP)),
    ],
    service: OrganizationServiceDep,
) -> OrganizationRead:
    organization = await service.transfer_ownership(
        context.organization_id, context.user_id, data.new_owner_id
    )
    return OrganizationRead.model_validate(organization)


@router.get("/current/audit-logs", response_model=PaginatedResponse[AuditLogRead])
async def list_audit_logs(
    context: Annotated[
        OrganizationContext, Depends(require_permissions(Permission.AUDIT_READ))
    ],
    audit_service: AuditServiceDep,
    cursor: CursorQuery = None,
    limit: LimitQuery = 50,
    action: ActionQuery = None,
) -> PaginatedResponse[AuditLogRead]:
    """Audit trail of the current organization, newest first."""
    logs, next_cursor, has_more = await audit_service.list_logs(
        organization_id=context.organization_id,
        cursor=cursor,
        limit=limit,
        action=action,
    )
    return PaginatedResponse[AuditLogRead](
        items=[AuditLogRead.model_validate(log) for log in logs],
        next_cursor=next_cursor,
        has_more=has_more,
    )
