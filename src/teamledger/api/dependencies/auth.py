"""Authentication and authorization dependencies.

Thin FastAPI adapters over AuthorizationGate: each stage raises the gate's
typed errors, which the exception handlers turn into 401/400/403 responses.
"""

from collections.abc import Callable, Coroutine
from typing import Annotated, Any

from fastapi import Depends, Request

from src.teamledger.api.dependencies.repositories import (
    MembershipRepo,
    OrganizationRepo,
    UserRepo,
)
from src.teamledger.api.dependencies.services import MembershipCacheDep, TokenServiceDep
from src.teamledger.core.logging import bind_organization_context, bind_user_context
from src.teamledger.core.permissions import CheckMode, Permission, Role
from src.teamledger.services.authorization import (
    AuthorizationGate,
    Identity,
    OrganizationContext,
)


def get_authorization_gate(
    token_service: TokenServiceDep,
    user_repo: UserRepo,
    organization_repo: OrganizationRepo,
    membership_repo: MembershipRepo,
    membership_cache: MembershipCacheDep,
) -> AuthorizationGate:
    return AuthorizationGate(
        token_service,
        user_repo,
        organization_repo,
        membership_repo,
        membership_cache,
    )


Gate = Annotated[AuthorizationGate, Depends(get_authorization_gate)]


async def get_current_identity(request: Request, gate: Gate) -> Identity:
    identity = await gate.authenticate(request.headers)
    bind_user_context(identity.user_id, identity.email)
    return identity


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]


async def get_optional_identity(request: Request, gate: Gate) -> Identity | None:
    identity = await gate.authenticate_optional(request.headers)
    if identity is not None:
        bind_user_context(identity.user_id, identity.email)
    return identity


OptionalIdentity = Annotated[Identity | None, Depends(get_optional_identity)]


async def get_current_organization(
    request: Request, identity: CurrentIdentity, gate: Gate
) -> OrganizationContext:
    context = await gate.resolve_organization(identity, request.headers)
    bind_organization_context(context.organization_id, context.role.value)
    return context


CurrentOrganization = Annotated[OrganizationContext, Depends(get_current_organization)]


async def get_optional_organization(
    request: Request, identity: OptionalIdentity, gate: Gate
) -> OrganizationContext | None:
    return await gate.resolve_organization_optional(identity, request.headers)


OptionalOrganization = Annotated[
    OrganizationContext | None, Depends(get_optional_organization)
]


def require_permissions(
    *permissions: Permission, mode: CheckMode = CheckMode.ALL
) -> Callable[..., Coroutine[Any, Any, OrganizationContext]]:
    """Dependency factory: resolve the organization and require permissions.

    Usage:
        @router.patch("/", dependencies=[Depends(require_permissions(Permission.ORG_UPDATE))])
    """

    async def dependency(context: CurrentOrganization, gate: Gate) -> OrganizationContext:
        gate.require(context.role, permissions, mode)
        return context

    return dependency


def require_minimum_role(
    min_role: Role,
) -> Callable[..., Coroutine[Any, Any, OrganizationContext]]:
    async def dependency(context: CurrentOrganization) -> OrganizationContext:
        AuthorizationGate.require_minimum_role(context.role, min_role)
        return context

    return dependency
