"""FastAPI dependency injection definitions."""

from src.teamledger.api.dependencies.auth import (
    CurrentIdentity,
    CurrentOrganization,
    OptionalIdentity,
    OptionalOrganization,
    get_authorization_gate,
    get_current_identity,
    get_current_organization,
    require_minimum_role,
    require_permissions,
)
from src.teamledger.api.dependencies.db import DBSession, get_db_session
from src.teamledger.api.dependencies.services import (
    AuditServiceDep,
    AuthServiceDep,
    InviteServiceDep,
    MembershipServiceDep,
    OrganizationServiceDep,
    get_broadcaster,
    get_membership_cache,
    get_notification_dispatcher,
    get_token_service,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Auth
    "CurrentIdentity",
    "CurrentOrganization",
    "OptionalIdentity",
    "OptionalOrganization",
    "get_authorization_gate",
    "get_current_identity",
    "get_current_organization",
    "require_minimum_role",
    "require_permissions",
    # Services
    "AuditServiceDep",
    "AuthServiceDep",
    "InviteServiceDep",
    "MembershipServiceDep",
    "OrganizationServiceDep",
    "get_broadcaster",
    "get_membership_cache",
    "get_notification_dispatcher",
    "get_token_service",
]
