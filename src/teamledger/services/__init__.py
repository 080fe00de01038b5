from src.teamledger.services.audit_service import AuditService
from src.teamledger.services.auth_service import AuthService
from src.teamledger.services.authorization import AuthorizationGate
from src.teamledger.services.invite_service import InviteService
from src.teamledger.services.membership_cache import MembershipCache
from src.teamledger.services.membership_service import MembershipService
from src.teamledger.services.organization_service import OrganizationService

__all__ = [
    "AuditService",
    "AuthService",
    "AuthorizationGate",
    "InviteService",
    "MembershipCache",
    "MembershipService",
    "OrganizationService",
]
