"""Model exports.

Import from here: `from src.teamledger.models import User, Organization`
"""

from src.teamledger.models.audit import AuditAction, AuditLog
from src.teamledger.models.auth import OrganizationInvite, OtpCode, RefreshToken
from src.teamledger.models.enums import InviteStatus, OtpType, Role
from src.teamledger.models.organization import Organization, OrganizationMember
from src.teamledger.models.user import User

__all__ = [
    # Enums
    "InviteStatus",
    "OtpType",
    "Role",
    # Tables
    "AuditLog",
    "Organization",
    "OrganizationInvite",
    "OrganizationMember",
    "OtpCode",
    "RefreshToken",
    "User",
    # Audit
    "AuditAction",
]
