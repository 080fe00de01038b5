"""Repository exports."""

from src.teamledger.repositories.audit import AuditLogRepository
from src.teamledger.repositories.base import BaseRepository
from src.teamledger.repositories.invite import InviteRepository
from src.teamledger.repositories.membership import MembershipRepository
from src.teamledger.repositories.organization import OrganizationRepository
from src.teamledger.repositories.otp import OtpRepository
from src.teamledger.repositories.token import RefreshTokenRepository
from src.teamledger.repositories.user import UserRepository

__all__ = [
    "AuditLogRepository",
    "BaseRepository",
    "InviteRepository",
    "MembershipRepository",
    "OrganizationRepository",
    "OtpRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
