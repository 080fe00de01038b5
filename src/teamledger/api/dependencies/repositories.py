"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.teamledger.api.dependencies.db import DBSession
from src.teamledger.repositories import (
    AuditLogRepository,
    InviteRepository,
    MembershipRepository,
    OrganizationRepository,
    OtpRepository,
    RefreshTokenRepository,
    UserRepository,
)


def get_user_repository(session: DBSession) -> UserRepository:
    return UserRepository(session)


def get_otp_repository(session: DBSession) -> OtpRepository:
    return OtpRepository(session)


def get_token_repository(session: DBSession) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


def get_organization_repository(session: DBSession) -> OrganizationRepository:
    return OrganizationRepository(session)


def get_membership_repository(session: DBSession) -> MembershipRepository:
    return MembershipRepository(session)


def get_invite_repository(session: DBSession) -> InviteRepository:
    return InviteRepository(session)


def get_audit_log_repository(session: DBSession) -> AuditLogRepository:
    return AuditLogRepository(session)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
OtpRepo = Annotated[OtpRepository, Depends(get_otp_repository)]
TokenRepo = Annotated[RefreshTokenRepository, Depends(get_token_repository)]
OrganizationRepo = Annotated[OrganizationRepository, Depends(get_organization_repository)]
MembershipRepo = Annotated[MembershipRepository, Depends(get_membership_repository)]
InviteRepo = Annotated[InviteRepository, Depends(get_invite_repository)]
AuditLogRepo = Annotated[AuditLogRepository, Depends(get_audit_log_repository)]
