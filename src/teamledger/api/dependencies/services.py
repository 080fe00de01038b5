"""Service factory dependencies.

Token service, membership cache, broadcaster and notifier are process-wide
collaborators; repositories and services are built per request around the
request's session.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.teamledger.api.dependencies.db import DBSession
from src.teamledger.api.dependencies.repositories import (
    AuditLogRepo,
    InviteRepo,
    MembershipRepo,
    OrganizationRepo,
    OtpRepo,
    TokenRepo,
    UserRepo,
)
from src.teamledger.core.config import get_settings
from src.teamledger.core.realtime import EventBroadcaster
from src.teamledger.core.redis import get_redis
from src.teamledger.core.security import TokenService
from src.teamledger.services.audit_service import AuditService
from src.teamledger.services.auth_service import AuthService
from src.teamledger.services.invite_service import InviteService
from src.teamledger.services.membership_cache import MembershipCache
from src.teamledger.services.membership_service import MembershipService
from src.teamledger.services.notifications import (
    NotificationDispatcher,
    TemporalNotificationDispatcher,
)
from src.teamledger.services.organization_service import OrganizationService


@lru_cache
def get_token_service() -> TokenService:
    return TokenService.from_settings(get_settings())


async def get_membership_cache() -> MembershipCache:
    settings = get_settings()
    return MembershipCache(await get_redis(), ttl_seconds=settings.membership_cache_ttl_seconds)


async def get_broadcaster() -> EventBroadcaster:
    return EventBroadcaster(await get_redis())


def get_notification_dispatcher() -> NotificationDispatcher:
    return TemporalNotificationDispatcher()


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
MembershipCacheDep = Annotated[MembershipCache, Depends(get_membership_cache)]
BroadcasterDep = Annotated[EventBroadcaster, Depends(get_broadcaster)]
NotifierDep = Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)]


def get_audit_service(audit_repo: AuditLogRepo, session: DBSession) -> AuditService:
    return AuditService(audit_repo, session)


AuditServiceDep = Annotated[AuditService, Depends(get_audit_service)]


def get_auth_service(
    user_repo: UserRepo,
    otp_repo: OtpRepo,
    token_repo: TokenRepo,
    organization_repo: OrganizationRepo,
    membership_repo: MembershipRepo,
    invite_repo: InviteRepo,
    session: DBSession,
    token_service: TokenServiceDep,
    notifier: NotifierDep,
) -> AuthService:
    return AuthService(
        user_repo,
        otp_repo,
        token_repo,
        organization_repo,
        membership_repo,
        invite_repo,
        session,
        token_service,
        notifier,
    )


def get_organization_service(
    organization_repo: OrganizationRepo,
    membership_repo: MembershipRepo,
    session: DBSession,
    membership_cache: MembershipCacheDep,
    audit_service: AuditServiceDep,
    broadcaster: BroadcasterDep,
) -> OrganizationService:
    return OrganizationService(
        organization_repo,
        membership_repo,
        session,
        membership_cache,
        audit_service,
        broadcaster,
    )


def get_membership_service(
    membership_repo: MembershipRepo,
    user_repo: UserRepo,
    session: DBSession,
    membership_cache: MembershipCacheDep,
    audit_service: AuditServiceDep,
    broadcaster: BroadcasterDep,
) -> MembershipService:
    return MembershipService(
        membership_repo,
        user_repo,
        session,
        membership_cache,
        audit_service,
        broadcaster,
    )


def get_invite_service(
    invite_repo: InviteRepo,
    organization_repo: OrganizationRepo,
    membership_repo: MembershipRepo,
    user_repo: UserRepo,
    session: DBSession,
    membership_cache: MembershipCacheDep,
    audit_service: AuditServiceDep,
    notifier: NotifierDep,
    broadcaster: BroadcasterDep,
) -> InviteService:
    return InviteService(
        invite_repo,
        organization_repo,
        membership_repo,
        user_repo,
        session,
        membership_cache,
        audit_service,
        notifier,
        broadcaster,
    )


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
OrganizationServiceDep = Annotated[OrganizationService, Depends(get_organization_service)]
MembershipServiceDep = Annotated[MembershipService, Depends(get_membership_service)]
InviteServiceDep = Annotated[InviteService, Depends(get_invite_service)]
