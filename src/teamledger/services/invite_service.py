"""Invite lifecycle - invite, inspect, accept and decline.

An invite moves PENDING -> ACCEPTED | DECLINED | EXPIRED exactly once. Only
the SHA-256 of the invite token is stored; the plaintext travels by email.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.teamledger.core.config import get_settings
from src.teamledger.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from src.teamledger.core.logging import get_logger
from src.teamledger.core.realtime import EventBroadcaster
from src.teamledger.core.security import generate_secure_token, hash_token
from src.teamledger.core.validators import normalize_email
from src.teamledger.models import (
    AuditAction,
    InviteStatus,
    Organization,
    OrganizationInvite,
    Role,
    User,
)
from src.teamledger.models.base import utc_now
from src.teamledger.repositories import (
    InviteRepository,
    MembershipRepository,
    OrganizationRepository,
    UserRepository,
)
from src.teamledger.services.audit_service import AuditService
from src.teamledger.services.membership_cache import MembershipCache
from src.teamledger.services.notifications import NotificationDispatcher

logger = get_logger(__name__)


@dataclass(frozen=True)
class InviteDetails:
    """What the accept page shows before the invitee signs in or signs up."""

    email: str
    organization_id: UUID
    organization_name: str
    role: Role
    inviter_name: str
    is_registered: bool
    expires_at: datetime


class InviteService:
    def __init__(
        self,
        invite_repo: InviteRepository,
        organization_repo: OrganizationRepository,
        membership_repo: MembershipRepository,
        user_repo: UserRepository,
        session: AsyncSession,
        membership_cache: MembershipCache,
        audit_service: AuditService,
        notifier: NotificationDispatcher,
        broadcaster: EventBroadcaster,
    ):
        self.invite_repo = invite_repo
        self.organization_repo = organization_repo
        self.membership_repo = membership_repo
        self.user_repo = user_repo
        self.session = session
        self.membership_cache = membership_cache
        self.audit_service = audit_service
        self.notifier = notifier
        self.broadcaster = broadcaster

    async def invite_user(
        self,
        organization_id: UUID,
        email: str,
        role: Role,
        inviter_id: UUID,
    ) -> OrganizationInvite:
        """Create a PENDING invite and enqueue the invite email.

        Raises:
            NotFound: Organization missing or deleted
            Forbidden: Role is OWNER
            Conflict: Already a member, or a pending invite exists
        """
        settings = get_settings()
        organization = await self._get_organization_or_404(organization_id)
        if role is Role.OWNER:
            raise Forbidden("Cannot invite a user as owner")

        email = normalize_email(email)
        existing_user = await self.user_repo.get_by_email(email)
        if existing_user is not None:
            membership = await self.membership_repo.get_membership(
                existing_user.id, organization_id
            )
            if membership is not None:
                raise Conflict("User is already a member of this organization")

        if await self.invite_repo.get_pending_for_email(email, organization_id):
            raise Conflict("An invite is already pending for this email")

        token = generate_secure_token()
        invite = OrganizationInvite(
            organization_id=organization_id,
            email=email,
            role=role.value,
            token_hash=hash_token(token),
            invited_by_id=inviter_id,
            expires_at=utc_now() + timedelta(days=settings.invite_expire_days),
        )
        try:
            self.invite_repo.add(invite)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Invite created",
            organization_id=str(organization_id),
            invite_id=str(invite.id),
            role=role.value,
        )

        inviter = await self.user_repo.get_by_id(inviter_id)
        await self.audit_service.log_action(
            organization_id=organization_id,
            action=AuditAction.MEMBER_INVITE,
            entity_type="invite",
            entity_id=invite.id,
            user_id=inviter_id,
            new_data={"email": email, "role": role.value},
        )
        await self.notifier.send_invite(
            email=email,
            token=token,
            organization_name=organization.name,
            inviter_name=inviter.name if inviter else "Someone",
            role=role.value,
            is_registered=existing_user is not None,
        )
        return invite

    async def get_invite_details(self, token: str) -> InviteDetails:
        """Public lookup by token.

        Raises:
            NotFound: Unknown token
            BadRequest: Invite no longer pending or expired
        """
        invite = await self._get_by_token_or_404(token)
        if invite.status != InviteStatus.PENDING.value:
            raise BadRequest("Invite is no longer valid")
        if invite.is_expired:
            raise BadRequest("Invite has expired")

        organization = await self._get_organization_or_404(invite.organization_id)
        inviter = await self.user_repo.get_by_id(invite.invited_by_id)
        return InviteDetails(
            email=invite.email,
            organization_id=organization.id,
            organization_name=organization.name,
            role=Role(invite.role),
            inviter_name=inviter.name if inviter else "Someone",
            is_registered=await self.user_repo.exists_by_email(invite.email),
            expires_at=invite.expires_at,
        )

    async def accept_invite(self, token: str, user_id: UUID) -> UUID:
        """Join the organization with the invited role. Returns the organization id.

        Raises:
            NotFound: Unknown token
            BadRequest: Invite no longer pending, or expired (it is marked EXPIRED)
            Forbidden: Invite addressed to another email
            Conflict: Already a member (the invite is consumed)
        """
        invite = await self._get_by_token_or_404(token)
        if invite.status != InviteStatus.PENDING.value:
            raise BadRequest("Invite has already been used")

        if invite.is_expired:
            await self._close(invite, InviteStatus.EXPIRED)
            raise BadRequest("Invite has expired")

        user = await self._get_invitee(invite, user_id)

        if await self.membership_repo.get_membership(user.id, invite.organization_id):
            await self._close(invite, InviteStatus.ACCEPTED)
            raise Conflict("You are already a member of this organization")

        organization = await self._get_organization_or_404(invite.organization_id)
        role = Role(invite.role)
        try:
            self.membership_repo.create_membership(user.id, organization.id, role)
            await self.invite_repo.set_status(invite, InviteStatus.ACCEPTED)
            await self.membership_cache.invalidate(organization.id, user.id)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise Conflict("You are already a member of this organization") from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Invite accepted",
            organization_id=str(organization.id),
            user_id=str(user.id),
            role=role.value,
        )
        # Drop any entry cached under a previous membership
        await self.membership_cache.invalidate(organization.id, user.id)
        await self.audit_service.log_action(
            organization_id=organization.id,
            action=AuditAction.MEMBER_JOIN,
            entity_type="membership",
            entity_id=user.id,
            user_id=user.id,
            new_data={"role": role.value, "invite_id": str(invite.id)},
        )
        await self.broadcaster.publish_to_user(
            invite.invited_by_id,
            "invite_accepted",
            {
                "organization_id": str(organization.id),
                "user_id": str(user.id),
                "message": f"{user.name} has accepted your invitation to join {organization.name}",
            },
        )
        await self.broadcaster.publish_to_organization(
            organization.id, "member_joined", {"user_id": str(user.id), "role": role.value}
        )
        return organization.id

    async def decline_invite(self, token: str, user_id: UUID) -> None:
        """Raises: NotFound, BadRequest (not pending), Forbidden (another email)."""
        invite = await self._get_by_token_or_404(token)
        if invite.status != InviteStatus.PENDING.value:
            raise BadRequest("Invite has already been used")

        await self._get_invitee(invite, user_id)
        await self._close(invite, InviteStatus.DECLINED)
        logger.info("Invite declined", invite_id=str(invite.id))

    async def list_pending_invites(self, email: str) -> list[OrganizationInvite]:
        return await self.invite_repo.list_pending_by_email(normalize_email(email))

    async def list_organization_invites(self, organization_id: UUID) -> list[OrganizationInvite]:
        await self._get_organization_or_404(organization_id)
        return await self.invite_repo.list_pending_by_organization(organization_id)

    async def _close(self, invite: OrganizationInvite, status: InviteStatus) -> None:
        try:
            await self.invite_repo.set_status(invite, status)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def _get_by_token_or_404(self, token: str) -> OrganizationInvite:
        invite = await self.invite_repo.get_by_hash(hash_token(token))
        if invite is None:
            raise NotFound("Invite not found")
        return invite

    async def _get_invitee(self, invite: OrganizationInvite, user_id: UUID) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None or normalize_email(user.email) != invite.email:
            raise Forbidden("This invite is not for your email address")
        return user

    async def _get_organization_or_404(self, organization_id: UUID) -> Organization:
        organization = await self.organization_repo.get_active(organization_id)
        if organization is None:
            raise NotFound("Organization not found")
        return organization
