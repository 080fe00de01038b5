"""Membership management - listing members, changing roles and removing members."""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.teamledger.core.exceptions import BadRequest, Forbidden, NotFound
from src.teamledger.core.logging import get_logger
from src.teamledger.core.permissions import management_rank
from src.teamledger.core.realtime import EventBroadcaster
from src.teamledger.models import AuditAction, OrganizationMember, Role, User
from src.teamledger.repositories import MembershipRepository, UserRepository
from src.teamledger.services.audit_service import AuditService
from src.teamledger.services.membership_cache import MembershipCache

logger = get_logger(__name__)


@dataclass(frozen=True)
class MemberWithUser:
    membership: OrganizationMember
    user: User


class MembershipService:
    """Role mutations with hierarchy guardrails.

    Members are addressed by membership row id. An actor may only act on
    members ranked strictly below them and may only grant roles strictly
    below their own. OWNER is never granted or changed here; ownership moves
    through OrganizationService.transfer_ownership.
    """

    def __init__(
        self,
        membership_repo: MembershipRepository,
        user_repo: UserRepository,
        session: AsyncSession,
        membership_cache: MembershipCache,
        audit_service: AuditService,
        broadcaster: EventBroadcaster,
    ):
        self.membership_repo = membership_repo
        self.user_repo = user_repo
        self.session = session
        self.membership_cache = membership_cache
        self.audit_service = audit_service
        self.broadcaster = broadcaster

    async def list_members(self, organization_id: UUID) -> list[MemberWithUser]:
        rows = await self.membership_repo.list_members(organization_id)
        return [MemberWithUser(membership=member, user=user) for member, user in rows]

    async def get_member(self, organization_id: UUID, member_id: UUID) -> MemberWithUser:
        membership = await self._get_or_404(organization_id, member_id)
        user = await self.user_repo.get_by_id(membership.user_id)
        if user is None:
            raise NotFound("Member not found")
        return MemberWithUser(membership=membership, user=user)

    async def update_member_role(
        self,
        organization_id: UUID,
        member_id: UUID,
        new_role: Role,
        actor_id: UUID,
        actor_role: Role,
    ) -> OrganizationMember:
        """Change a member's role.

        Raises:
            NotFound: Member not in the organization
            BadRequest: Actor targets their own membership
            Forbidden: Target is OWNER, new role is OWNER, or either the
                target's current role or the new role ranks at or above the actor
            CacheInvalidationError: The cached role could not be cleared
        """
        membership = await self._get_or_404(organization_id, member_id)

        if membership.user_id == actor_id:
            raise BadRequest("Cannot change your own role")
        if membership.role == Role.OWNER.value:
            raise Forbidden("Cannot change the owner's role")
        if new_role is Role.OWNER:
            raise Forbidden("Use ownership transfer to assign the owner role")

        actor_rank = management_rank(actor_role)
        if management_rank(membership.role) >= actor_rank:
            raise Forbidden("Cannot change the role of a member at or above your level")
        if management_rank(new_role) >= actor_rank:
            raise Forbidden("Cannot assign a role at or above your own")

        previous_role = membership.role
        if previous_role == new_role.value:
            return membership

        try:
            await self.membership_repo.update_role(membership, new_role)
            await self.membership_cache.invalidate(organization_id, membership.user_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Member role changed",
            organization_id=str(organization_id),
            member_id=str(member_id),
            previous_role=previous_role,
            new_role=new_role.value,
        )
        await self.membership_cache.invalidate(organization_id, membership.user_id)
        await self.audit_service.log_action(
            organization_id=organization_id,
            action=AuditAction.MEMBER_ROLE_CHANGE,
            entity_type="membership",
            entity_id=membership.id,
            user_id=actor_id,
            previous_data={"role": previous_role},
            new_data={"role": new_role.value},
        )
        await self.broadcaster.publish_to_user(
            membership.user_id,
            "role_changed",
            {
                "organization_id": str(organization_id),
                "previous_role": previous_role,
                "new_role": new_role.value,
            },
        )
        return membership

    async def remove_member(
        self,
        organization_id: UUID,
        member_id: UUID,
        actor_id: UUID,
        actor_role: Role,
    ) -> None:
        """Remove a member from the organization.

        Raises:
            NotFound: Member not in the organization
            BadRequest: Actor targets their own membership (use leave instead)
            Forbidden: Target is OWNER or ranks at or above the actor
            CacheInvalidationError: The cached role could not be cleared
        """
        membership = await self._get_or_404(organization_id, member_id)

        if membership.user_id == actor_id:
            raise BadRequest("Cannot remove yourself. Leave the organization instead")
        if membership.role == Role.OWNER.value:
            raise Forbidden("Cannot remove the owner")
        if management_rank(membership.role) >= management_rank(actor_role):
            raise Forbidden("Cannot remove a member at or above your level")

        removed_user_id = membership.user_id
        removed_role = membership.role
        try:
            await self.membership_repo.remove(membership)
            await self.membership_cache.invalidate(organization_id, removed_user_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Member removed",
            organization_id=str(organization_id),
            removed_user_id=str(removed_user_id),
        )
        await self.membership_cache.invalidate(organization_id, removed_user_id)
        await self.audit_service.log_action(
            organization_id=organization_id,
            action=AuditAction.MEMBER_REMOVE,
            entity_type="membership",
            entity_id=member_id,
            user_id=actor_id,
            previous_data={"user_id": str(removed_user_id), "role": removed_role},
        )
        await self.broadcaster.publish_to_user(
            removed_user_id,
            "removed_from_organization",
            {"organization_id": str(organization_id)},
        )

    async def _get_or_404(self, organization_id: UUID, member_id: UUID) -> OrganizationMember:
        membership = await self.membership_repo.get_in_organization(member_id, organization_id)
        if membership is None:
            raise NotFound("Member not found")
        return membership
