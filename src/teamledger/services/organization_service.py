"""Organization lifecycle - creation, rename, deletion, leaving and ownership transfer."""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.teamledger.core.exceptions import BadRequest, Forbidden, NotFound
from src.teamledger.core.logging import get_logger
from src.teamledger.core.realtime import EventBroadcaster
from src.teamledger.core.validators import generate_slug
from src.teamledger.models import AuditAction, Organization, Role
from src.teamledger.repositories import MembershipRepository, OrganizationRepository
from src.teamledger.services.audit_service import AuditService
from src.teamledger.services.membership_cache import MembershipCache

logger = get_logger(__name__)


@dataclass(frozen=True)
class OrganizationWithRole:
    organization: Organization
    role: Role


class OrganizationService:
    def __init__(
        self,
        organization_repo: OrganizationRepository,
        membership_repo: MembershipRepository,
        session: AsyncSession,
        membership_cache: MembershipCache,
        audit_service: AuditService,
        broadcaster: EventBroadcaster,
    ):
        self.organization_repo = organization_repo
        self.membership_repo = membership_repo
        self.session = session
        self.membership_cache = membership_cache
        self.audit_service = audit_service
        self.broadcaster = broadcaster

    async def create(self, user_id: UUID, name: str) -> Organization:
        """Create an organization with the caller as OWNER."""
        name = name.strip()
        try:
            organization = self.organization_repo.create(
                name=name, slug=generate_slug(name), owner_id=user_id
            )
            await self.session.flush()
            self.membership_repo.create_membership(user_id, organization.id, Role.OWNER)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Organization created", organization_id=str(organization.id))
        await self.audit_service.log_action(
            organization_id=organization.id,
            action=AuditAction.ORG_CREATE,
            entity_type="organization",
            entity_id=organization.id,
            user_id=user_id,
            new_data={"name": organization.name, "slug": organization.slug},
        )
        return organization

    async def get(self, organization_id: UUID, user_id: UUID) -> OrganizationWithRole:
        """Get an organization the caller belongs to.

        Non-members get NotFound so organization ids cannot be enumerated.
        """
        organization = await self.organization_repo.get_active(organization_id)
        membership = await self.membership_repo.get_membership(user_id, organization_id)
        if organization is None or membership is None:
            raise NotFound("Organization not found")
        return OrganizationWithRole(organization=organization, role=Role(membership.role))

    async def list_user_organizations(self, user_id: UUID) -> list[OrganizationWithRole]:
        rows = await self.organization_repo.list_for_user(user_id)
        return [OrganizationWithRole(organization=org, role=Role(role)) for org, role in rows]

    async def update(self, organization_id: UUID, user_id: UUID, name: str) -> Organization:
        """Rename an organization. The slug is regenerated from the new name."""
        organization = await self._get_or_404(organization_id)
        previous = {"name": organization.name, "slug": organization.slug}
        name = name.strip()

        try:
            await self.organization_repo.update_name(organization, name, generate_slug(name))
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.membership_cache.invalidate_organization(organization_id)
        await self.audit_service.log_action(
            organization_id=organization_id,
            action=AuditAction.ORG_UPDATE,
            entity_type="organization",
            entity_id=organization_id,
            user_id=user_id,
            previous_data=previous,
            new_data={"name": organization.name, "slug": organization.slug},
        )
        await self.broadcaster.publish_to_organization(
            organization_id, "organization_updated", {"name": organization.name}
        )
        return organization

    async def delete(self, organization_id: UUID, user_id: UUID) -> None:
        """Soft-delete an organization. Owner only."""
        organization = await self._get_or_404(organization_id)
        if organization.owner_id != user_id:
            raise Forbidden("Only the owner can delete the organization")

        try:
            await self.organization_repo.soft_delete(organization)
            await self.membership_cache.invalidate_organization(organization_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Organization deleted", organization_id=str(organization_id))
        await self.membership_cache.invalidate_organization(organization_id)
        await self.audit_service.log_action(
            organization_id=organization_id,
            action=AuditAction.ORG_DELETE,
            entity_type="organization",
            entity_id=organization_id,
            user_id=user_id,
            previous_data={"name": organization.name, "slug": organization.slug},
        )
        await self.broadcaster.publish_to_organization(
            organization_id, "organization_deleted", {"organization_id": str(organization_id)}
        )

    async def leave(self, organization_id: UUID, user_id: UUID) -> None:
        """Remove the caller's own membership. The owner must transfer ownership first."""
        await self._get_or_404(organization_id)
        membership = await self.membership_repo.get_membership(user_id, organization_id)
        if membership is None:
            raise NotFound("You are not a member of this organization")
        if membership.role == Role.OWNER.value:
            raise BadRequest("Owner cannot leave the organization. Transfer ownership first")

        role = membership.role
        try:
            await self.membership_repo.remove(membership)
            await self.membership_cache.invalidate(organization_id, user_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.membership_cache.invalidate(organization_id, user_id)
        await self.audit_service.log_action(
            organization_id=organization_id,
            action=AuditAction.MEMBER_LEAVE,
            entity_type="membership",
            entity_id=user_id,
            user_id=user_id,
            previous_data={"role": role},
        )
        await self.broadcaster.publish_to_organization(
            organization_id, "member_left", {"user_id": str(user_id)}
        )

    async def transfer_ownership(
        self, organization_id: UUID, current_owner_id: UUID, new_owner_id: UUID
    ) -> Organization:
        """Hand the organization to another member.

        The previous owner becomes ADMIN. The organization row is locked
        before the owner check and both memberships are re-read under that
        lock, so concurrent transfers serialize and the loser sees the new
        owner. The owner pointer and both role changes commit together or
        not at all.

        Raises:
            NotFound: Organization missing, or the new owner is not a member
            Forbidden: Caller is not the owner
            BadRequest: Transfer to self
            CacheInvalidationError: A cached role could not be cleared
        """
        if new_owner_id == current_owner_id:
            raise BadRequest("Cannot transfer ownership to yourself")

        try:
            organization = await self.organization_repo.get_active(
                organization_id, for_update=True
            )
            if organization is None:
                raise NotFound("Organization not found")
            if organization.owner_id != current_owner_id:
                raise Forbidden("Only the owner can transfer ownership")

            current_owner_membership = await self.membership_repo.get_membership(
                current_owner_id, organization_id, for_update=True
            )
            if (
                current_owner_membership is None
                or current_owner_membership.role != Role.OWNER.value
            ):
                raise Forbidden("Only the owner can transfer ownership")
            new_owner_membership = await self.membership_repo.get_membership(
                new_owner_id, organization_id, for_update=True
            )
            if new_owner_membership is None:
                raise NotFound("New owner must be a member of the organization")

            await self.organization_repo.set_owner(organization, new_owner_id)
            await self.membership_repo.update_role(new_owner_membership, Role.OWNER)
            await self.membership_repo.update_role(current_owner_membership, Role.ADMIN)
            await self.membership_cache.invalidate(organization_id, new_owner_id)
            await self.membership_cache.invalidate(organization_id, current_owner_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Ownership transferred",
            organization_id=str(organization_id),
            new_owner_id=str(new_owner_id),
        )
        await self.membership_cache.invalidate(organization_id, new_owner_id)
        await self.membership_cache.invalidate(organization_id, current_owner_id)
        await self.audit_service.log_action(
            organization_id=organization_id,
            action=AuditAction.ORG_TRANSFER_OWNERSHIP,
            entity_type="organization",
            entity_id=organization_id,
            user_id=current_owner_id,
            previous_data={"owner_id": str(current_owner_id)},
            new_data={"owner_id": str(new_owner_id)},
        )
        await self.broadcaster.publish_to_user(
            new_owner_id,
            "ownership_transferred",
            {"organization_id": str(organization_id), "name": organization.name},
        )
        return organization

    async def _get_or_404(self, organization_id: UUID) -> Organization:
        organization = await self.organization_repo.get_active(organization_id)
        if organization is None:
            raise NotFound("Organization not found")
        return organization
