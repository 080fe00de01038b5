"""Repository for OrganizationMember entity."""

from uuid import UUID

from sqlmodel import select

from src.teamledger.models import OrganizationMember, Role, User
from src.teamledger.repositories.base import BaseRepository


class MembershipRepository(BaseRepository[OrganizationMember]):
    """Membership store - the authoritative (user, organization, role) relation."""

    model = OrganizationMember

    async def get_membership(
        self, user_id: UUID, organization_id: UUID, for_update: bool = False
    ) -> OrganizationMember | None:
        """Get membership for a user in an organization."""
        query = select(OrganizationMember).where(
            OrganizationMember.user_id == user_id,
            OrganizationMember.organization_id == organization_id,
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_in_organization(
        self, member_id: UUID, organization_id: UUID
    ) -> OrganizationMember | None:
        """Get a membership row by id, only if it belongs to the organization."""
        result = await self.session.execute(
            select(OrganizationMember).where(
                OrganizationMember.id == member_id,
                OrganizationMember.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_members(self, organization_id: UUID) -> list[tuple[OrganizationMember, User]]:
        """All members of an organization with their user rows, oldest first."""
        result = await self.session.execute(
            select(OrganizationMember, User)
            .join(User, User.id == OrganizationMember.user_id)  # type: ignore[arg-type]
            .where(OrganizationMember.organization_id == organization_id)
            .order_by(OrganizationMember.joined_at)  # type: ignore[arg-type]
        )
        return [(member, user) for member, user in result.all()]

    def create_membership(
        self,
        user_id: UUID,
        organization_id: UUID,
        role: Role = Role.MEMBER,
    ) -> OrganizationMember:
        """Create a new membership (add to session, no commit)."""
        membership = OrganizationMember(
            user_id=user_id,
            organization_id=organization_id,
            role=role.value,
        )
        self.session.add(membership)
        return membership

    async def update_role(self, membership: OrganizationMember, role: Role) -> OrganizationMember:
        """Change a member's role and flush (no commit)."""
        membership.role = role.value
        self.session.add(membership)
        await self.session.flush()
        return membership

    async def remove(self, membership: OrganizationMember) -> None:
        """Delete a membership row and flush (no commit)."""
        await self.session.delete(membership)
        await self.session.flush()
