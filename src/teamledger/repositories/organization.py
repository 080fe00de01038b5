"""Repository for Organization entity."""

from uuid import UUID

from sqlmodel import select

from src.teamledger.models import Organization, OrganizationMember
from src.teamledger.models.base import utc_now
from src.teamledger.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    """Repository for organizations. Soft-deleted rows are hidden unless asked for."""

    model = Organization

    async def get_active(
        self, organization_id: UUID, for_update: bool = False
    ) -> Organization | None:
        """Get an organization that exists and is not soft-deleted.

        Args:
            organization_id: The organization to load
            for_update: Lock the row until the transaction ends and refresh
                any copy already loaded in the session
        """
        query = select(Organization).where(
            Organization.id == organization_id,
            Organization.deleted_at == None,  # noqa: E711
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: UUID) -> list[tuple[Organization, str]]:
        """Active organizations the user belongs to, with the user's role."""
        result = await self.session.execute(
            select(Organization, OrganizationMember.role)
            .join(
                OrganizationMember,
                OrganizationMember.organization_id == Organization.id,  # type: ignore[arg-type]
            )
            .where(
                OrganizationMember.user_id == user_id,
                Organization.deleted_at == None,  # noqa: E711
            )
            .order_by(OrganizationMember.joined_at)  # type: ignore[arg-type]
        )
        return [(org, role) for org, role in result.all()]

    def create(self, name: str, slug: str, owner_id: UUID) -> Organization:
        """Create an organization (add to session, no commit)."""
        organization = Organization(name=name, slug=slug, owner_id=owner_id)
        self.session.add(organization)
        return organization

    async def update_name(self, organization: Organization, name: str, slug: str) -> Organization:
        organization.name = name
        organization.slug = slug
        organization.updated_at = utc_now()
        self.session.add(organization)
        await self.session.flush()
        return organization

    async def set_owner(self, organization: Organization, owner_id: UUID) -> Organization:
        organization.owner_id = owner_id
        organization.updated_at = utc_now()
        self.session.add(organization)
        await self.session.flush()
        return organization

    async def soft_delete(self, organization: Organization) -> Organization:
        organization.deleted_at = utc_now()
        self.session.add(organization)
        await self.session.flush()
        return organization
