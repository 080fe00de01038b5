"""Repository for OrganizationInvite entity."""

from uuid import UUID

from sqlmodel import select, update

from src.teamledger.models import InviteStatus, OrganizationInvite
from src.teamledger.models.base import utc_now
from src.teamledger.repositories.base import BaseRepository


class InviteRepository(BaseRepository[OrganizationInvite]):
    """Repository for organization invites."""

    model = OrganizationInvite

    async def get_by_hash(self, token_hash: str) -> OrganizationInvite | None:
        """Get an invite by token hash, whatever its status."""
        result = await self.session.execute(
            select(OrganizationInvite).where(OrganizationInvite.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def get_pending_for_email(
        self, email: str, organization_id: UUID
    ) -> OrganizationInvite | None:
        """Get a pending, unexpired invite for an email in an organization."""
        result = await self.session.execute(
            select(OrganizationInvite).where(
                OrganizationInvite.email == email,
                OrganizationInvite.organization_id == organization_id,
                OrganizationInvite.status == InviteStatus.PENDING.value,
                OrganizationInvite.expires_at > utc_now(),
            )
        )
        return result.scalars().first()

    async def list_pending_by_email(self, email: str) -> list[OrganizationInvite]:
        result = await self.session.execute(
            select(OrganizationInvite)
            .where(
                OrganizationInvite.email == email,
                OrganizationInvite.status == InviteStatus.PENDING.value,
                OrganizationInvite.expires_at > utc_now(),
            )
            .order_by(OrganizationInvite.created_at.desc())  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def list_pending_by_organization(self, organization_id: UUID) -> list[OrganizationInvite]:
        result = await self.session.execute(
            select(OrganizationInvite)
            .where(
                OrganizationInvite.organization_id == organization_id,
                OrganizationInvite.status == InviteStatus.PENDING.value,
                OrganizationInvite.expires_at > utc_now(),
            )
            .order_by(OrganizationInvite.created_at.desc())  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def set_status(
        self, invite: OrganizationInvite, status: InviteStatus
    ) -> OrganizationInvite:
        """Move an invite out of PENDING (flush, no commit)."""
        invite.status = status.value
        invite.responded_at = utc_now()
        self.session.add(invite)
        await self.session.flush()
        return invite

    async def expire_overdue(self) -> int:
        """Mark every overdue PENDING invite EXPIRED. Returns the number updated."""
        result = await self.session.execute(
            update(OrganizationInvite)
            .where(OrganizationInvite.status == InviteStatus.PENDING.value)  # type: ignore[arg-type]
            .where(OrganizationInvite.expires_at <= utc_now())  # type: ignore[arg-type]
            .values(status=InviteStatus.EXPIRED.value)
        )
        await self.session.commit()
        return result.rowcount or 0  # type: ignore[attr-defined]
