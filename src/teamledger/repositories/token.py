"""Repository for RefreshToken entity."""

from datetime import timedelta
from uuid import UUID

from sqlalchemy import and_, delete, or_, update
from sqlmodel import select

from src.teamledger.models import RefreshToken
from src.teamledger.models.base import utc_now
from src.teamledger.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Repository for issued refresh tokens."""

    model = RefreshToken

    async def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        result = await self.session.execute(
            select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def get_valid_by_hash(
        self, token_hash: str, for_update: bool = False
    ) -> RefreshToken | None:
        """Get a non-revoked, unexpired refresh token by hash.

        Args:
            token_hash: The hashed token to look up
            for_update: Lock the row so concurrent refreshes of the same
                token cannot both succeed
        """
        query = select(RefreshToken).where(
            RefreshToken.token_hash == token_hash,
            RefreshToken.revoked_at == None,  # noqa: E711
            RefreshToken.expires_at > utc_now(),
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_active_for_user(self, user_id: UUID) -> list[RefreshToken]:
        """Active tokens of a user (for denylisting with remaining TTLs)."""
        result = await self.session.execute(
            select(RefreshToken).where(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked_at == None,  # noqa: E711
                RefreshToken.expires_at > utc_now(),
            )
        )
        return list(result.scalars().all())

    def revoke(self, token: RefreshToken) -> RefreshToken:
        token.revoked_at = utc_now()
        self.session.add(token)
        return token

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke all active refresh tokens of a user. Returns the number revoked."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id)  # type: ignore[arg-type]
            .where(RefreshToken.revoked_at == None)  # type: ignore[arg-type]  # noqa: E711
            .values(revoked_at=utc_now())
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def cleanup_expired(self, retention_days: int) -> int:
        """Delete tokens expired, or revoked, more than retention_days ago."""
        cutoff = utc_now() - timedelta(days=retention_days)
        stmt = delete(RefreshToken).where(
            or_(
                RefreshToken.expires_at < cutoff,  # type: ignore[arg-type]
                and_(
                    RefreshToken.revoked_at != None,  # type: ignore[arg-type]  # noqa: E711
                    RefreshToken.revoked_at < cutoff,  # type: ignore[arg-type, operator]
                ),
            )
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0  # type: ignore[attr-defined]
