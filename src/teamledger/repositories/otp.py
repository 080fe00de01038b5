"""Repository for OtpCode entity."""

from datetime import timedelta

from sqlalchemy import delete, or_
from sqlmodel import select, update

from src.teamledger.models import OtpCode, OtpType
from src.teamledger.models.base import utc_now
from src.teamledger.repositories.base import BaseRepository


class OtpRepository(BaseRepository[OtpCode]):
    """Repository for one-time codes."""

    model = OtpCode

    async def get_latest_valid(self, email: str, otp_type: OtpType) -> OtpCode | None:
        """Latest unused, unexpired code for (email, type)."""
        result = await self.session.execute(
            select(OtpCode)
            .where(
                OtpCode.email == email,
                OtpCode.type == otp_type.value,
                OtpCode.used_at == None,  # noqa: E711
                OtpCode.expires_at > utc_now(),
            )
            .order_by(OtpCode.created_at.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        return result.scalars().first()

    async def invalidate_existing(self, email: str, otp_type: OtpType) -> None:
        """Mark every unused code for (email, type) as used."""
        await self.session.execute(
            update(OtpCode)
            .where(OtpCode.email == email)  # type: ignore[arg-type]
            .where(OtpCode.type == otp_type.value)  # type: ignore[arg-type]
            .where(OtpCode.used_at == None)  # type: ignore[arg-type]  # noqa: E711
            .values(used_at=utc_now())
        )

    def mark_used(self, otp: OtpCode) -> OtpCode:
        otp.used_at = utc_now()
        self.session.add(otp)
        return otp

    async def cleanup_expired(self, retention_days: int) -> int:
        """Delete codes expired or used more than retention_days ago."""
        cutoff = utc_now() - timedelta(days=retention_days)
        stmt = delete(OtpCode).where(
            or_(
                OtpCode.expires_at < cutoff,  # type: ignore[arg-type]
                OtpCode.used_at < cutoff,  # type: ignore[arg-type, operator]
            )
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0  # type: ignore[attr-defined]
