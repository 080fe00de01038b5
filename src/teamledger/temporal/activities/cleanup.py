"""OTP, refresh-token and invite maintenance activities."""

from temporalio import activity

from src.teamledger.core.db import get_session


@activity.defn
async def cleanup_refresh_tokens(retention_days: int) -> int:
    """Delete refresh tokens expired or revoked more than retention_days ago.

    Idempotent: a second run finds nothing to delete.
    """
    activity.logger.info(f"Cleaning up refresh tokens older than {retention_days} days")

    async with get_session() as session:
        from src.teamledger.repositories.token import RefreshTokenRepository

        count = await RefreshTokenRepository(session).cleanup_expired(retention_days)

    activity.logger.info(f"Deleted {count} refresh tokens")
    return count


@activity.defn
async def cleanup_otp_codes(retention_days: int) -> int:
    """Delete one-time codes expired or used more than retention_days ago."""
    activity.logger.info(f"Cleaning up one-time codes older than {retention_days} days")

    async with get_session() as session:
        from src.teamledger.repositories.otp import OtpRepository

        count = await OtpRepository(session).cleanup_expired(retention_days)

    activity.logger.info(f"Deleted {count} one-time codes")
    return count


@activity.defn
async def expire_overdue_invites() -> int:
    """Move PENDING invites past their expiry to EXPIRED."""
    async with get_session() as session:
        from src.teamledger.repositories.invite import InviteRepository

        count = await InviteRepository(session).expire_overdue()

    activity.logger.info(f"Expired {count} overdue invites")
    return count
