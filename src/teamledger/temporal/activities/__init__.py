"""Temporal activities."""

from src.teamledger.temporal.activities.cleanup import (
    cleanup_otp_codes,
    cleanup_refresh_tokens,
    expire_overdue_invites,
)
from src.teamledger.temporal.activities.email import SendEmailInput, deliver_email

__all__ = [
    "SendEmailInput",
    "cleanup_otp_codes",
    "cleanup_refresh_tokens",
    "deliver_email",
    "expire_overdue_invites",
]
