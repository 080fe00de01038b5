"""Notification utilities - email."""

from src.teamledger.core.notifications.email import (
    EmailMessage,
    render_invite_email,
    render_otp_email,
    send_email,
)

__all__ = [
    "EmailMessage",
    "render_invite_email",
    "render_otp_email",
    "send_email",
]
