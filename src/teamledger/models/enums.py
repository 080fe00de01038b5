"""Shared enums for models."""

from enum import Enum

from src.teamledger.core.permissions import Role

__all__ = ["InviteStatus", "OtpType", "Role"]


class InviteStatus(str, Enum):
    """Organization invite status. Only PENDING can transition."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class OtpType(str, Enum):
    """Purpose of a one-time code."""

    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"
