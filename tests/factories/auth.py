"""Authentication-related factories for test data generation."""

import secrets
from datetime import timedelta

from polyfactory import Use

from src.teamledger.core.security import hash_token
from src.teamledger.models import OrganizationInvite, OtpCode, RefreshToken
from src.teamledger.models.enums import InviteStatus, OtpType, Role
from tests.factories.base import BaseFactory, generate_uuid, utc_now


def generate_token_hash() -> str:
    """Generate a random token hash."""
    return hash_token(secrets.token_urlsafe(32))


class OtpCodeFactory(BaseFactory):
    """Factory for generating OtpCode test data."""

    __model__ = OtpCode

    id = Use(generate_uuid)
    email = Use(lambda: f"user_{generate_uuid().hex[-8:]}@example.com")
    code_hash = Use(lambda: hash_token("123456"))
    type = OtpType.EMAIL_VERIFICATION.value
    expires_at = Use(lambda: utc_now() + timedelta(minutes=10))
    created_at = Use(utc_now)
    used_at = None

    @classmethod
    def expired(cls, **kwargs):
        """Create a code past its expiry."""
        return cls.build(expires_at=utc_now() - timedelta(minutes=1), **kwargs)


class RefreshTokenFactory(BaseFactory):
    """Factory for generating RefreshToken test data."""

    __model__ = RefreshToken

    id = Use(generate_uuid)
    user_id = None  # Required FK - must be set explicitly
    token_hash = Use(generate_token_hash)
    expires_at = Use(lambda: utc_now() + timedelta(days=7))
    created_at = Use(utc_now)
    revoked_at = None

    @classmethod
    def revoked_token(cls, **kwargs):
        """Create a revoked token."""
        return cls.build(revoked_at=utc_now(), **kwargs)

    @classmethod
    def expired(cls, **kwargs):
        """Create an expired token."""
        return cls.build(expires_at=utc_now() - timedelta(days=1), **kwargs)


class InviteFactory(BaseFactory):
    """Factory for generating OrganizationInvite test data.

    Pass token_hash=hash_token(token) when the test needs the plaintext.
    """

    __model__ = OrganizationInvite

    id = Use(generate_uuid)
    # FK fields - must be set explicitly
    organization_id = None
    invited_by_id = None
    email = Use(lambda: f"invitee_{generate_uuid().hex[-8:]}@example.com")
    role = Role.MEMBER.value
    token_hash = Use(generate_token_hash)
    status = InviteStatus.PENDING.value
    expires_at = Use(lambda: utc_now() + timedelta(days=7))
    created_at = Use(utc_now)
    responded_at = None

    @classmethod
    def expired(cls, **kwargs):
        """Create a pending invite past its expiry."""
        return cls.build(expires_at=utc_now() - timedelta(days=1), **kwargs)
