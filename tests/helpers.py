"""Test helper functions for common data creation patterns."""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.teamledger.core.security import generate_secure_token, hash_token
from src.teamledger.models import Organization, OrganizationInvite, OrganizationMember, User
from src.teamledger.models.enums import OtpType, Role
from tests.factories import InviteFactory, MembershipFactory, OrganizationFactory, UserFactory


@dataclass
class SentOtp:
    email: str
    code: str
    otp_type: OtpType


@dataclass
class SentInvite:
    email: str
    token: str
    organization_name: str
    inviter_name: str
    role: str
    is_registered: bool


@dataclass
class RecordingNotifier:
    """NotificationDispatcher that keeps every message in memory."""

    otps: list[SentOtp] = field(default_factory=list)
    invites: list[SentInvite] = field(default_factory=list)

    async def send_otp(self, email: str, code: str, otp_type: OtpType) -> None:
        self.otps.append(SentOtp(email=email, code=code, otp_type=otp_type))

    async def send_invite(
        self,
        email: str,
        token: str,
        organization_name: str,
        inviter_name: str,
        role: str,
        is_registered: bool,
    ) -> None:
        self.invites.append(
            SentInvite(
                email=email,
                token=token,
                organization_name=organization_name,
                inviter_name=inviter_name,
                role=role,
                is_registered=is_registered,
            )
        )

    def last_code(self, email: str, otp_type: OtpType = OtpType.EMAIL_VERIFICATION) -> str:
        for sent in reversed(self.otps):
            if sent.email == email and sent.otp_type is otp_type:
                return sent.code
        raise AssertionError(f"No {otp_type.value} code sent to {email}")

    def last_invite_token(self, email: str) -> str:
        for sent in reversed(self.invites):
            if sent.email == email:
                return sent.token
        raise AssertionError(f"No invite sent to {email}")


@dataclass
class RecordingBroadcaster:
    """EventBroadcaster stand-in that records (channel, event, data)."""

    events: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    async def publish_to_organization(
        self, organization_id: UUID, event: str, data: dict[str, Any]
    ) -> bool:
        self.events.append((f"org:{organization_id}", event, data))
        return True

    async def publish_to_user(self, user_id: UUID, event: str, data: dict[str, Any]) -> bool:
        self.events.append((f"user:{user_id}", event, data))
        return True

    def names(self) -> list[str]:
        return [event for _, event, _ in self.events]


async def create_user(session: AsyncSession, **user_kwargs) -> User:
    """Create and commit a verified user (see UserFactory for defaults)."""
    user = UserFactory.build(**user_kwargs)
    session.add(user)
    await session.commit()
    return user


async def create_organization_with_owner(
    session: AsyncSession,
    **user_kwargs,
) -> tuple[Organization, User]:
    """Create an organization together with its OWNER.

    Returns:
        Tuple of (organization, owner)
    """
    owner = UserFactory.build(**user_kwargs)
    session.add(owner)
    await session.flush()

    organization = OrganizationFactory.build(owner_id=owner.id)
    session.add(organization)
    await session.flush()

    session.add(MembershipFactory.owner(user_id=owner.id, organization_id=organization.id))
    await session.commit()
    return organization, owner


async def create_user_with_membership(
    session: AsyncSession,
    organization: Organization,
    role: Role = Role.MEMBER,
    **user_kwargs,
) -> tuple[User, OrganizationMember]:
    """Create a user and their membership in an organization.

    Args:
        session: Database session
        organization: Organization to create membership in
        role: Role for the membership (default: MEMBER)
        **user_kwargs: Additional args passed to UserFactory

    Returns:
        Tuple of (user, membership)
    """
    user = UserFactory.build(**user_kwargs)
    session.add(user)
    await session.flush()

    membership = MembershipFactory.build(
        user_id=user.id,
        organization_id=organization.id,
        role=role.value,
    )
    session.add(membership)
    await session.commit()
    return user, membership


async def create_invite(
    session: AsyncSession,
    organization: Organization,
    inviter: User,
    email: str,
    role: Role = Role.MEMBER,
    expired: bool = False,
) -> tuple[OrganizationInvite, str]:
    """Create a pending invite directly in the database.

    Returns:
        Tuple of (invite, plaintext token)
    """
    token = generate_secure_token()
    build = InviteFactory.expired if expired else InviteFactory.build
    invite = build(
        organization_id=organization.id,
        invited_by_id=inviter.id,
        email=email,
        role=role.value,
        token_hash=hash_token(token),
    )
    session.add(invite)
    await session.commit()
    return invite, token


def auth_headers(access_token: str, organization_id: UUID | None = None) -> dict[str, str]:
    """Build request headers for an authenticated (and optionally org-scoped) call."""
    headers = {"Authorization": f"Bearer {access_token}"}
    if organization_id is not None:
        headers["X-Organization-ID"] = str(organization_id)
    return headers
