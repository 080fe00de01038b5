"""Integration tests for the maintenance cleanup queries."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from src.teamledger.models import InviteStatus, OrganizationInvite, OtpCode, RefreshToken
from src.teamledger.models.base import utc_now
from src.teamledger.repositories.invite import InviteRepository
from src.teamledger.repositories.otp import OtpRepository
from src.teamledger.repositories.token import RefreshTokenRepository
from tests.factories import OtpCodeFactory, RefreshTokenFactory
from tests.helpers import create_invite, create_organization_with_owner, create_user

pytestmark = pytest.mark.integration


async def _count(db_session, model) -> int:
    return await db_session.scalar(select(func.count()).select_from(model))


async def test_refresh_token_cleanup(db_session):
    user = await create_user(db_session)
    long_ago = utc_now() - timedelta(days=60)
    db_session.add_all(
        [
            RefreshTokenFactory.build(user_id=user.id),
            RefreshTokenFactory.build(user_id=user.id, expires_at=long_ago),
            RefreshTokenFactory.build(user_id=user.id, revoked_at=long_ago),
            RefreshTokenFactory.revoked_token(user_id=user.id),
        ]
    )
    await db_session.commit()

    deleted = await RefreshTokenRepository(db_session).cleanup_expired(30)

    assert deleted == 2
    assert await _count(db_session, RefreshToken) == 2
    assert await RefreshTokenRepository(db_session).cleanup_expired(30) == 0


async def test_otp_cleanup(db_session):
    long_ago = utc_now() - timedelta(days=60)
    db_session.add_all(
        [
            OtpCodeFactory.build(),
            OtpCodeFactory.expired(),
            OtpCodeFactory.build(expires_at=long_ago),
            OtpCodeFactory.build(used_at=long_ago),
        ]
    )
    await db_session.commit()

    deleted = await OtpRepository(db_session).cleanup_expired(30)

    assert deleted == 2
    assert await _count(db_session, OtpCode) == 2


async def test_expire_overdue_invites(db_session):
    organization, owner = await create_organization_with_owner(db_session)
    current, _ = await create_invite(db_session, organization, owner, "x@example.com")
    overdue, _ = await create_invite(
        db_session, organization, owner, "y@example.com", expired=True
    )
    current_id, overdue_id = current.id, overdue.id

    updated = await InviteRepository(db_session).expire_overdue()

    assert updated == 1
    statuses = dict(
        (
            await db_session.execute(
                select(OrganizationInvite.id, OrganizationInvite.status)
            )
        ).all()
    )
    assert statuses[current_id] == InviteStatus.PENDING.value
    assert statuses[overdue_id] == InviteStatus.EXPIRED.value
