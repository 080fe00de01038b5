"""Integration tests for AuthService: signup, verification, sessions and passwords."""

import pytest
from sqlalchemy import func, select

from src.teamledger.core.exceptions import BadRequest, Conflict, Unauthenticated
from src.teamledger.core.security import TokenType, hash_token
from src.teamledger.models import (
    InviteStatus,
    Organization,
    OrganizationInvite,
    OrganizationMember,
    RefreshToken,
    Role,
    User,
)
from src.teamledger.models.enums import OtpType
from tests.factories import DEFAULT_TEST_PASSWORD
from tests.helpers import create_invite, create_organization_with_owner, create_user

pytestmark = pytest.mark.integration

PASSWORD = "Abcd1234!"


async def _signup_and_verify(auth_service, notifier, email="a@x.com", name="A"):
    await auth_service.signup(email=email, password=PASSWORD, name=name)
    return await auth_service.verify_email(email, notifier.last_code(email))


class TestSignup:
    async def test_signup_creates_unverified_owner(self, auth_service, db_session, notifier):
        """Signup without an invite creates the user and their own organization."""
        result = await auth_service.signup(email="a@x.com", password=PASSWORD, name="A")

        assert result.user.is_email_verified is False
        assert result.organization_id is not None

        organization = await db_session.get(Organization, result.organization_id)
        assert organization.owner_id == result.user.id
        assert organization.name == "A's Workspace"

        membership = (
            await db_session.execute(
                select(OrganizationMember).where(OrganizationMember.user_id == result.user.id)
            )
        ).scalar_one()
        assert membership.role == Role.OWNER.value
        assert len(notifier.last_code("a@x.com")) == 6

    async def test_signup_with_organization_name(self, auth_service, db_session):
        result = await auth_service.signup(
            email="a@x.com", password=PASSWORD, name="A", organization_name="  Acme  "
        )

        organization = await db_session.get(Organization, result.organization_id)
        assert organization.name == "Acme"
        assert organization.slug.startswith("acme-")

    async def test_email_is_normalized(self, auth_service):
        result = await auth_service.signup(email="  A@X.COM ", password=PASSWORD, name="A")
        assert result.user.email == "a@x.com"

    async def test_duplicate_email_conflicts(self, auth_service):
        await auth_service.signup(email="a@x.com", password=PASSWORD, name="A")

        with pytest.raises(Conflict):
            await auth_service.signup(email="A@x.com", password=PASSWORD, name="Again")

    async def test_password_is_hashed(self, auth_service):
        result = await auth_service.signup(email="a@x.com", password=PASSWORD, name="A")
        assert result.user.hashed_password != PASSWORD
        assert result.user.hashed_password.startswith("$argon2")


class TestVerifyEmail:
    async def test_login_refused_before_verification(self, auth_service):
        await auth_service.signup(email="a@x.com", password=PASSWORD, name="A")

        with pytest.raises(Unauthenticated, match="Email not verified"):
            await auth_service.login("a@x.com", PASSWORD)

    async def test_verify_then_login(self, auth_service, notifier, token_service):
        session = await _signup_and_verify(auth_service, notifier)

        assert session.user.is_email_verified is True
        assert session.user.email_verified_at is not None
        assert token_service.verify(session.tokens.access_token, TokenType.ACCESS) is not None

        login = await auth_service.login("a@x.com", PASSWORD)
        assert login.user.id == session.user.id
        assert [(org.name, role) for org, role in login.organizations] == [
            ("A's Workspace", Role.OWNER.value)
        ]

    async def test_wrong_code_rejected(self, auth_service):
        await auth_service.signup(email="a@x.com", password=PASSWORD, name="A")

        with pytest.raises(BadRequest):
            await auth_service.verify_email("a@x.com", "000000x")

    async def test_code_is_single_use(self, auth_service, notifier):
        await auth_service.signup(email="a@x.com", password=PASSWORD, name="A")
        code = notifier.last_code("a@x.com")
        await auth_service.verify_email("a@x.com", code)

        with pytest.raises(BadRequest):
            await auth_service.verify_email("a@x.com", code)

    async def test_resend_replaces_previous_code(self, auth_service, notifier):
        await auth_service.signup(email="a@x.com", password=PASSWORD, name="A")
        first = notifier.last_code("a@x.com")

        await auth_service.resend_otp("a@x.com")
        second = notifier.last_code("a@x.com")

        if first != second:
            with pytest.raises(BadRequest):
                await auth_service.verify_email("a@x.com", first)
        session = await auth_service.verify_email("a@x.com", second)
        assert session.user.is_email_verified is True

    async def test_resend_for_unknown_email_is_silent(self, auth_service, notifier):
        await auth_service.resend_otp("ghost@x.com")
        assert notifier.otps == []


class TestLogin:
    async def test_unknown_email_and_wrong_password_look_alike(self, auth_service, db_session):
        await create_user(db_session, email="known@x.com")

        with pytest.raises(Unauthenticated) as unknown:
            await auth_service.login("ghost@x.com", DEFAULT_TEST_PASSWORD)
        with pytest.raises(Unauthenticated) as wrong:
            await auth_service.login("known@x.com", "Wrong1234!")

        assert unknown.value.message == wrong.value.message

    async def test_login_is_case_insensitive(self, auth_service, db_session):
        user = await create_user(db_session, email="known@x.com")

        result = await auth_service.login("KNOWN@x.com", DEFAULT_TEST_PASSWORD)

        assert result.user.id == user.id


class TestRefresh:
    async def test_rotation_revokes_presented_token(self, auth_service, notifier):
        session = await _signup_and_verify(auth_service, notifier)
        old_refresh = session.tokens.refresh_token

        new_pair = await auth_service.refresh_tokens(old_refresh)

        assert new_pair.refresh_token != old_refresh
        with pytest.raises(Unauthenticated):
            await auth_service.refresh_tokens(old_refresh)
        # The rotated token itself still works
        await auth_service.refresh_tokens(new_pair.refresh_token)

    async def test_access_token_cannot_refresh(self, auth_service, notifier):
        session = await _signup_and_verify(auth_service, notifier)

        with pytest.raises(Unauthenticated):
            await auth_service.refresh_tokens(session.tokens.access_token)

    async def test_garbage_token(self, auth_service):
        with pytest.raises(Unauthenticated):
            await auth_service.refresh_tokens("not-a-token")

    async def test_rotation_populates_denylist(self, auth_service, notifier, mock_redis):
        session = await _signup_and_verify(auth_service, notifier)
        old_hash = hash_token(session.tokens.refresh_token)

        await auth_service.refresh_tokens(session.tokens.refresh_token)

        assert await mock_redis.get(f"token_denylist:{old_hash}") == "1"

    async def test_denylisted_token_rejected_before_database(
        self, auth_service, notifier, mock_redis
    ):
        session = await _signup_and_verify(auth_service, notifier)
        token_hash = hash_token(session.tokens.refresh_token)
        await mock_redis.setex(f"token_denylist:{token_hash}", 60, "1")

        with pytest.raises(Unauthenticated):
            await auth_service.refresh_tokens(session.tokens.refresh_token)

    async def test_works_without_redis(self, auth_service, notifier, mock_redis_unavailable):
        session = await _signup_and_verify(auth_service, notifier)

        new_pair = await auth_service.refresh_tokens(session.tokens.refresh_token)

        assert new_pair.access_token


class TestLogout:
    async def test_logout_revokes_token(self, auth_service, notifier):
        session = await _signup_and_verify(auth_service, notifier)

        await auth_service.logout(session.tokens.refresh_token)

        with pytest.raises(Unauthenticated):
            await auth_service.refresh_tokens(session.tokens.refresh_token)

    async def test_logout_unknown_token_is_silent(self, auth_service):
        await auth_service.logout("never-issued")

    async def test_logout_all(self, auth_service, notifier, db_session):
        session = await _signup_and_verify(auth_service, notifier)
        await auth_service.login("a@x.com", PASSWORD)

        revoked = await auth_service.logout_all(session.user.id)

        assert revoked == 2
        active = await db_session.scalar(
            select(func.count())
            .select_from(RefreshToken)
            .where(
                RefreshToken.user_id == session.user.id,
                RefreshToken.revoked_at == None,  # noqa: E711
            )
        )
        assert active == 0


class TestPasswordReset:
    async def test_unknown_email_is_silent(self, auth_service, notifier):
        await auth_service.forgot_password("ghost@x.com")
        assert notifier.otps == []

    async def test_reset_revokes_sessions(self, auth_service, notifier):
        session = await _signup_and_verify(auth_service, notifier)

        await auth_service.forgot_password("a@x.com")
        code = notifier.last_code("a@x.com", OtpType.PASSWORD_RESET)
        await auth_service.reset_password("a@x.com", code, "N3w-Passw0rd!")

        with pytest.raises(Unauthenticated):
            await auth_service.refresh_tokens(session.tokens.refresh_token)
        with pytest.raises(Unauthenticated):
            await auth_service.login("a@x.com", PASSWORD)
        await auth_service.login("a@x.com", "N3w-Passw0rd!")

    async def test_verification_code_cannot_reset(self, auth_service, notifier):
        await auth_service.signup(email="a@x.com", password=PASSWORD, name="A")
        code = notifier.last_code("a@x.com")

        with pytest.raises(BadRequest):
            await auth_service.reset_password("a@x.com", code, "N3w-Passw0rd!")


class TestChangePassword:
    async def test_wrong_current_password(self, auth_service, notifier):
        session = await _signup_and_verify(auth_service, notifier)

        with pytest.raises(Unauthenticated):
            await auth_service.change_password(session.user.id, "Wrong1234!", "N3w-Passw0rd!")

    async def test_change_revokes_sessions(self, auth_service, notifier):
        session = await _signup_and_verify(auth_service, notifier)

        await auth_service.change_password(session.user.id, PASSWORD, "N3w-Passw0rd!")

        with pytest.raises(Unauthenticated):
            await auth_service.refresh_tokens(session.tokens.refresh_token)
        await auth_service.login("a@x.com", "N3w-Passw0rd!")


class TestInviteSignup:
    async def test_invited_signup_joins_inviting_organization_only(
        self, auth_service, invite_service, db_session, notifier
    ):
        """Signing up with an invite creates no organization; accepting grants MEMBER."""
        organization, owner = await create_organization_with_owner(db_session)
        await invite_service.invite_user(organization.id, "b@x.com", Role.MEMBER, owner.id)
        token = notifier.last_invite_token("b@x.com")

        result = await auth_service.signup(
            email="b@x.com", password=PASSWORD, name="B", invite_token=token
        )
        assert result.organization_id is None

        session = await auth_service.verify_email("b@x.com", notifier.last_code("b@x.com"))
        joined = await invite_service.accept_invite(token, session.user.id)

        assert joined == organization.id
        owned = await db_session.scalar(
            select(func.count())
            .select_from(Organization)
            .where(Organization.owner_id == session.user.id)
        )
        assert owned == 0
        memberships = (
            await db_session.execute(
                select(OrganizationMember.organization_id, OrganizationMember.role).where(
                    OrganizationMember.user_id == session.user.id
                )
            )
        ).all()
        assert memberships == [(organization.id, Role.MEMBER.value)]

    async def test_invite_for_other_email_rejected(self, auth_service, db_session):
        organization, owner = await create_organization_with_owner(db_session)
        _, token = await create_invite(db_session, organization, owner, "b@x.com")

        with pytest.raises(BadRequest):
            await auth_service.signup(
                email="c@x.com", password=PASSWORD, name="C", invite_token=token
            )
        assert await db_session.scalar(select(User).where(User.email == "c@x.com")) is None

    async def test_expired_invite_rejected(self, auth_service, db_session):
        organization, owner = await create_organization_with_owner(db_session)
        _, token = await create_invite(db_session, organization, owner, "b@x.com", expired=True)

        with pytest.raises(BadRequest):
            await auth_service.signup(
                email="b@x.com", password=PASSWORD, name="B", invite_token=token
            )

    async def test_signup_leaves_invite_pending(self, auth_service, db_session):
        organization, owner = await create_organization_with_owner(db_session)
        invite, token = await create_invite(db_session, organization, owner, "b@x.com")

        await auth_service.signup(email="b@x.com", password=PASSWORD, name="B", invite_token=token)

        status = await db_session.scalar(
            select(OrganizationInvite.status).where(OrganizationInvite.id == invite.id)
        )
        assert status == InviteStatus.PENDING.value
