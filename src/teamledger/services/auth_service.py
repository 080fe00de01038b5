"""Session lifecycle - signup, verification, login, refresh and password changes."""

import hmac
from dataclasses import dataclass, field
from datetime import timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.teamledger.core.cache import deny_token, deny_tokens, is_token_denied
from src.teamledger.core.config import get_settings
from src.teamledger.core.exceptions import BadRequest, Conflict, Unauthenticated
from src.teamledger.core.logging import get_logger
from src.teamledger.core.security import (
    DUMMY_PASSWORD_HASH,
    TokenPair,
    TokenService,
    TokenType,
    generate_otp,
    hash_password,
    hash_token,
    verify_password,
)
from src.teamledger.core.validators import generate_slug, normalize_email
from src.teamledger.models import (
    InviteStatus,
    Organization,
    OrganizationInvite,
    OtpCode,
    OtpType,
    RefreshToken,
    Role,
    User,
)
from src.teamledger.models.base import utc_now
from src.teamledger.repositories import (
    InviteRepository,
    MembershipRepository,
    OrganizationRepository,
    OtpRepository,
    RefreshTokenRepository,
    UserRepository,
)
from src.teamledger.services.notifications import NotificationDispatcher

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_CODE = "Invalid or expired code"


@dataclass(frozen=True)
class SignupResult:
    """New account. No tokens: the email must be verified first.

    organization_id is None when the account was created from an invite.
    """

    user: User
    organization_id: UUID | None


@dataclass(frozen=True)
class SessionResult:
    user: User
    tokens: TokenPair


@dataclass(frozen=True)
class LoginResult:
    user: User
    tokens: TokenPair
    organizations: list[tuple[Organization, str]] = field(default_factory=list)


class AuthService:
    """Authentication and account lifecycle.

    Refresh tokens are recorded by hash. Rotation, logout and password
    changes revoke them in the database (authoritative) and then add them to
    the Redis denylist for fast rejection.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        otp_repo: OtpRepository,
        token_repo: RefreshTokenRepository,
        organization_repo: OrganizationRepository,
        membership_repo: MembershipRepository,
        invite_repo: InviteRepository,
        session: AsyncSession,
        token_service: TokenService,
        notifier: NotificationDispatcher,
    ):
        self.user_repo = user_repo
        self.otp_repo = otp_repo
        self.token_repo = token_repo
        self.organization_repo = organization_repo
        self.membership_repo = membership_repo
        self.invite_repo = invite_repo
        self.session = session
        self.token_service = token_service
        self.notifier = notifier

    # --- Signup & verification ---

    async def signup(
        self,
        email: str,
        password: str,
        name: str,
        organization_name: str | None = None,
        invite_token: str | None = None,
    ) -> SignupResult:
        """Create an unverified account and send a verification code.

        Without an invite the user gets a new organization as OWNER. With an
        invite no organization is created; the invite stays PENDING and grants
        membership once the verified user accepts it.

        Raises:
            BadRequest: Invite token invalid, not pending, expired or for another email
            Conflict: Email already registered
        """
        email = normalize_email(email)
        if invite_token:
            await self._validate_signup_invite(invite_token, email)

        if await self.user_repo.exists_by_email(email):
            raise Conflict("Email already registered")

        organization_id: UUID | None = None
        try:
            user = User(email=email, hashed_password=hash_password(password), name=name.strip())
            self.user_repo.add(user)
            await self.session.flush()

            if not invite_token:
                org_name = (organization_name or "").strip() or f"{user.name}'s Workspace"
                organization = self.organization_repo.create(
                    name=org_name, slug=generate_slug(org_name), owner_id=user.id
                )
                await self.session.flush()
                self.membership_repo.create_membership(user.id, organization.id, Role.OWNER)
                organization_id = organization.id

            code = await self._create_otp(email, OtpType.EMAIL_VERIFICATION)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.info("Signup rejected by unique constraint", error=str(e.orig))
            raise Conflict("Email already registered") from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "User signed up",
            user_id=str(user.id),
            organization_id=str(organization_id) if organization_id else None,
            via_invite=bool(invite_token),
        )

        await self.notifier.send_otp(email, code, OtpType.EMAIL_VERIFICATION)
        return SignupResult(user=user, organization_id=organization_id)

    async def _validate_signup_invite(self, invite_token: str, email: str) -> OrganizationInvite:
        invite = await self.invite_repo.get_by_hash(hash_token(invite_token))
        if invite is None or invite.email != email:
            raise BadRequest("Invalid invite token for this email address")
        if invite.status != InviteStatus.PENDING.value:
            raise BadRequest("Invite has already been used or expired")
        if invite.is_expired:
            raise BadRequest("Invite has expired")
        return invite

    async def verify_email(self, email: str, code: str) -> SessionResult:
        """Check the verification code, mark the email verified and start a session.

        Raises:
            BadRequest: Code absent, expired, already used or wrong
        """
        email = normalize_email(email)
        otp = await self._consume_otp(email, code, OtpType.EMAIL_VERIFICATION)
        user = await self.user_repo.get_by_email(email)
        if otp is None or user is None:
            raise BadRequest(INVALID_CODE)

        try:
            self.otp_repo.mark_used(otp)
            self.user_repo.mark_email_verified(user)
            tokens = self._issue_session(user)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Email verified", user_id=str(user.id))
        return SessionResult(user=user, tokens=tokens)

    async def resend_otp(self, email: str, otp_type: OtpType = OtpType.EMAIL_VERIFICATION) -> None:
        """Issue a fresh code. Silent for unknown or already-verified accounts."""
        email = normalize_email(email)
        user = await self.user_repo.get_by_email(email)
        if user is None:
            logger.info("Code requested for unknown email", otp_type=otp_type.value)
            return
        if otp_type is OtpType.EMAIL_VERIFICATION and user.is_email_verified:
            logger.info("Verification code requested for verified user", user_id=str(user.id))
            return

        try:
            code = await self._create_otp(email, otp_type)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.notifier.send_otp(email, code, otp_type)

    async def forgot_password(self, email: str) -> None:
        await self.resend_otp(email, OtpType.PASSWORD_RESET)

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        """Replace the password using a reset code and end every session.

        Raises:
            BadRequest: Code absent, expired, already used or wrong
        """
        email = normalize_email(email)
        otp = await self._consume_otp(email, code, OtpType.PASSWORD_RESET)
        user = await self.user_repo.get_by_email(email)
        if otp is None or user is None:
            raise BadRequest(INVALID_CODE)

        try:
            self.otp_repo.mark_used(otp)
            self.user_repo.set_password_hash(user, hash_password(new_password))
            revoked = await self._revoke_all_in_session(user.id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._deny_after_commit(revoked)
        logger.info("Password reset", user_id=str(user.id), sessions_revoked=len(revoked))

    # --- Sessions ---

    async def login(self, email: str, password: str) -> LoginResult:
        """Authenticate with email and password.

        Unknown email and wrong password produce the same error; the cause
        is only logged.

        Raises:
            Unauthenticated: Bad credentials, or the email is not verified yet
        """
        email = normalize_email(email)
        user = await self.user_repo.get_by_email(email)

        # Always run the slow hash so unknown emails take as long as known ones
        password_hash = user.hashed_password if user else DUMMY_PASSWORD_HASH
        password_valid = verify_password(password, password_hash)

        if user is None:
            logger.info("Login failed", reason="unknown_email")
            raise Unauthenticated(INVALID_CREDENTIALS)
        if not password_valid:
            logger.info("Login failed", reason="bad_password", user_id=str(user.id))
            raise Unauthenticated(INVALID_CREDENTIALS)
        if not user.is_email_verified:
            logger.info("Login failed", reason="email_not_verified", user_id=str(user.id))
            raise Unauthenticated("Email not verified")

        try:
            tokens = self._issue_session(user)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        organizations = await self.organization_repo.list_for_user(user.id)
        logger.info("Login succeeded", user_id=str(user.id))
        return LoginResult(user=user, tokens=tokens, organizations=organizations)

    async def refresh_tokens(self, refresh_token: str) -> TokenPair:
        """Rotate a refresh token: revoke it and issue a new pair.

        Raises:
            Unauthenticated: Token invalid, expired, revoked or its user is gone
        """
        payload = self.token_service.verify(refresh_token, TokenType.REFRESH)
        if payload is None:
            raise Unauthenticated("Invalid or expired refresh token")

        token_hash = hash_token(refresh_token)
        if await self._is_denied(token_hash):
            logger.warning("Revoked refresh token presented", user_id=str(payload.user_id))
            raise Unauthenticated("Invalid or expired refresh token")

        db_token = await self.token_repo.get_valid_by_hash(token_hash, for_update=True)
        if db_token is None or not hmac.compare_digest(token_hash, db_token.token_hash):
            raise Unauthenticated("Invalid or expired refresh token")

        user = await self.user_repo.get_by_id(db_token.user_id)
        if user is None:
            raise Unauthenticated("Invalid or expired refresh token")

        try:
            self.token_repo.revoke(db_token)
            tokens = self._issue_session(user)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._deny_after_commit([(token_hash, self._remaining_ttl(db_token))])
        return tokens

    async def logout(self, refresh_token: str) -> None:
        """Revoke one refresh token. Unknown tokens are ignored."""
        token_hash = hash_token(refresh_token)
        db_token = await self.token_repo.get_by_hash(token_hash)
        if db_token is None or db_token.is_revoked:
            return

        try:
            self.token_repo.revoke(db_token)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._deny_after_commit([(token_hash, self._remaining_ttl(db_token))])

    async def logout_all(self, user_id: UUID) -> int:
        """Revoke every refresh token of the user. Returns the number revoked."""
        try:
            revoked = await self._revoke_all_in_session(user_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._deny_after_commit(revoked)
        logger.info("All sessions revoked", user_id=str(user_id), count=len(revoked))
        return len(revoked)

    async def change_password(self, user_id: UUID, current_password: str, new_password: str) -> None:
        """Replace the password of a signed-in user and end every session.

        Raises:
            Unauthenticated: User gone or current password wrong
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise Unauthenticated("User not found")
        if not verify_password(current_password, user.hashed_password):
            logger.info("Password change rejected", reason="bad_password", user_id=str(user_id))
            raise Unauthenticated("Current password is incorrect")

        try:
            self.user_repo.set_password_hash(user, hash_password(new_password))
            revoked = await self._revoke_all_in_session(user.id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._deny_after_commit(revoked)
        logger.info("Password changed", user_id=str(user.id), sessions_revoked=len(revoked))

    async def me(self, user_id: UUID) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise Unauthenticated("User not found")
        return user

    # --- Helpers ---

    def _issue_session(self, user: User) -> TokenPair:
        """Sign a token pair and record the refresh token (caller commits)."""
        tokens = self.token_service.issue_token_pair(user.id, user.email)
        self.token_repo.add(
            RefreshToken(
                user_id=user.id,
                token_hash=hash_token(tokens.refresh_token),
                expires_at=utc_now() + timedelta(seconds=self.token_service.refresh_lifetime),
            )
        )
        return tokens

    async def _create_otp(self, email: str, otp_type: OtpType) -> str:
        """Replace any unused code for (email, type) with a new one (caller commits)."""
        settings = get_settings()
        await self.otp_repo.invalidate_existing(email, otp_type)
        code = generate_otp(settings.otp_length)
        self.otp_repo.add(
            OtpCode(
                email=email,
                code_hash=hash_token(code),
                type=otp_type.value,
                expires_at=utc_now() + timedelta(minutes=settings.otp_expiry_minutes),
            )
        )
        return code

    async def _consume_otp(self, email: str, code: str, otp_type: OtpType) -> OtpCode | None:
        otp = await self.otp_repo.get_latest_valid(email, otp_type)
        if otp is None:
            return None
        if not hmac.compare_digest(hash_token(code.strip()), otp.code_hash):
            return None
        return otp

    async def _revoke_all_in_session(self, user_id: UUID) -> list[tuple[str, int]]:
        active = await self.token_repo.get_active_for_user(user_id)
        await self.token_repo.revoke_all_for_user(user_id)
        return [(token.token_hash, self._remaining_ttl(token)) for token in active]

    @staticmethod
    def _remaining_ttl(token: RefreshToken) -> int:
        return max(int((token.expires_at - utc_now()).total_seconds()), 0)

    async def _is_denied(self, token_hash: str) -> bool:
        try:
            return await is_token_denied(token_hash) is True
        except Exception as e:
            # Denylist is an accelerator; the refresh_tokens table decides
            logger.warning("Token denylist lookup failed", error=str(e))
            return False

    async def _deny_after_commit(self, tokens: list[tuple[str, int]]) -> None:
        if not tokens:
            return
        try:
            if len(tokens) == 1:
                await deny_token(*tokens[0])
            else:
                await deny_tokens(tokens)
        except Exception as e:
            # Database already committed and authoritative
            logger.warning("Failed to denylist tokens in Redis", error=str(e), count=len(tokens))
