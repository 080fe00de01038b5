"""JWT access/refresh token signing and verification.

The service is constructed explicitly (one per process, built from settings)
so tests can swap in a deterministic clock.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from jose import JWTError, jwt

from src.teamledger.core.config import Settings

DEFAULT_EXPIRY_SECONDS = 3600

_EXPIRY_PATTERN = re.compile(r"^(\d+)([smhd])$")
_EXPIRY_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPayload:
    """Verified claims of a token."""

    user_id: UUID
    email: str
    type: TokenType
    issued_at: datetime
    expires_at: datetime
    jti: str | None = None


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def parse_expiry(value: str) -> int:
    """Convert "<n><s|m|h|d>" to seconds. Anything else means one hour."""
    match = _EXPIRY_PATTERN.match(value.strip()) if value else None
    if match is None:
        return DEFAULT_EXPIRY_SECONDS
    amount, unit = match.groups()
    return int(amount) * _EXPIRY_UNITS[unit]


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an `Authorization: Bearer <token>` header value."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[7:].strip()
    return token or None


def _utc_clock() -> datetime:
    return datetime.now(UTC)


class TokenService:
    """Issues and verifies signed access and refresh tokens.

    Access and refresh tokens are signed with different secrets, so a token
    of one type never verifies as the other even before the type claim is
    compared.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expiry: str = "15m",
        refresh_expiry: str = "7d",
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utc_clock,
    ):
        self._secrets = {
            TokenType.ACCESS: access_secret,
            TokenType.REFRESH: refresh_secret,
        }
        self._lifetimes = {
            TokenType.ACCESS: parse_expiry(access_expiry),
            TokenType.REFRESH: parse_expiry(refresh_expiry),
        }
        self.algorithm = algorithm
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            access_secret=settings.jwt_access_secret,
            refresh_secret=settings.jwt_refresh_secret,
            access_expiry=settings.jwt_access_expiry,
            refresh_expiry=settings.jwt_refresh_expiry,
            algorithm=settings.jwt_algorithm,
        )

    @property
    def access_lifetime(self) -> int:
        return self._lifetimes[TokenType.ACCESS]

    @property
    def refresh_lifetime(self) -> int:
        return self._lifetimes[TokenType.REFRESH]

    def _issue(self, token_type: TokenType, user_id: UUID, email: str) -> str:
        now = self.clock()
        expire = now + timedelta(seconds=self._lifetimes[token_type])
        claims: dict[str, Any] = {
            "sub": str(user_id),
            "email": email,
            "type": token_type.value,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        if token_type is TokenType.REFRESH:
            # Unique per token so two refreshes in the same second never collide
            claims["jti"] = uuid4().hex
        return jwt.encode(  # type: ignore[no-any-return]
            claims,
            self._secrets[token_type],
            algorithm=self.algorithm,
        )

    def issue_access_token(self, user_id: UUID, email: str) -> str:
        return self._issue(TokenType.ACCESS, user_id, email)

    def issue_refresh_token(self, user_id: UUID, email: str) -> str:
        return self._issue(TokenType.REFRESH, user_id, email)

    def issue_token_pair(self, user_id: UUID, email: str) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user_id, email),
            refresh_token=self.issue_refresh_token(user_id, email),
        )

    def verify(self, token: str, expected_type: TokenType) -> TokenPayload | None:
        """Verify signature, expiry and type. Returns None on any failure."""
        if not token:
            return None
        try:
            claims = jwt.decode(
                token,
                self._secrets[expected_type],
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            return None

        if claims.get("type") != expected_type.value:
            return None

        try:
            user_id = UUID(str(claims["sub"]))
            issued_at = datetime.fromtimestamp(int(claims["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(claims["exp"]), UTC)
        except (KeyError, TypeError, ValueError):
            return None

        # Expiry is checked against the injected clock, not the wall clock
        if self.clock() >= expires_at:
            return None

        return TokenPayload(
            user_id=user_id,
            email=str(claims.get("email", "")),
            type=expected_type,
            issued_at=issued_at,
            expires_at=expires_at,
            jti=claims.get("jti"),
        )
