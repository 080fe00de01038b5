"""One-time codes and opaque tokens."""

import secrets
from hashlib import sha256


def hash_token(token: str) -> str:
    """Hash a token or code using SHA256 for storage."""
    return sha256(token.encode()).hexdigest()


def generate_otp(length: int = 6) -> str:
    """Generate a numeric one-time code of `length` digits."""
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


def generate_secure_token(nbytes: int = 32) -> str:
    """Generate an opaque URL-safe token (invite links)."""
    return secrets.token_urlsafe(nbytes)
