"""Security utilities - tokens, passwords and one-time codes.

Re-exports all security-related functions for convenience.
"""

from src.teamledger.core.security.otp import generate_otp, generate_secure_token, hash_token
from src.teamledger.core.security.passwords import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    verify_password,
)
from src.teamledger.core.security.tokens import (
    TokenPair,
    TokenPayload,
    TokenService,
    TokenType,
    extract_bearer_token,
    parse_expiry,
)

__all__ = [
    # Tokens
    "TokenPair",
    "TokenPayload",
    "TokenService",
    "TokenType",
    "extract_bearer_token",
    "parse_expiry",
    # Passwords
    "DUMMY_PASSWORD_HASH",
    "hash_password",
    "verify_password",
    # One-time codes
    "generate_otp",
    "generate_secure_token",
    "hash_token",
]
