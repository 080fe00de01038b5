"""Refresh-token denylist with Redis backend and graceful fallback.

Fast revocation checks for rotated or logged-out refresh tokens. When Redis
is unavailable, callers fall back to the refresh_tokens table.
"""

from src.teamledger.core.redis import get_redis

PREFIX_TOKEN_DENYLIST = "token_denylist"


async def deny_token(token_hash: str, ttl: int) -> bool:
    """Add a revoked token to the denylist.

    Args:
        token_hash: SHA256 hash of the token
        ttl: Time-to-live in seconds (remaining token lifetime)

    Returns:
        True if stored in Redis, False if Redis unavailable
    """
    redis = await get_redis()
    if not redis or ttl <= 0:
        return False
    await redis.setex(f"{PREFIX_TOKEN_DENYLIST}:{token_hash}", ttl, "1")
    return True


async def is_token_denied(token_hash: str) -> bool | None:
    """Check if a token is on the denylist.

    Returns:
        True: Token is revoked
        False: Redis confirmed it is not there
        None: Redis unavailable (caller must check database)
    """
    redis = await get_redis()
    if not redis:
        return None
    result = await redis.get(f"{PREFIX_TOKEN_DENYLIST}:{token_hash}")
    return result is not None


async def deny_tokens(tokens_with_ttls: list[tuple[str, int]]) -> int:
    """Bulk denylist tokens with individual TTLs (logout-all, password change).

    Returns:
        Number of tokens stored (0 if Redis unavailable)
    """
    redis = await get_redis()
    if not redis:
        return 0

    pipe = redis.pipeline()
    stored = 0
    for token_hash, ttl in tokens_with_ttls:
        if ttl > 0:
            pipe.setex(f"{PREFIX_TOKEN_DENYLIST}:{token_hash}", ttl, "1")
            stored += 1
    await pipe.execute()
    return stored
