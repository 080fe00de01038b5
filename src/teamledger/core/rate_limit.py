"""Rate limiting for the public auth endpoints.

Uses Redis for distributed limits when REDIS_URL is configured, in-memory
storage otherwise. Storage failures never block a request.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.teamledger.core.config import get_settings
from src.teamledger.core.logging import get_logger

logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """Rate limit key from the client IP only.

    User-controlled headers are never part of the key, otherwise rotating
    them would create unlimited buckets.
    """
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    """Create rate limiter with the appropriate storage backend.

    Disabled in the testing environment.
    """
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    if settings.redis_url:
        logger.info("Rate limiter using Redis backend")
        return Limiter(
            key_func=get_rate_limit_key,
            storage_uri=settings.redis_url,
            swallow_errors=True,
        )

    logger.info("Rate limiter using in-memory backend (not distributed)")
    return Limiter(key_func=get_rate_limit_key, swallow_errors=True)


# Reads settings at import time
limiter = create_limiter()
