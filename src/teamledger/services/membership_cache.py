"""Membership cache - TTL-bounded accelerator in front of the membership store.

Entries are derived data. Read and write failures are logged and treated as
a miss so authorization falls through to the database. Invalidation failures
are retried once and then raised as CacheInvalidationError.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.teamledger.core.exceptions import ServiceUnavailable
from src.teamledger.core.logging import get_logger
from src.teamledger.core.permissions import Role
from src.teamledger.models.base import utc_now

logger = get_logger(__name__)

DEFAULT_MEMBERSHIP_TTL_SECONDS = 300
INVALIDATION_ATTEMPTS = 2


class CacheInvalidationError(ServiceUnavailable):
    default_message = "Membership cache could not be updated, please retry"


def membership_key(organization_id: UUID, user_id: UUID) -> str:
    return f"org:{organization_id}:member:{user_id}"


def organization_pattern(organization_id: UUID) -> str:
    return f"org:{organization_id}:*"


@dataclass(frozen=True)
class CachedMembership:
    role: Role
    cached_at: datetime


class MembershipCache:
    """Read-through/write-through cache of (organization, user) -> role.

    Constructed once per process with the shared Redis client (or None when
    Redis is unavailable, in which case every lookup is a miss).
    """

    def __init__(self, redis: Redis | None, ttl_seconds: int = DEFAULT_MEMBERSHIP_TTL_SECONDS):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    async def get(self, organization_id: UUID, user_id: UUID) -> CachedMembership | None:
        if self.redis is None:
            return None
        key = membership_key(organization_id, user_id)
        try:
            raw = await self.redis.get(key)
        except (RedisError, OSError) as e:
            logger.warning("Membership cache read failed, using store", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return CachedMembership(
                role=Role(data["role"]),
                cached_at=datetime.fromisoformat(data["cached_at"]),
            )
        except (ValueError, KeyError, TypeError):
            # Corrupt or outdated entry: drop it and reload from the store
            logger.warning("Discarding unreadable membership cache entry", key=key)
            try:
                await self.redis.delete(key)
            except (RedisError, OSError) as e:
                logger.warning("Could not drop membership cache entry", key=key, error=str(e))
            return None

    async def set(self, organization_id: UUID, user_id: UUID, role: Role) -> None:
        if self.redis is None:
            return
        key = membership_key(organization_id, user_id)
        payload = json.dumps({"role": role.value, "cached_at": utc_now().isoformat()})
        try:
            await self.redis.set(key, payload, ex=self.ttl_seconds)
        except (RedisError, OSError) as e:
            logger.warning("Membership cache write failed", key=key, error=str(e))

    async def invalidate(self, organization_id: UUID, user_id: UUID) -> None:
        """Delete one (organization, user) entry.

        Raises:
            CacheInvalidationError: Redis failed twice in a row
        """
        if self.redis is None:
            return
        key = membership_key(organization_id, user_id)
        for attempt in range(1, INVALIDATION_ATTEMPTS + 1):
            try:
                await self.redis.delete(key)
            except (RedisError, OSError) as e:
                logger.error(
                    "Membership cache invalidation failed",
                    key=key,
                    attempt=attempt,
                    error=str(e),
                )
                if attempt == INVALIDATION_ATTEMPTS:
                    raise CacheInvalidationError() from e
            else:
                logger.debug("Membership cache entry invalidated", key=key)
                return

    async def invalidate_organization(self, organization_id: UUID) -> int:
        """Delete every cached entry of an organization. Returns keys deleted.

        Raises:
            CacheInvalidationError: Redis failed twice in a row
        """
        if self.redis is None:
            return 0
        for attempt in range(1, INVALIDATION_ATTEMPTS + 1):
            try:
                deleted = await self._delete_matching(organization_pattern(organization_id))
            except (RedisError, OSError) as e:
                logger.error(
                    "Organization cache invalidation failed",
                    organization_id=str(organization_id),
                    attempt=attempt,
                    error=str(e),
                )
                if attempt == INVALIDATION_ATTEMPTS:
                    raise CacheInvalidationError() from e
            else:
                logger.debug(
                    "Organization cache invalidated",
                    organization_id=str(organization_id),
                    keys_deleted=deleted,
                )
                return deleted
        return 0

    async def _delete_matching(self, pattern: str) -> int:
        deleted = 0
        batch: list[str] = []
        async for key in self.redis.scan_iter(match=pattern, count=100):
            batch.append(key)
            if len(batch) >= 100:
                deleted += await self.redis.delete(*batch)
                batch = []
        if batch:
            deleted += await self.redis.delete(*batch)
        return deleted
