"""Tests for MembershipCache (src/teamledger/services/membership_cache.py)."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.teamledger.core.permissions import Role
from src.teamledger.services.membership_cache import (
    CacheInvalidationError,
    MembershipCache,
    membership_key,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def cache(fake_redis) -> MembershipCache:
    return MembershipCache(fake_redis, ttl_seconds=300)


@pytest.fixture
def broken_redis() -> MagicMock:
    """Redis client whose every call fails."""
    redis = MagicMock()
    redis.get = AsyncMock(side_effect=RedisConnectionError("down"))
    redis.set = AsyncMock(side_effect=RedisConnectionError("down"))
    redis.delete = AsyncMock(side_effect=RedisConnectionError("down"))
    return redis


class TestReadWrite:
    async def test_miss_returns_none(self, cache):
        assert await cache.get(uuid4(), uuid4()) is None

    async def test_set_then_get(self, cache):
        org_id, user_id = uuid4(), uuid4()
        await cache.set(org_id, user_id, Role.ADMIN)

        entry = await cache.get(org_id, user_id)

        assert entry is not None
        assert entry.role is Role.ADMIN

    async def test_entries_expire(self, cache, fake_redis):
        org_id, user_id = uuid4(), uuid4()
        await cache.set(org_id, user_id, Role.MEMBER)

        ttl = await fake_redis.ttl(membership_key(org_id, user_id))

        assert 0 < ttl <= 300

    async def test_corrupt_entry_is_dropped(self, cache, fake_redis):
        org_id, user_id = uuid4(), uuid4()
        key = membership_key(org_id, user_id)
        await fake_redis.set(key, '{"role": "emperor"}')

        assert await cache.get(org_id, user_id) is None
        assert await fake_redis.get(key) is None


class TestInvalidation:
    async def test_invalidate_single_entry(self, cache):
        org_id, user_id = uuid4(), uuid4()
        await cache.set(org_id, user_id, Role.ADMIN)

        await cache.invalidate(org_id, user_id)

        assert await cache.get(org_id, user_id) is None

    async def test_invalidate_organization_spares_other_organizations(self, cache):
        org_id, other_org_id = uuid4(), uuid4()
        users = [uuid4() for _ in range(3)]
        for user_id in users:
            await cache.set(org_id, user_id, Role.MEMBER)
        await cache.set(other_org_id, users[0], Role.MEMBER)

        deleted = await cache.invalidate_organization(org_id)

        assert deleted == 3
        for user_id in users:
            assert await cache.get(org_id, user_id) is None
        assert await cache.get(other_org_id, users[0]) is not None


class TestWithoutRedis:
    async def test_none_client_is_always_a_miss(self):
        cache = MembershipCache(None)
        org_id, user_id = uuid4(), uuid4()

        await cache.set(org_id, user_id, Role.OWNER)

        assert await cache.get(org_id, user_id) is None
        await cache.invalidate(org_id, user_id)
        assert await cache.invalidate_organization(org_id) == 0

    async def test_read_failure_is_a_miss(self, broken_redis):
        cache = MembershipCache(broken_redis)
        assert await cache.get(uuid4(), uuid4()) is None

    async def test_write_failure_is_swallowed(self, broken_redis):
        cache = MembershipCache(broken_redis)
        await cache.set(uuid4(), uuid4(), Role.MEMBER)
        broken_redis.set.assert_awaited_once()


class TestInvalidationFailures:
    async def test_invalidate_retries_then_raises(self, broken_redis):
        cache = MembershipCache(broken_redis)

        with pytest.raises(CacheInvalidationError) as exc_info:
            await cache.invalidate(uuid4(), uuid4())

        assert broken_redis.delete.await_count == 2
        assert exc_info.value.status_code == 503

    async def test_transient_failure_is_retried(self, cache, fake_redis, monkeypatch):
        org_id, user_id = uuid4(), uuid4()
        await cache.set(org_id, user_id, Role.ADMIN)
        real_delete = fake_redis.delete
        calls = []

        async def flaky_delete(*keys):
            calls.append(keys)
            if len(calls) == 1:
                raise RedisConnectionError("timeout")
            return await real_delete(*keys)

        monkeypatch.setattr(fake_redis, "delete", flaky_delete)

        await cache.invalidate(org_id, user_id)

        assert len(calls) == 2
        assert await cache.get(org_id, user_id) is None

    async def test_invalidate_organization_raises(self):
        redis = MagicMock()
        redis.scan_iter = MagicMock(side_effect=RedisConnectionError("down"))
        cache = MembershipCache(redis)

        with pytest.raises(CacheInvalidationError):
            await cache.invalidate_organization(uuid4())

        assert redis.scan_iter.call_count == 2

    async def test_corrupt_entry_with_failing_delete_is_still_a_miss(self, broken_redis):
        broken_redis.get = AsyncMock(return_value="not json")
        cache = MembershipCache(broken_redis)

        assert await cache.get(uuid4(), uuid4()) is None
