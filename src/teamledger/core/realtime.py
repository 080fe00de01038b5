"""Realtime event broadcasting over Redis pub/sub.

Best-effort: a failed publish is logged and never fails the caller. The
websocket gateway that fans events out to clients subscribes to the same
channels.
"""

import json
from typing import Any
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.teamledger.core.logging import get_logger
from src.teamledger.models.base import utc_now

logger = get_logger(__name__)


def organization_channel(organization_id: UUID) -> str:
    return f"org:{organization_id}:events"


def user_channel(user_id: UUID) -> str:
    return f"user:{user_id}:events"


class EventBroadcaster:
    def __init__(self, redis: Redis | None):
        self.redis = redis

    async def _publish(self, channel: str, event: str, data: dict[str, Any]) -> bool:
        if self.redis is None:
            return False
        message = json.dumps(
            {"event": event, "data": data, "timestamp": utc_now().isoformat()},
            default=str,
        )
        try:
            await self.redis.publish(channel, message)
        except (RedisError, OSError) as e:
            logger.warning("Event publish failed", channel=channel, event=event, error=str(e))
            return False
        return True

    async def publish_to_organization(
        self, organization_id: UUID, event: str, data: dict[str, Any]
    ) -> bool:
        return await self._publish(organization_channel(organization_id), event, data)

    async def publish_to_user(self, user_id: UUID, event: str, data: dict[str, Any]) -> bool:
        return await self._publish(user_channel(user_id), event, data)
