"""Redis connection management and realtime Pub/Sub fan-out.

Committed writes to components and incidents are announced on a
per-project channel so that open status pages can refresh.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import redis.asyncio as aioredis

from statuspage.core.config import Settings

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "statuspage:realtime"


def project_channel(project_id: UUID | str) -> str:
    """Return the Pub/Sub channel name for a project."""
    return f"{CHANNEL_PREFIX}:{project_id}"


def create_redis_client(settings: Settings) -> aioredis.Redis:
    """Create an async Redis client."""
    client: aioredis.Redis = aioredis.from_url(
        settings.redis_url or f"redis://{settings.redis_host}:{settings.redis_port}/0",
        decode_responses=True,
    )
    return client


async def verify_redis_connectivity(client: aioredis.Redis) -> bool:
    """Return True if Redis responds to PING."""
    try:
        return bool(await client.ping())
    except (aioredis.RedisError, ConnectionError, OSError):
        logger.exception("Failed to connect to Redis")
        return False


async def publish_project_event(
    client: aioredis.Redis | None,
    project_id: UUID | str,
    event: str,
    data: dict[str, Any],
) -> int:
    """Publish a realtime event for a project.

    The write that triggered the event has already been committed, so a
    publish failure is logged and reported as zero receivers.

    Returns:
        Number of subscribers that received the message.
    """
    if client is None:
        return 0

    message = json.dumps(
        {
            "event": event,
            "project_id": str(project_id),
            "data": data,
            "timestamp": datetime.now(UTC).isoformat(),
        },
        default=str,
    )
    try:
        return int(await client.publish(project_channel(project_id), message))
    except (aioredis.RedisError, ConnectionError, OSError):
        logger.warning("Failed to publish %s event for project %s", event, project_id)
        return 0
