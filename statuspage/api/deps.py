"""Shared FastAPI dependencies.

Provides the canonical database session dependency used by all route
files, plus access to the Redis client created in the lifespan.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import redis.asyncio as aioredis
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.core.config import Settings, get_settings


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state via FastAPI dependency injection.

    Yields a session from the async session factory stored in app.state.
    The session is scoped to the request lifecycle.
    """
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


def get_redis(request: Request, settings: Settings = Depends(get_settings)) -> aioredis.Redis | None:
    """Return the Redis client for realtime events, or None when they are off."""
    if not settings.realtime_events_enabled:
        return None
    return getattr(request.app.state, "redis_client", None)
