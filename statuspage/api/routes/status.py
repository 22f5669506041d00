"""Public status page routes.

Unauthenticated and rate limited per client address. Unknown slugs
return 404; uptime figures degrade to neutral values instead of failing
the page. The only writes are subscription requests.
"""

from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, Request, Response, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.api.deps import get_redis, get_session
from statuspage.api.schemas.common import Envelope, ok
from statuspage.api.schemas.incidents import IncidentRead
from statuspage.api.schemas.status import StatusPage, StatusSummary
from statuspage.api.schemas.subscribers import (
    SubscriptionCancel,
    SubscriptionCreate,
    SubscriptionReceipt,
    SubscriptionVerify,
)
from statuspage.api.services.status import StatusService
from statuspage.api.services.subscriber import SubscriberService
from statuspage.core.config import Settings, get_settings
from statuspage.core.models import Subscriber
from statuspage.core.redis import publish_project_event

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/v1/status", tags=["status"])


def _status_rate_limit() -> str:
    return get_settings().status_rate_limit


@router.get("/{slug}", response_model=Envelope[StatusPage])
@limiter.limit(_status_rate_limit)
async def get_status_page(
    request: Request,
    slug: str,
    days: int = Query(default=90, ge=1, le=365),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Project, components, recent incidents, overall status and uptime."""
    service = StatusService(session, settings)
    page = await service.get_status_page(slug, days=days)
    return ok(page, "Status page retrieved successfully")


@router.get("/{slug}/summary", response_model=Envelope[StatusSummary])
@limiter.limit(_status_rate_limit)
async def get_status_summary(
    request: Request,
    slug: str,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    service = StatusService(session, settings)
    summary = await service.get_summary(slug)
    return ok(summary, "Status summary retrieved successfully")


@router.get("/{slug}/incidents", response_model=Envelope[list[IncidentRead]])
@limiter.limit(_status_rate_limit)
async def get_incident_history(
    request: Request,
    slug: str,
    days: int = Query(default=90, ge=1, le=365),
    limit: int = Query(default=50, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Incidents created in the last ``days`` days with their timelines."""
    service = StatusService(session, settings)
    incidents = await service.get_incident_history(slug, days=days, limit=limit)
    return ok(incidents, "Incident history retrieved successfully")


def _subscribe_rate_limit() -> str:
    return get_settings().subscribe_rate_limit


def _receipt(subscriber: Subscriber) -> SubscriptionReceipt:
    return SubscriptionReceipt(email=subscriber.email, verified=subscriber.verified)


@router.post("/{slug}/subscribe", response_model=Envelope[SubscriptionReceipt], status_code=status.HTTP_201_CREATED)
@limiter.limit(_subscribe_rate_limit)
async def subscribe(
    request: Request,
    response: Response,
    slug: str,
    payload: SubscriptionCreate,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    redis_client: aioredis.Redis | None = Depends(get_redis),
) -> dict[str, Any]:
    """Subscribe to incident notifications for a status page.

    The subscription stays unverified until its token is confirmed.
    Repeating the request for a pending address returns 200.
    """
    project = await StatusService(session, settings).get_project_by_slug(slug)
    subscriber, created = await SubscriberService(session).create_subscription(project.id, payload.model_dump())
    if not created:
        response.status_code = status.HTTP_200_OK
        return ok(_receipt(subscriber), "Verification is still pending for this email")

    await session.commit()
    await publish_project_event(
        redis_client,
        project.id,
        "subscriber.created",
        {"id": str(subscriber.id), "notify_by": subscriber.notify_by},
    )
    return ok(_receipt(subscriber), "Subscription created, verification pending")


@router.post("/{slug}/verify", response_model=Envelope[SubscriptionReceipt])
@limiter.limit(_subscribe_rate_limit)
async def verify_subscription(
    request: Request,
    slug: str,
    payload: SubscriptionVerify,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    project = await StatusService(session, settings).get_project_by_slug(slug)
    subscriber = await SubscriberService(session).verify_subscription(project.id, payload.token)
    await session.commit()
    return ok(_receipt(subscriber), "Subscription verified")


@router.post("/{slug}/unsubscribe", response_model=Envelope[None])
@limiter.limit(_subscribe_rate_limit)
async def unsubscribe(
    request: Request,
    slug: str,
    payload: SubscriptionCancel,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    project = await StatusService(session, settings).get_project_by_slug(slug)
    await SubscriberService(session).unsubscribe(project.id, payload.email)
    await session.commit()
    return ok(None, "Unsubscribed successfully")
