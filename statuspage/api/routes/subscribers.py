"""Subscriber management routes for a project owner."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.api.deps import get_session
from statuspage.api.schemas.common import Envelope, ok, paginate
from statuspage.api.schemas.subscribers import SubscriberList, SubscriberPatch, SubscriberRead, SubscriberStats
from statuspage.api.services.subscriber import SubscriberService
from statuspage.core.models import Project
from statuspage.core.permissions import require_project_owner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/projects/{project_id}/subscribers", tags=["subscribers"])


@router.get("", response_model=Envelope[SubscriberList])
async def list_subscribers(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
    verified: bool | None = Query(default=None),
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    subscribers, total = await SubscriberService(session).list_subscribers(
        project.id, page=page, limit=limit, verified=verified
    )
    return ok({"subscribers": subscribers, "pagination": paginate(page, limit, total)})


@router.get("/stats", response_model=Envelope[SubscriberStats])
async def get_subscriber_stats(
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    stats = await SubscriberService(session).get_stats(project.id)
    return ok(stats)


@router.get("/{subscriber_id}", response_model=Envelope[SubscriberRead])
async def get_subscriber(
    subscriber_id: UUID,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    subscriber = await SubscriberService(session).get_subscriber(project.id, subscriber_id)
    return ok(subscriber)


@router.patch("/{subscriber_id}", response_model=Envelope[SubscriberRead])
async def update_subscriber(
    subscriber_id: UUID,
    payload: SubscriberPatch,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Change a subscriber's phone or notification preferences."""
    service = SubscriberService(session)
    subscriber = await service.get_subscriber(project.id, subscriber_id)
    subscriber = await service.update_subscriber(subscriber, payload.model_dump(exclude_unset=True))
    await session.commit()
    return ok(subscriber, "Subscriber updated successfully")


@router.delete("/{subscriber_id}", response_model=Envelope[None])
async def delete_subscriber(
    subscriber_id: UUID,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    service = SubscriberService(session)
    subscriber = await service.get_subscriber(project.id, subscriber_id)
    await service.delete_subscriber(subscriber)
    await session.commit()
    return ok(None, "Subscriber deleted successfully")
