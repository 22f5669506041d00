"""Incident management routes for a project.

Each write is one transaction; the realtime event is published only
after the commit succeeds.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.aggregation.incidents import IncidentJoiner
from statuspage.api.deps import get_redis, get_session
from statuspage.api.schemas.common import Envelope, ok, paginate
from statuspage.api.schemas.incidents import (
    IncidentCreate,
    IncidentList,
    IncidentPatch,
    IncidentRead,
    IncidentUpdateCreate,
    IncidentUpdateRead,
)
from statuspage.api.services.incident import IncidentService
from statuspage.core.models import Incident, IncidentStatus, Project
from statuspage.core.permissions import require_project_owner
from statuspage.core.redis import publish_project_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/projects/{project_id}/incidents", tags=["incidents"])


def _event_name(incident: Incident, was_resolved: bool = False) -> str:
    if incident.status == IncidentStatus.RESOLVED and not was_resolved:
        return "incident.resolved"
    return "incident.updated"


async def _publish(redis_client: aioredis.Redis | None, event: str, joined: dict[str, Any]) -> None:
    payload = IncidentRead.model_validate(joined).model_dump(mode="json")
    await publish_project_event(redis_client, joined["project_id"], event, payload)


@router.get("", response_model=Envelope[IncidentList])
async def list_incidents(
    status_filter: IncidentStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    incidents, total = await IncidentService(session).list_incidents(
        project.id, status=status_filter, page=page, limit=limit
    )
    joined = await IncidentJoiner(session).join_many(project.id, incidents)
    return ok({"incidents": joined, "pagination": paginate(page, limit, total)})


@router.post("", response_model=Envelope[IncidentRead], status_code=status.HTTP_201_CREATED)
async def create_incident(
    payload: IncidentCreate,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    redis_client: aioredis.Redis | None = Depends(get_redis),
) -> dict[str, Any]:
    """File an incident; its first timeline entry is written in the same transaction."""
    incident = await IncidentService(session).create_incident(project.id, payload.model_dump())
    await session.commit()
    joined = await IncidentJoiner(session).join_one(incident)
    await _publish(redis_client, "incident.created", joined)
    return ok(joined, "Incident created successfully")


@router.get("/{incident_id}", response_model=Envelope[IncidentRead])
async def get_incident(
    incident_id: UUID,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    incident = await IncidentService(session).get_incident(project.id, incident_id)
    return ok(await IncidentJoiner(session).join_one(incident))


@router.patch("/{incident_id}", response_model=Envelope[IncidentRead])
async def update_incident(
    incident_id: UUID,
    payload: IncidentPatch,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    redis_client: aioredis.Redis | None = Depends(get_redis),
) -> dict[str, Any]:
    service = IncidentService(session)
    incident = await service.get_incident(project.id, incident_id)
    was_resolved = incident.status == IncidentStatus.RESOLVED
    incident = await service.update_incident(incident, payload.model_dump(exclude_unset=True))
    await session.commit()
    joined = await IncidentJoiner(session).join_one(incident)
    await _publish(redis_client, _event_name(incident, was_resolved), joined)
    return ok(joined, "Incident updated successfully")


@router.post(
    "/{incident_id}/updates",
    response_model=Envelope[IncidentUpdateRead],
    status_code=status.HTTP_201_CREATED,
)
async def add_incident_update(
    incident_id: UUID,
    payload: IncidentUpdateCreate,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    redis_client: aioredis.Redis | None = Depends(get_redis),
) -> dict[str, Any]:
    """Set the incident status and append a timeline entry."""
    service = IncidentService(session)
    incident = await service.get_incident(project.id, incident_id)
    was_resolved = incident.status == IncidentStatus.RESOLVED
    update = await service.add_update(incident, payload.status, payload.content)
    await session.commit()
    joined = await IncidentJoiner(session).join_one(incident)
    await _publish(redis_client, _event_name(incident, was_resolved), joined)
    return ok(update, "Incident update added successfully")


@router.delete("/{incident_id}", response_model=Envelope[None])
async def delete_incident(
    incident_id: UUID,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    redis_client: aioredis.Redis | None = Depends(get_redis),
) -> dict[str, Any]:
    service = IncidentService(session)
    incident = await service.get_incident(project.id, incident_id)
    await service.delete_incident(incident)
    await session.commit()
    await publish_project_event(redis_client, project.id, "incident.deleted", {"id": str(incident_id)})
    return ok(None, "Incident deleted successfully")
