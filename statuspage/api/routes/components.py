"""Component management routes for a project.

Committed changes are announced on the project's realtime channel.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.api.deps import get_redis, get_session
from statuspage.api.schemas.common import Envelope, ok, paginate
from statuspage.api.schemas.components import (
    ComponentCreate,
    ComponentList,
    ComponentPatch,
    ComponentRead,
    ComponentReorder,
    ComponentStatusChange,
)
from statuspage.api.services.component import ComponentService
from statuspage.core.config import Settings, get_settings
from statuspage.core.models import Component, Project
from statuspage.core.permissions import require_project_owner
from statuspage.core.redis import publish_project_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/projects/{project_id}/components", tags=["components"])


def _service(session: AsyncSession, settings: Settings) -> ComponentService:
    return ComponentService(session, max_components=settings.max_components_per_project)


def _event_payload(component: Component) -> dict[str, Any]:
    return ComponentRead.model_validate(component).model_dump(mode="json")


@router.get("", response_model=Envelope[ComponentList])
async def list_components(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    components, total = await _service(session, settings).list_components(project.id, page=page, limit=limit)
    return ok({"components": components, "pagination": paginate(page, limit, total)})


@router.post("", response_model=Envelope[ComponentRead], status_code=status.HTTP_201_CREATED)
async def create_component(
    payload: ComponentCreate,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    redis_client: aioredis.Redis | None = Depends(get_redis),
) -> dict[str, Any]:
    """Append a component at the end of the project's ordering."""
    component = await _service(session, settings).create_component(project.id, payload.model_dump())
    await session.commit()
    await publish_project_event(redis_client, project.id, "component.created", _event_payload(component))
    return ok(component, "Component created successfully")


@router.put("/order", response_model=Envelope[list[ComponentRead]])
async def reorder_components(
    payload: ComponentReorder,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    redis_client: aioredis.Redis | None = Depends(get_redis),
) -> dict[str, Any]:
    positions = {item.id: item.position for item in payload.components}
    components = await _service(session, settings).reorder(project.id, positions)
    await session.commit()
    await publish_project_event(
        redis_client,
        project.id,
        "component.updated",
        {"order": [{"id": str(c.id), "position": c.position} for c in components]},
    )
    return ok(components, "Component order updated successfully")


@router.get("/{component_id}", response_model=Envelope[ComponentRead])
async def get_component(
    component_id: UUID,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    component = await _service(session, settings).get_component(project.id, component_id)
    return ok(component)


@router.patch("/{component_id}", response_model=Envelope[ComponentRead])
async def update_component(
    component_id: UUID,
    payload: ComponentPatch,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    redis_client: aioredis.Redis | None = Depends(get_redis),
) -> dict[str, Any]:
    service = _service(session, settings)
    component = await service.get_component(project.id, component_id)
    component = await service.update_component(component, payload.model_dump(exclude_unset=True))
    await session.commit()
    await publish_project_event(redis_client, project.id, "component.updated", _event_payload(component))
    return ok(component, "Component updated successfully")


@router.patch("/{component_id}/status", response_model=Envelope[ComponentRead])
async def update_component_status(
    component_id: UUID,
    payload: ComponentStatusChange,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    redis_client: aioredis.Redis | None = Depends(get_redis),
) -> dict[str, Any]:
    service = _service(session, settings)
    component = await service.get_component(project.id, component_id)
    component = await service.update_status(component, payload.status)
    await session.commit()
    await publish_project_event(redis_client, project.id, "component.updated", _event_payload(component))
    return ok(component, "Component status updated successfully")


@router.delete("/{component_id}", response_model=Envelope[None])
async def delete_component(
    component_id: UUID,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    redis_client: aioredis.Redis | None = Depends(get_redis),
) -> dict[str, Any]:
    service = _service(session, settings)
    component = await service.get_component(project.id, component_id)
    await service.delete_component(component)
    await session.commit()
    await publish_project_event(redis_client, project.id, "component.deleted", {"id": str(component_id)})
    return ok(None, "Component deleted successfully")
