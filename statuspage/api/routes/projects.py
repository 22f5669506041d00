"""Project management routes.

Provides CRUD operations and dashboard statistics for the projects a
user owns. Platform admins can see and manage every project.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.api.deps import get_session
from statuspage.api.schemas.common import Envelope, ok, paginate
from statuspage.api.schemas.projects import (
    ProjectCreate,
    ProjectList,
    ProjectPatch,
    ProjectRead,
    ProjectStats,
)
from statuspage.api.services.project import ProjectService
from statuspage.core.auth import get_current_user
from statuspage.core.models import Project, User
from statuspage.core.permissions import require_project_owner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


@router.post("", response_model=Envelope[ProjectRead], status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Create a project owned by the caller. Slugs are globally unique."""
    project = await ProjectService(session).create_project(user, payload.model_dump())
    await session.commit()
    return ok(project, "Project created successfully")


@router.get("", response_model=Envelope[ProjectList])
async def list_projects(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    projects, total = await ProjectService(session).list_projects(user, page=page, limit=limit)
    return ok({"projects": projects, "pagination": paginate(page, limit, total)})


@router.get("/{project_id}", response_model=Envelope[ProjectRead])
async def get_project(project: Project = Depends(require_project_owner)) -> dict[str, Any]:
    return ok(project)


@router.patch("/{project_id}", response_model=Envelope[ProjectRead])
async def update_project(
    payload: ProjectPatch,
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    changes = payload.model_dump(exclude_unset=True)
    project = await ProjectService(session).update_project(project, changes)
    await session.commit()
    return ok(project, "Project updated successfully")


@router.delete("/{project_id}", response_model=Envelope[None])
async def delete_project(
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Delete a project and everything it owns."""
    await ProjectService(session).delete_project(project)
    await session.commit()
    return ok(None, "Project deleted successfully")


@router.get("/{project_id}/stats", response_model=Envelope[ProjectStats])
async def get_project_stats(
    project: Project = Depends(require_project_owner),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    stats = await ProjectService(session).get_stats(project)
    return ok(stats)
