"""Project ownership checks for the management API."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.api.deps import get_session
from statuspage.core.auth import get_current_user
from statuspage.core.models import Project, User, UserRole

logger = logging.getLogger(__name__)


def can_manage_project(user: User, project: Project) -> bool:
    """Return True if the user owns the project or is a platform admin."""
    return user.role == UserRole.PLATFORM_ADMIN or project.user_id == user.id


async def require_project_owner(
    project_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> Project:
    """FastAPI dependency that resolves a project the caller may manage.

    Platform admins bypass the ownership check.

    Raises:
        HTTPException 404: If the project does not exist.
        HTTPException 403: If the user does not own the project.
    """
    result = await session.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project {project_id} not found",
        )

    if not can_manage_project(user, project):
        logger.warning("User %s denied access to project %s", user.id, project_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this project",
        )
    return project
