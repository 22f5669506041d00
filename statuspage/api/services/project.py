"""Project management: CRUD, ownership listing and dashboard statistics."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.aggregation.precedence import build_status_distribution
from statuspage.core.errors import ConflictError
from statuspage.core.models import (
    DEFAULT_BRANDING,
    Component,
    Incident,
    IncidentImpact,
    IncidentStatus,
    Project,
    User,
    UserRole,
)

logger = logging.getLogger(__name__)


class ProjectService:
    """Writes go through flush only; the route commits."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _ensure_slug_free(self, slug: str, exclude_id: uuid.UUID | None = None) -> None:
        stmt = select(Project.id).where(Project.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Project.id != exclude_id)
        result = await self._session.execute(stmt)
        if result.scalar_one_or_none() is not None:
            raise ConflictError(f"Slug '{slug}' is already taken")

    async def _flush(self, slug: str) -> None:
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # Lost a race on the unique slug index.
            raise ConflictError(f"Slug '{slug}' is already taken") from exc

    async def create_project(self, owner: User, data: dict[str, Any]) -> Project:
        await self._ensure_slug_free(data["slug"])

        now = datetime.now(UTC)
        project = Project(
            id=uuid.uuid4(),
            user_id=owner.id,
            name=data["name"],
            slug=data["slug"],
            description=data.get("description"),
            custom_domain=data.get("custom_domain"),
            branding={**DEFAULT_BRANDING, **(data.get("branding") or {})},
            created_at=now,
            updated_at=now,
        )
        self._session.add(project)
        await self._flush(project.slug)
        logger.info("Project %s created by user %s (slug=%s)", project.id, owner.id, project.slug)
        return project

    async def list_projects(self, user: User, page: int = 1, limit: int = 20) -> tuple[list[Project], int]:
        """Projects owned by the user (all projects for platform admins)."""
        query = select(Project)
        count_query = select(func.count(Project.id))
        if user.role != UserRole.PLATFORM_ADMIN:
            query = query.where(Project.user_id == user.id)
            count_query = count_query.where(Project.user_id == user.id)

        result = await self._session.execute(
            query.order_by(Project.created_at.desc()).offset((page - 1) * limit).limit(limit)
        )
        projects = list(result.scalars().all())
        total = (await self._session.execute(count_query)).scalar() or 0
        return projects, total

    async def update_project(self, project: Project, changes: dict[str, Any]) -> Project:
        if changes.get("slug") is not None and changes["slug"] != project.slug:
            await self._ensure_slug_free(changes["slug"], exclude_id=project.id)
        if "branding" in changes and changes["branding"] is not None:
            changes["branding"] = {**(project.branding or DEFAULT_BRANDING), **changes["branding"]}

        for field_name, value in changes.items():
            if value is None and field_name in ("name", "slug"):
                continue
            setattr(project, field_name, value)
        project.updated_at = datetime.now(UTC)
        await self._flush(project.slug)
        return project

    async def delete_project(self, project: Project) -> None:
        await self._session.delete(project)
        await self._session.flush()
        logger.info("Project %s deleted", project.id)

    async def get_stats(self, project: Project) -> dict[str, Any]:
        """Incident counters, mean resolution time and component distribution."""
        resolved = Incident.status == IncidentStatus.RESOLVED
        resolution_hours = func.extract("epoch", Incident.end_time - Incident.start_time) / 3600
        result = await self._session.execute(
            select(
                func.count(Incident.id).label("total"),
                func.count(Incident.id).filter(Incident.status != IncidentStatus.RESOLVED).label("active"),
                func.count(Incident.id).filter(resolved).label("resolved"),
                func.count(Incident.id).filter(Incident.impact == IncidentImpact.CRITICAL).label("critical"),
                func.count(Incident.id).filter(Incident.impact == IncidentImpact.MAJOR).label("major"),
                func.count(Incident.id).filter(Incident.impact == IncidentImpact.MINOR).label("minor"),
                func.avg(resolution_hours).filter(and_(resolved, Incident.end_time.is_not(None))).label("avg_hours"),
            ).where(Incident.project_id == project.id)
        )
        row = result.one()

        status_result = await self._session.execute(
            select(Component.status, func.count(Component.id))
            .where(Component.project_id == project.id)
            .group_by(Component.status)
        )
        pairs = [(str(status), count) for status, count in status_result.all()]

        return {
            "total_incidents": int(row.total or 0),
            "active_incidents": int(row.active or 0),
            "resolved_incidents": int(row.resolved or 0),
            "critical_incidents": int(row.critical or 0),
            "major_incidents": int(row.major or 0),
            "minor_incidents": int(row.minor or 0),
            "avg_resolution_hours": round(float(row.avg_hours), 2) if row.avg_hours is not None else None,
            "component_status_distribution": build_status_distribution(pairs),
        }
