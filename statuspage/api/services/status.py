"""Public status page composition.

Reads a project by slug and combines, per request:
- Component list and overall status (never cached)
- Recent incidents with timelines
- Uptime rollups

Uptime reads are lenient: a failure is confined to their own savepoint
and turns into neutral figures.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.aggregation.incidents import IncidentJoiner
from statuspage.aggregation.precedence import build_status_distribution, resolve_overall_status
from statuspage.aggregation.summary import compose_status_message
from statuspage.aggregation.uptime import UptimeAggregator
from statuspage.core.config import Settings
from statuspage.core.errors import NotFoundError
from statuspage.core.models import Component, Incident, IncidentStatus, Project

logger = logging.getLogger(__name__)


class StatusService:
    """Builds the unauthenticated status page views for a project slug."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._incidents = IncidentJoiner(session)
        self._uptime = UptimeAggregator(session)

    async def get_project_by_slug(self, slug: str) -> Project:
        result = await self._session.execute(select(Project).where(Project.slug == slug))
        project = result.scalar_one_or_none()
        if project is None:
            raise NotFoundError(f"Status page '{slug}' not found")
        return project

    async def get_status_page(self, slug: str, days: int | None = None) -> dict[str, Any]:
        """Full public page: project, components, incidents, overall status, uptime."""
        days = days or self._settings.default_uptime_window_days
        project = await self.get_project_by_slug(slug)

        result = await self._session.execute(
            select(Component)
            .where(Component.project_id == project.id)
            .order_by(Component.position, Component.created_at)
        )
        components = list(result.scalars().all())
        counts = Counter(str(c.status) for c in components)
        overall_status = resolve_overall_status(counts.items())

        incidents = await self._incidents.list_recent(
            project.id,
            days=self._settings.status_page_incident_window_days,
            limit=self._settings.status_page_incident_limit,
        )
        uptime_stats = await self._uptime.get_uptime_statistics(project.id, days=days)

        logger.debug(
            "Status page %s: %d components, %d incidents, overall=%s",
            slug,
            len(components),
            len(incidents),
            overall_status,
        )
        return {
            "project": project,
            "components": components,
            "incidents": incidents,
            "overall_status": overall_status,
            "uptime_stats": uptime_stats.to_dict(),
        }

    async def get_summary(self, slug: str) -> dict[str, Any]:
        """Compact summary: overall status, distribution, active incidents, 24h uptime."""
        project = await self.get_project_by_slug(slug)

        result = await self._session.execute(
            select(Component.status, func.count(Component.id))
            .where(Component.project_id == project.id)
            .group_by(Component.status)
        )
        pairs = [(str(status), count) for status, count in result.all()]
        overall_status = resolve_overall_status(pairs)

        active_result = await self._session.execute(
            select(func.count(Incident.id)).where(
                Incident.project_id == project.id,
                Incident.status != IncidentStatus.RESOLVED,
            )
        )
        active_incidents = int(active_result.scalar_one() or 0)

        recent_uptime = await self._uptime.get_recent_uptime(project.id, hours=24)

        return {
            "overall_status": overall_status,
            "component_status_distribution": build_status_distribution(pairs),
            "active_incidents": active_incidents,
            "recent_uptime_24h": recent_uptime,
            "status_message": compose_status_message(overall_status, active_incidents),
        }

    async def get_incident_history(self, slug: str, days: int = 90, limit: int = 50) -> list[dict[str, Any]]:
        project = await self.get_project_by_slug(slug)
        return await self._incidents.list_recent(project.id, days=days, limit=limit)
