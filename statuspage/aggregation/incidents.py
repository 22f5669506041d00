"""Incident timelines joined with the names of affected components.

``Incident.affected_components`` holds bare ids. Names are looked up
among the project's current components; ids that no longer resolve are
dropped from the name list without error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from statuspage.core.models import Component, Incident, IncidentUpdate

logger = logging.getLogger(__name__)


def serialize_update(update: IncidentUpdate) -> dict[str, Any]:
    return {
        "id": update.id,
        "incident_id": update.incident_id,
        "status": update.status,
        "content": update.content,
        "created_at": update.created_at,
    }


def join_incident(incident: Incident, names_by_id: dict[UUID, str]) -> dict[str, Any]:
    """Flatten an incident with its timeline and resolved component names."""
    affected = list(dict.fromkeys(incident.affected_components or []))
    names = [names_by_id[cid] for cid in affected if cid in names_by_id]
    updates = sorted(incident.updates or [], key=lambda u: u.created_at, reverse=True)
    return {
        "id": incident.id,
        "project_id": incident.project_id,
        "title": incident.title,
        "content": incident.content,
        "status": incident.status,
        "impact": incident.impact,
        "affected_components": affected,
        "affected_component_names": names,
        "start_time": incident.start_time,
        "end_time": incident.end_time,
        "created_at": incident.created_at,
        "updated_at": incident.updated_at,
        "updates": [serialize_update(u) for u in updates],
    }


class IncidentJoiner:
    """Loads incidents for a project and annotates them for display."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_recent(
        self,
        project_id: UUID,
        days: int,
        limit: int,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Incidents created in the last ``days`` days, newest first."""
        now = now or datetime.now(UTC)
        stmt = (
            select(Incident)
            .options(selectinload(Incident.updates))
            .where(
                Incident.project_id == project_id,
                Incident.created_at >= now - timedelta(days=days),
            )
            .order_by(Incident.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        incidents = list(result.scalars().all())
        return await self.join_many(project_id, incidents)

    async def join_many(self, project_id: UUID, incidents: Sequence[Incident]) -> list[dict[str, Any]]:
        ids = {cid for incident in incidents for cid in (incident.affected_components or [])}
        names_by_id = await self.component_names(project_id, ids)
        return [join_incident(incident, names_by_id) for incident in incidents]

    async def join_one(self, incident: Incident) -> dict[str, Any]:
        names_by_id = await self.component_names(incident.project_id, incident.affected_components or [])
        return join_incident(incident, names_by_id)

    async def component_names(self, project_id: UUID, component_ids: Iterable[UUID]) -> dict[UUID, str]:
        """Map ids to names for components that still exist in the project."""
        wanted = set(component_ids)
        if not wanted:
            return {}
        result = await self.session.execute(
            select(Component.id, Component.name).where(
                Component.project_id == project_id,
                Component.id.in_(wanted),
            )
        )
        names = {row.id: row.name for row in result.all()}
        missing = len(wanted) - len(names)
        if missing:
            logger.debug("%d affected component id(s) no longer resolve in project %s", missing, project_id)
        return names
