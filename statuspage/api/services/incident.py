"""Incident lifecycle management for a project.

Manages creation with the initial timeline entry, partial updates that
append to the timeline, explicit status updates, and resolution.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from statuspage.core.errors import NotFoundError, PayloadValidationError
from statuspage.core.models import (
    Component,
    Incident,
    IncidentImpact,
    IncidentStatus,
    IncidentUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_CONTENT = "Incident updated"


class IncidentService:
    """Manages incidents and their append-only update timeline."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def validate_affected_components(self, project_id: uuid.UUID, component_ids: Iterable[uuid.UUID]) -> None:
        """Reject ids that are not components of the project.

        Raises:
            PayloadValidationError: Listing the ids that do not belong.
        """
        wanted = set(component_ids)
        if not wanted:
            return
        result = await self._session.execute(
            select(Component.id).where(Component.project_id == project_id, Component.id.in_(wanted))
        )
        found = set(result.scalars().all())
        missing = sorted(str(cid) for cid in wanted - found)
        if missing:
            raise PayloadValidationError(
                f"Components do not belong to this project: {', '.join(missing)}",
                field="affected_components",
            )

    async def get_incident(self, project_id: uuid.UUID, incident_id: uuid.UUID) -> Incident:
        result = await self._session.execute(
            select(Incident)
            .options(selectinload(Incident.updates))
            .where(Incident.id == incident_id, Incident.project_id == project_id)
        )
        incident = result.scalar_one_or_none()
        if incident is None:
            raise NotFoundError(f"Incident {incident_id} not found")
        return incident

    async def list_incidents(
        self,
        project_id: uuid.UUID,
        status: IncidentStatus | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Incident], int]:
        query = select(Incident).options(selectinload(Incident.updates)).where(Incident.project_id == project_id)
        count_query = select(func.count(Incident.id)).where(Incident.project_id == project_id)
        if status is not None:
            query = query.where(Incident.status == status)
            count_query = count_query.where(Incident.status == status)

        result = await self._session.execute(
            query.order_by(Incident.created_at.desc()).offset((page - 1) * limit).limit(limit)
        )
        incidents = list(result.scalars().all())
        total = (await self._session.execute(count_query)).scalar() or 0
        return incidents, total

    async def create_incident(self, project_id: uuid.UUID, data: dict[str, Any]) -> Incident:
        """Create an incident together with its first timeline entry.

        Args:
            project_id: Owning project.
            data: Validated create payload. ``status`` defaults to
                investigating, ``impact`` to minor and ``start_time`` to now.

        Returns:
            The flushed Incident with ``updates`` populated.
        """
        affected = list(dict.fromkeys(data.get("affected_components") or []))
        await self.validate_affected_components(project_id, affected)

        now = datetime.now(UTC)
        status = data.get("status") or IncidentStatus.INVESTIGATING
        incident_id = uuid.uuid4()
        first_update = IncidentUpdate(
            id=uuid.uuid4(),
            incident_id=incident_id,
            status=status,
            content=data["content"],
            created_at=now,
        )
        incident = Incident(
            id=incident_id,
            project_id=project_id,
            title=data["title"],
            content=data["content"],
            status=status,
            impact=data.get("impact") or IncidentImpact.MINOR,
            affected_components=affected,
            start_time=data.get("start_time") or now,
            end_time=now if status == IncidentStatus.RESOLVED else None,
            created_at=now,
            updated_at=now,
            updates=[first_update],
        )
        self._session.add(incident)
        await self._session.flush()

        logger.info(
            "Incident %s created in project %s: status=%s, impact=%s, components=%d",
            incident.id,
            project_id,
            incident.status,
            incident.impact,
            len(affected),
        )
        return incident

    def _append_update(self, incident: Incident, status: IncidentStatus, content: str, now: datetime) -> IncidentUpdate:
        update = IncidentUpdate(
            id=uuid.uuid4(),
            incident_id=incident.id,
            status=status,
            content=content,
            created_at=now,
        )
        # Newest first, matching the relationship ordering.
        incident.updates.insert(0, update)
        return update

    def _check_end_time(self, incident: Incident, end_time: datetime) -> datetime:
        if end_time.tzinfo is None:
            end_time = end_time.replace(tzinfo=UTC)
        if end_time < incident.start_time:
            raise PayloadValidationError("end_time cannot be before start_time", field="end_time")
        return end_time

    def _apply_status(self, incident: Incident, status: IncidentStatus, now: datetime) -> None:
        incident.status = status
        if status == IncidentStatus.RESOLVED and incident.end_time is None:
            incident.end_time = now

    async def update_incident(self, incident: Incident, changes: dict[str, Any]) -> Incident:
        """Apply a partial update.

        A change of status or content also appends a timeline entry.
        An explicit ``end_time`` wins over the one stamped on resolution.
        """
        if changes.get("affected_components") is not None:
            changes["affected_components"] = list(dict.fromkeys(changes["affected_components"]))
            await self.validate_affected_components(incident.project_id, changes["affected_components"])

        if changes.get("end_time") is not None:
            changes["end_time"] = self._check_end_time(incident, changes["end_time"])

        now = datetime.now(UTC)
        new_status = changes.pop("status", None)
        for field_name, value in changes.items():
            if value is not None:
                setattr(incident, field_name, value)
        if new_status is not None:
            self._apply_status(incident, new_status, now)

        if new_status is not None or changes.get("content"):
            self._append_update(
                incident,
                status=new_status or incident.status,
                content=changes.get("content") or DEFAULT_UPDATE_CONTENT,
                now=now,
            )
        incident.updated_at = now
        await self._session.flush()
        return incident

    async def add_update(self, incident: Incident, status: IncidentStatus, content: str) -> IncidentUpdate:
        """Set the incident status and record the timeline entry."""
        now = datetime.now(UTC)
        previous = incident.status
        self._apply_status(incident, status, now)
        update = self._append_update(incident, status=status, content=content, now=now)
        incident.updated_at = now
        await self._session.flush()
        logger.info("Incident %s status %s -> %s", incident.id, previous, status)
        return update

    async def delete_incident(self, incident: Incident) -> None:
        await self._session.delete(incident)
        await self._session.flush()
        logger.info("Incident %s deleted", incident.id)
