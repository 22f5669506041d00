"""Component management within a project."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.core.errors import NotFoundError, PayloadValidationError
from statuspage.core.models import Component, ComponentStatus

logger = logging.getLogger(__name__)


class ComponentService:
    """CRUD and ordering for components. The caller commits."""

    def __init__(self, session: AsyncSession, max_components: int = 50) -> None:
        self._session = session
        self._max_components = max_components

    async def get_component(self, project_id: uuid.UUID, component_id: uuid.UUID) -> Component:
        result = await self._session.execute(
            select(Component).where(Component.id == component_id, Component.project_id == project_id)
        )
        component = result.scalar_one_or_none()
        if component is None:
            raise NotFoundError(f"Component {component_id} not found")
        return component

    async def list_components(
        self, project_id: uuid.UUID, page: int = 1, limit: int = 50
    ) -> tuple[list[Component], int]:
        result = await self._session.execute(
            select(Component)
            .where(Component.project_id == project_id)
            .order_by(Component.position, Component.created_at)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        components = list(result.scalars().all())
        count = await self._session.execute(
            select(func.count(Component.id)).where(Component.project_id == project_id)
        )
        return components, count.scalar() or 0

    async def create_component(self, project_id: uuid.UUID, data: dict[str, Any]) -> Component:
        """Append a component after the current last position."""
        count = await self._session.execute(
            select(func.count(Component.id)).where(Component.project_id == project_id)
        )
        if (count.scalar() or 0) >= self._max_components:
            raise PayloadValidationError(
                f"Projects are limited to {self._max_components} components",
            )

        max_position = await self._session.execute(
            select(func.max(Component.position)).where(Component.project_id == project_id)
        )
        position = (max_position.scalar() or 0) + 1

        now = datetime.now(UTC)
        component = Component(
            id=uuid.uuid4(),
            project_id=project_id,
            name=data["name"],
            description=data.get("description"),
            status=data.get("status") or ComponentStatus.OPERATIONAL,
            position=position,
            created_at=now,
            updated_at=now,
        )
        self._session.add(component)
        await self._session.flush()
        logger.info("Component %s created in project %s at position %d", component.id, project_id, position)
        return component

    async def update_component(self, component: Component, changes: dict[str, Any]) -> Component:
        for field_name, value in changes.items():
            # Only the description may be cleared.
            if value is None and field_name != "description":
                continue
            setattr(component, field_name, value)
        component.updated_at = datetime.now(UTC)
        await self._session.flush()
        return component

    async def update_status(self, component: Component, status: ComponentStatus) -> Component:
        previous = component.status
        component.status = status
        component.updated_at = datetime.now(UTC)
        await self._session.flush()
        logger.info("Component %s status %s -> %s", component.id, previous, status)
        return component

    async def delete_component(self, component: Component) -> None:
        # Incidents keep the id in affected_components; it just stops resolving.
        await self._session.delete(component)
        await self._session.flush()
        logger.info("Component %s deleted from project %s", component.id, component.project_id)

    async def reorder(self, project_id: uuid.UUID, positions: dict[uuid.UUID, int]) -> list[Component]:
        """Apply new positions in bulk.

        Raises:
            PayloadValidationError: If any id is not a component of the project.
        """
        result = await self._session.execute(
            select(Component).where(Component.project_id == project_id, Component.id.in_(list(positions)))
        )
        components = list(result.scalars().all())
        found = {c.id for c in components}
        unknown = [str(cid) for cid in positions if cid not in found]
        if unknown:
            raise PayloadValidationError(
                f"Components not found in project: {', '.join(unknown)}",
                field="components",
            )

        now = datetime.now(UTC)
        for component in components:
            component.position = positions[component.id]
            component.updated_at = now
        await self._session.flush()
        return sorted(components, key=lambda c: c.position)
