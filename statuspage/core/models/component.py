"""Component model and the five-value operational status enum."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statuspage.core.database import Base

if TYPE_CHECKING:
    from statuspage.core.models.project import Project
    from statuspage.core.models.uptime import UptimeCheck


class ComponentStatus(enum.StrEnum):
    """Current operational state of a monitored component."""

    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    PARTIAL_OUTAGE = "partial_outage"
    MAJOR_OUTAGE = "major_outage"
    MAINTENANCE = "maintenance"


class Component(Base):
    """A monitored service or unit within a project (e.g. "API", "Database")."""

    __tablename__ = "components"
    __table_args__ = (
        Index("ix_components_project_id", "project_id"),
        Index("ix_components_project_position", "project_id", "position"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ComponentStatus] = mapped_column(
        Enum(ComponentStatus, values_callable=lambda e: [x.value for x in e]),
        default=ComponentStatus.OPERATIONAL,
        server_default="operational",
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    project: Mapped[Project] = relationship("Project", back_populates="components")
    uptime_checks: Mapped[list[UptimeCheck]] = relationship(
        "UptimeCheck", back_populates="component", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Component(id={self.id}, name='{self.name}', status={self.status})>"
