"""Incident models: the incident ledger and its append-only update timeline."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statuspage.core.database import Base


class IncidentStatus(enum.StrEnum):
    """Incident lifecycle states."""

    INVESTIGATING = "investigating"
    IDENTIFIED = "identified"
    MONITORING = "monitoring"
    RESOLVED = "resolved"


class IncidentImpact(enum.StrEnum):
    """How badly an incident affects users."""

    NONE = "none"
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"


class Incident(Base):
    """A reported disruption affecting zero or more components.

    ``affected_components`` holds bare component ids with no foreign key:
    a component deleted after the incident was filed simply stops
    resolving to a name.
    """

    __tablename__ = "incidents"
    __table_args__ = (
        Index("ix_incidents_project_created", "project_id", "created_at"),
        Index("ix_incidents_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[IncidentStatus] = mapped_column(
        Enum(IncidentStatus, values_callable=lambda e: [x.value for x in e]),
        default=IncidentStatus.INVESTIGATING,
        server_default="investigating",
        nullable=False,
    )
    impact: Mapped[IncidentImpact] = mapped_column(
        Enum(IncidentImpact, values_callable=lambda e: [x.value for x in e]),
        default=IncidentImpact.MINOR,
        server_default="minor",
        nullable=False,
    )
    affected_components: Mapped[list[uuid.UUID]] = mapped_column(
        ARRAY(UUID(as_uuid=True)), default=list, server_default="{}", nullable=False
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Newest first; selectin so async code never triggers a lazy load.
    updates: Mapped[list[IncidentUpdate]] = relationship(
        "IncidentUpdate",
        back_populates="incident",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="desc(IncidentUpdate.created_at)",
    )

    def __repr__(self) -> str:
        return f"<Incident(id={self.id}, status={self.status}, impact={self.impact})>"


class IncidentUpdate(Base):
    """A timeline entry on an incident."""

    __tablename__ = "incident_updates"
    __table_args__ = (Index("ix_incident_updates_incident_id", "incident_id"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    incident_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("incidents.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[IncidentStatus] = mapped_column(
        Enum(IncidentStatus, values_callable=lambda e: [x.value for x in e]), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    incident: Mapped[Incident] = relationship("Incident", back_populates="updates")

    def __repr__(self) -> str:
        return f"<IncidentUpdate(id={self.id}, status={self.status})>"
