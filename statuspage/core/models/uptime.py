"""Uptime check configuration and the per-check result log.

Rows in ``uptime_logs`` are written by an external checker. This service
only reads them, apart from the opt-in retention cleanup.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statuspage.core.database import Base

if TYPE_CHECKING:
    from statuspage.core.models.component import Component


class UptimeStatus(enum.StrEnum):
    """Result of the most recent run of a check."""

    UP = "up"
    DOWN = "down"
    UNKNOWN = "unknown"


class UptimeCheck(Base):
    """A configured health check attached to a component."""

    __tablename__ = "uptime_checks"
    __table_args__ = (
        Index("ix_uptime_checks_project_id", "project_id"),
        Index("ix_uptime_checks_component_id", "component_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    component_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("components.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    method: Mapped[str] = mapped_column(String(10), nullable=False, default="GET")
    timeout: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    interval: Mapped[int] = mapped_column(Integer, nullable=False, default=300)  # seconds
    expected_status_codes: Mapped[list[int]] = mapped_column(ARRAY(Integer), nullable=False, default=lambda: [200])
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_status: Mapped[UptimeStatus] = mapped_column(
        Enum(UptimeStatus, values_callable=lambda e: [x.value for x in e]),
        default=UptimeStatus.UNKNOWN,
        server_default="unknown",
        nullable=False,
    )
    last_checked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    component: Mapped[Component] = relationship("Component", back_populates="uptime_checks")

    def __repr__(self) -> str:
        return f"<UptimeCheck(id={self.id}, url='{self.url}')>"


class UptimeLog(Base):
    """One recorded check outcome."""

    __tablename__ = "uptime_logs"
    __table_args__ = (Index("ix_uptime_logs_check_checked_at", "uptime_check_id", "checked_at"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    uptime_check_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("uptime_checks.id", ondelete="CASCADE"), nullable=False
    )
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    response_time: Mapped[int | None] = mapped_column(Integer, nullable=True)  # milliseconds
    status_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    checked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<UptimeLog(id={self.id}, success={self.success})>"
