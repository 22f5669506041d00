"""Status page subscribers and their notification preferences.

Only the subscription records live here. Delivering notifications is
left to whatever worker reads verified subscribers.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statuspage.core.database import Base

if TYPE_CHECKING:
    from statuspage.core.models.project import Project


class NotifyChannel(enum.StrEnum):
    EMAIL = "email"
    SMS = "sms"


class NotifyEvent(enum.StrEnum):
    INCIDENT_CREATED = "incident_created"
    INCIDENT_UPDATED = "incident_updated"
    INCIDENT_RESOLVED = "incident_resolved"
    MAINTENANCE_SCHEDULED = "maintenance_scheduled"


DEFAULT_NOTIFY_ON: tuple[NotifyEvent, ...] = (NotifyEvent.INCIDENT_CREATED, NotifyEvent.INCIDENT_RESOLVED)


class Subscriber(Base):
    """An email address (and optional phone) subscribed to a project's updates.

    New subscriptions start unverified with a one-time verification
    token; verifying clears the token.
    """

    __tablename__ = "subscribers"
    __table_args__ = (
        UniqueConstraint("project_id", "email", name="uq_subscribers_project_email"),
        Index("ix_subscribers_project_id", "project_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(16), nullable=True)  # E.164
    notify_by: Mapped[list[str]] = mapped_column(ARRAY(String(20)), nullable=False)
    notify_on: Mapped[list[str]] = mapped_column(ARRAY(String(40)), nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    project: Mapped[Project] = relationship("Project", back_populates="subscribers")

    def __repr__(self) -> str:
        return f"<Subscriber(id={self.id}, email='{self.email}', verified={self.verified})>"
