"""Project model: the unit a public status page is published for."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from statuspage.core.database import Base

if TYPE_CHECKING:
    from statuspage.core.models.auth import User
    from statuspage.core.models.component import Component
    from statuspage.core.models.subscriber import Subscriber

DEFAULT_BRANDING: dict[str, str] = {
    "primary_color": "#10b981",
    "secondary_color": "#6b7280",
    "background_color": "#ffffff",
    "text_color": "#111827",
    "font_family": "Inter",
}


class Project(Base):
    """A status page project owned by a single user."""

    __tablename__ = "projects"
    __table_args__ = (Index("ix_projects_user_id", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    branding: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owner: Mapped[User] = relationship("User", back_populates="projects")
    components: Mapped[list[Component]] = relationship(
        "Component", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )
    subscribers: Mapped[list[Subscriber]] = relationship(
        "Subscriber", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, slug='{self.slug}')>"
