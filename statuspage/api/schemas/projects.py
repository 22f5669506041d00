"""Pydantic schemas for projects and project statistics."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from statuspage.api.schemas.common import Pagination, reject_null

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def _check_slug(v: str | None) -> str | None:
    if v is not None and not SLUG_PATTERN.match(v):
        raise ValueError("slug may only contain lowercase letters, digits and single hyphens")
    return v


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    custom_domain: str | None = Field(None, max_length=255)
    branding: dict[str, Any] | None = None

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        return _check_slug(v) or v


class ProjectPatch(BaseModel):
    """Schema for updating a project (PATCH). All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    custom_domain: str | None = Field(None, max_length=255)
    branding: dict[str, Any] | None = None

    @field_validator("name", "slug")
    @classmethod
    def check_not_null(cls, v: str | None) -> str | None:
        return reject_null(v)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        return _check_slug(v)


class ProjectRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    user_id: UUID
    name: str
    slug: str
    description: str | None = None
    custom_domain: str | None = None
    branding: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime


class ProjectList(BaseModel):
    projects: list[ProjectRead]
    pagination: Pagination


class ProjectStats(BaseModel):
    """Incident and component counters for the project dashboard."""

    total_incidents: int
    active_incidents: int
    resolved_incidents: int
    critical_incidents: int
    major_incidents: int
    minor_incidents: int
    avg_resolution_hours: float | None = None
    component_status_distribution: dict[str, int]
