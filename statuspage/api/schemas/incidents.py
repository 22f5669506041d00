"""Pydantic schemas for incidents and their update timelines."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from statuspage.api.schemas.common import Pagination
from statuspage.core.models import IncidentImpact, IncidentStatus


class IncidentCreate(BaseModel):
    """Schema for filing an incident."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    status: IncidentStatus = IncidentStatus.INVESTIGATING
    impact: IncidentImpact = IncidentImpact.MINOR
    affected_components: list[UUID] = Field(default_factory=list)
    start_time: datetime | None = None


class IncidentPatch(BaseModel):
    """Schema for updating an incident (PATCH). All fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1)
    status: IncidentStatus | None = None
    impact: IncidentImpact | None = None
    affected_components: list[UUID] | None = None
    end_time: datetime | None = None


class IncidentUpdateCreate(BaseModel):
    """Schema for appending a timeline entry."""

    status: IncidentStatus
    content: str = Field(..., min_length=1)


class IncidentUpdateRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    incident_id: UUID
    status: IncidentStatus
    content: str
    created_at: datetime


class IncidentRead(BaseModel):
    """An incident with its timeline (newest first) and affected component names."""

    id: UUID
    project_id: UUID
    title: str
    content: str
    status: IncidentStatus
    impact: IncidentImpact
    affected_components: list[UUID]
    affected_component_names: list[str]
    start_time: datetime
    end_time: datetime | None = None
    created_at: datetime
    updated_at: datetime
    updates: list[IncidentUpdateRead]


class IncidentList(BaseModel):
    incidents: list[IncidentRead]
    pagination: Pagination
