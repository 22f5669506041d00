"""Pydantic schemas for components."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from statuspage.api.schemas.common import Pagination, reject_null
from statuspage.core.models import ComponentStatus


class ComponentCreate(BaseModel):
    """Schema for creating a component. Position is assigned by the server."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    status: ComponentStatus = ComponentStatus.OPERATIONAL


class ComponentPatch(BaseModel):
    """Schema for updating a component (PATCH). All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    status: ComponentStatus | None = None
    position: int | None = Field(None, ge=1)

    @field_validator("name", "status", "position")
    @classmethod
    def check_not_null(cls, v: Any) -> Any:
        return reject_null(v)


class ComponentStatusChange(BaseModel):
    status: ComponentStatus


class ComponentPosition(BaseModel):
    id: UUID
    position: int = Field(..., ge=1)


class ComponentReorder(BaseModel):
    """Bulk reorder payload; every id must belong to the project."""

    components: list[ComponentPosition] = Field(..., min_length=1)

    @field_validator("components")
    @classmethod
    def check_unique_ids(cls, v: list[ComponentPosition]) -> list[ComponentPosition]:
        ids = [item.id for item in v]
        if len(ids) != len(set(ids)):
            raise ValueError("component ids must be unique")
        return v


class ComponentRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    project_id: UUID
    name: str
    description: str | None = None
    status: ComponentStatus
    position: int
    created_at: datetime
    updated_at: datetime


class ComponentList(BaseModel):
    components: list[ComponentRead]
    pagination: Pagination
