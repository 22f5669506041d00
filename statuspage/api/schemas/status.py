"""Pydantic schemas for the public status page."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel

from statuspage.api.schemas.components import ComponentRead
from statuspage.api.schemas.incidents import IncidentRead
from statuspage.core.models import ComponentStatus


class PublicProject(BaseModel):
    """Project fields that are safe to show without authentication."""

    model_config = {"from_attributes": True}

    id: UUID
    name: str
    slug: str
    description: str | None = None
    custom_domain: str | None = None
    branding: dict[str, Any] | None = None


class ComponentUptimeRead(BaseModel):
    component_id: UUID
    component_name: str
    uptime_percentage: float
    avg_response_time: float
    total_checks: int
    successful_checks: int


class DailyUptimeRead(BaseModel):
    date: str
    uptime_percentage: float
    total_checks: int
    successful_checks: int


class UptimeStatsRead(BaseModel):
    overall_uptime: float
    components: list[ComponentUptimeRead]
    daily_data: list[DailyUptimeRead]
    period_days: int


class StatusPage(BaseModel):
    project: PublicProject
    components: list[ComponentRead]
    incidents: list[IncidentRead]
    overall_status: ComponentStatus
    uptime_stats: UptimeStatsRead


class StatusSummary(BaseModel):
    overall_status: ComponentStatus
    component_status_distribution: dict[str, int]
    active_incidents: int
    recent_uptime_24h: float
    status_message: str
