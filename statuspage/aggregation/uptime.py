"""Uptime rollups over a rolling window of check logs.

Aggregates, per project:
- Uptime percentage and mean response time per component
- Overall uptime across every log of the project
- Daily uptime buckets, newest first

An empty sample always counts as 100 % uptime. The reads run inside a
savepoint: any database failure rolls back only that savepoint, is logged
and is replaced with neutral stats, so objects the caller already loaded
in the same session stay usable and the public page keeps rendering.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.core.models import Component, UptimeCheck, UptimeLog

logger = logging.getLogger(__name__)

FULL_UPTIME = 100.0


def uptime_percentage(successful: int, total: int) -> float:
    """Return ``successful / total`` as a percentage rounded to 2 decimals.

    ``total == 0`` means nothing was measured and reads as full uptime.
    """
    if total <= 0:
        return FULL_UPTIME
    return round(successful / total * 100, 2)


@dataclass
class ComponentUptime:
    """Uptime figures for one component over the window."""

    component_id: str
    component_name: str
    uptime_percentage: float
    avg_response_time: float
    total_checks: int
    successful_checks: int


@dataclass
class DailyUptime:
    """Uptime figures for one calendar day."""

    date: str
    uptime_percentage: float
    total_checks: int
    successful_checks: int


@dataclass
class UptimeStats:
    """Complete uptime rollup for a project."""

    overall_uptime: float
    period_days: int
    components: list[ComponentUptime] = field(default_factory=list)
    daily_data: list[DailyUptime] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def neutral_uptime_stats(days: int) -> UptimeStats:
    """Stats reported when the rollup cannot be computed."""
    return UptimeStats(overall_uptime=FULL_UPTIME, period_days=days)


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class UptimeAggregator:
    """Reads uptime logs for a project and rolls them up.

    Args:
        session: Request-scoped async session. It is never rolled back as a
            whole; a failed rollup only discards its own savepoint.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_uptime_statistics(
        self,
        project_id: UUID,
        days: int = 90,
        now: datetime | None = None,
    ) -> UptimeStats:
        """Compute the rollup over the last ``days`` days.

        Never raises; see the module docstring.
        """
        now = now or datetime.now(UTC)
        window_start = now - timedelta(days=days)
        try:
            async with self.session.begin_nested():
                components = await self._component_uptime(project_id, window_start, now)
                total, successful = await self._overall_counts(project_id, window_start, now)
                daily = await self._daily_uptime(project_id, window_start, now, days)
        except Exception:
            logger.exception("Uptime rollup failed for project %s (days=%d)", project_id, days)
            return neutral_uptime_stats(days)

        return UptimeStats(
            overall_uptime=uptime_percentage(successful, total),
            period_days=days,
            components=components,
            daily_data=daily,
        )

    async def get_recent_uptime(
        self,
        project_id: UUID,
        hours: int = 24,
        now: datetime | None = None,
    ) -> float:
        """Overall uptime over the trailing ``hours`` hours (100.0 on failure)."""
        now = now or datetime.now(UTC)
        try:
            async with self.session.begin_nested():
                total, successful = await self._overall_counts(project_id, now - timedelta(hours=hours), now)
        except Exception:
            logger.exception("Recent uptime query failed for project %s (hours=%d)", project_id, hours)
            return FULL_UPTIME
        return uptime_percentage(successful, total)

    async def _component_uptime(
        self, project_id: UUID, window_start: datetime, now: datetime
    ) -> list[ComponentUptime]:
        # count(log.id) rather than count(*) so the outer join yields 0 for
        # components whose checks logged nothing in the window.
        stmt = (
            select(
                Component.id.label("component_id"),
                Component.name.label("component_name"),
                func.count(UptimeLog.id).label("total_checks"),
                func.count(UptimeLog.id).filter(UptimeLog.success.is_(True)).label("successful_checks"),
                func.avg(UptimeLog.response_time).filter(UptimeLog.success.is_(True)).label("avg_response_time"),
            )
            .select_from(Component)
            .join(UptimeCheck, UptimeCheck.component_id == Component.id)
            .outerjoin(
                UptimeLog,
                and_(
                    UptimeLog.uptime_check_id == UptimeCheck.id,
                    UptimeLog.checked_at >= window_start,
                    UptimeLog.checked_at <= now,
                ),
            )
            .where(Component.project_id == project_id)
            .group_by(Component.id, Component.name, Component.position, Component.created_at)
            .order_by(Component.position, Component.created_at)
        )
        result = await self.session.execute(stmt)

        rows = []
        for row in result.all():
            total = int(row.total_checks or 0)
            successful = int(row.successful_checks or 0)
            rows.append(
                ComponentUptime(
                    component_id=str(row.component_id),
                    component_name=row.component_name,
                    uptime_percentage=uptime_percentage(successful, total),
                    avg_response_time=round(float(row.avg_response_time or 0), 2),
                    total_checks=total,
                    successful_checks=successful,
                )
            )
        return rows

    async def _overall_counts(self, project_id: UUID, window_start: datetime, now: datetime) -> tuple[int, int]:
        stmt = (
            select(
                func.count(UptimeLog.id).label("total_checks"),
                func.count(UptimeLog.id).filter(UptimeLog.success.is_(True)).label("successful_checks"),
            )
            .select_from(UptimeLog)
            .join(UptimeCheck, UptimeLog.uptime_check_id == UptimeCheck.id)
            .join(Component, UptimeCheck.component_id == Component.id)
            .where(
                Component.project_id == project_id,
                UptimeLog.checked_at >= window_start,
                UptimeLog.checked_at <= now,
            )
        )
        row = (await self.session.execute(stmt)).one()
        return int(row.total_checks or 0), int(row.successful_checks or 0)

    async def _daily_uptime(
        self, project_id: UUID, window_start: datetime, now: datetime, days: int
    ) -> list[DailyUptime]:
        # Bucket by UTC calendar day whatever the session TimeZone is.
        day = func.date(func.timezone("UTC", UptimeLog.checked_at)).label("day")
        stmt = (
            select(
                day,
                func.count(UptimeLog.id).label("total_checks"),
                func.count(UptimeLog.id).filter(UptimeLog.success.is_(True)).label("successful_checks"),
            )
            .select_from(UptimeLog)
            .join(UptimeCheck, UptimeLog.uptime_check_id == UptimeCheck.id)
            .join(Component, UptimeCheck.component_id == Component.id)
            .where(
                Component.project_id == project_id,
                UptimeLog.checked_at >= window_start,
                UptimeLog.checked_at <= now,
            )
            .group_by(day)
            .order_by(day.desc())
            .limit(days)
        )
        result = await self.session.execute(stmt)

        first_day, last_day = window_start.date(), now.date()
        buckets = []
        for row in result.all():
            bucket_day = _as_date(row.day)
            if not first_day <= bucket_day <= last_day:
                continue
            total = int(row.total_checks or 0)
            successful = int(row.successful_checks or 0)
            buckets.append(
                DailyUptime(
                    date=bucket_day.isoformat(),
                    uptime_percentage=uptime_percentage(successful, total),
                    total_checks=total,
                    successful_checks=successful,
                )
            )
        buckets.sort(key=lambda b: b.date, reverse=True)
        return buckets[:days]
