"""Uptime log retention.

Uptime logs grow without bound unless old rows are pruned. Pruning is
opt-in: with ``uptime_log_retention_days`` unset nothing is deleted.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.core.models import UptimeLog

logger = logging.getLogger(__name__)


def retention_cutoff(retention_days: int, now: datetime | None = None) -> datetime:
    """Logs checked before this instant are eligible for deletion."""
    if retention_days < 1:
        raise ValueError("retention_days must be at least 1")
    return (now or datetime.now(UTC)) - timedelta(days=retention_days)


async def cleanup_old_uptime_logs(
    session: AsyncSession,
    retention_days: int | None,
    now: datetime | None = None,
) -> int:
    """Delete uptime logs older than the retention window.

    Returns the number of rows deleted (0 when retention is disabled).
    The caller commits.
    """
    if retention_days is None:
        logger.info("Uptime log retention is disabled; nothing to clean up")
        return 0

    cutoff = retention_cutoff(retention_days, now)
    result = await session.execute(delete(UptimeLog).where(UptimeLog.checked_at < cutoff))
    deleted = result.rowcount or 0
    logger.info("Retention cleanup: deleted %d uptime logs checked before %s", deleted, cutoff.isoformat())
    return deleted
