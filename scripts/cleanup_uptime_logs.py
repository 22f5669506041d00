"""Delete uptime logs older than the configured retention window.

Retention is opt-in: set UPTIME_LOG_RETENTION_DAYS (or pass --days).
Without either, the script exits without deleting anything.

Usage:
    python -m scripts.cleanup_uptime_logs
    python -m scripts.cleanup_uptime_logs --days 180
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from statuspage.core.config import get_settings
from statuspage.core.database import create_engine
from statuspage.core.retention import cleanup_old_uptime_logs

logging.basicConfig(level=logging.INFO, format="%(levelname)s  %(message)s")
logger = logging.getLogger(__name__)


async def run(days: int | None) -> int:
    settings = get_settings()
    retention_days = days if days is not None else settings.uptime_log_retention_days
    if retention_days is None:
        logger.warning("No retention window configured (UPTIME_LOG_RETENTION_DAYS); skipping cleanup")
        return 0

    engine, session_factory = create_engine(settings)
    try:
        async with session_factory() as session:
            deleted = await cleanup_old_uptime_logs(session, retention_days)
            await session.commit()
    finally:
        await engine.dispose()
    return deleted


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Prune old uptime logs")
    parser.add_argument("--days", type=int, default=None, help="Retention window in days (overrides settings)")
    args = parser.parse_args(argv)
    if args.days is not None and args.days < 1:
        parser.error("--days must be at least 1")

    deleted = asyncio.run(run(args.days))
    logger.info("Done: %d uptime logs deleted", deleted)
    return 0


if __name__ == "__main__":
    sys.exit(main())
