"""Seed script: populates the database with a demo status page.

Creates an owner, an "acme" project with four components, uptime checks
with 30 days of check logs, and a few incidents with timelines. Prints an
access token for the owner so the management API can be tried at once.

Usage:
    python -m scripts.seed_demo          # seed everything
    python -m scripts.seed_demo --reset  # wipe the demo project and reseed

Requires: a bootstrapped PostgreSQL database (see scripts.bootstrap_db).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select

from statuspage.core.auth import create_access_token
from statuspage.core.config import get_settings
from statuspage.core.database import create_engine
from statuspage.core.models import (
    DEFAULT_BRANDING,
    DEFAULT_NOTIFY_ON,
    Component,
    ComponentStatus,
    Incident,
    IncidentImpact,
    IncidentStatus,
    IncidentUpdate,
    NotifyChannel,
    Project,
    Subscriber,
    UptimeCheck,
    UptimeLog,
    UptimeStatus,
    User,
    UserRole,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s  %(message)s")
logger = logging.getLogger(__name__)

# Stable ids across runs.
NS = uuid.UUID("5a7c0e51-2b1d-4f3e-9c6a-0d8e7f6a5b4c")


def _id(name: str) -> uuid.UUID:
    return uuid.uuid5(NS, name)


OWNER_ID = _id("owner")
PROJECT_ID = _id("project:acme")
DEMO_SLUG = "acme"

COMPONENTS = [
    ("API", "Public REST API", ComponentStatus.OPERATIONAL, 0.999),
    ("Dashboard", "Web dashboard", ComponentStatus.OPERATIONAL, 0.995),
    ("Database", "Primary PostgreSQL cluster", ComponentStatus.DEGRADED, 0.98),
    ("Webhooks", "Outbound webhook delivery", ComponentStatus.OPERATIONAL, 0.99),
]

LOG_DAYS = 30
LOGS_PER_DAY = 48


async def reset(session) -> None:  # type: ignore[no-untyped-def]
    logger.info("Removing existing demo project")
    await session.execute(delete(Project).where(Project.slug == DEMO_SLUG))
    await session.commit()


async def seed(session) -> None:  # type: ignore[no-untyped-def]
    now = datetime.now(UTC)
    rng = random.Random(42)

    existing = await session.execute(select(Project.id).where(Project.slug == DEMO_SLUG))
    if existing.scalar_one_or_none() is not None:
        logger.info("Demo project already present; use --reset to reseed")
        return

    owner = await session.get(User, OWNER_ID)
    if owner is None:
        owner = User(id=OWNER_ID, email="owner@example.com", name="Demo Owner", role=UserRole.OWNER)
        session.add(owner)

    project = Project(
        id=PROJECT_ID,
        user_id=OWNER_ID,
        name="Acme Cloud",
        slug=DEMO_SLUG,
        description="Demo status page",
        branding=dict(DEFAULT_BRANDING),
        created_at=now,
        updated_at=now,
    )
    session.add(project)

    component_ids = []
    for position, (name, description, status, success_rate) in enumerate(COMPONENTS, start=1):
        component = Component(
            id=_id(f"component:{name}"),
            project_id=PROJECT_ID,
            name=name,
            description=description,
            status=status,
            position=position,
            created_at=now,
            updated_at=now,
        )
        session.add(component)
        component_ids.append(component.id)

        check = UptimeCheck(
            id=_id(f"check:{name}"),
            project_id=PROJECT_ID,
            component_id=component.id,
            name=f"{name} check",
            url=f"https://{name.lower()}.acme.example/health",
            last_status=UptimeStatus.UP,
            last_checked_at=now,
        )
        session.add(check)

        step = timedelta(days=1) / LOGS_PER_DAY
        for i in range(LOG_DAYS * LOGS_PER_DAY):
            success = rng.random() < success_rate
            session.add(
                UptimeLog(
                    uptime_check_id=check.id,
                    success=success,
                    response_time=rng.randint(40, 400) if success else None,
                    status_code=200 if success else 503,
                    error_message=None if success else "Service Unavailable",
                    checked_at=now - i * step,
                )
            )
    logger.info("Created %d components with %d logs each", len(COMPONENTS), LOG_DAYS * LOGS_PER_DAY)

    resolved_at = now - timedelta(days=6)
    resolved = Incident(
        id=_id("incident:webhooks"),
        project_id=PROJECT_ID,
        title="Delayed webhook deliveries",
        content="Webhook deliveries are delayed by up to 10 minutes.",
        status=IncidentStatus.RESOLVED,
        impact=IncidentImpact.MINOR,
        affected_components=[component_ids[3]],
        start_time=resolved_at - timedelta(hours=2),
        end_time=resolved_at,
        created_at=resolved_at - timedelta(hours=2),
        updated_at=resolved_at,
        updates=[
            IncidentUpdate(
                status=IncidentStatus.INVESTIGATING,
                content="Webhook deliveries are delayed by up to 10 minutes.",
                created_at=resolved_at - timedelta(hours=2),
            ),
            IncidentUpdate(
                status=IncidentStatus.RESOLVED,
                content="The delivery backlog has been drained.",
                created_at=resolved_at,
            ),
        ],
    )
    active = Incident(
        id=_id("incident:database"),
        project_id=PROJECT_ID,
        title="Elevated database latency",
        content="Some queries are slower than usual.",
        status=IncidentStatus.MONITORING,
        impact=IncidentImpact.MAJOR,
        affected_components=[component_ids[2], component_ids[0]],
        start_time=now - timedelta(hours=3),
        created_at=now - timedelta(hours=3),
        updated_at=now - timedelta(minutes=30),
        updates=[
            IncidentUpdate(
                status=IncidentStatus.INVESTIGATING,
                content="Some queries are slower than usual.",
                created_at=now - timedelta(hours=3),
            ),
            IncidentUpdate(
                status=IncidentStatus.MONITORING,
                content="A failover completed; latency is recovering.",
                created_at=now - timedelta(minutes=30),
            ),
        ],
    )
    session.add_all([resolved, active])
    session.add(
        Subscriber(
            id=_id("subscriber:ops"),
            project_id=PROJECT_ID,
            email="ops@statuspage.dev",
            notify_by=[NotifyChannel.EMAIL.value],
            notify_on=[event.value for event in DEFAULT_NOTIFY_ON],
            verified=True,
            created_at=now,
            updated_at=now,
        )
    )
    await session.commit()
    logger.info("Seeded project '%s' (%s) with 2 incidents and 1 subscriber", DEMO_SLUG, PROJECT_ID)


async def main(do_reset: bool) -> None:
    settings = get_settings()
    engine, session_factory = create_engine(settings)
    try:
        async with session_factory() as session:
            if do_reset:
                await reset(session)
            await seed(session)
    finally:
        await engine.dispose()

    token = create_access_token({"sub": str(OWNER_ID)}, settings)
    logger.info("Public page: /api/v1/status/%s", DEMO_SLUG)
    logger.info("Owner token: %s", token)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a demo status page")
    parser.add_argument("--reset", action="store_true", help="Remove the demo project first")
    args = parser.parse_args()
    asyncio.run(main(args.reset))
