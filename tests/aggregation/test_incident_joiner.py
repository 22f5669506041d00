"""Tests for joining incidents with timelines and affected component names."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.dialects import postgresql

from statuspage.aggregation.incidents import IncidentJoiner, join_incident
from statuspage.core.models import Incident, IncidentImpact, IncidentStatus, IncidentUpdate

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
PROJECT_ID = uuid.uuid4()


def _make_incident(affected: list[uuid.UUID] | None = None, **overrides) -> Incident:  # noqa: ANN003
    incident_id = overrides.pop("id", uuid.uuid4())
    created = overrides.pop("created_at", NOW - timedelta(hours=2))
    updates = overrides.pop(
        "updates",
        [
            IncidentUpdate(
                id=uuid.uuid4(),
                incident_id=incident_id,
                status=IncidentStatus.INVESTIGATING,
                content="Looking into it",
                created_at=created,
            ),
            IncidentUpdate(
                id=uuid.uuid4(),
                incident_id=incident_id,
                status=IncidentStatus.IDENTIFIED,
                content="Found the cause",
                created_at=created + timedelta(minutes=30),
            ),
        ],
    )
    defaults = {
        "id": incident_id,
        "project_id": PROJECT_ID,
        "title": "API errors",
        "content": "Looking into it",
        "status": IncidentStatus.IDENTIFIED,
        "impact": IncidentImpact.MAJOR,
        "affected_components": affected or [],
        "start_time": created,
        "end_time": None,
        "created_at": created,
        "updated_at": created,
        "updates": updates,
    }
    defaults.update(overrides)
    return Incident(**defaults)


def _scalars_result(items: list) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = items
    return result


def _compiled(session: AsyncMock, call_index: int) -> tuple[str, list]:
    """SQL text (whitespace collapsed) and bound values of an executed statement."""
    stmt = session.execute.call_args_list[call_index].args[0]
    compiled = stmt.compile(dialect=postgresql.dialect())
    return " ".join(str(compiled).split()), list(compiled.params.values())


def _names_result(pairs: list[tuple[uuid.UUID, str]]) -> MagicMock:
    result = MagicMock()
    result.all.return_value = [SimpleNamespace(id=cid, name=name) for cid, name in pairs]
    return result


class TestJoinIncident:
    def test_updates_newest_first(self) -> None:
        joined = join_incident(_make_incident(), {})
        contents = [u["content"] for u in joined["updates"]]
        assert contents == ["Found the cause", "Looking into it"]

    def test_deleted_component_is_dropped_from_names(self) -> None:
        api_id, deleted_id = uuid.uuid4(), uuid.uuid4()
        incident = _make_incident(affected=[api_id, deleted_id])

        joined = join_incident(incident, {api_id: "API"})

        assert joined["affected_component_names"] == ["API"]
        assert joined["affected_components"] == [api_id, deleted_id]

    def test_names_follow_affected_order(self) -> None:
        a, b = uuid.uuid4(), uuid.uuid4()
        joined = join_incident(_make_incident(affected=[b, a, b]), {a: "API", b: "Database"})
        assert joined["affected_component_names"] == ["Database", "API"]


class TestIncidentJoiner:
    async def test_list_recent_resolves_names_in_one_query(self) -> None:
        api_id, gone_id = uuid.uuid4(), uuid.uuid4()
        incidents = [_make_incident(affected=[api_id, gone_id]), _make_incident(affected=[api_id])]
        session = AsyncMock()
        session.execute = AsyncMock(side_effect=[_scalars_result(incidents), _names_result([(api_id, "API")])])

        joined = await IncidentJoiner(session).list_recent(PROJECT_ID, days=30, limit=20, now=NOW)

        assert len(joined) == 2
        assert joined[0]["affected_component_names"] == ["API"]
        assert joined[1]["affected_component_names"] == ["API"]
        assert session.execute.await_count == 2

    async def test_no_affected_components_skips_name_lookup(self) -> None:
        session = AsyncMock()
        session.execute = AsyncMock(side_effect=[_scalars_result([_make_incident()])])

        joined = await IncidentJoiner(session).list_recent(PROJECT_ID, days=90, limit=50, now=NOW)

        assert joined[0]["affected_component_names"] == []
        assert session.execute.await_count == 1

    async def test_empty_window(self) -> None:
        session = AsyncMock()
        session.execute = AsyncMock(side_effect=[_scalars_result([])])

        assert await IncidentJoiner(session).list_recent(PROJECT_ID, days=7, limit=10, now=NOW) == []

    async def test_join_one(self) -> None:
        db_id = uuid.uuid4()
        session = AsyncMock()
        session.execute = AsyncMock(return_value=_names_result([(db_id, "Database")]))

        joined = await IncidentJoiner(session).join_one(_make_incident(affected=[db_id]))

        assert joined["affected_component_names"] == ["Database"]
        assert joined["project_id"] == PROJECT_ID


class TestIncidentQueries:
    async def test_recent_window_is_scoped_and_capped(self) -> None:
        session = AsyncMock()
        session.execute = AsyncMock(side_effect=[_scalars_result([])])

        await IncidentJoiner(session).list_recent(PROJECT_ID, days=30, limit=20, now=NOW)

        sql, params = _compiled(session, 0)
        where = sql.split(" WHERE ", 1)[1]
        assert "incidents.project_id = " in where
        assert "incidents.created_at >= " in where
        assert "ORDER BY incidents.created_at DESC" in sql
        assert "LIMIT " in sql
        assert PROJECT_ID in params
        assert NOW - timedelta(days=30) in params
        assert 20 in params

    async def test_name_lookup_is_scoped_to_project(self) -> None:
        api_id = uuid.uuid4()
        session = AsyncMock()
        session.execute = AsyncMock(
            side_effect=[_scalars_result([_make_incident(affected=[api_id])]), _names_result([(api_id, "API")])]
        )

        await IncidentJoiner(session).list_recent(PROJECT_ID, days=30, limit=20, now=NOW)

        sql, params = _compiled(session, 1)
        assert sql.startswith("SELECT components.id, components.name FROM components WHERE")
        assert "components.project_id = " in sql
        assert "components.id IN " in sql
        assert PROJECT_ID in params
        assert any(api_id in value for value in params if isinstance(value, (list, set, tuple)))
