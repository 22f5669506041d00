"""Tests for uptime rollups: percentages, daily buckets and the lenient fallback."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime, timedelta
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from statuspage.aggregation.uptime import (
    UptimeAggregator,
    neutral_uptime_stats,
    uptime_percentage,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
PROJECT_ID = uuid.uuid4()


def _rows_result(rows: list) -> MagicMock:
    result = MagicMock()
    result.all.return_value = rows
    return result


def _one_result(total: int, successful: int) -> MagicMock:
    result = MagicMock()
    result.one.return_value = SimpleNamespace(total_checks=total, successful_checks=successful)
    return result


def _component_row(name: str, total: int, successful: int, avg: float | None) -> SimpleNamespace:
    return SimpleNamespace(
        component_id=uuid.uuid4(),
        component_name=name,
        total_checks=total,
        successful_checks=successful,
        avg_response_time=avg,
    )


def _day_row(day: date, total: int, successful: int) -> SimpleNamespace:
    return SimpleNamespace(day=day, total_checks=total, successful_checks=successful)


class _Savepoint:
    def __init__(self) -> None:
        self.exit_exc_type: type[BaseException] | None = None

    async def __aenter__(self) -> _Savepoint:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        self.exit_exc_type = exc_type
        return False


def _session(*results: Any) -> AsyncMock:
    session = AsyncMock()
    session.execute = AsyncMock(side_effect=list(results))
    session.rollback = AsyncMock()
    savepoint = _Savepoint()
    session.begin_nested = MagicMock(return_value=savepoint)
    session.savepoint = savepoint
    return session


def _compiled(session: AsyncMock, call_index: int) -> tuple[str, str, str, list]:
    """SQL text (whitespace collapsed), its join and WHERE parts, and the bound values."""
    stmt = session.execute.call_args_list[call_index].args[0]
    compiled = stmt.compile(dialect=postgresql.dialect())
    sql = " ".join(str(compiled).split())
    joins, where = sql.split(" FROM ", 1)[1].split(" WHERE ", 1)
    return sql, joins, where, list(compiled.params.values())


class TestUptimePercentage:
    def test_empty_sample_is_full_uptime(self) -> None:
        assert uptime_percentage(0, 0) == 100.0

    def test_ratio(self) -> None:
        assert uptime_percentage(8, 10) == 80.0

    def test_rounded_to_two_decimals(self) -> None:
        assert uptime_percentage(2, 3) == 66.67

    @pytest.mark.parametrize(("successful", "total"), [(0, 1), (1, 1), (999, 1000), (1, 7)])
    def test_bounded(self, successful: int, total: int) -> None:
        assert 0 <= uptime_percentage(successful, total) <= 100


class TestGetUptimeStatistics:
    async def test_no_logs_reports_full_uptime(self) -> None:
        session = _session(
            _rows_result([_component_row("API", 0, 0, None)]),
            _one_result(0, 0),
            _rows_result([]),
        )
        stats = await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=90, now=NOW)

        assert stats.overall_uptime == 100.0
        assert stats.period_days == 90
        assert stats.components[0].uptime_percentage == 100.0
        assert stats.components[0].avg_response_time == 0
        assert stats.daily_data == []

    async def test_eight_of_ten_successful(self) -> None:
        session = _session(
            _rows_result([_component_row("API", 10, 8, 123.456)]),
            _one_result(10, 8),
            _rows_result([_day_row(date(2026, 10, 18), 10, 8)]),
        )
        stats = await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=7, now=NOW)

        assert stats.overall_uptime == 80.0
        component = stats.components[0]
        assert component.component_name == "API"
        assert component.uptime_percentage == 80.0
        assert component.avg_response_time == 123.46
        assert component.total_checks == 10
        assert component.successful_checks == 8
        assert stats.daily_data[0].date == "2026-10-18"
        assert stats.daily_data[0].uptime_percentage == 80.0

    async def test_component_order_is_preserved(self) -> None:
        session = _session(
            _rows_result([_component_row("API", 4, 4, 50), _component_row("Database", 4, 2, 80)]),
            _one_result(8, 6),
            _rows_result([]),
        )
        stats = await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=30, now=NOW)

        assert [c.component_name for c in stats.components] == ["API", "Database"]
        assert stats.overall_uptime == 75.0

    async def test_daily_buckets_capped_and_within_window(self) -> None:
        days = 3
        rows = [_day_row(NOW.date() - timedelta(days=offset), 10, 9) for offset in range(6)]
        rows.append(_day_row(NOW.date() + timedelta(days=1), 5, 5))
        session = _session(_rows_result([]), _one_result(0, 0), _rows_result(rows))

        stats = await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=days, now=NOW)

        assert len(stats.daily_data) <= days
        first_day = (NOW - timedelta(days=days)).date()
        for bucket in stats.daily_data:
            assert first_day <= date.fromisoformat(bucket.date) <= NOW.date()
        dates = [bucket.date for bucket in stats.daily_data]
        assert dates == sorted(dates, reverse=True)

    async def test_daily_rows_accept_datetime_values(self) -> None:
        rows = [_day_row(datetime(2026, 10, 17, tzinfo=UTC), 4, 1)]
        session = _session(_rows_result([]), _one_result(4, 1), _rows_result(rows))

        stats = await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=7, now=NOW)

        assert stats.daily_data[0].date == "2026-10-17"
        assert stats.daily_data[0].uptime_percentage == 25.0

    async def test_query_failure_returns_neutral_stats(self, caplog: pytest.LogCaptureFixture) -> None:
        session = _session(OperationalError("SELECT", {}, Exception("connection lost")))

        with caplog.at_level(logging.ERROR, logger="statuspage.aggregation.uptime"):
            stats = await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=45, now=NOW)

        assert stats == neutral_uptime_stats(45)
        assert stats.to_dict() == {"overall_uptime": 100.0, "period_days": 45, "components": [], "daily_data": []}
        assert any(record.exc_info for record in caplog.records)

    async def test_failure_only_unwinds_the_savepoint(self) -> None:
        session = _session(_rows_result([]), RuntimeError("boom"))

        stats = await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=90, now=NOW)

        assert stats.overall_uptime == 100.0
        session.begin_nested.assert_called_once()
        assert session.savepoint.exit_exc_type is RuntimeError
        session.rollback.assert_not_awaited()

    async def test_reads_run_inside_one_savepoint(self) -> None:
        session = _session(_rows_result([]), _one_result(0, 0), _rows_result([]))

        await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=7, now=NOW)

        session.begin_nested.assert_called_once()
        assert session.savepoint.exit_exc_type is None
        assert session.execute.await_count == 3


class TestUptimeQueries:
    async def test_component_rollup_keeps_window_in_outer_join(self) -> None:
        session = _session(_rows_result([]), _one_result(0, 0), _rows_result([]))

        await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=7, now=NOW)

        sql, joins, where, params = _compiled(session, 0)
        assert "count(uptime_logs.id)" in sql
        assert "count(*)" not in sql
        assert "LEFT OUTER JOIN uptime_logs ON" in joins
        assert "uptime_logs.checked_at >= " in joins
        assert "uptime_logs.checked_at <= " in joins
        # A window in WHERE would turn the outer join into an inner one.
        assert "checked_at" not in where
        assert "components.project_id = " in where
        assert "ORDER BY components.position, components.created_at" in sql
        assert PROJECT_ID in params
        assert NOW - timedelta(days=7) in params
        assert NOW in params

    async def test_overall_counts_scoped_to_project_and_window(self) -> None:
        session = _session(_rows_result([]), _one_result(0, 0), _rows_result([]))

        await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=30, now=NOW)

        sql, joins, where, params = _compiled(session, 1)
        assert "JOIN uptime_checks ON uptime_logs.uptime_check_id = uptime_checks.id" in joins
        assert "JOIN components ON uptime_checks.component_id = components.id" in joins
        assert "components.project_id = " in where
        assert "uptime_logs.checked_at >= " in where
        assert "uptime_logs.checked_at <= " in where
        assert "FILTER (WHERE uptime_logs.success IS true)" in sql
        assert PROJECT_ID in params
        assert NOW - timedelta(days=30) in params
        assert NOW in params

    async def test_daily_buckets_use_utc_days_and_cap(self) -> None:
        session = _session(_rows_result([]), _one_result(0, 0), _rows_result([]))

        await UptimeAggregator(session).get_uptime_statistics(PROJECT_ID, days=7, now=NOW)

        sql, _, where, params = _compiled(session, 2)
        assert "date(timezone(" in sql
        assert "UTC" in params
        assert "components.project_id = " in where
        assert "uptime_logs.checked_at >= " in where
        assert "ORDER BY day DESC" in sql
        assert "LIMIT " in sql
        assert 7 in params
        assert NOW - timedelta(days=7) in params

    async def test_recent_uptime_window(self) -> None:
        session = _session(_one_result(0, 0))

        await UptimeAggregator(session).get_recent_uptime(PROJECT_ID, hours=24, now=NOW)

        _, _, where, params = _compiled(session, 0)
        assert "components.project_id = " in where
        assert PROJECT_ID in params
        assert NOW - timedelta(hours=24) in params
        assert NOW in params


class TestGetRecentUptime:
    async def test_ratio_over_last_day(self) -> None:
        session = _session(_one_result(200, 199))
        assert await UptimeAggregator(session).get_recent_uptime(PROJECT_ID, now=NOW) == 99.5

    async def test_no_logs(self) -> None:
        session = _session(_one_result(0, 0))
        assert await UptimeAggregator(session).get_recent_uptime(PROJECT_ID, now=NOW) == 100.0

    async def test_failure_falls_back_to_full_uptime(self) -> None:
        session = _session(OperationalError("SELECT", {}, Exception("timeout")))

        assert await UptimeAggregator(session).get_recent_uptime(PROJECT_ID, now=NOW) == 100.0
        assert session.savepoint.exit_exc_type is OperationalError
        session.rollback.assert_not_awaited()
