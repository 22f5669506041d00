"""Tests for the one-line status message."""

from __future__ import annotations

import pytest

from statuspage.aggregation.summary import compose_status_message


class TestComposeStatusMessage:
    def test_all_operational(self) -> None:
        assert compose_status_message("operational", 0) == "All systems operational"

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            ("degraded", "Some systems experiencing degraded performance"),
            ("partial_outage", "Some systems experiencing partial outage"),
            ("major_outage", "Major outage affecting multiple systems"),
            ("maintenance", "Scheduled maintenance in progress"),
        ],
    )
    def test_status_sentences(self, status: str, expected: str) -> None:
        assert compose_status_message(status, 0) == expected

    def test_unknown_status(self) -> None:
        assert compose_status_message("sideways", 0) == "Status unknown"

    def test_single_active_incident(self) -> None:
        message = compose_status_message("operational", 1)
        assert message == "We are currently experiencing 1 active incident"

    def test_plural_active_incidents(self) -> None:
        message = compose_status_message("operational", 3)
        assert message == "We are currently experiencing 3 active incidents"

    @pytest.mark.parametrize("status", ["major_outage", "maintenance", "degraded"])
    def test_incidents_override_component_status(self, status: str) -> None:
        assert compose_status_message(status, 2) == "We are currently experiencing 2 active incidents"
