"""Human-readable one-line status sentence for the public summary."""

from __future__ import annotations

from statuspage.core.models import ComponentStatus

STATUS_MESSAGES: dict[str, str] = {
    ComponentStatus.OPERATIONAL: "All systems operational",
    ComponentStatus.DEGRADED: "Some systems experiencing degraded performance",
    ComponentStatus.PARTIAL_OUTAGE: "Some systems experiencing partial outage",
    ComponentStatus.MAJOR_OUTAGE: "Major outage affecting multiple systems",
    ComponentStatus.MAINTENANCE: "Scheduled maintenance in progress",
}

UNKNOWN_STATUS_MESSAGE = "Status unknown"


def compose_status_message(overall_status: str, active_incidents: int) -> str:
    """Describe the project state in one sentence.

    Active incidents take precedence over component status.
    """
    if active_incidents > 0:
        suffix = "s" if active_incidents > 1 else ""
        return f"We are currently experiencing {active_incidents} active incident{suffix}"
    return STATUS_MESSAGES.get(overall_status, UNKNOWN_STATUS_MESSAGE)
