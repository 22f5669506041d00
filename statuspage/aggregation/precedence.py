"""Overall status resolution from per-component status counts.

The overall status of a project is never stored: callers hand in the
``(status, count)`` pairs of a GROUP BY over components and get the
single most severe status back.
"""

from __future__ import annotations

from collections.abc import Iterable

from statuspage.core.models import ComponentStatus

# Most severe first.
STATUS_SEVERITY: tuple[ComponentStatus, ...] = (
    ComponentStatus.MAJOR_OUTAGE,
    ComponentStatus.PARTIAL_OUTAGE,
    ComponentStatus.MAINTENANCE,
    ComponentStatus.DEGRADED,
    ComponentStatus.OPERATIONAL,
)


def _normalize(pairs: Iterable[tuple[str, int]]) -> dict[ComponentStatus, int]:
    counts: dict[ComponentStatus, int] = {}
    for raw_status, count in pairs:
        try:
            status = ComponentStatus(raw_status)
        except ValueError:
            continue
        counts[status] = counts.get(status, 0) + int(count or 0)
    return counts


def resolve_overall_status(pairs: Iterable[tuple[str, int]]) -> ComponentStatus:
    """Return the most severe status with a positive count.

    An empty project, or one whose counts are all zero, is operational.
    """
    counts = _normalize(pairs)
    for status in STATUS_SEVERITY:
        if counts.get(status, 0) > 0:
            return status
    return ComponentStatus.OPERATIONAL


def build_status_distribution(pairs: Iterable[tuple[str, int]]) -> dict[str, int]:
    """Return a count for every status, zero-filled, in severity order."""
    counts = _normalize(pairs)
    return {status.value: counts.get(status, 0) for status in STATUS_SEVERITY}
