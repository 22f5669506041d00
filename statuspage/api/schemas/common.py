"""Response envelope shared by every endpoint.

Error responses use the same keys with ``success: false`` plus
``errors`` and ``request_id``; they are built in ``statuspage.api.main``.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """``{success, data, message}`` wrapper used for all responses."""

    success: bool = True
    data: T | None = None
    message: str | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


def paginate(page: int, limit: int, total: int) -> Pagination:
    return Pagination(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit if limit else 0)


def ok(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """Build a success envelope for a route return value."""
    return {"success": True, "data": data, "message": message}


def reject_null(value: Any) -> Any:
    """PATCH fields that may be omitted but not cleared."""
    if value is None:
        raise ValueError("may not be null")
    return value
