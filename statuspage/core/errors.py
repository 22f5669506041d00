"""Domain exceptions raised by the service layer.

The application maps these to HTTP responses in ``statuspage.api.main``:
``NotFoundError`` -> 404, ``ConflictError`` -> 409 and any other
``ValueError`` -> 400.
"""

from __future__ import annotations


class NotFoundError(LookupError):
    """A project, component or incident does not exist (or is not visible)."""


class ConflictError(Exception):
    """A write collides with existing data, e.g. a duplicate slug."""


class PayloadValidationError(ValueError):
    """A write payload failed a business rule.

    ``field`` names the offending input so the error response can carry
    field-level messages.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
