"""Error taxonomy shared by services, repositories and routes.

Every error carries a machine readable ``code`` and the HTTP status used when
it escapes a request handler. The application installs a single exception
handler that renders them with :func:`~bar_api.app.utils.responses.err`.
"""

from __future__ import annotations

from typing import Any


class BarError(Exception):
    """Base class for all expected application errors."""

    code = "ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(BarError):
    """Malformed or out-of-range input, rejected before persistence."""

    code = "VALIDATION"
    status_code = 400


class NotFoundError(BarError):
    """A referenced identifier does not resolve."""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(BarError):
    """A uniqueness race lost against a concurrent writer."""

    code = "CONFLICT"
    status_code = 409


class InvalidTransitionError(ConflictError):
    """The requested status change is not allowed from the current status."""

    code = "INVALID_TRANSITION"


class SessionClosedError(BarError):
    """Table orders arrived while no fulfilment session is open."""

    code = "SESSION_CLOSED"
    status_code = 409


class UpstreamUnavailableError(BarError):
    """The database, catalog or a required secret is unreachable or unset."""

    code = "UPSTREAM_UNAVAILABLE"
    status_code = 503
