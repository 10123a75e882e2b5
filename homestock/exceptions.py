"""
Homestock - Domain Exceptions

Raised by the price statistics query and mapped to HTTP status codes by
api/main.py. Nothing here is retried internally; the caller decides whether
to re-issue the query.
"""

from __future__ import annotations

from typing import Any


class HomestockError(Exception):
    """Base exception for all Homestock errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}


class MissingIdentifier(HomestockError):
    """The caller supplied no item id. Raised before any I/O."""

    def __init__(self, field: str = "item_id"):
        super().__init__(
            f"{field} is required",
            code="MISSING_IDENTIFIER",
            details={"field": field},
        )


class UpstreamUnavailable(HomestockError):
    """The observation store read failed. The cause is chained, not wrapped away."""

    def __init__(self, cause: BaseException):
        super().__init__(
            str(cause) or type(cause).__name__,
            code="UPSTREAM_UNAVAILABLE",
            details={"error_type": type(cause).__name__},
        )


class MalformedObservation(HomestockError):
    """A stored row has an unknown platform or an unparseable price/date."""

    def __init__(self, reason: str, row: Any = None):
        super().__init__(
            f"Malformed price observation: {reason}",
            code="MALFORMED_OBSERVATION",
            details={"row": repr(row)},
        )
