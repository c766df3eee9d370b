"""
Centralized error handling for connection and query failures.
Exception types plus a reusable helper so routes stay thin and new error categories are easy to add.
"""
from __future__ import annotations

from typing import Callable

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Constants: status codes
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400  # candidate connection config rejected
STATUS_SERVICE_UNAVAILABLE = 503  # store unreachable, connection lost, pool exhausted
STATUS_INTERNAL_ERROR = 500


class ConnectionFailure(Exception):
    """A candidate connection config could not be reached or its credentials were rejected."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class QueryFailure(Exception):
    """The store failed a read; carries the driver's message unmodified."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def driver_message(exc: BaseException) -> str:
    """
    Message from the underlying DB driver when SQLAlchemy wrapped one (DBAPIError.orig),
    else the exception's own text.
    """
    orig = getattr(exc, "orig", None)
    msg = str(orig) if orig is not None else str(exc)
    return msg or exc.__class__.__name__


# ---------------------------------------------------------------------------
# Error rules: (predicate, status_code)
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

def _is_unavailable(msg: str) -> bool:
    lower = msg.lower()
    return (
        "can't connect" in lower
        or "lost connection" in lower
        or "gone away" in lower
        or "queuepool limit" in lower
        or "timed out" in lower
        or "unable to open database" in lower
    )


# List of (predicate, status_code). First match wins.
QUERY_ERROR_RULES: list[tuple[Callable[[str], bool], int]] = [
    (_is_unavailable, STATUS_SERVICE_UNAVAILABLE),
]


def query_error_to_http(exc: Exception) -> HTTPException:
    """
    Map a failed read into an HTTPException carrying the driver message.
    Uses QUERY_ERROR_RULES for known categories; otherwise 500.
    """
    msg = exc.message if isinstance(exc, QueryFailure) else driver_message(exc)
    for predicate, status_code in QUERY_ERROR_RULES:
        if predicate(msg):
            return HTTPException(status_code=status_code, detail=msg)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=msg)
