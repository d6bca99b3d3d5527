"""Error classification for platform API failures.

Classifies exceptions by category to enable:
- Informative diagnostics (timeout vs auth vs server)
- Retry hints in transport diagnostics
"""

from __future__ import annotations

from enum import Enum

import httpx


class ErrorClass(Enum):
    TRANSIENT = "transient"  # 429, network errors
    SERVER = "server"  # 5xx
    TIMEOUT = "timeout"  # deadline exceeded
    CLIENT = "client"  # 4xx other than 429
    UNKNOWN = "unknown"


def _classify_status(status_code: int) -> ErrorClass | None:
    if status_code == 429:
        return ErrorClass.TRANSIENT
    if 400 <= status_code < 500:
        return ErrorClass.CLIENT
    if 500 <= status_code < 600:
        return ErrorClass.SERVER
    return None


def classify_error(error: BaseException) -> ErrorClass:
    """Classify an error to determine handling strategy.

    Checks the structured ``status_code`` first, then the exception
    type. A TransportError raised for a failed request carries the
    underlying httpx error as its cause, which is classified in turn.
    Untyped exceptions fall back to message matching.
    """
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        by_status = _classify_status(status_code)
        if by_status is not None:
            return by_status

    if isinstance(error, (TimeoutError, httpx.TimeoutException)):
        return ErrorClass.TIMEOUT
    if isinstance(error, httpx.NetworkError):
        return ErrorClass.TRANSIENT
    if error.__cause__ is not None:
        return classify_error(error.__cause__)

    msg = str(error).lower()
    if "timeout" in msg or "timed out" in msg:
        return ErrorClass.TIMEOUT
    if "rate limit" in msg:
        return ErrorClass.TRANSIENT
    if "connection" in msg:
        return ErrorClass.TRANSIENT
    return ErrorClass.UNKNOWN


_RETRYABLE = frozenset({
    ErrorClass.TRANSIENT,
    ErrorClass.SERVER,
    ErrorClass.TIMEOUT,
})


def is_retryable(error: BaseException) -> bool:
    """Return True if the error category supports retry."""
    return classify_error(error) in _RETRYABLE
