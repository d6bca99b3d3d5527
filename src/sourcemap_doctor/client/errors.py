"""Exceptions raised by release sources."""

from __future__ import annotations


class TransportError(Exception):
    """A fetch failed: non-2xx response or network error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(TransportError):
    """The requested event, release or file does not exist."""
