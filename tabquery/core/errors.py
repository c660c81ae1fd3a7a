"""
Exception types raised by the tabquery client.
"""
from __future__ import annotations

from typing import Any


class TabQueryError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgument(TabQueryError, ValueError):
    """A caller passed a value of the wrong shape (bad key part, non-filter object, ...)."""


class RequestFailure(TabQueryError):
    """An HTTP request failed and no failure callback was supplied.

    Parameters
    ----------
    message : str
        Human-readable reason, usually the server's ``exception`` text.
    status : int
        HTTP status code, or 0 when the server was never reached.
    payload : dict
        The normalised error body.
    """

    def __init__(self, message: str, status: int = 0, payload: dict[str, Any] | None = None):
        super().__init__(message)
        self.status = status
        self.payload = payload or {}
