"""Exceptions raised by the Onshape STL importer."""
from __future__ import annotations

from typing import Optional


class ConfigurationError(Exception):
    """Raised when required Onshape credentials are missing."""


class OnshapeError(Exception):
    """Base class for failures talking to the Onshape REST API.

    The tool and HTTP layers convert any subclass into a user-visible error
    message; everything else propagates.
    """

    def __init__(self, message: str, step: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step


class OnshapeAPIError(OnshapeError):
    """Onshape answered with a non-success status code."""

    def __init__(self, status_code: int, body: str, step: Optional[str] = None) -> None:
        super().__init__(f"Onshape API Error {status_code}: {body}", step=step)
        self.status_code = status_code
        self.body = body


class OnshapeTransportError(OnshapeError):
    """The request never produced a response (connection refused, timeout, ...)."""

    def __init__(self, detail: str, step: Optional[str] = None) -> None:
        where = f" during {step}" if step else ""
        super().__init__(f"Onshape request failed{where}: {detail}", step=step)


class SetupError(Exception):
    """Raised by the desktop setup command for unrecoverable problems."""


__all__ = [
    "ConfigurationError",
    "OnshapeAPIError",
    "OnshapeError",
    "OnshapeTransportError",
    "SetupError",
]
