"""
Error taxonomy for the relay and aggregator.

Errors are carried as values (RelayResult.error, RenderModel.error) rather
than raised across layers. HTTP routes translate them to JSON bodies.
"""

from typing import Any, Optional


class RelayError(Exception):
    """Base class for search errors."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        out = {"error": self.message}
        if self.details is not None:
            out["details"] = self.details
        return out


class InvalidRequest(RelayError):
    """Client supplied no usable query text."""


class UpstreamError(RelayError):
    """Transport failure or non-2xx status from the places provider."""

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        super().__init__(message, details)
        self.status = status


class RenderError(RelayError):
    """Aggregator-level failure; accumulated results are left as they were."""

    def __init__(self, message: str, cause: Optional[RelayError] = None):
        super().__init__(message, cause.details if cause is not None else None)
        self.cause = cause
