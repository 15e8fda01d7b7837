"""
Error types for acquisition and persistence.

Per-source errors (transport, HTTP, parse, missing field) derive from
AcquisitionError and never escape the fetcher: they become failed
FetchOutcomes. WriteError is the only fatal class for a run.
"""

from typing import Optional


class AcquisitionError(Exception):
    """Base class for errors recovered per source."""
    pass


class TransportError(AcquisitionError):
    """Connection failure or timeout."""
    pass


class HttpError(AcquisitionError):
    """Upstream answered with a non-success status."""

    def __init__(self, status: int, message: Optional[str] = None):
        self.status = status
        super().__init__(message or f"HTTP {status}")


class ParseError(AcquisitionError):
    """Body or value could not be parsed."""
    pass


class FieldNotFound(AcquisitionError):
    """A dotted field path did not resolve."""

    def __init__(self, path: str, segment: Optional[str] = None):
        self.path = path
        self.segment = segment
        super().__init__(f"Field {path} not found")


class WriteError(Exception):
    """Persisting an output artifact failed."""

    def __init__(self, path: str, message: str, original_error: Optional[Exception] = None):
        self.path = path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{path}: {message}")


class ConfigValidationError(Exception):
    """Raised when the source configuration fails validation."""
    pass
