"""
Custom exceptions for the ingestion pipeline with structured error context.

Each exception carries a context dictionary so failures can be logged with
the station, provider and URL involved.

Exception Hierarchy:
    ETLException (base)
    ├── CatalogUnavailable        fatal to a run
    ├── RunInProgressError        overlap guard
    ├── UpstreamError
    │   ├── UpstreamUnavailable
    │   └── MalformedUpstreamResponse
    ├── TransformationError
    │   ├── ValidationError
    │   └── DataFormatError
    └── LoadError
        └── UpsertError

"No data" is deliberately absent: a provider that has nothing to report
returns a FetchResult with status NO_DATA instead of raising.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ETLException(Exception):
    """
    Base exception for all ETL-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (station, provider, url, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Run-level Errors
# ============================================================================

class CatalogUnavailable(ETLException):
    """
    Raised when the station list or the variable map cannot be loaded.

    This is the only error that aborts a run: without the catalog no station
    can be processed.
    """
    pass


class RunInProgressError(ETLException):
    """Raised when a run is requested while another one has not finished."""
    pass


# ============================================================================
# Upstream Provider Errors
# ============================================================================

class UpstreamError(ETLException):
    """Base exception for provider call failures (isolated per station)."""
    pass


class UpstreamUnavailable(UpstreamError):
    """
    Provider could not be reached or answered with an error status.

    Context should include:
        - provider: Provider name (nws, airnow)
        - url: The endpoint that failed
        - status_code: HTTP status code (if a response was received)
    """
    pass


class MalformedUpstreamResponse(UpstreamError):
    """
    Provider answered but the body is not what the client expects.

    Handled exactly like UpstreamUnavailable.
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(ETLException):
    """Base exception for normalization failures."""
    pass


class ValidationError(TransformationError):
    """
    Exception raised when a record fails validation.

    Context should include:
        - field_name: Name of the field that failed validation
        - field_value: Value that failed validation
    """
    pass


class DataFormatError(TransformationError):
    """Provider value could not be parsed (e.g. an observation timestamp)."""
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(ETLException):
    """Base exception for reading store failures."""
    pass


class UpsertError(LoadError):
    """
    Exception raised when an upsert into the reading table fails.

    Context should include:
        - station_id, variable_id, observed_at: the conflict key
    """
    pass
