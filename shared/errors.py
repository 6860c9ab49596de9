"""
Shared error handling for the contributions service.
"""

from typing import Dict, Any, Optional

from opentelemetry import trace
from pydantic import BaseModel


INTERNAL_ERROR_BODY = "internal"


class ErrorResponse(BaseModel):
    """Standard error response format (logged, never sent to callers)."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ContributionsError(Exception):
    """Base exception for the contributions service."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(ContributionsError):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ServiceError(ContributionsError):
    """Service-related errors."""

    def __init__(self, message: str = "Service error", details: Optional[Dict[str, Any]] = None,
                 code: str = "SERVICE_ERROR"):
        super().__init__(code, message, details)


class ExternalServiceError(ContributionsError):
    """External service errors."""

    def __init__(self, service: str, message: str = "External service error",
                 details: Optional[Dict[str, Any]] = None, code: str = "EXTERNAL_SERVICE_ERROR"):
        self.service = service
        super().__init__(code, f"{service}: {message}", details)


class UpstreamTransportError(ExternalServiceError):
    """The upstream could not be reached, timed out, or answered with a non-200 status."""

    def __init__(self, message: str = "Transport failure", details: Optional[Dict[str, Any]] = None,
                 service: str = "github"):
        super().__init__(service, message, details, code="UPSTREAM_TRANSPORT_ERROR")


class UpstreamDecodeError(ExternalServiceError):
    """The upstream body did not match the expected contribution calendar shape."""

    def __init__(self, message: str = "Unexpected response shape", details: Optional[Dict[str, Any]] = None,
                 service: str = "github"):
        super().__init__(service, message, details, code="UPSTREAM_DECODE_ERROR")


class CacheInconsistencyError(ServiceError):
    """The cache claimed to be fresh but held no value."""

    def __init__(self, message: str = "Cache fresh but empty", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="CACHE_INCONSISTENCY")
