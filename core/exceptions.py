"""
Centralized exception hierarchy for domain-specific errors.

Only structural failures (a stored trace that cannot be loaded or parsed,
malformed request input) are meant to reach the HTTP layer. Map matching
failures are raised by the OSRM client and recovered by the road snapper.
"""


class TraceServiceError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(TraceServiceError):
    """Exception raised when request or trace data validation fails."""


class TraceLoadError(TraceServiceError):
    """Exception raised when a stored trace cannot be read or parsed."""


class ExternalServiceError(TraceServiceError):
    """Exception raised when service calls fail."""


class RateLimitError(ExternalServiceError):
    """Exception raised when rate limits are exceeded."""


TraceServiceException = TraceServiceError
ValidationException = ValidationError
TraceLoadException = TraceLoadError
ExternalServiceException = ExternalServiceError
RateLimitException = RateLimitError
