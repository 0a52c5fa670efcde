"""Error hierarchy for repocache.

Error layers:
- RepoCacheError: Base class for all repocache errors
- DomainError: Requests that cannot be satisfied regardless of cache state (4xx responses)
- InfrastructureError: Upstream and storage failures (5xx responses)

These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class RepoCacheError(Exception):
    """Base class for all repocache errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (typically 4xx)
# =============================================================================


class DomainError(RepoCacheError):
    """Base class for domain errors."""


class NotFoundError(DomainError):
    """Artifact or version does not exist upstream or in the store."""


class InvalidFormatError(DomainError):
    """Retrieved content failed structural validation."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


# =============================================================================
# Infrastructure Errors (typically 5xx)
# =============================================================================


class InfrastructureError(RepoCacheError):
    """Base class for infrastructure/system errors."""


class UpstreamError(InfrastructureError):
    """Transient upstream failure: network, rate limit, malformed transport response."""


class RateLimitedError(UpstreamError):
    """Upstream refused the request because a rate limit was hit."""

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message, code="RATE_LIMITED")
        self.retry_after = retry_after


class StorageUnavailableError(InfrastructureError):
    """Durable snapshot store is unavailable."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
