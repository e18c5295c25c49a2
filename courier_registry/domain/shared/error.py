"""Error hierarchy for the registry.

Error layers:
- RegistryError: Base class for all registry errors
- DomainError: Business rule violations, validation failures (4xx responses)
- InfrastructureError: System-level failures like storage outages (500 responses)

These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class RegistryError(Exception):
    """Base class for all registry errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(RegistryError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed.

    ``fields`` lists the offending input fields, in the order they were checked.
    """

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.fields = list(fields or [])


class VerificationError(DomainError):
    """The instance metadata probe failed."""

    def __init__(self, message: str, reason: str, status_code: int | None = None) -> None:
        super().__init__(message, code="VERIFICATION_FAILED")
        self.reason = reason
        self.status_code = status_code


class ConflictError(DomainError):
    """Resource already exists."""


# =============================================================================
# Infrastructure Errors (system-level failures)
# =============================================================================


class InfrastructureError(RegistryError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Storage backend failed or is unavailable."""


class ServiceUnavailableError(InfrastructureError):
    """The registry cannot accept the request right now (e.g. shutting down)."""
