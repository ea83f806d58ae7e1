class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when required input is missing or invalid."""


class NotFoundError(DomainError):
    """Raised when a referenced session, row or record does not exist."""


class LockTimeoutError(DomainError):
    """Raised when the document lock could not be obtained in time. Nothing was written."""


class SchemaError(DomainError):
    """Raised when a logical column cannot be resolved against a table header."""


class ConfigurationError(Exception):
    """Irrecoverable misconfiguration. Never converted into an ``ok: False`` result."""


class MissingTableError(ConfigurationError):
    """Raised when a table that must already exist is missing on a write path."""
