class DomainError(Exception):
    """Base exception for ledger rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidDateFormat(ValidationError):
    """Raised when a date string is not day/month/year."""


class InvalidField(LookupError):
    """Unknown logical field name. A programming error, not a business condition."""


class StorageUnavailable(Exception):
    """Raised when a backing-store primitive fails (network/API error)."""


class SchemaUnresolved(StorageUnavailable):
    """Raised when a write targets a segment whose layout could not be determined."""
