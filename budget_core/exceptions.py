"""Domain-specific exceptions for the budget tracker core services."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class RecordNotFoundError(LookupError):
    """Raised when an entry or recurring expense cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer cannot write the ledger document."""
