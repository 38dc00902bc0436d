"""Error hierarchy for the lending service."""


class LendingError(Exception):
    """Base exception for all lending errors."""


class ValidationError(LendingError):
    """Raised when request input is missing, malformed or out of range."""


class LoanPaidOffError(ValidationError):
    """Raised when a payment targets a loan that is already paid off."""


class NotFoundError(LendingError):
    """Raised when a loan or customer has no matching record."""


class PersistenceError(LendingError):
    """Raised when the underlying store operation fails."""
