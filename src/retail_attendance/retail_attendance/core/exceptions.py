class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid (amount, reason, date, policy values)."""


class InvalidTransition(DomainError):
    """Raised when an attendance action is not legal from the record's current status."""


class AttendanceAlreadyExists(DomainError):
    """Raised when an attendance record already exists for the employee and day."""


class AlreadyCheckedIn(AttendanceAlreadyExists):
    """Raised on a second check-in for the same day."""


class NotFound(DomainError):
    """Raised when an attendance record or penalty entry does not exist."""


class PersistenceError(DomainError):
    """Storage I/O failure or timeout. Callers may retry."""


class PolicyNotConfigured(DomainError):
    """Raised by policy stores when a tenant has no saved policy yet."""
