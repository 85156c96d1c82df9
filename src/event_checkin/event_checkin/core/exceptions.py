class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a ticket id does not resolve to any attendee."""


class AlreadyInStateError(DomainError):
    """Raised when a transition is not applicable to the record's current state."""


class ParseError(DomainError):
    """Raised when an import payload yields no well-formed rows."""

    def __init__(self, message: str, *, total_parsed: int = 0):
        super().__init__(message)
        self.total_parsed = total_parsed


class PersistenceError(DomainError):
    """Raised by storage slots when reading or writing the payload fails."""
