class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DuplicateRequest(ValidationError):
    """Raised when a non-rejected correction already exists for the day."""


class StateConflict(DomainError):
    """Raised when the stored state does not allow the operation.

    Callers should re-read the current state instead of trusting their own copy.
    """


class AlreadyCheckedIn(StateConflict):
    pass


class AlreadyCheckedOut(StateConflict):
    pass


class NoActiveSession(StateConflict):
    pass


class NotFound(DomainError):
    """Raised when a request or record cannot be resolved."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DuplicateEntryError(Exception):
    """Raised by repositories when a unique key rejects a write."""
