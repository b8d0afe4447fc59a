class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when a transition is not legal from the current state."""


class NotFoundError(DomainError):
    """Raised when there is no shift, break or user to act on."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class InternalInvariantViolation(RuntimeError):
    """Stored shift data is inconsistent (never repaired, never user-facing)."""
