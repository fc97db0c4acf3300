class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is malformed (e.g. unsupported mode value)."""


class AuthenticationError(DomainError):
    """Raised when there is no valid actor session."""


class AuthorizationError(DomainError):
    """Raised when an actor lacks the capability for an action."""


class InactiveUserError(DomainError):
    """Raised when the acting account is deactivated."""


class NotFoundError(DomainError):
    """Raised when a referenced record or user does not exist."""


class InvalidStateError(DomainError):
    """Raised when the day's record is not in a state that allows the action."""
