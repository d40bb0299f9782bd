class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials or bearer tokens are missing or invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks the role or membership for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class ConflictError(DomainError):
    """Raised when a write would duplicate a unique record."""


class InvalidStateError(DomainError):
    """Raised when the meeting status does not allow the action."""


class AlreadyFinalizedError(DomainError):
    """Raised when an attendance record has used its single edit."""


class StoreUnavailableError(DomainError):
    """Raised when the database call fails or times out."""
