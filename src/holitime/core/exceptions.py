class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTransitionError(ValidationError):
    """Raised when a status change is not allowed from the current status."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or the caller is anonymous."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """Raised when the change clashes with existing data."""

    status_code = 409
