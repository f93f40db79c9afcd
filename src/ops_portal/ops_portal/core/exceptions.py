class DomainError(Exception):
    """Base exception for business rule violations.

    ``status_code`` is the HTTP status the JSON API answers with.
    """

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised for a missing session, bad credentials, a disabled account or a wrong finance PIN."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action, or the finance module is locked."""

    status_code = 403
