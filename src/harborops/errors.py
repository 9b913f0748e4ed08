from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the caller. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource or preset is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when the caller identity is missing or malformed."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class AccessDeniedError(UserError):
    """Raised when a user tries to access a resource they do not have permission for."""


class ValidationError(UserError):
    """Raised when user input fails validation."""


class InvalidFieldError(ValidationError):
    """Raised when a filter, sort or group key is not a known field of the resource."""


class InvalidOperatorError(ValidationError):
    """Raised when an operator is not legal for the resolved field."""


class InvalidValueError(ValidationError):
    """Raised when a filter value has the wrong shape or type."""
