"""Custom exceptions for model, store, and service layers."""


class ModelError(Exception):
    """Base class for PayLite domain failures."""


class ModelValidationError(ModelError):
    """Raised when input or record data fails business validation."""


class DuplicateEmailError(ModelValidationError):
    """Raised when registering an email that already belongs to a user."""


class ModelNotFoundError(ModelError):
    """Raised when a requested record does not exist."""


class AlreadySettledError(ModelError):
    """Raised when repaying an installment that is no longer pending."""


class StorageError(ModelError):
    """Raised when the underlying record store fails to read or write."""


class AuthenticationError(ModelError):
    """Raised when credentials or a session token cannot be verified."""


class AuthorizationError(ModelError):
    """Raised when an authenticated user lacks the required role."""
