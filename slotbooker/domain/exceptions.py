"""
Domain-specific exception hierarchy for the slot booking backend.

Every error carries the HTTP status code the API layer answers with, so the
web boundary can translate them with a single handler.
"""


class SlotBookerError(Exception):
    """Base class for all application-level errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(SlotBookerError):
    """Raised when request fields are malformed (dates, times, intervals)."""

    status_code = 400


class NotFoundError(SlotBookerError):
    """Raised when a resource does not exist or is not owned by the caller."""

    status_code = 404


class AuthenticationError(SlotBookerError):
    """Raised when credentials or tokens cannot be verified."""

    status_code = 401


class PermissionDeniedError(SlotBookerError):
    """Raised when an authenticated user is not associated with a business."""

    status_code = 403


class ConflictError(SlotBookerError):
    """Raised when a unique resource (e.g. an account email) already exists."""

    status_code = 409


class StorageError(SlotBookerError):
    """Raised when a transactional write fails and has been rolled back."""

    status_code = 500


class SlotConflictError(StorageError):
    """Raised when a slot batch collides with an existing slot of the same service."""

    status_code = 409
