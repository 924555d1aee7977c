"""Custom exceptions for the application.

Every exception carries the HTTP status and the error kind rendered in the
``{"error": ..., "message": ...}`` envelope by the handlers in ``core.app``.
"""

from typing import Any, Dict, Optional


class BaseAPIException(Exception):
    """Base exception for all API exceptions."""

    error = "Internal Server Error"

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class BadRequestError(BaseAPIException):
    """Raised when the request is malformed or a field is invalid."""

    error = "Bad Request"

    def __init__(self, message: str = "Bad request", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 400, details)


class UnauthorizedError(BaseAPIException):
    """Raised when authentication fails."""

    error = "Unauthorized"

    def __init__(self, message: str = "Authentication required", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 401, details)


class ForbiddenError(BaseAPIException):
    """Raised when the caller lacks a membership, role or location access."""

    error = "Forbidden"

    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 403, details)


class NotFoundError(BaseAPIException):
    """Raised when a resource is absent or not visible to the caller."""

    error = "Not Found"

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 404, details)


class ConflictError(BaseAPIException):
    """Raised when there's a conflict with existing data."""

    error = "Conflict"

    def __init__(self, message: str = "Conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 409, details)


class FileTooLargeError(BaseAPIException):
    """Raised when an upload exceeds the configured size limit."""

    error = "File Too Large"

    def __init__(self, message: str = "File too large", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 413, details)


class LockedError(BaseAPIException):
    """Raised when a resource is temporarily unavailable (virus scan pending)."""

    error = "Locked"

    def __init__(self, message: str = "Resource is locked", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 423, details)


class InternalServerError(BaseAPIException):
    """Raised when an internal server error occurs."""

    error = "Internal Server Error"

    def __init__(self, message: str = "Internal server error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 500, details)


class StorageError(InternalServerError):
    """Raised when the object storage backend rejects or fails a call.

    The backend detail is kept in ``details`` for logging; clients only
    ever see the generic message.
    """

    def __init__(self, message: str = "Storage operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
