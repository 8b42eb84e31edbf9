"""
Custom Exception Classes for ShareHub

Services raise these typed errors; the HTTP layer maps each one to a status
code through a single handler (see exception_handlers.py). Nothing inspects
message text to pick a status.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in every error response."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"
    AUTH_FAILED = "AUTH_FAILED"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    FILE_TYPE_NOT_ALLOWED = "FILE_TYPE_NOT_ALLOWED"
    STORAGE_ERROR = "STORAGE_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"


class ShareHubError(Exception):
    """Base exception class for all ShareHub errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        details: Any = None,
        status_code: int | None = None,
        error_code: ErrorCode | None = None,
    ):
        self.message = message
        self.details = details if details is not None else {}
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Validation & Business Rule Exceptions
# ============================================================================


class ValidationFailedError(ShareHubError):
    """Raised when input is well-formed but violates a business rule"""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = dict(details or {})
        if field:
            error_details["field"] = field
        super().__init__(message=message, details=error_details)


class ConflictError(ShareHubError):
    """Raised for guard violations and duplicates (e.g. slug already taken)"""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.CONFLICT


class ConfirmationRequiredError(ConflictError):
    """Raised when a destructive operation needs an explicit confirm flag"""

    error_code = ErrorCode.CONFIRMATION_REQUIRED


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class UnauthorizedError(ShareHubError):
    """Raised when no usable credential was presented"""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = ErrorCode.AUTH_FAILED

    def __init__(self, message: str = "Authentication required", details: dict[str, Any] | None = None):
        super().__init__(message=message, details=details)


class ForbiddenError(ShareHubError):
    """Raised when the credential is invalid or lacks the needed capability"""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = ErrorCode.AUTH_PERMISSION_DENIED

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, details=details)


# ============================================================================
# Resource Not Found
# ============================================================================


class NotFoundError(ShareHubError):
    """Raised for unknown ids and for rows outside the caller's tenant scope"""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


# ============================================================================
# File & Storage Exceptions
# ============================================================================


class InvalidFileTypeError(ValidationFailedError):
    """Raised when an uploaded file's MIME type is not on the allow-list"""

    error_code = ErrorCode.FILE_TYPE_NOT_ALLOWED

    def __init__(self, file_type: str | None, allowed_types: list[str]):
        super().__init__(
            message=f"File type '{file_type}' is not allowed",
            details={"file_type": file_type, "allowed_types": allowed_types},
        )


class FileTooLargeError(ValidationFailedError):
    """Raised when an upload exceeds its size limit"""

    error_code = ErrorCode.FILE_TOO_LARGE

    def __init__(self, size: int, max_size: int):
        super().__init__(
            message=f"File too large. Maximum size: {max_size // (1024 * 1024)}MB",
            details={"file_size": size, "max_size": max_size},
        )


class StorageError(ShareHubError):
    """Raised when the object store rejects a write"""

    error_code = ErrorCode.STORAGE_ERROR


class RateLimitExceededError(ShareHubError):
    """Raised when rate limit is exceeded"""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = ErrorCode.RATE_LIMIT_EXCEEDED

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message=message)
