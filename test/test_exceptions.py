"""
Tests for custom exception classes and their HTTP rendering

Tests exception initialization, messages, status codes, and details.
"""

import json

from fastapi import status
from starlette.requests import Request

from sharehub.exception_handlers import (
    create_error_response,
    get_error_type,
    get_http_error_code,
    sharehub_exception_handler,
)
from sharehub.exceptions import (
    ConfirmationRequiredError,
    ConflictError,
    ErrorCode,
    FileTooLargeError,
    ForbiddenError,
    InvalidFileTypeError,
    NotFoundError,
    RateLimitExceededError,
    ShareHubError,
    StorageError,
    UnauthorizedError,
    ValidationFailedError,
)


def _request(path="/sessions/12"):
    return Request({"type": "http", "method": "GET", "path": path, "headers": [], "query_string": b""})


class TestShareHubError:
    """Test base ShareHubError class"""

    def test_default(self):
        exc = ShareHubError("Test error")
        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.error_code == ErrorCode.INTERNAL_ERROR
        assert exc.details == {}

    def test_custom_status(self):
        exc = ShareHubError("Test error", status_code=status.HTTP_400_BAD_REQUEST)
        assert exc.status_code == status.HTTP_400_BAD_REQUEST

    def test_details(self):
        exc = ShareHubError("Test error", details={"key": "value", "count": 42})
        assert exc.details["key"] == "value"
        assert exc.details["count"] == 42


class TestValidationExceptions:
    def test_validation_failed_with_field(self):
        exc = ValidationFailedError("Bad sort", field="sort")
        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert exc.details == {"field": "sort"}

    def test_conflict_is_bad_request(self):
        exc = ConflictError("Slug taken")
        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert exc.error_code == ErrorCode.CONFLICT

    def test_confirmation_required_is_a_conflict(self):
        exc = ConfirmationRequiredError("Confirm first", details={"speech_count": 3})
        assert isinstance(exc, ConflictError)
        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert exc.error_code == ErrorCode.CONFIRMATION_REQUIRED
        assert exc.details["speech_count"] == 3


class TestAuthExceptions:
    def test_unauthorized_default(self):
        exc = UnauthorizedError()
        assert str(exc) == "Authentication required"
        assert exc.status_code == status.HTTP_401_UNAUTHORIZED

    def test_forbidden_custom_message(self):
        exc = ForbiddenError("Token has expired")
        assert str(exc) == "Token has expired"
        assert exc.status_code == status.HTTP_403_FORBIDDEN


class TestNotFoundError:
    def test_without_id(self):
        exc = NotFoundError("Event")
        assert str(exc) == "Event not found"
        assert exc.status_code == status.HTTP_404_NOT_FOUND

    def test_with_id(self):
        exc = NotFoundError("Session", 12)
        assert str(exc) == "Session with id '12' not found"
        assert exc.details == {"resource_type": "Session", "resource_id": 12}


class TestFileExceptions:
    def test_invalid_file_type(self):
        exc = InvalidFileTypeError("text/plain", ["application/pdf"])
        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert exc.error_code == ErrorCode.FILE_TYPE_NOT_ALLOWED
        assert exc.details["allowed_types"] == ["application/pdf"]

    def test_file_too_large(self):
        exc = FileTooLargeError(200 * 1024 * 1024, 100 * 1024 * 1024)
        assert str(exc) == "File too large. Maximum size: 100MB"
        assert exc.error_code == ErrorCode.FILE_TOO_LARGE

    def test_storage_error_is_server_error(self):
        assert StorageError("disk full").status_code == status.HTTP_500_INTERNAL_SERVER_ERROR

    def test_rate_limit(self):
        exc = RateLimitExceededError()
        assert exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS


class TestErrorResponses:
    """Test the shared JSON error envelope"""

    def test_create_error_response_body(self):
        response = create_error_response(404, "Session not found", ErrorCode.RESOURCE_NOT_FOUND, path="/sessions/1")
        body = json.loads(response.body)
        assert body == {
            "error": "Not Found",
            "message": "Session not found",
            "status_code": 404,
            "error_code": "RESOURCE_NOT_FOUND",
            "path": "/sessions/1",
        }

    def test_error_type_fallback(self):
        assert get_error_type(418) == "Error"

    def test_http_error_code_mapping(self):
        assert get_http_error_code(401) == "AUTH_FAILED"
        assert get_http_error_code(418) == "UNKNOWN_ERROR"

    async def test_handler_uses_exception_status(self):
        response = await sharehub_exception_handler(_request(), NotFoundError("Session", 12))
        body = json.loads(response.body)
        assert response.status_code == 404
        assert body["error_code"] == "RESOURCE_NOT_FOUND"
        assert body["details"]["resource_id"] == 12
        assert body["path"] == "/sessions/12"
