"""
hackhub/errors.py
Centralized error types and their HTTP rendering.

Every failure the services raise is a subclass of HackHubError. Each subclass
carries its HTTP status and machine-readable code, so the API layer maps
errors to responses by type alone.

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "error": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional)
}

HTTP STATUS CODE DISCIPLINE:
- 400: Invalid input / malformed request
- 401: Authentication missing or expired
- 403: Authenticated but not allowed (admin-only operations)
- 404: Resource does not exist
- 409: Business-rule conflict (duplicate, closed registration)
- 429: Rate limit exceeded
- 500: Storage / internal failure, never caused by user input
"""
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"

    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID = "AUTH_INVALID"

    FORBIDDEN = "FORBIDDEN"
    ADMIN_REQUIRED = "ADMIN_REQUIRED"

    NOT_FOUND = "NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"

    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    DUPLICATE_REGISTRATION = "DUPLICATE_REGISTRATION"
    CONFLICT = "CONFLICT"
    USERNAME_TAKEN = "USERNAME_TAKEN"

    RATE_LIMITED = "RATE_LIMITED"

    STORAGE_ERROR = "STORAGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def new_log_id() -> str:
    return str(uuid.uuid4())[:8]


class HackHubError(Exception):
    """Base error with consistent structure"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        if code:
            self.code = code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the public error body"""
        result = {
            "success": False,
            "error": self.message,
            "code": self.code
        }
        if self.details:
            result["details"] = self.details
        return result

    def to_response(self) -> JSONResponse:
        """Convert to FastAPI JSONResponse"""
        return JSONResponse(status_code=self.status_code, content=self.to_dict(), headers=self.headers())

    def headers(self) -> Optional[Dict[str, str]]:
        return None


class ValidationError(HackHubError):
    """400 - Malformed or empty input, always client-fixable"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        if field and not details:
            details = {"field": field}
        super().__init__(message, details=details)
        self.field = field


class AuthenticationError(HackHubError):
    """401 - Missing or invalid credentials"""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = ErrorCode.AUTH_REQUIRED

    def __init__(self, message: str = "Authentication required", code: str = ErrorCode.AUTH_REQUIRED):
        super().__init__(message, code=code)


class AuthorizationError(HackHubError):
    """403 - Authenticated caller lacks the capability"""
    status_code = status.HTTP_403_FORBIDDEN
    code = ErrorCode.FORBIDDEN

    def __init__(self, message: str = "Admin access required", code: str = ErrorCode.ADMIN_REQUIRED):
        super().__init__(message, code=code)


class NotFoundError(HackHubError):
    """404 - Resource does not exist"""
    status_code = status.HTTP_404_NOT_FOUND
    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, identifier: Any = None, code: str = ErrorCode.NOT_FOUND):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(message, code=code)
        self.resource = resource
        self.identifier = identifier


class ConflictError(HackHubError):
    """409 - Request conflicts with current state"""
    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.CONFLICT


class RegistrationClosedError(ConflictError):
    """409 - Event is not accepting registrations"""
    code = ErrorCode.REGISTRATION_CLOSED

    def __init__(self, event_id: Any):
        super().__init__(f"Registration is closed for event '{event_id}'")
        self.event_id = event_id


class DuplicateRegistrationError(ConflictError):
    """409 - The user already holds a registration for the event"""
    code = ErrorCode.DUPLICATE_REGISTRATION

    def __init__(self, user_id: Any, event_id: Any):
        super().__init__("You have already registered for this event")
        self.user_id = user_id
        self.event_id = event_id


class RateLimitError(HackHubError):
    """429 - Too many requests"""
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = ErrorCode.RATE_LIMITED

    def __init__(self, retry_after: int = 60, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message, details={"retry_after_seconds": retry_after})
        self.retry_after = retry_after

    def headers(self) -> Optional[Dict[str, str]]:
        return {"Retry-After": str(self.retry_after)}


class StorageError(HackHubError):
    """500 - Backing store failure. Detail is logged, never sent to the client."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = ErrorCode.STORAGE_ERROR

    def __init__(self, context: str, cause: Optional[BaseException] = None):
        self.log_id = new_log_id()
        self.context = context
        self.cause = cause
        super().__init__(
            "A storage error occurred. Please try again later.",
            details={"log_id": self.log_id}
        )
        logger.error(
            f"[{self.log_id}] Storage error in {context}: "
            f"{type(cause).__name__ if cause else 'unknown'}: {cause}"
        )


def internal_error_response(log_id: str) -> JSONResponse:
    """Generic 500 body for exceptions outside the HackHubError hierarchy"""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "An unexpected error occurred. Please try again later.",
            "code": ErrorCode.INTERNAL_ERROR,
            "details": {"log_id": log_id}
        }
    )
