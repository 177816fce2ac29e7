"""
paperdesk/errors.py
Centralized error handling for the assignment and scrutiny workflow.

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "error": "ErrorType",
    "message": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional)
}

HTTP STATUS CODE DISCIPLINE:
- 200/201: Successful, valid request
- 400: Invalid input, duplicate record or invalid state transition
- 401: Identity missing or expired
- 403: Identity lacks permission (role / ownership)
- 404: Resource does not exist
- 503: Backing store unavailable (retry with backoff)
"""

import logging
import uuid
from typing import Optional, Dict, Any
from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_INPUT = "INVALID_INPUT"
    IDENTITY_MISMATCH = "IDENTITY_MISMATCH"

    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID = "AUTH_INVALID"

    FORBIDDEN = "FORBIDDEN"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    OWNERSHIP_VIOLATION = "OWNERSHIP_VIOLATION"

    NOT_FOUND = "NOT_FOUND"
    FACULTY_NOT_FOUND = "FACULTY_NOT_FOUND"
    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
    QUESTION_PAPER_NOT_FOUND = "QUESTION_PAPER_NOT_FOUND"

    CONFLICT = "CONFLICT"
    DUPLICATE_FACULTY = "DUPLICATE_FACULTY"
    DUPLICATE_ASSIGNMENT = "DUPLICATE_ASSIGNMENT"
    DUPLICATE_SUBMISSION = "DUPLICATE_SUBMISSION"
    ALREADY_RESPONDED = "ALREADY_RESPONDED"
    ASSIGNMENT_NOT_ACCEPTED = "ASSIGNMENT_NOT_ACCEPTED"
    ALREADY_SCRUTINIZED = "ALREADY_SCRUTINIZED"
    REQUEST_NOT_PENDING = "REQUEST_NOT_PENDING"
    REQUEST_NOT_ACCEPTED = "REQUEST_NOT_ACCEPTED"
    STATE_TRANSITION_INVALID = "STATE_TRANSITION_INVALID"

    STORAGE_ERROR = "STORAGE_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Standard error response model"""
    success: bool = False
    error: str
    message: str
    code: str
    details: Optional[Dict[str, Any]] = None


class APIError(Exception):
    """Base API exception with consistent structure"""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = {
            "success": False,
            "error": self.error,
            "message": self.message,
            "code": self.code
        }
        if self.details:
            result["details"] = self.details
        return result

    def to_response(self) -> JSONResponse:
        """Convert to FastAPI JSONResponse"""
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


class ValidationError(APIError):
    """400 - Missing or malformed input; client must correct and retry"""
    def __init__(self, message: str, code: str = ErrorCode.VALIDATION_ERROR, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Validation Error",
            message=message,
            code=code,
            details=details
        )


class UnauthorizedError(APIError):
    """401 - Identity context missing or unreadable"""
    def __init__(self, message: str = "Authentication required", code: str = ErrorCode.AUTH_REQUIRED):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="Unauthorized",
            message=message,
            code=code
        )


class ForbiddenError(APIError):
    """403 - Identity lacks permission for this record or action"""
    def __init__(self, message: str, code: str = ErrorCode.FORBIDDEN, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="Forbidden",
            message=message,
            code=code,
            details=details
        )


class NotFoundError(APIError):
    """404 - Referenced entity does not exist"""
    def __init__(self, resource: str, identifier: Any = None, code: str = ErrorCode.NOT_FOUND):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} '{identifier}' not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="Not Found",
            message=message,
            code=code
        )


class ConflictError(APIError):
    """400 - Uniqueness or state violation; not retryable with the same input"""
    def __init__(self, message: str, code: str = ErrorCode.CONFLICT, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Conflict",
            message=message,
            code=code,
            details=details
        )


class StorageError(APIError):
    """503 - Backing store failure; nothing was applied, caller may retry"""
    def __init__(self, message: str = "Storage temporarily unavailable. Please retry.", log_id: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error="Storage Error",
            message=message,
            code=ErrorCode.STORAGE_ERROR,
            details={"log_id": log_id} if log_id else None
        )


def storage_error_from(error: Exception, context: str = "") -> StorageError:
    """Log a backing-store failure under a short id and wrap it as StorageError"""
    log_id = str(uuid.uuid4())[:8]
    logger.error(f"[{log_id}] Storage failure in {context}: {type(error).__name__}: {str(error)}")
    return StorageError(log_id=log_id)


def require_fields(values: Dict[str, Any], context: str = "request") -> None:
    """Raise ValidationError listing every blank or missing field"""
    missing = []
    for name, value in values.items():
        if value is None:
            missing.append(name)
        elif isinstance(value, str) and value.strip() == "":
            missing.append(name)
        elif isinstance(value, (list, tuple)) and len(value) == 0:
            missing.append(name)
    if missing:
        raise ValidationError(
            f"Missing required fields for {context}: {', '.join(missing)}",
            code=ErrorCode.MISSING_FIELD,
            details={"fields": missing}
        )


ERROR_MAPPING = {
    400: ("Bad Request", ErrorCode.INVALID_INPUT),
    401: ("Unauthorized", ErrorCode.AUTH_REQUIRED),
    403: ("Forbidden", ErrorCode.FORBIDDEN),
    404: ("Not Found", ErrorCode.NOT_FOUND),
    405: ("Method Not Allowed", ErrorCode.INVALID_INPUT),
    429: ("Too Many Requests", ErrorCode.RATE_LIMITED),
    503: ("Storage Error", ErrorCode.STORAGE_ERROR),
    500: ("Internal Error", ErrorCode.INTERNAL_ERROR),
}
