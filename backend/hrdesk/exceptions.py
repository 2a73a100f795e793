"""
HR Desk Backend - Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the attendance and recruitment backends.
How:   Each exception carries a message and optional context dict. Global
       exception handlers (registered in main.py) catch these and return
       structured JSON error responses with the matching HTTP status code.
Who:   Raised by services and middleware; caught by global handlers.

Exception Hierarchy:
    HrDeskError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class HrDeskError(Exception):
    """
    Base exception for all HR Desk application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(HrDeskError):
    """
    Raised when client input fails a business rule.

    When: Missing required fields, unknown enum values, malformed month keys.
    HTTP: 400 Bad Request. Pydantic schema errors keep FastAPI's 422.

    Example response:
        {
            "error": "validation_error",
            "message": "type must be \\"in\\" or \\"out\\"",
            "details": {"field": "type"}
        }
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(HrDeskError):
    """Raised when login credentials are unknown, wrong, or belong to an inactive account."""

    status_code = 401
    error_code = "authentication_failed"

    def __init__(
        self,
        message: str = "invalid credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(HrDeskError):
    """
    Raised when the acting user or role may not perform an operation.

    When: Admin endpoints called by a non-admin actor, status changes by a
          role other than recruiter/dept_manager.
    HTTP: 403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(HrDeskError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows and the recruitment store returns
    None for unknown ids; services convert None into this exception.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(HrDeskError):
    """Raised when a write would violate a uniqueness rule (e.g. duplicate account email)."""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(HrDeskError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    Response includes a Retry-After header.
    """

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(HrDeskError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic. Details
    (constraint name, driver error) are logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
