"""
Marathon Event API — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by services, the auth gate and the store client.

Exception Hierarchy:
    MarathonAPIError (base)
    ├── ValidationError       → 400 Bad Request
    ├── AuthenticationError   → 401 Unauthorized
    ├── NotFoundError         → 404 Not Found
    └── DatabaseError         → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class MarathonAPIError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where the handler says so)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MarathonAPIError):
    """
    Raised when client input fails validation.

    When:    Malformed ObjectId, empty merge-patch, unknown sort order,
             unusable marathon reference in transactional mode.
    HTTP:    400 Bad Request

    Schema-level body errors are left to FastAPI (422).
    """

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


class AuthenticationError(MarathonAPIError):
    """
    Raised by the auth gate when a protected route is called without a
    usable session cookie.

    Reasons:
        "unauthorized access" - no `token` cookie on the request
        "invalid token"       - bad signature, malformed or expired token
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "unauthorized access",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MarathonAPIError):
    """
    Raised when a requested document does not exist.

    The driver returns None for a missing document; services convert that
    into this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(MarathonAPIError):
    """
    Raised when a store operation fails.

    What:    Wraps any PyMongoError (connection lost, write error, timeout).
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the driver
    error is kept in `context` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
