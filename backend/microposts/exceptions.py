"""
Microposts Backend - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception class carries a user-facing message and an optional
       context dict. Global exception handlers (registered in main.py) turn
       them into structured JSON responses with the matching status code.
Who:   Raised by services and route dependencies; caught by global handlers.

Exception Hierarchy:
    MicroPostsError (base)
    ├── ValidationError              → 400 Bad Request (client can fix)
    ├── InvalidCredentialsError      → 401 (login failed, uniform message)
    ├── AuthenticationRequiredError  → 401 (anonymous caller)
    ├── AuthorizationError           → 401 (identified, but not the owner)
    ├── NotFoundError                → 404 Not Found
    ├── AlreadyExistsError           → 409 Conflict
    └── DatabaseError                → 500 Internal Server Error

Token verification failures are deliberately absent: the authentication
middleware resolves them to an anonymous identity instead of raising.
"""

from typing import Any, Dict, Optional


class MicroPostsError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client
                  unless a handler explicitly includes it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MicroPostsError):
    """
    Raised when client input fails a business rule.

    When:    Malformed email, missing post title, self-follow, unknown filter.
    HTTP:    400 Bad Request

    Schema-level problems (wrong JSON types) are still reported by FastAPI
    as 422; this class covers the rules the services enforce themselves.
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


class InvalidCredentialsError(MicroPostsError):
    """
    Raised when login fails.

    The message is identical whether the email is unknown or the password
    is wrong, so the response cannot be used to enumerate accounts.
    HTTP:    401 Unauthorized
    """

    MESSAGE = "Invalid credentials"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=self.MESSAGE, context=context)


class AuthenticationRequiredError(MicroPostsError):
    """Raised when an anonymous caller hits an action that needs a user. HTTP 401."""

    def __init__(
        self,
        message: str = "You must be logged in to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(MicroPostsError):
    """
    Raised when an identified user acts on a resource they do not own.

    HTTP:    401 Unauthorized, with error code `unauthorized` so clients can
             tell it apart from `authentication_required`.
    """

    def __init__(
        self,
        resource: str = "resource",
        action: str = "modify",
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Unauthorized to {action} this {resource}"
        ctx = context or {}
        ctx["resource"] = resource
        ctx["action"] = action
        super().__init__(message=message, context=ctx)


class NotFoundError(MicroPostsError):
    """
    Raised when a requested resource does not exist.

    Repositories return None for missing rows; services convert that into
    this exception so the 404 decision stays out of the store layer.
    HTTP:    404 Not Found
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


class AlreadyExistsError(MicroPostsError):
    """Raised when creating a row that collides with a unique key. HTTP 409."""

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(MicroPostsError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the original
    exception type travels in `context` and is only logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
