"""
CV Site Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into
       structured JSON error responses with the right HTTP status code.
Who:   Raised by CRUD handlers, hooks and the route builder.

Exception Hierarchy:
    CVSiteError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    └── ConfigurationError       → raised at router construction, never served

Persistence failures (sqlalchemy.exc.SQLAlchemyError) are not wrapped: they
propagate unmodified and are answered with a generic 500 by main.py.
"""

from typing import Any, Dict, Optional


class CVSiteError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CVSiteError):
    """
    Raised when client input fails validation.

    When:    Malformed path id, bad ?limit= / ?cursor=, non-JSON body,
             references to records that do not exist.
    HTTP:    400 Bad Request
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


class AuthenticationError(CVSiteError):
    """Raised by hooks that require a known caller. HTTP 401."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CVSiteError):
    """
    Raised when a requested resource does not exist.

    When:    PUT/PATCH against a missing or soft-deleted record,
             DELETE against an id with no record at all.
    HTTP:    404 Not Found

    The requested id is kept in `context["resource_id"]`.
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
        self.resource_id = resource_id


class ConfigurationError(CVSiteError):
    """
    Raised while building a resource router from an invalid configuration.

    When:    Unknown verb in a `pre-<verb>`/`post-<verb>` key, unsupported
             action value, unknown populate path or sort field.
    Effect:  Application start-up fails; nothing is deferred to request time.
    """

    def __init__(
        self,
        message: str = "Invalid resource configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
