"""
Book Catalog Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the error scenarios the API exposes.
Why:   Services raise these instead of building HTTP responses; global
       handlers registered in main.py translate them into the standard
       error envelope with the right status code.
How:   Each exception carries a client-safe message and an optional context
       dict. Context is logged server-side and only returned to the client
       where it is safe (validation field errors).

Exception Hierarchy:
    BookCatalogError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found (entity or referenced category)
    └── DatabaseError     → 500 Internal Server Error

Error envelope (every handler):
    {
        "error": {
            "code": "validation_error",
            "message": "Search query must be at most 100 characters",
            "fields": {"q": "Search query must be at most 100 characters"},
            "request_id": "a1b2c3d4"
        }
    }
"""

from typing import Any, Dict, Optional


class BookCatalogError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, NOT returned to client)
    """

    code = "internal_server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BookCatalogError):
    """
    Raised when client input fails a rule the request schema cannot express.

    When:    Search query too long, or any other business-rule check on input.
    HTTP:    400 Bad Request

    `fields` maps field names to messages and is returned to the client.
    Passing `field` alone records `message` under that field name.
    """

    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        fields: Optional[Dict[str, str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.fields = dict(fields or {})
        if field and field not in self.fields:
            self.fields[field] = message


class NotFoundError(BookCatalogError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE on an unknown id, or a book write that references
             a category id with no matching row.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; services convert that None
    into this exception.
    """

    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class DatabaseError(BookCatalogError):
    """
    Raised when a database operation fails unexpectedly.

    When:    Connection lost mid-query, constraint violation not pre-checked
             (e.g. the referenced category was deleted between the existence
             check and the insert), deadlock, etc.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the underlying
    error type goes into `context` and is logged only.
    """

    code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
