"""
Book Catalog Backend — Shared Schemas
=====================================

Error envelope and health/welcome payloads used across routers, plus the
NUL check shared by the request schemas. The response models exist
mainly so OpenAPI documents the shapes the global exception handlers emit.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


def reject_nul(value: Optional[str]) -> Optional[str]:
    """PostgreSQL text columns cannot store NUL; refuse it at validation time."""
    if value is not None and "\x00" in value:
        raise ValueError("Value must not contain NUL characters")
    return value


class ErrorDetail(BaseModel):
    """
    Body of the `error` key in every error response.

    Example:
        {
            "code": "validation_error",
            "message": "Request validation failed",
            "fields": {"title": "String should have at least 1 character"},
            "request_id": "550e8400"
        }
    """
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    fields: Optional[Dict[str, str]] = Field(default=None, description="Per-field validation messages")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class ErrorResponse(BaseModel):
    """Standard error envelope: {"error": {...}}."""
    error: ErrorDetail


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


class MessageResponse(BaseModel):
    message: str
