"""
CV Site Backend — Pydantic Response Schemas
=============================================

What:  Response models shared across endpoints: the error envelope, the
       paginated list envelope and the health report.
Who:   The error envelope is produced by the handlers in main.py and declared
       on every CRUD route by cvsite.crud.router; the page
       envelope documents the `?limit=` shape of CRUD list routes.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class PageResponse(BaseModel):
    """
    Cursor-paginated list body (GET /api/<resource>/?limit=N[&cursor=C]).

    How cursor works:
        - cursor: id of the last item in this page, null for an empty page
        - Client sends it back as ?cursor= to get the next (older) page
        - Server uses WHERE id < :cursor ORDER BY id DESC
    """
    cursor: Optional[int] = Field(default=None, description="Cursor for the next page")
    limit: int = Field(description="Effective page size")
    items: List[Any] = Field(description="Records of this page")
    total: int = Field(description="Number of items in this page")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "project with ID '12' was not found",
            "details": {"resource": "project", "resource_id": "12"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
