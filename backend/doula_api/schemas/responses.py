"""
Doula JSON Backend — Response Schemas
=======================================

What:  Pydantic models for the fixed-shape responses (errors, health,
       delete acknowledgement).
Why:   Records themselves are free-form JSON objects and are never modelled;
       only the envelopes the server controls get a schema, which also
       documents them in the OpenAPI output.
"""

from typing import List

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Error body used by every failing endpoint.

    Example:
        {"error": "not found"}
    """
    error: str = Field(description="Static error text: read/write/update/delete error or not found")


class DeleteResponse(BaseModel):
    success: bool = Field(default=True)


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and storage status.
    Who:   Returned by GET /health for monitoring and container orchestrators.
    """
    status: str = Field(description="Overall service status: healthy or degraded")
    version: str = Field(description="Application version")
    data_dir: str = Field(description="Resolved directory holding collection files")
    storage: str = Field(description="Data directory state: writable or unavailable")
    collections: List[str] = Field(description="Collections served under /api/<name>")
    uptime_seconds: float = Field(description="Seconds since service started")
