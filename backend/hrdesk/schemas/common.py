"""
HR Desk Backend - Shared Pydantic Schemas
==========================================

What:  Response models used by both applications (errors, health, ping) and
       the camelCase base model used by recruitment contracts.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model whose JSON field names are camelCase.

    Python code uses snake_case attribute names; requests are accepted in
    either form, responses are serialized with the camelCase aliases.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PingResponse(BaseModel):
    """Liveness probe used by the frontends on load."""
    ok: bool = True
    app: Optional[str] = Field(default=None, description="Application name (recruitment only)")
    time: int = Field(description="Server clock, epoch milliseconds")


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "candidate with ID 'cand_9999' was not found",
            "details": {"resource": "candidate", "resource_id": "cand_9999"},
            "request_id": "1f0c2a9e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    Health check response showing service and dependency status.

    database is reported by the attendance app; store_candidates by the
    recruitment app. The other field is null.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    app: str = Field(description="Application name: attendance or recruitment")
    version: str = Field(description="Application version")
    database: Optional[str] = Field(default=None, description="connected, disconnected")
    store_candidates: Optional[int] = Field(default=None, description="Candidates held in memory")
    uptime_seconds: float = Field(description="Seconds since service started")
