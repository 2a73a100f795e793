"""
HR Desk Backend - Attendance Request/Response Schemas
======================================================

What:  API contract for the clock-in/out endpoints.
How:   Request fields are optional at the schema level so that business-rule
       failures ("type must be in or out") surface as 400 from the service
       rather than FastAPI's generic 422.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ClockRequest(BaseModel):
    type: Optional[Any] = Field(default=None, description='"in" or "out"')


class AttendanceUpdateRequest(BaseModel):
    """PATCH body. Omitted fields are left unchanged; an unknown type is ignored."""
    time: Optional[int] = Field(default=None, description="New time, epoch milliseconds")
    type: Optional[str] = Field(default=None, description='"in" or "out"')


class AttendanceEventResponse(BaseModel):
    """One clock event as returned by every attendance endpoint."""
    id: str
    type: str
    time: int = Field(description="Epoch milliseconds")

    model_config = {"from_attributes": True}


class DaySummary(BaseModel):
    """
    First clock-in, last clock-out and worked duration of one day.

    Serialized as {"in": ..., "out": ..., "workedMs": ...}.
    """
    in_time: Optional[int] = Field(default=None, alias="in")
    out_time: Optional[int] = Field(default=None, alias="out")
    worked_ms: Optional[int] = Field(default=None, alias="workedMs")

    model_config = ConfigDict(populate_by_name=True)


class MonthlySummaryResponse(BaseModel):
    month: str = Field(description="YYYY-MM")
    summary: Dict[str, DaySummary] = Field(description="Day key (YYYY-MM-DD) to summary, ascending")
