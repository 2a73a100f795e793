"""
HR Desk Backend - Attendance Route Handlers
============================================

What:  Clock-in/out endpoints of the attendance app.
How:   Thin handlers: parse the request, call attendance_service with the
       request's AsyncSession, return the schema. The session dependency
       commits on success and rolls back on any exception.

Route Inventory:
    GET    /api/ping
    POST   /api/attendance/clock
    GET    /api/attendance?date=YYYY-MM-DD
    PATCH  /api/attendance/{event_id}
    DELETE /api/attendance/{event_id}
    GET    /api/attendance/summary/{month}
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.database import get_db_session
from hrdesk.schemas.attendance import (
    AttendanceEventResponse,
    AttendanceUpdateRequest,
    ClockRequest,
    MonthlySummaryResponse,
)
from hrdesk.schemas.common import ErrorResponse, OkResponse, PingResponse
from hrdesk.services.attendance_service import attendance_service, now_ms

router = APIRouter(prefix="/api", tags=["Attendance"])


@router.get(
    "/ping",
    response_model=PingResponse,
    response_model_exclude_none=True,
    summary="Liveness ping",
)
async def ping() -> PingResponse:
    return PingResponse(time=now_ms())


@router.post(
    "/attendance/clock",
    response_model=AttendanceEventResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid type", "model": ErrorResponse}},
    summary="Clock in or out at the server time",
)
async def clock(
    body: Optional[ClockRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> AttendanceEventResponse:
    return await attendance_service.clock(db, body.type if body is not None else None)


@router.get(
    "/attendance",
    response_model=List[AttendanceEventResponse],
    responses={400: {"description": "Malformed date", "model": ErrorResponse}},
    summary="List the events of one day",
)
async def list_attendance(
    date: Optional[str] = Query(
        default=None,
        description="Day key YYYY-MM-DD (UTC). Defaults to today.",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[AttendanceEventResponse]:
    return await attendance_service.list_events(db, date)


@router.get(
    "/attendance/summary/{month}",
    response_model=MonthlySummaryResponse,
    responses={400: {"description": "Malformed month", "model": ErrorResponse}},
    summary="Per-day first-in/last-out summary of a month",
)
async def monthly_summary(
    month: str,
    db: AsyncSession = Depends(get_db_session),
) -> MonthlySummaryResponse:
    """
    Days without events are absent from `summary`.

    Example:
        GET /api/attendance/summary/2025-01
        {"month": "2025-01",
         "summary": {"2025-01-06": {"in": 1736150400000, "out": 1736182800000,
                                    "workedMs": 32400000}}}
    """
    return await attendance_service.monthly_summary(db, month)


@router.patch(
    "/attendance/{event_id}",
    response_model=AttendanceEventResponse,
    responses={404: {"description": "Unknown event", "model": ErrorResponse}},
    summary="Correct an event's time or type",
)
async def update_attendance(
    event_id: str,
    body: AttendanceUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AttendanceEventResponse:
    return await attendance_service.update_event(db, event_id, new_time=body.time, new_type=body.type)


@router.delete(
    "/attendance/{event_id}",
    response_model=OkResponse,
    responses={404: {"description": "Unknown event", "model": ErrorResponse}},
    summary="Delete an event",
)
async def delete_attendance(
    event_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> OkResponse:
    await attendance_service.delete_event(db, event_id)
    return OkResponse()
