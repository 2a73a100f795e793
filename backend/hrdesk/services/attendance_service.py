"""
HR Desk Backend - Attendance Service
=====================================

What:  Clock-in/out recording, correction, deletion, and daily/monthly summaries.
How:   Operates on AttendanceEvent and DailySummary rows through the request's
       AsyncSession. The session dependency commits; this service only flushes.
Who:   Called by the attendance route handlers.

Daily summary maintenance:
    Every write (clock, update, delete) recomputes the DailySummary of the
    affected day from that day's events:

        events(date) ordered by time
          ├── first "in"  → in_time
          ├── last  "out" → out_time
          └── both set    → worked_ms = out_time - in_time

    A day left with neither kind of event loses its summary row.

Day keys:
    An event's `date` is the UTC day of its clock time and never changes, even
    if a later PATCH moves `time` across midnight.
"""

import logging
import re
import time
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrdesk.exceptions import DatabaseError, NotFoundError, ValidationError
from hrdesk.models.attendance import AttendanceEvent, DailySummary
from hrdesk.schemas.attendance import (
    AttendanceEventResponse,
    DaySummary,
    MonthlySummaryResponse,
)

logger = logging.getLogger(__name__)

CLOCK_TYPES = ("in", "out")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def now_ms() -> int:
    """Current server time in epoch milliseconds."""
    return int(time.time() * 1000)


def date_key(ms: int) -> str:
    """UTC day key (YYYY-MM-DD) of an epoch-millisecond timestamp."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d")


def _validate_date(value: str) -> str:
    if not _DATE_RE.match(value):
        raise ValidationError(message="date must be YYYY-MM-DD", field="date")
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(message=f"'{value}' is not a valid date", field="date")
    return value


def _to_response(event: AttendanceEvent) -> AttendanceEventResponse:
    return AttendanceEventResponse(id=event.id, type=event.type, time=event.time)


class AttendanceService:
    """
    Business logic for attendance events.

    Responsibilities:
        - clock(): record a clock-in/out at the server time
        - list_events(): events of a day, oldest first
        - update_event() / delete_event(): corrections
        - monthly_summary(): per-day first-in/last-out for a month
        - recompute_daily_summary(): keeps DailySummary consistent with events

    Error Handling:
        SQLAlchemy errors are wrapped in DatabaseError; application errors
        (ValidationError, NotFoundError) propagate unchanged.
    """

    async def clock(
        self,
        db: AsyncSession,
        clock_type: Optional[str],
        at_ms: Optional[int] = None,
    ) -> AttendanceEventResponse:
        """
        Record a clock-in or clock-out.

        Args:
            db: Async database session
            clock_type: "in" or "out"
            at_ms: Event time; defaults to the server clock

        Raises:
            ValidationError: clock_type is anything other than "in"/"out" (→ 400)
        """
        if clock_type not in CLOCK_TYPES:
            raise ValidationError(message='type must be "in" or "out"', field="type")

        stamp = at_ms if at_ms is not None else now_ms()
        day = date_key(stamp)

        try:
            event = AttendanceEvent(date=day, type=clock_type, time=stamp)
            db.add(event)
            await db.flush()
            await self.recompute_daily_summary(db, day)
        except SQLAlchemyError as e:
            logger.error("Clock error: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to record attendance",
                context={"error_type": type(e).__name__},
            )

        logger.info("Clock-%s recorded for %s (id=%s)", clock_type, day, event.id)
        return _to_response(event)

    async def list_events(
        self,
        db: AsyncSession,
        day: Optional[str] = None,
    ) -> List[AttendanceEventResponse]:
        """Events of `day` (default: today, UTC) ordered by time ascending."""
        day = _validate_date(day) if day else date_key(now_ms())
        try:
            result = await db.execute(
                select(AttendanceEvent)
                .where(AttendanceEvent.date == day)
                .order_by(asc(AttendanceEvent.time))
            )
            events = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Query error for %s: %s", day, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch attendance",
                context={"date": day},
            )
        return [_to_response(e) for e in events]

    async def update_event(
        self,
        db: AsyncSession,
        event_id: str,
        new_time: Optional[int] = None,
        new_type: Optional[str] = None,
    ) -> AttendanceEventResponse:
        """
        Correct an event's time and/or type.

        A type other than "in"/"out" is ignored. The event keeps its day key.

        Raises:
            NotFoundError: No event with this id (→ 404)
        """
        event = await self._get_event(db, event_id)
        try:
            if new_time is not None:
                event.time = new_time
            if new_type in CLOCK_TYPES:
                event.type = new_type
            await db.flush()
            await self.recompute_daily_summary(db, event.date)
        except SQLAlchemyError as e:
            logger.error("Patch error for %s: %s", event_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to update", context={"event_id": event_id})
        return _to_response(event)

    async def delete_event(self, db: AsyncSession, event_id: str) -> None:
        """
        Delete an event and recompute its day.

        Raises:
            NotFoundError: No event with this id (→ 404)
        """
        event = await self._get_event(db, event_id)
        day = event.date
        try:
            await db.delete(event)
            await db.flush()
            await self.recompute_daily_summary(db, day)
        except SQLAlchemyError as e:
            logger.error("Delete error for %s: %s", event_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete", context={"event_id": event_id})
        logger.info("Attendance event %s deleted (%s)", event_id, day)

    async def monthly_summary(self, db: AsyncSession, month: str) -> MonthlySummaryResponse:
        """
        Per-day summaries of a month.

        Raises:
            ValidationError: month is not YYYY-MM (→ 400)
        """
        if not _MONTH_RE.match(month):
            raise ValidationError(message="month must be YYYY-MM", field="month")
        try:
            result = await db.execute(
                select(DailySummary)
                .where(DailySummary.month == month)
                .order_by(asc(DailySummary.date))
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Summary error for %s: %s", month, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch summary", context={"month": month})

        return MonthlySummaryResponse(
            month=month,
            summary={
                row.date: DaySummary(
                    in_time=row.in_time,
                    out_time=row.out_time,
                    worked_ms=row.worked_ms,
                )
                for row in rows
            },
        )

    async def recompute_daily_summary(self, db: AsyncSession, day: str) -> Optional[DailySummary]:
        """
        Rebuild the DailySummary of `day` from its events.

        Returns the summary row, or None when the day has no events left.
        """
        result = await db.execute(
            select(AttendanceEvent)
            .where(AttendanceEvent.date == day)
            .order_by(asc(AttendanceEvent.time))
        )
        first_in: Optional[int] = None
        last_out: Optional[int] = None
        for event in result.scalars().all():
            if event.type == "in" and first_in is None:
                first_in = event.time
            if event.type == "out":
                last_out = event.time

        summary = await db.get(DailySummary, day)

        if first_in is None and last_out is None:
            if summary is not None:
                await db.delete(summary)
                await db.flush()
            return None

        if summary is None:
            summary = DailySummary(date=day, month=day[:7])
            db.add(summary)

        summary.month = day[:7]
        summary.in_time = first_in
        summary.out_time = last_out
        summary.worked_ms = (
            last_out - first_in if first_in is not None and last_out is not None else None
        )
        await db.flush()
        return summary

    async def _get_event(self, db: AsyncSession, event_id: str) -> AttendanceEvent:
        try:
            event = await db.get(AttendanceEvent, event_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching event %s: %s", event_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the attendance event.",
                context={"event_id": event_id},
            )
        if event is None:
            raise NotFoundError(resource="attendance event", resource_id=event_id)
        return event


# ── Singleton Instance ────────────────────────────────────────────────────
attendance_service = AttendanceService()
