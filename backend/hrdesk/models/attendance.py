"""
HR Desk Backend - Attendance SQLAlchemy Models
===============================================

What:  ORM models for the `attendance` and `daily_summary` tables.
How:   Inherit from the shared DeclarativeBase; Alembic reads these for migrations.
Who:   Used by AttendanceService for CRUD and summary recomputation.

Table Design:
    attendance
        - id: UUID string generated in Python (portable across PostgreSQL and SQLite)
        - date: UTC day key "YYYY-MM-DD" of `time`, fixed at clock time
        - type: "in" | "out"
        - time: epoch milliseconds (BIGINT)
        Index on (date, time) serves "events of a day, oldest first".

    daily_summary
        - date: primary key, one row per day with at least one event
        - month: "YYYY-MM", indexed for the monthly summary query
        - in_time / out_time: first clock-in and last clock-out of the day
        - worked_ms: out_time - in_time when both exist
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from hrdesk.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class AttendanceEvent(Base):
    """
    A single clock-in or clock-out.

    Lifecycle:
        1. Created by POST /api/attendance/clock with the server clock
        2. Optionally corrected (time/type) by PATCH
        3. Deleted by DELETE
        Every change triggers a recomputation of the day's DailySummary.
    """

    __tablename__ = "attendance"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    type: Mapped[str] = mapped_column(String(3), nullable=False)
    time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_attendance_date_time", "date", "time"),
    )

    def __repr__(self) -> str:
        return f"<AttendanceEvent(id={self.id}, type='{self.type}', time={self.time})>"


class DailySummary(Base):
    """Cached first-in / last-out per day, kept in sync with AttendanceEvent rows."""

    __tablename__ = "daily_summary"

    date: Mapped[str] = mapped_column(String(10), primary_key=True)
    month: Mapped[str] = mapped_column(String(7), nullable=False, index=True)
    in_time: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    out_time: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    worked_ms: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<DailySummary(date='{self.date}', in_time={self.in_time}, "
            f"out_time={self.out_time})>"
        )
