"""Create attendance tables

Revision ID: 001
Revises: None
Create Date: 2025-01-06 00:00:00.000000+00:00

What:  Creates `attendance` (clock events) and `daily_summary` (per-day
       first-in/last-out cache).
How:   Portable column types only (String, BigInteger, DateTime with time
       zone), so the same revision runs on PostgreSQL and SQLite.

Rollback: downgrade() drops both tables (all attendance data is lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "attendance",
        sa.Column("id", sa.String(36), nullable=False, comment="uuid4 string"),
        sa.Column("date", sa.String(10), nullable=False, comment="UTC day of the clock time, YYYY-MM-DD"),
        sa.Column("type", sa.String(3), nullable=False, comment="'in' or 'out'"),
        sa.Column("time", sa.BigInteger(), nullable=False, comment="Epoch milliseconds"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_attendance"),
    )
    # Day listing and summary recomputation both read one day ordered by time.
    op.create_index("idx_attendance_date_time", "attendance", ["date", "time"])

    op.create_table(
        "daily_summary",
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("month", sa.String(7), nullable=False, comment="YYYY-MM"),
        sa.Column("in_time", sa.BigInteger(), nullable=True, comment="First clock-in, epoch ms"),
        sa.Column("out_time", sa.BigInteger(), nullable=True, comment="Last clock-out, epoch ms"),
        sa.Column("worked_ms", sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint("date", name="pk_daily_summary"),
    )
    op.create_index("ix_daily_summary_month", "daily_summary", ["month"])


def downgrade() -> None:
    op.drop_index("ix_daily_summary_month", table_name="daily_summary")
    op.drop_table("daily_summary")
    op.drop_index("idx_attendance_date_time", table_name="attendance")
    op.drop_table("attendance")
