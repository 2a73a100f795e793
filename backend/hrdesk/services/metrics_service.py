"""
HR Desk Backend - Recruiting Metrics
=====================================

What:  Period-based recruiting KPIs over the application records of the store.
How:   Pure functions: normalize the requested period/filter, compute the
       period's UTC date range, then filter, group and summarize applications.
Who:   Called by RecruitmentService for GET /bootstrap and GET /metrics.

Periods (fiscal year starting in month F, filter fiscalYear Y):
    monthly     calendar month `month` of the current calendar year
    quarterly   [F + 3(q-1), F + 3q) months from the start of fiscal year Y
    halfyearly  [F, F+6) or [F+6, F+12)
    yearly      [F, F+12)
    All ranges are UTC and end-exclusive; month offsets roll into the next year.

Output:
    overall summary ─┬─ byGroup (org groups in first-seen order)
                     ├─ statusCounts (all six statuses)
                     └─ comparison
                         ├─ overall: previous period, same period last year, 3-year trend
                         └─ byDepartment / bySection / byGroup rows
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Type

from hrdesk.schemas.recruitment import (
    ALL_STATUSES,
    ApplicationRecord,
    ApplicationSummary,
    DepartmentRow,
    DimensionRow,
    GroupRow,
    GroupSummary,
    MetricFilter,
    MetricsComparison,
    OverallComparison,
    OverallDiff,
    RecruitingMetrics,
    SectionRow,
    SummaryDiff,
    SummaryLite,
    TrendPoint,
)

_SECONDS_PER_DAY = 86400

DIMENSIONS: Dict[str, Tuple[str, ...]] = {
    "department": ("department",),
    "section": ("department", "section"),
    "group": ("department", "section", "group"),
}

ROW_TYPES: Dict[str, Type[DimensionRow]] = {
    "department": DepartmentRow,
    "section": SectionRow,
    "group": GroupRow,
}

DimensionKey = Tuple[str, ...]
DimensionSummary = Dict[DimensionKey, Tuple[Dict[str, str], SummaryLite]]


@dataclass(frozen=True)
class DateRange:
    """Half-open UTC interval [start, end)."""
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def shifted(self, delta: timedelta) -> "DateRange":
        return DateRange(self.start - delta, self.end - delta)

    def previous_year(self) -> "DateRange":
        return DateRange(_minus_year(self.start), _minus_year(self.end))


# ══════════════════════════════════════════════════════════════════════════
# Fiscal Calendar
# ══════════════════════════════════════════════════════════════════════════


def current_fiscal_year(now: datetime, start_month: int) -> int:
    """Calendar year in which the fiscal year containing `now` started."""
    return now.year if now.month >= start_month else now.year - 1


def _fiscal_month_offset(now: datetime, start_month: int) -> int:
    return (now.month - start_month) % 12


def current_quarter(now: datetime, start_month: int) -> int:
    return _fiscal_month_offset(now, start_month) // 3 + 1


def current_half(now: datetime, start_month: int) -> int:
    return 1 if _fiscal_month_offset(now, start_month) < 6 else 2


def _month_start(year: int, month_index: int) -> datetime:
    """First instant of month `month_index` (0-based, may overflow) of `year`, UTC."""
    return datetime(year + month_index // 12, month_index % 12 + 1, 1, tzinfo=timezone.utc)


def _minus_year(moment: datetime) -> datetime:
    return moment.replace(year=moment.year - 1)


# ══════════════════════════════════════════════════════════════════════════
# Request Normalization
# ══════════════════════════════════════════════════════════════════════════


def parse_int(value: Optional[str]) -> Optional[int]:
    """Lenient integer parsing for query strings ("4", "4.0"); anything else is None."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def normalize_period(raw: Optional[str]) -> str:
    return raw if raw in ("quarterly", "halfyearly", "yearly") else "monthly"


def normalize_filter(
    month: Optional[int],
    quarter: Optional[int],
    half: Optional[int],
    fiscal_year: Optional[int],
    start_month: int,
    now: datetime,
) -> MetricFilter:
    """
    Replace missing or out-of-range filter values with "current" ones.

    fiscalYear is only accepted within the last three fiscal years.
    """
    this_fiscal_year = current_fiscal_year(now, start_month)
    return MetricFilter(
        month=month if month is not None and 1 <= month <= 12 else now.month,
        quarter=quarter if quarter is not None and 1 <= quarter <= 4 else current_quarter(now, start_month),
        half=half if half in (1, 2) else current_half(now, start_month),
        fiscal_year=(
            fiscal_year
            if fiscal_year is not None and this_fiscal_year - 2 <= fiscal_year <= this_fiscal_year
            else this_fiscal_year
        ),
    )


def period_range(period: str, start_month: int, metric_filter: MetricFilter, now: datetime) -> DateRange:
    fiscal_index = start_month - 1
    if period == "monthly":
        return DateRange(
            _month_start(now.year, metric_filter.month - 1),
            _month_start(now.year, metric_filter.month),
        )
    if period == "quarterly":
        offset = (metric_filter.quarter - 1) * 3
        length = 3
    elif period == "halfyearly":
        offset = 0 if metric_filter.half == 1 else 6
        length = 6
    else:
        offset = 0
        length = 12
    return DateRange(
        _month_start(metric_filter.fiscal_year, fiscal_index + offset),
        _month_start(metric_filter.fiscal_year, fiscal_index + offset + length),
    )


# ══════════════════════════════════════════════════════════════════════════
# Summaries
# ══════════════════════════════════════════════════════════════════════════


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def round1(value: float) -> float:
    """One decimal, exact ties away from zero (6.25 -> 6.3, -6.25 -> -6.3)."""
    return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=timezone.utc)


def _days_between(later: datetime, earlier: datetime) -> int:
    return _round_half_up((later - earlier).total_seconds() / _SECONDS_PER_DAY)


def _date_span(later: Optional[date], earlier: Optional[date]) -> Optional[int]:
    if later is None or earlier is None:
        return None
    return _days_between(_midnight(later), _midnight(earlier))


def median(values: Sequence[float]) -> Optional[float]:
    """Middle value; mean of the two middle values (1 decimal) for even counts."""
    if not values:
        return None
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[mid]
    return round((ordered[mid - 1] + ordered[mid]) / 2, 1)


def _median_of(spans: Iterable[Optional[int]]) -> Optional[float]:
    return median([s for s in spans if s is not None])


def summarize(apps: Sequence[ApplicationRecord]) -> ApplicationSummary:
    """
    Counts, pass rate and median durations of a set of applications.

    An application's decision is its final result, else its first result.
    passRate = passed / decided × 100 (1 decimal), 0 when nothing is decided.
    """
    decisions = [a.final_interview_result or a.first_interview_result for a in apps]
    decided = [d for d in decisions if d]
    passed = sum(1 for d in decided if d == "PASS")
    pass_rate = round1(passed / len(decided) * 100) if decided else 0.0

    first_to_first_result = _median_of(
        _date_span(a.first_result_notified_date, a.first_interview_date) for a in apps
    )
    return ApplicationSummary(
        total_applications=len(apps),
        passed_interviews=passed,
        decided_interviews=len(decided),
        pass_rate=pass_rate,
        median_days_applied_to_final_decision_for_hired=_median_of(
            _date_span(a.final_result_notified_date, a.applied_date)
            for a in apps
            if a.final_interview_result == "PASS"
        ),
        median_days_applied_to_first_interview=_median_of(
            _date_span(a.first_interview_date, a.applied_date) for a in apps
        ),
        median_days_first_interview_to_first_result=first_to_first_result,
        median_days_first_result_to_final_interview=_median_of(
            _date_span(a.final_interview_date, a.first_result_notified_date) for a in apps
        ),
        median_days_final_interview_to_final_result=_median_of(
            _date_span(a.final_result_notified_date, a.final_interview_date) for a in apps
        ),
        median_days_applied_to_interview=_median_of(
            _days_between(_midnight(a.first_interview_date), a.applied_at)
            for a in apps
            if a.first_interview_date is not None
        ),
        median_days_interview_to_notification=first_to_first_result,
    )


def summarize_lite(apps: Sequence[ApplicationRecord]) -> SummaryLite:
    summary = summarize(apps)
    return SummaryLite(total_applications=summary.total_applications, pass_rate=summary.pass_rate)


def summarize_by_dimension(apps: Iterable[ApplicationRecord], dimension: str) -> DimensionSummary:
    """Group by the dimension's org fields (first-seen order) and summarize each group."""
    fields = DIMENSIONS[dimension]
    grouped: Dict[DimensionKey, List[ApplicationRecord]] = {}
    for app in apps:
        grouped.setdefault(tuple(getattr(app, f) for f in fields), []).append(app)
    return {
        key: (dict(zip(fields, key)), summarize_lite(members))
        for key, members in grouped.items()
    }


def diff_rate(current: int, previous: int) -> Optional[float]:
    """Relative change in percent (1 decimal); None when there is no baseline."""
    if previous == 0:
        return None
    return round1((current - previous) / previous * 100)


def _diff(current: SummaryLite, previous: SummaryLite) -> SummaryDiff:
    return SummaryDiff(
        total_applications=current.total_applications - previous.total_applications,
        total_applications_rate=diff_rate(current.total_applications, previous.total_applications),
        pass_rate=round1(current.pass_rate - previous.pass_rate),
    )


# ══════════════════════════════════════════════════════════════════════════
# Trend & Comparison
# ══════════════════════════════════════════════════════════════════════════


def trend_label(period: str, year: int, metric_filter: MetricFilter) -> str:
    if period == "monthly":
        return f"{year}年{metric_filter.month}月"
    if period == "quarterly":
        return f"{year}年度Q{metric_filter.quarter}"
    if period == "halfyearly":
        return f"{year}年度{'上期' if metric_filter.half == 1 else '下期'}"
    return f"{year}年度"


@dataclass
class _TrendSlot:
    label: str
    apps: List[ApplicationRecord]

    def by_dimension(self, dimension: str) -> DimensionSummary:
        return summarize_by_dimension(self.apps, dimension)


def _build_rows(
    row_type: Type[DimensionRow],
    current: DimensionSummary,
    previous_year: DimensionSummary,
    trend: List[Tuple[str, DimensionSummary]],
) -> List[DimensionRow]:
    """
    One row per key seen in the current period, the previous year, or the trend.

    The row's org fields come from whichever source first saw the key.
    """
    keys = dict.fromkeys(
        [*current, *previous_year, *(key for _, summary in trend for key in summary)]
    )
    rows = []
    for key in keys:
        sources = [current, previous_year, *(summary for _, summary in trend)]
        meta = next(s[key][0] for s in sources if key in s)
        now_value = current[key][1] if key in current else SummaryLite()
        prev_value = previous_year[key][1] if key in previous_year else SummaryLite()
        rows.append(row_type(
            **meta,
            current=now_value,
            previous_year_same_period=prev_value,
            diff=_diff(now_value, prev_value),
            trend=[
                TrendPoint(
                    label=label,
                    total_applications=summary[key][1].total_applications if key in summary else 0,
                    pass_rate=summary[key][1].pass_rate if key in summary else 0,
                )
                for label, summary in trend
            ],
        ))
    return rows


def calculate_recruiting_metrics(
    applications: Iterable[ApplicationRecord],
    period: str,
    start_month: int,
    metric_filter: MetricFilter,
    now: Optional[datetime] = None,
) -> RecruitingMetrics:
    """
    Compute all KPIs for the requested period.

    Args:
        applications: Every application in the store
        period: monthly | quarterly | halfyearly | yearly (already normalized)
        start_month: Fiscal year start month (1, 4 or 9)
        metric_filter: Normalized filter (see normalize_filter)
        now: Reference time; defaults to the current UTC time

    Comparison ranges:
        previous period           the period range shifted back by its own length
        same period last year     start/end with the year decremented
        trend                     the same slot in each of the last three years
    """
    now = now or datetime.now(timezone.utc)
    all_apps = list(applications)

    def within(rng: DateRange) -> List[ApplicationRecord]:
        return [a for a in all_apps if rng.contains(a.applied_at)]

    current_range = period_range(period, start_month, metric_filter, now)
    current_apps = within(current_range)
    overall = summarize(current_apps)

    status_counts = {status: 0 for status in ALL_STATUSES}
    for app in current_apps:
        status_counts[app.status] += 1

    groups: Dict[DimensionKey, List[ApplicationRecord]] = {}
    for app in current_apps:
        groups.setdefault((app.department, app.section, app.group), []).append(app)
    by_group = [
        GroupSummary(department=d, section=s, group=g, **summarize(members).model_dump())
        for (d, s, g), members in groups.items()
    ]

    previous_period = summarize_lite(
        within(current_range.shifted(current_range.end - current_range.start))
    )
    last_year_range = current_range.previous_year()
    last_year_apps = within(last_year_range)
    last_year = summarize_lite(last_year_apps)

    if period == "monthly":
        base_year = current_range.start.year
        trend_years = [base_year - 2, base_year - 1, base_year]
    else:
        trend_years = [metric_filter.fiscal_year - 2, metric_filter.fiscal_year - 1, metric_filter.fiscal_year]

    slots = []
    for year in trend_years:
        if period == "monthly":
            rng = DateRange(
                _month_start(year, metric_filter.month - 1),
                _month_start(year, metric_filter.month),
            )
        else:
            rng = period_range(period, start_month, replace_fiscal_year(metric_filter, year), now)
        slots.append(_TrendSlot(label=trend_label(period, year, metric_filter), apps=within(rng)))

    overall_lite = SummaryLite(total_applications=overall.total_applications, pass_rate=overall.pass_rate)
    comparison = MetricsComparison(
        overall=OverallComparison(
            previous_period=previous_period,
            previous_year_same_period=last_year,
            diff=OverallDiff(
                previous_period=_diff(overall_lite, previous_period),
                previous_year_same_period=_diff(overall_lite, last_year),
            ),
            trend=[
                TrendPoint(label=slot.label, **summarize_lite(slot.apps).model_dump())
                for slot in slots
            ],
        ),
        **{
            f"by_{dimension}": _build_rows(
                ROW_TYPES[dimension],
                summarize_by_dimension(current_apps, dimension),
                summarize_by_dimension(last_year_apps, dimension),
                [(slot.label, slot.by_dimension(dimension)) for slot in slots],
            )
            for dimension in DIMENSIONS
        },
    )

    return RecruitingMetrics(
        **overall.model_dump(),
        by_group=by_group,
        status_counts=status_counts,
        comparison=comparison,
    )


def replace_fiscal_year(metric_filter: MetricFilter, year: int) -> MetricFilter:
    return metric_filter.model_copy(update={"fiscal_year": year})
