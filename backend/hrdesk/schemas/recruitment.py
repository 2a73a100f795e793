"""
HR Desk Backend - Recruitment Schemas
======================================

What:  Pydantic models for the recruitment backend. They serve two roles:
       - Records held by the in-memory store (UserAccount, CandidateRecord, ...)
       - Request/response contracts of the recruitment API
How:   All models derive from CamelModel, so the wire format is camelCase
       (fullName, appliedDate, statusHistory) while Python code uses snake_case.

Record shapes:
    CandidateRecord
    └── applications: List[ApplicationRecord]
        ├── interviews: List[InterviewRecord]
        │   └── feedback: InterviewFeedback | None
        └── status_history: List[StatusChange]
"""

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator

from hrdesk.schemas.common import CamelModel

Role = Literal["recruiter", "interviewer", "dept_manager", "tech_admin"]
Decision = Literal["PASS", "FAIL"]
Status = Literal["APPLIED", "SCREENING", "INTERVIEW", "OFFER", "HIRED", "REJECTED"]
MetricPeriod = Literal["monthly", "quarterly", "halfyearly", "yearly"]

ALL_ROLES: List[str] = ["recruiter", "interviewer", "dept_manager", "tech_admin"]
ADMIN_ROLES = frozenset({"recruiter", "tech_admin"})
STATUS_CHANGE_ROLES = frozenset({"recruiter", "dept_manager"})
ALL_STATUSES: List[str] = ["APPLIED", "SCREENING", "INTERVIEW", "OFFER", "HIRED", "REJECTED"]
METRIC_PERIODS: List[str] = ["monthly", "quarterly", "halfyearly", "yearly"]
ALLOWED_FISCAL_START_MONTHS = (1, 4, 9)


# ══════════════════════════════════════════════════════════════════════════
# Organization
# ══════════════════════════════════════════════════════════════════════════


class OrgSection(CamelModel):
    section: str
    groups: List[str]


class OrgDepartment(CamelModel):
    department: str
    sections: List[OrgSection]


class OrgGroup(CamelModel):
    department: str
    section: str
    group: str


# ══════════════════════════════════════════════════════════════════════════
# Store Records
# ══════════════════════════════════════════════════════════════════════════


class PublicUserAccount(CamelModel):
    """A user account as exposed by the API (no password)."""
    id: str
    name: str
    email: str
    role: Role
    title: str
    department: Optional[str] = None
    section: Optional[str] = None
    group: Optional[str] = None
    active: bool = True
    created_at: datetime
    updated_at: datetime


class UserAccount(PublicUserAccount):
    """Stored account. The password is excluded from every serialization."""
    password: str = Field(exclude=True, repr=False)


class InterviewFeedback(CamelModel):
    interviewer_decision: Decision
    interviewer_comment: str
    recruiter_comment: Optional[str] = None


class InterviewRecord(CamelModel):
    id: str
    round: int
    interviewer_id: str
    scheduled_at: datetime
    result_notified_at: Optional[datetime] = None
    feedback: Optional[InterviewFeedback] = None


class StatusChange(CamelModel):
    from_status: Optional[Status] = Field(default=None, alias="from")
    to: Status
    changed_at: datetime
    changed_by_role: Role


class ApplicationRecord(CamelModel):
    """
    One application of a candidate to an org group.

    The first/final interview fields are the flat view the frontend edits;
    `interviews` holds the per-round records that interviewers give feedback on.
    """
    id: str
    department: str
    section: str
    group: str
    applied_date: date
    first_interview_date: Optional[date] = None
    first_interviewers: List[str] = Field(default_factory=list)
    first_interview_result: Optional[Decision] = None
    first_interviewer_comment: Optional[str] = None
    first_recruiter_comment: Optional[str] = None
    first_result_notified_date: Optional[date] = None
    final_interview_date: Optional[date] = None
    final_interviewers: List[str] = Field(default_factory=list)
    final_interview_result: Optional[Decision] = None
    final_interviewer_comment: Optional[str] = None
    final_recruiter_comment: Optional[str] = None
    final_result_notified_date: Optional[date] = None
    status: Status
    applied_at: datetime
    interviews: List[InterviewRecord] = Field(default_factory=list)
    status_history: List[StatusChange] = Field(default_factory=list)


class CandidateRecord(CamelModel):
    id: str
    full_name: str
    email: str
    phone: str
    applied_role: str
    document_urls: List[str] = Field(default_factory=list)
    applications: List[ApplicationRecord] = Field(default_factory=list)
    created_at: datetime


class SystemSettings(CamelModel):
    fiscal_year_start_month: int = 4


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AccountWriteRequest(CamelModel):
    """
    Body of POST and PATCH /admin/accounts.

    `role` is a plain string so that unknown roles are reported as 400 by the
    service. Only fields present in the request are applied on PATCH.
    """
    actor_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    title: Optional[str] = None
    department: Optional[str] = None
    section: Optional[str] = None
    group: Optional[str] = None
    active: Optional[bool] = None
    password: Optional[str] = None


class SettingsUpdateRequest(CamelModel):
    actor_id: Optional[str] = None
    # Unchecked here; anything but 1, 4 or 9 is a 400 from the service.
    fiscal_year_start_month: Optional[Any] = None


class ApplicationInput(CamelModel):
    """
    Application fields accepted on candidate create/update.

    Blank strings from form inputs are treated as "not set".
    Interviewer lists are loosely typed; non-string entries are dropped.
    """
    department: Optional[str] = None
    section: Optional[str] = None
    group: Optional[str] = None
    applied_date: Optional[date] = None
    first_interview_date: Optional[date] = None
    first_interviewers: Optional[List[Any]] = None
    first_interview_result: Optional[Decision] = None
    first_interviewer_comment: Optional[str] = None
    first_recruiter_comment: Optional[str] = None
    first_result_notified_date: Optional[date] = None
    final_interview_date: Optional[date] = None
    final_interviewers: Optional[List[Any]] = None
    final_interview_result: Optional[Decision] = None
    final_interviewer_comment: Optional[str] = None
    final_recruiter_comment: Optional[str] = None
    final_result_notified_date: Optional[date] = None

    @field_validator(
        "department",
        "section",
        "group",
        "applied_date",
        "first_interview_date",
        "first_interview_result",
        "first_interviewer_comment",
        "first_recruiter_comment",
        "first_result_notified_date",
        "final_interview_date",
        "final_interview_result",
        "final_interviewer_comment",
        "final_recruiter_comment",
        "final_result_notified_date",
        mode="before",
    )
    @classmethod
    def blank_as_missing(cls, v: Any) -> Any:
        return _blank_to_none(v)


class CandidateInput(CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    applied_role: Optional[str] = None
    document_urls: Optional[List[Any]] = None
    applications: Optional[List[ApplicationInput]] = None


class FeedbackRequest(CamelModel):
    interviewer_decision: Optional[str] = None
    interviewer_comment: Optional[str] = None
    recruiter_comment: Optional[str] = None


class StatusChangeRequest(CamelModel):
    status: Optional[str] = None
    actor_role: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Metrics
# ══════════════════════════════════════════════════════════════════════════


class MetricFilter(CamelModel):
    month: int
    quarter: int
    half: int
    fiscal_year: int


class SummaryLite(CamelModel):
    total_applications: int = 0
    pass_rate: float = 0


class ApplicationSummary(CamelModel):
    """Counts, pass rate and median durations (days) of a set of applications."""
    total_applications: int
    passed_interviews: int
    decided_interviews: int
    pass_rate: float
    median_days_applied_to_final_decision_for_hired: Optional[float] = None
    median_days_applied_to_first_interview: Optional[float] = None
    median_days_first_interview_to_first_result: Optional[float] = None
    median_days_first_result_to_final_interview: Optional[float] = None
    median_days_final_interview_to_final_result: Optional[float] = None
    median_days_applied_to_interview: Optional[float] = None
    median_days_interview_to_notification: Optional[float] = None


class GroupSummary(ApplicationSummary):
    department: str
    section: str
    group: str


class SummaryDiff(CamelModel):
    total_applications: int
    total_applications_rate: Optional[float] = None
    pass_rate: float


class TrendPoint(CamelModel):
    label: str
    total_applications: int
    pass_rate: float


class OverallDiff(CamelModel):
    previous_period: SummaryDiff
    previous_year_same_period: SummaryDiff


class OverallComparison(CamelModel):
    previous_period: SummaryLite
    previous_year_same_period: SummaryLite
    diff: OverallDiff
    trend: List[TrendPoint]


class DimensionRow(CamelModel):
    """
    Comparison values of one org unit. The subclasses add the unit's keys,
    so a department row carries no section or group at all.
    """
    current: SummaryLite
    previous_year_same_period: SummaryLite
    diff: SummaryDiff
    trend: List[TrendPoint]


class DepartmentRow(DimensionRow):
    department: str


class SectionRow(DepartmentRow):
    section: str


class GroupRow(SectionRow):
    group: str


class MetricsComparison(CamelModel):
    overall: OverallComparison
    by_department: List[DepartmentRow]
    by_section: List[SectionRow]
    by_group: List[GroupRow]


class RecruitingMetrics(ApplicationSummary):
    by_group: List[GroupSummary]
    status_counts: Dict[str, int]
    comparison: MetricsComparison


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class LoginResponse(CamelModel):
    user: PublicUserAccount
    can_access_admin: bool


class AccountListResponse(CamelModel):
    accounts: List[PublicUserAccount]


class SettingsResponse(CamelModel):
    settings: SystemSettings


class CandidateListResponse(CamelModel):
    candidates: List[CandidateRecord]
    total_count: int
    limit: int
    offset: int
    has_more: bool


class MetricsResponse(CamelModel):
    metric_period: MetricPeriod
    metric_filter: MetricFilter
    metrics: RecruitingMetrics


class SsoInfo(CamelModel):
    enabled: bool = False
    planned: bool = True


class AuthInfo(CamelModel):
    type: str = "email_password"
    sso: SsoInfo = Field(default_factory=SsoInfo)
    initial_password: str


class OrganizationInfo(CamelModel):
    required_headcount: Dict[str, int]
    current_accounts: Dict[str, int]
    structure: List[OrgDepartment]


class RetentionPolicy(CamelModel):
    candidate_data_years: int = 10
    audit_log_years: int = 15
    pii_policy: str = "logical_delete_then_anonymize_after_10y"


class BootstrapResponse(MetricsResponse):
    """Everything the recruitment frontend needs after login, in one payload."""
    mode: str = "dummy"
    auth: AuthInfo
    organization: OrganizationInfo
    retention_policy: RetentionPolicy = Field(default_factory=RetentionPolicy)
    settings: SystemSettings
    candidates: List[CandidateRecord]
