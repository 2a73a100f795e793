"""
HR Desk Backend - Recruitment Service
======================================

What:  Business rules of the recruitment API: login, account administration,
       system settings, candidate CRUD, interview feedback, status changes,
       and the bootstrap/metrics payloads.
How:   Operates on the RecruitmentStore passed in by the route (like the
       attendance service operates on an AsyncSession). Raises HrDeskError
       subclasses; the app's exception handlers turn them into responses.
Who:   Called by the recruitment and admin route handlers.

Authorization model (mock, no sessions):
    - Admin endpoints receive an `actorId` and require an active account
      whose role is recruiter or tech_admin.
    - Status changes receive an `actorRole` and require recruiter or
      dept_manager.
"""

import hmac
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from hrdesk.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from hrdesk.schemas.recruitment import (
    ADMIN_ROLES,
    ALL_ROLES,
    ALL_STATUSES,
    ALLOWED_FISCAL_START_MONTHS,
    STATUS_CHANGE_ROLES,
    AccountListResponse,
    AccountWriteRequest,
    ApplicationInput,
    ApplicationRecord,
    AuthInfo,
    BootstrapResponse,
    CandidateInput,
    CandidateListResponse,
    CandidateRecord,
    FeedbackRequest,
    InterviewFeedback,
    InterviewRecord,
    LoginRequest,
    LoginResponse,
    MetricsResponse,
    OrganizationInfo,
    PublicUserAccount,
    SettingsResponse,
    SettingsUpdateRequest,
    StatusChange,
    StatusChangeRequest,
    UserAccount,
)
from hrdesk.services.metrics_service import (
    calculate_recruiting_metrics,
    normalize_filter,
    normalize_period,
    parse_int,
)
from hrdesk.services.recruitment_seed import DEFAULT_TITLES, ORG_GROUPS, ORG_STRUCTURE
from hrdesk.services.recruitment_store import RecruitmentStore

logger = logging.getLogger(__name__)

ADMIN_ONLY_MESSAGE = "admin access is restricted to recruiter/tech_admin"
CANDIDATE_REQUIRED_MESSAGE = "fullName, email, phone, appliedRole are required"

# Application fields copied verbatim from the request when present.
_OPTIONAL_APPLICATION_FIELDS = (
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
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _public(user: UserAccount) -> PublicUserAccount:
    return PublicUserAccount.model_validate(user.model_dump())


def _strings(values: Optional[Iterable[Any]], cap: Optional[int] = None) -> List[str]:
    """Keep only string entries (at most `cap` of them)."""
    kept = [v for v in (values or []) if isinstance(v, str)]
    return kept[:cap] if cap is not None else kept


def _require_contact_fields(body: CandidateInput) -> None:
    if not (body.full_name and body.email and body.phone and body.applied_role):
        raise ValidationError(message=CANDIDATE_REQUIRED_MESSAGE)


class RecruitmentService:
    """
    Stateless service; every method takes the store it works on.

    Error Handling:
        ValidationError (400), AuthenticationError (401),
        PermissionDeniedError (403), NotFoundError (404) and
        ConflictError (409) propagate to the global handlers.
    """

    # ── Auth ──────────────────────────────────────────────────────────────

    def login(self, store: RecruitmentStore, body: LoginRequest) -> LoginResponse:
        """
        Email/password login against the mock accounts.

        Unknown email, inactive account and wrong password are indistinguishable
        to the caller (all 401 "invalid credentials").
        """
        if not body.email or not body.password:
            raise ValidationError(message="email and password are required")

        user = store.find_user_by_email(body.email)
        if (
            user is None
            or not user.active
            or not hmac.compare_digest(user.password.encode(), body.password.encode())
        ):
            logger.info("Login rejected for %s", body.email.strip().lower())
            raise AuthenticationError()

        logger.info("Login succeeded for %s (%s)", user.id, user.role)
        return LoginResponse(user=_public(user), can_access_admin=user.role in ADMIN_ROLES)

    def require_admin(self, store: RecruitmentStore, actor_id: Optional[str]) -> UserAccount:
        """
        Resolve the acting account and check it may use the admin endpoints.

        Raises:
            PermissionDeniedError: Missing/unknown actor, inactive, or not an admin role (→ 403)
        """
        actor = store.find_user(actor_id) if actor_id else None
        if actor is None or not actor.active or actor.role not in ADMIN_ROLES:
            raise PermissionDeniedError(message=ADMIN_ONLY_MESSAGE, context={"actor_id": actor_id})
        return actor

    # ── Accounts ──────────────────────────────────────────────────────────

    def list_accounts(self, store: RecruitmentStore, actor_id: Optional[str]) -> AccountListResponse:
        self.require_admin(store, actor_id)
        return AccountListResponse(accounts=[_public(u) for u in store.users])

    def create_account(self, store: RecruitmentStore, body: AccountWriteRequest) -> PublicUserAccount:
        """
        Create an account.

        Defaults: title by role, active unless explicitly false, the initial
        password when none is given. The email is stored trimmed and lowercased.

        Raises:
            PermissionDeniedError: Actor is not an active admin (→ 403)
            ValidationError: name, email or a valid role is missing (→ 400)
            ConflictError: Another account already uses the email (→ 409)
        """
        self.require_admin(store, body.actor_id)

        if not body.name or not body.email or body.role not in ALL_ROLES:
            raise ValidationError(message="name, email, role are required")

        email = body.email.strip().lower()
        if store.find_user_by_email(email) is not None:
            raise ConflictError(message="email already exists", context={"email": email})

        now = _utcnow()
        account = UserAccount(
            id=store.next_id("user"),
            name=body.name,
            email=email,
            role=body.role,
            title=body.title or DEFAULT_TITLES[body.role],
            department=body.department,
            section=body.section,
            group=body.group,
            active=body.active is not False,
            password=body.password or store.initial_password,
            created_at=now,
            updated_at=now,
        )
        store.users.append(account)
        logger.info("Account %s created by %s (role=%s)", account.id, body.actor_id, account.role)
        return _public(account)

    def update_account(
        self,
        store: RecruitmentStore,
        account_id: str,
        body: AccountWriteRequest,
    ) -> PublicUserAccount:
        """
        Partially update an account. Only fields present in the request change.

        Raises:
            PermissionDeniedError: Actor is not an active admin (→ 403)
            NotFoundError: Unknown account id (→ 404)
            ValidationError: Unknown role (→ 400)
            ConflictError: Email used by another account (→ 409)
        """
        self.require_admin(store, body.actor_id)

        target = store.find_user(account_id)
        if target is None:
            raise NotFoundError(resource="account", resource_id=account_id)

        if body.role and body.role not in ALL_ROLES:
            raise ValidationError(message="invalid role", field="role")

        if body.email:
            email = body.email.strip().lower()
            clash = store.find_user_by_email(email)
            if clash is not None and clash.id != account_id:
                raise ConflictError(message="email already exists", context={"email": email})
            target.email = email

        present = body.model_fields_set
        # name and title are required on an account; null leaves them unchanged.
        for field in ("name", "title"):
            if field in present and getattr(body, field) is not None:
                setattr(target, field, getattr(body, field))
        for field in ("department", "section", "group"):
            if field in present:
                setattr(target, field, getattr(body, field))
        if body.role:
            target.role = body.role
        if body.active is not None:
            target.active = body.active
        if body.password:
            target.password = body.password
        target.updated_at = _utcnow()

        logger.info("Account %s updated by %s", account_id, body.actor_id)
        return _public(target)

    # ── Settings ──────────────────────────────────────────────────────────

    def get_settings(self, store: RecruitmentStore, actor_id: Optional[str]) -> SettingsResponse:
        self.require_admin(store, actor_id)
        return SettingsResponse(settings=store.settings)

    def update_settings(self, store: RecruitmentStore, body: SettingsUpdateRequest) -> SettingsResponse:
        self.require_admin(store, body.actor_id)
        month = body.fiscal_year_start_month
        if isinstance(month, bool) or month not in ALLOWED_FISCAL_START_MONTHS:
            raise ValidationError(
                message="fiscalYearStartMonth must be one of 1, 4, 9",
                field="fiscalYearStartMonth",
            )
        store.settings.fiscal_year_start_month = int(month)
        logger.info("Fiscal year start month set to %d by %s", month, body.actor_id)
        return SettingsResponse(settings=store.settings)

    # ── Candidates ────────────────────────────────────────────────────────

    def list_candidates(
        self,
        store: RecruitmentStore,
        limit: int,
        offset: int,
        status: Optional[str] = None,
        department: Optional[str] = None,
    ) -> CandidateListResponse:
        """
        Page through candidates in store order (newest created first).

        `status` and `department` match the candidate's first application.
        """
        if status is not None and status not in ALL_STATUSES:
            raise ValidationError(message="invalid status", field="status")

        def matches(candidate: CandidateRecord) -> bool:
            app = candidate.applications[0] if candidate.applications else None
            if status is not None and (app is None or app.status != status):
                return False
            if department is not None and (app is None or app.department != department):
                return False
            return True

        selected = [c for c in store.candidates if matches(c)]
        page = selected[offset:offset + limit]
        return CandidateListResponse(
            candidates=page,
            total_count=len(selected),
            limit=limit,
            offset=offset,
            has_more=offset + len(page) < len(selected),
        )

    def get_candidate(self, store: RecruitmentStore, candidate_id: str) -> CandidateRecord:
        candidate = store.find_candidate(candidate_id)
        if candidate is None:
            raise NotFoundError(resource="candidate", resource_id=candidate_id)
        return candidate

    def create_candidate(self, store: RecruitmentStore, body: CandidateInput) -> CandidateRecord:
        """
        Register a candidate with one application in status APPLIED.

        Org placement defaults to the first org group and the applied date to
        today (UTC). The new candidate is placed at the front of the list.
        """
        _require_contact_fields(body)

        now = _utcnow()
        incoming = body.applications[0] if body.applications else ApplicationInput()
        default_group = ORG_GROUPS[0]
        candidate_id = store.next_id("cand")

        app = ApplicationRecord(
            id=store.next_id("app"),
            department=incoming.department or default_group.department,
            section=incoming.section or default_group.section,
            group=incoming.group or default_group.group,
            applied_date=incoming.applied_date or now.date(),
            first_interviewers=_strings(incoming.first_interviewers, cap=2),
            final_interviewers=_strings(incoming.final_interviewers, cap=2),
            status="APPLIED",
            applied_at=now,
            status_history=[
                StatusChange(from_status=None, to="APPLIED", changed_at=now, changed_by_role="recruiter")
            ],
            **{field: getattr(incoming, field) for field in _OPTIONAL_APPLICATION_FIELDS},
        )
        candidate = CandidateRecord(
            id=candidate_id,
            full_name=body.full_name,
            email=body.email,
            phone=body.phone,
            applied_role=body.applied_role,
            document_urls=_strings(body.document_urls),
            created_at=now,
            applications=[app],
        )
        store.candidates.insert(0, candidate)
        logger.info("Candidate %s created (application %s)", candidate.id, app.id)
        return candidate

    def update_candidate(
        self,
        store: RecruitmentStore,
        candidate_id: str,
        body: CandidateInput,
    ) -> CandidateRecord:
        """
        Replace a candidate's contact fields and edit its first application.

        Application fields change only when present in the request; an empty
        value clears an optional field, while an empty appliedDate keeps the
        current one. Blank department/section/group are ignored.
        """
        candidate = self.get_candidate(store, candidate_id)
        _require_contact_fields(body)

        candidate.full_name = body.full_name
        candidate.email = body.email
        candidate.phone = body.phone
        candidate.applied_role = body.applied_role
        candidate.document_urls = _strings(body.document_urls)

        incoming = body.applications[0] if body.applications else None
        app = candidate.applications[0] if candidate.applications else None
        if incoming is not None and app is not None:
            present = incoming.model_fields_set
            for field in ("department", "section", "group"):
                if getattr(incoming, field):
                    setattr(app, field, getattr(incoming, field))
            if "applied_date" in present and incoming.applied_date:
                app.applied_date = incoming.applied_date
            for field in _OPTIONAL_APPLICATION_FIELDS:
                if field in present:
                    setattr(app, field, getattr(incoming, field) or None)
            if "first_interviewers" in present:
                app.first_interviewers = _strings(incoming.first_interviewers, cap=2)
            if "final_interviewers" in present:
                app.final_interviewers = _strings(incoming.final_interviewers, cap=2)

        logger.info("Candidate %s updated", candidate_id)
        return candidate

    # ── Interviews & Applications ─────────────────────────────────────────

    def submit_feedback(
        self,
        store: RecruitmentStore,
        interview_id: str,
        body: FeedbackRequest,
    ) -> InterviewRecord:
        """
        Record an interviewer's decision. The first submission also stamps
        resultNotifiedAt; later ones keep it.
        """
        if body.interviewer_decision not in ("PASS", "FAIL") or not body.interviewer_comment:
            raise ValidationError(
                message="interviewerDecision(PASS/FAIL) and interviewerComment are required"
            )

        interview = store.find_interview(interview_id)
        if interview is None:
            raise NotFoundError(resource="interview", resource_id=interview_id)

        interview.feedback = InterviewFeedback(
            interviewer_decision=body.interviewer_decision,
            interviewer_comment=body.interviewer_comment,
            recruiter_comment=body.recruiter_comment,
        )
        if interview.result_notified_at is None:
            interview.result_notified_at = _utcnow()
        return interview

    def change_status(
        self,
        store: RecruitmentStore,
        application_id: str,
        body: StatusChangeRequest,
    ) -> ApplicationRecord:
        """
        Move an application to a new status and append the history entry.

        Raises:
            ValidationError: Unknown status (→ 400)
            PermissionDeniedError: actorRole is not recruiter/dept_manager (→ 403)
            NotFoundError: Unknown application id (→ 404)
        """
        if body.status not in ALL_STATUSES:
            raise ValidationError(message="invalid status", field="status")
        if body.actor_role not in STATUS_CHANGE_ROLES:
            raise PermissionDeniedError(message="only recruiter or dept_manager can change status")

        app = store.find_application(application_id)
        if app is None:
            raise NotFoundError(resource="application", resource_id=application_id)

        previous = app.status
        app.status = body.status
        app.status_history.append(StatusChange(
            from_status=previous,
            to=body.status,
            changed_at=_utcnow(),
            changed_by_role=body.actor_role,
        ))
        logger.info("Application %s: %s -> %s by %s", application_id, previous, body.status, body.actor_role)
        return app

    # ── Dashboard ─────────────────────────────────────────────────────────

    def metrics(
        self,
        store: RecruitmentStore,
        period: Optional[str] = None,
        target_month: Optional[str] = None,
        target_quarter: Optional[str] = None,
        target_half: Optional[str] = None,
        target_fiscal_year: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> MetricsResponse:
        """Normalize the query and compute the metrics for the store's fiscal calendar."""
        now = now or _utcnow()
        start_month = store.settings.fiscal_year_start_month
        metric_period = normalize_period(period)
        metric_filter = normalize_filter(
            parse_int(target_month),
            parse_int(target_quarter),
            parse_int(target_half),
            parse_int(target_fiscal_year),
            start_month,
            now,
        )
        metrics = calculate_recruiting_metrics(
            store.iter_applications(), metric_period, start_month, metric_filter, now
        )
        return MetricsResponse(metric_period=metric_period, metric_filter=metric_filter, metrics=metrics)

    def bootstrap(self, store: RecruitmentStore, **query: Any) -> BootstrapResponse:
        """
        Everything the frontend loads after login: auth/org info, settings,
        metrics for the requested period and all candidates.

        Accepts the same query arguments as metrics().
        """
        result = self.metrics(store, **query)
        headcount = store.role_counts()
        return BootstrapResponse(
            auth=AuthInfo(initial_password=store.initial_password),
            organization=OrganizationInfo(
                required_headcount=headcount,
                current_accounts=dict(headcount),
                structure=ORG_STRUCTURE,
            ),
            settings=store.settings,
            metric_period=result.metric_period,
            metric_filter=result.metric_filter,
            metrics=result.metrics,
            candidates=store.candidates,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
recruitment_service = RecruitmentService()
