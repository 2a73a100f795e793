"""
HR Desk Backend - Recruitment Service Tests
============================================

RecruitmentService against a small seeded store (see conftest.store).

What we test:
    ✅ Seed dataset shape (accounts per role, ids, interviews)
    ✅ Login and admin authorization
    ✅ Account and settings administration rules
    ✅ Candidate create/update semantics, listing and lookup
    ✅ Interview feedback and status changes
    ✅ Bootstrap/metrics payload assembly
"""

import pytest

from hrdesk.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from hrdesk.schemas.recruitment import (
    AccountWriteRequest,
    CandidateInput,
    FeedbackRequest,
    LoginRequest,
    SettingsUpdateRequest,
    StatusChangeRequest,
)
from hrdesk.services.recruitment_service import RecruitmentService

from conftest import FIXED_NOW, INITIAL_PASSWORD, SEED_CANDIDATES


def candidate_body(**overrides) -> CandidateInput:
    payload = {
        "fullName": "山田 一郎",
        "email": "ichiro@example.com",
        "phone": "090-0000-0000",
        "appliedRole": "SRE",
    }
    payload.update(overrides)
    return CandidateInput.model_validate(payload)


class TestSeedDataset:

    def test_role_counts(self, store):
        assert store.role_counts() == {
            "recruiter": 3,
            "interviewer": 16,
            "dept_manager": 2,
            "tech_admin": 2,
        }

    def test_candidates_are_unique(self, store):
        assert len(store.candidates) == SEED_CANDIDATES
        assert len({c.id for c in store.candidates}) == SEED_CANDIDATES
        assert len({a.id for a in store.iter_applications()}) == SEED_CANDIDATES

    def test_old_candidates_are_decided(self, store):
        first = store.find_candidate("cand_1").applications[0]
        assert first.status == "REJECTED"
        assert first.first_interview_result == "FAIL"
        assert [i.id for i in first.interviews] == ["int_1_1"]

    def test_applied_evenly_until_now(self, store):
        assert store.find_candidate(f"cand_{SEED_CANDIDATES}").created_at == FIXED_NOW

    def test_same_inputs_same_dataset(self, store):
        from hrdesk.services.recruitment_store import RecruitmentStore

        again = RecruitmentStore.seeded(SEED_CANDIDATES, INITIAL_PASSWORD, now=FIXED_NOW)
        assert [c.model_dump() for c in again.candidates] == [c.model_dump() for c in store.candidates]


class TestLogin:

    def setup_method(self):
        self.service = RecruitmentService()

    def test_email_is_trimmed_and_case_insensitive(self, store):
        result = self.service.login(
            store, LoginRequest(email="  Recruiter1@Example.COM ", password=INITIAL_PASSWORD)
        )
        assert result.user.id == "recruiter_1"
        assert result.can_access_admin is True

    def test_interviewer_cannot_access_admin(self, store):
        result = self.service.login(store, LoginRequest(email="gl1@example.com", password=INITIAL_PASSWORD))
        assert result.can_access_admin is False

    @pytest.mark.parametrize(
        "email, password",
        [("recruiter1@example.com", "wrong"), ("nobody@example.com", INITIAL_PASSWORD)],
    )
    def test_invalid_credentials(self, store, email, password):
        with pytest.raises(AuthenticationError) as exc_info:
            self.service.login(store, LoginRequest(email=email, password=password))
        assert exc_info.value.message == "invalid credentials"

    def test_inactive_account_rejected(self, store):
        store.find_user("recruiter_2").active = False
        with pytest.raises(AuthenticationError):
            self.service.login(store, LoginRequest(email="recruiter2@example.com", password=INITIAL_PASSWORD))

    def test_missing_fields(self, store):
        with pytest.raises(ValidationError):
            self.service.login(store, LoginRequest(email="recruiter1@example.com"))


class TestAdministration:

    def setup_method(self):
        self.service = RecruitmentService()

    @pytest.mark.parametrize("actor_id", [None, "interviewer_gl_1", "manager_1", "ghost"])
    def test_non_admins_rejected(self, store, actor_id):
        with pytest.raises(PermissionDeniedError) as exc_info:
            self.service.list_accounts(store, actor_id)
        assert exc_info.value.message == "admin access is restricted to recruiter/tech_admin"

    def test_inactive_admin_rejected(self, store):
        store.find_user("tech_1").active = False
        with pytest.raises(PermissionDeniedError):
            self.service.get_settings(store, "tech_1")

    def test_list_accounts(self, store):
        result = self.service.list_accounts(store, "tech_1")
        assert len(result.accounts) == len(store.users)
        assert "password" not in result.accounts[0].model_dump()

    def test_create_account_defaults(self, store):
        created = self.service.create_account(
            store,
            AccountWriteRequest(actor_id="recruiter_1", name="新人", email=" New@Example.com", role="interviewer"),
        )

        assert created.id == f"user_{SEED_CANDIDATES + 1}"
        assert created.email == "new@example.com"
        assert created.title == "面接官"
        assert created.active is True
        login = self.service.login(store, LoginRequest(email="new@example.com", password=INITIAL_PASSWORD))
        assert login.user.id == created.id

    def test_create_inactive_with_password(self, store):
        created = self.service.create_account(
            store,
            AccountWriteRequest(
                actor_id="recruiter_1", name="x", email="x@example.com",
                role="tech_admin", active=False, password="secret",
            ),
        )
        assert created.active is False
        assert store.find_user(created.id).password == "secret"

    @pytest.mark.parametrize("role", [None, "ceo"])
    def test_create_requires_valid_role(self, store, role):
        with pytest.raises(ValidationError):
            self.service.create_account(
                store, AccountWriteRequest(actor_id="recruiter_1", name="x", email="x@example.com", role=role)
            )

    def test_create_duplicate_email(self, store):
        with pytest.raises(ConflictError):
            self.service.create_account(
                store,
                AccountWriteRequest(actor_id="recruiter_1", name="x", email="GL1@example.com", role="recruiter"),
            )

    def test_update_only_present_fields(self, store):
        before = store.find_user("interviewer_gl_1").model_copy()

        updated = self.service.update_account(
            store, "interviewer_gl_1", AccountWriteRequest(actor_id="tech_1", name="改名", section=None)
        )

        assert updated.name == "改名"
        assert updated.section is None
        assert updated.department == before.department
        assert updated.role == "interviewer"
        assert updated.updated_at > before.updated_at

    def test_update_ignores_null_required_fields(self, store):
        before = store.find_user("interviewer_gl_1").model_copy()

        updated = self.service.update_account(
            store,
            "interviewer_gl_1",
            AccountWriteRequest(actor_id="tech_1", name=None, title=None, group=None),
        )

        assert updated.name == before.name
        assert updated.title == before.title
        assert updated.group is None
        assert len(self.service.list_accounts(store, "tech_1").accounts) == len(store.users)

    def test_update_unknown_account(self, store):
        with pytest.raises(NotFoundError):
            self.service.update_account(store, "user_999", AccountWriteRequest(actor_id="tech_1"))

    def test_update_invalid_role(self, store):
        with pytest.raises(ValidationError):
            self.service.update_account(store, "manager_1", AccountWriteRequest(actor_id="tech_1", role="boss"))

    def test_update_email_clash(self, store):
        with pytest.raises(ConflictError):
            self.service.update_account(
                store, "manager_1", AccountWriteRequest(actor_id="tech_1", email="manager2@example.com")
            )

    def test_update_own_email_allowed(self, store):
        updated = self.service.update_account(
            store, "manager_1", AccountWriteRequest(actor_id="tech_1", email="MANAGER1@example.com")
        )
        assert updated.email == "manager1@example.com"

    def test_update_settings(self, store):
        result = self.service.update_settings(
            store, SettingsUpdateRequest(actor_id="recruiter_1", fiscal_year_start_month=9)
        )
        assert result.settings.fiscal_year_start_month == 9
        assert self.service.get_settings(store, "tech_1").settings.fiscal_year_start_month == 9

    @pytest.mark.parametrize("month", [None, 0, 5, 12])
    def test_unsupported_fiscal_start(self, store, month):
        with pytest.raises(ValidationError):
            self.service.update_settings(
                store, SettingsUpdateRequest(actor_id="recruiter_1", fiscal_year_start_month=month)
            )


class TestCandidates:

    def setup_method(self):
        self.service = RecruitmentService()

    def test_create_with_defaults(self, store):
        created = self.service.create_candidate(store, candidate_body(documentUrls=["a.pdf", 3]))

        assert store.candidates[0] is created
        assert created.id == f"cand_{SEED_CANDIDATES + 1}"
        assert created.document_urls == ["a.pdf"]
        app = created.applications[0]
        assert app.id == f"app_{SEED_CANDIDATES + 2}"
        assert (app.department, app.section, app.group) == ("第一開発部", "第一課", "Aグループ")
        assert app.applied_date == app.applied_at.date()
        assert app.status == "APPLIED"
        assert len(app.status_history) == 1
        assert app.status_history[0].from_status is None
        assert app.status_history[0].changed_by_role == "recruiter"

    def test_create_caps_interviewers(self, store):
        created = self.service.create_candidate(
            store,
            candidate_body(applications=[{
                "department": "第二開発部",
                "appliedDate": "2026-10-01",
                "firstInterviewers": [1, "a", "b", "c"],
            }]),
        )
        app = created.applications[0]
        assert app.department == "第二開発部"
        assert app.section == "第一課"
        assert str(app.applied_date) == "2026-10-01"
        assert app.first_interviewers == ["a", "b"]

    @pytest.mark.parametrize("missing", ["fullName", "email", "phone", "appliedRole"])
    def test_create_requires_contact_fields(self, store, missing):
        with pytest.raises(ValidationError) as exc_info:
            self.service.create_candidate(store, candidate_body(**{missing: ""}))
        assert exc_info.value.message == "fullName, email, phone, appliedRole are required"

    def test_update_replaces_contact_fields(self, store):
        updated = self.service.update_candidate(store, "cand_5", candidate_body())

        assert updated.full_name == "山田 一郎"
        assert updated.document_urls == []

    def test_update_only_present_application_fields(self, store):
        app = store.find_candidate("cand_4").applications[0]
        applied_date = app.applied_date
        first_result = app.first_interview_result

        self.service.update_candidate(
            store,
            "cand_4",
            candidate_body(applications=[{
                "appliedDate": "",
                "department": "",
                "finalInterviewResult": "",
                "finalInterviewers": ["x"],
            }]),
        )

        assert app.applied_date == applied_date
        assert app.department != ""
        assert app.first_interview_result == first_result
        assert app.final_interview_result is None
        assert app.final_interviewers == ["x"]

    def test_update_unknown_candidate(self, store):
        with pytest.raises(NotFoundError):
            self.service.update_candidate(store, "cand_9999", candidate_body())

    def test_get_candidate(self, store):
        assert self.service.get_candidate(store, "cand_7").id == "cand_7"
        with pytest.raises(NotFoundError):
            self.service.get_candidate(store, "cand_0")

    def test_list_paginates(self, store):
        page = self.service.list_candidates(store, limit=25, offset=50)

        assert page.total_count == SEED_CANDIDATES
        assert len(page.candidates) == 10
        assert page.has_more is False
        assert self.service.list_candidates(store, limit=25, offset=0).has_more is True

    def test_list_filters(self, store):
        rejected = self.service.list_candidates(store, limit=200, offset=0, status="REJECTED")
        expected = sum(1 for a in store.iter_applications() if a.status == "REJECTED")
        assert rejected.total_count == expected
        assert all(c.applications[0].status == "REJECTED" for c in rejected.candidates)

        second_dept = self.service.list_candidates(store, limit=200, offset=0, department="第二開発部")
        assert second_dept.total_count == SEED_CANDIDATES // 2

    def test_list_unknown_status(self, store):
        with pytest.raises(ValidationError):
            self.service.list_candidates(store, limit=10, offset=0, status="GHOSTED")


class TestInterviewsAndStatus:

    def setup_method(self):
        self.service = RecruitmentService()

    def test_feedback_keeps_existing_notification_time(self, store):
        interview = store.find_interview("int_1_1")
        notified = interview.result_notified_at

        result = self.service.submit_feedback(
            store, "int_1_1", FeedbackRequest(interviewer_decision="PASS", interviewer_comment="良好")
        )

        assert result.feedback.interviewer_decision == "PASS"
        assert result.feedback.recruiter_comment is None
        assert result.result_notified_at == notified

    def test_feedback_stamps_notification_time(self, store):
        store.find_interview("int_1_1").result_notified_at = None

        result = self.service.submit_feedback(
            store, "int_1_1", FeedbackRequest(interviewer_decision="FAIL", interviewer_comment="見送り")
        )

        assert result.result_notified_at is not None

    @pytest.mark.parametrize(
        "decision, comment",
        [(None, "ok"), ("MAYBE", "ok"), ("PASS", None), ("PASS", "")],
    )
    def test_feedback_validation(self, store, decision, comment):
        with pytest.raises(ValidationError):
            self.service.submit_feedback(
                store, "int_1_1", FeedbackRequest(interviewer_decision=decision, interviewer_comment=comment)
            )

    def test_feedback_unknown_interview(self, store):
        with pytest.raises(NotFoundError):
            self.service.submit_feedback(
                store, "int_0_1", FeedbackRequest(interviewer_decision="PASS", interviewer_comment="ok")
            )

    def test_change_status_appends_history(self, store):
        result = self.service.change_status(
            store, "app_1", StatusChangeRequest(status="OFFER", actor_role="dept_manager")
        )

        assert result.status == "OFFER"
        last = result.status_history[-1]
        assert (last.from_status, last.to, last.changed_by_role) == ("REJECTED", "OFFER", "dept_manager")

    def test_change_status_invalid_status_checked_first(self, store):
        with pytest.raises(ValidationError):
            self.service.change_status(store, "app_1", StatusChangeRequest(status="DONE", actor_role="interviewer"))

    @pytest.mark.parametrize("role", [None, "interviewer", "tech_admin"])
    def test_change_status_forbidden_roles(self, store, role):
        with pytest.raises(PermissionDeniedError):
            self.service.change_status(store, "app_1", StatusChangeRequest(status="OFFER", actor_role=role))

    def test_change_status_unknown_application(self, store):
        with pytest.raises(NotFoundError):
            self.service.change_status(store, "app_0", StatusChangeRequest(status="OFFER", actor_role="recruiter"))


class TestDashboard:

    def setup_method(self):
        self.service = RecruitmentService()

    def test_bootstrap(self, store):
        result = self.service.bootstrap(store, period="yearly", now=FIXED_NOW)

        assert result.mode == "dummy"
        assert result.auth.initial_password == INITIAL_PASSWORD
        assert result.organization.required_headcount == store.role_counts()
        assert result.organization.current_accounts["interviewer"] == 16
        assert len(result.organization.structure) == 2
        assert result.retention_policy.candidate_data_years == 10
        assert result.metric_period == "yearly"
        assert len(result.candidates) == SEED_CANDIDATES

    def test_metrics_falls_back_on_bad_query(self, store):
        result = self.service.metrics(
            store, period="weekly", target_month="abc", target_fiscal_year="1999", now=FIXED_NOW
        )

        assert result.metric_period == "monthly"
        assert result.metric_filter.month == 10
        assert result.metric_filter.fiscal_year == 2026

    def test_metrics_follow_fiscal_setting(self, store):
        store.settings.fiscal_year_start_month = 1
        result = self.service.metrics(store, period="quarterly", now=FIXED_NOW)

        assert result.metric_filter.quarter == 4
        assert sum(result.metrics.status_counts.values()) == result.metrics.total_applications
