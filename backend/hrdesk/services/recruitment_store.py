"""
HR Desk Backend - Recruitment In-Memory Store
==============================================

What:  Process-local state of the recruitment backend: accounts, candidates,
       system settings and the id counter.
How:   Plain lists of pydantic records. Route handlers run on the event loop
       and never await while mutating, so no locking is needed.
Who:   Created by the recruitment app's lifespan (app.state.store) and handed
       to RecruitmentService / metrics by the get_store dependency.

State resets on restart; nothing is persisted.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional

from fastapi import Request

from hrdesk.schemas.recruitment import (
    ALL_ROLES,
    ApplicationRecord,
    CandidateRecord,
    InterviewRecord,
    SystemSettings,
    UserAccount,
)
from hrdesk.services.recruitment_seed import build_candidates, build_users

logger = logging.getLogger(__name__)


class RecruitmentStore:
    """
    Holds all recruitment records.

    Attributes:
        users:       Accounts, seed order first, runtime-created appended
        candidates:  Newest-created first (runtime creations are prepended)
        settings:    Mutable system settings (fiscal year start month)
        initial_password: Password given to seed and password-less new accounts
    """

    def __init__(
        self,
        users: Optional[List[UserAccount]] = None,
        candidates: Optional[List[CandidateRecord]] = None,
        fiscal_year_start_month: int = 4,
        initial_password: str = "rec12345",
    ):
        self.users: List[UserAccount] = users or []
        self.candidates: List[CandidateRecord] = candidates or []
        self.settings = SystemSettings(fiscal_year_start_month=fiscal_year_start_month)
        self.initial_password = initial_password
        # Seeded ids run cand_1..cand_N and app_1..app_N; runtime ids continue after them.
        self._id_counter = len(self.candidates)

    @classmethod
    def seeded(
        cls,
        candidate_count: int,
        initial_password: str,
        fiscal_year_start_month: int = 4,
        now: Optional[datetime] = None,
    ) -> "RecruitmentStore":
        """Build a store filled with the mock dataset generated relative to `now`."""
        now = now or datetime.now(timezone.utc)
        users = build_users(initial_password)
        candidates = build_candidates(users, candidate_count, now)
        logger.info(
            "Recruitment store seeded: %d accounts, %d candidates",
            len(users),
            len(candidates),
        )
        return cls(
            users=users,
            candidates=candidates,
            fiscal_year_start_month=fiscal_year_start_month,
            initial_password=initial_password,
        )

    def next_id(self, prefix: str) -> str:
        """Runtime ids: <prefix>_<n> from a single increasing counter."""
        self._id_counter += 1
        return f"{prefix}_{self._id_counter}"

    # ── Lookups ───────────────────────────────────────────────────────────

    def find_user(self, user_id: str) -> Optional[UserAccount]:
        return next((u for u in self.users if u.id == user_id), None)

    def find_user_by_email(self, email: str) -> Optional[UserAccount]:
        normalized = email.strip().lower()
        return next((u for u in self.users if u.email.lower() == normalized), None)

    def find_candidate(self, candidate_id: str) -> Optional[CandidateRecord]:
        return next((c for c in self.candidates if c.id == candidate_id), None)

    def find_application(self, application_id: str) -> Optional[ApplicationRecord]:
        return next((a for a in self.iter_applications() if a.id == application_id), None)

    def find_interview(self, interview_id: str) -> Optional[InterviewRecord]:
        for app in self.iter_applications():
            for interview in app.interviews:
                if interview.id == interview_id:
                    return interview
        return None

    def iter_applications(self) -> Iterator[ApplicationRecord]:
        for candidate in self.candidates:
            yield from candidate.applications

    def role_counts(self) -> Dict[str, int]:
        """Number of accounts per role, every role present (zero if none)."""
        counts = {role: 0 for role in ALL_ROLES}
        for user in self.users:
            counts[user.role] += 1
        return counts


def get_store(request: Request) -> RecruitmentStore:
    """FastAPI dependency: the store created by the recruitment lifespan."""
    return request.app.state.store
