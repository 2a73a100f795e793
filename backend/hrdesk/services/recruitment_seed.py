"""
HR Desk Backend - Recruitment Mock Dataset
===========================================

What:  Builds the organization, the user accounts and the candidate pool that
       the recruitment backend serves in "dummy" mode.
How:   Pure functions of (now, candidate count, initial password). The same
       inputs always produce the same dataset.

Organization:
    2 departments × 2 sections × 3 groups = 12 org groups

Accounts:
    3 recruiters, 12 group leaders and 4 section chiefs (interviewers),
    2 department heads (dept_manager), 2 technical admins (tech_admin)

Candidates (applied evenly over the last 3 years, candidate i = 1..N):
    older than 30 days            fully decided
        i % 10 < 4                  first interview FAIL            → REJECTED
        otherwise                   first PASS, final PASS if i even → HIRED / REJECTED
    within 30 days
        i % 10 <= 2                 first interview FAIL            → REJECTED
        i % 10 <= 4                 first PASS, final decided       → HIRED / REJECTED
        i % 10 == 5 / 6             before first interview          → APPLIED / SCREENING
        otherwise                   first PASS, final pending       → INTERVIEW
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from hrdesk.schemas.recruitment import (
    ApplicationRecord,
    CandidateRecord,
    InterviewFeedback,
    InterviewRecord,
    OrgDepartment,
    OrgGroup,
    OrgSection,
    StatusChange,
    UserAccount,
)

ACCOUNTS_CREATED_AT = datetime(2026, 1, 1, tzinfo=timezone.utc)

_GROUPS = ["Aグループ", "Bグループ", "Cグループ"]

ORG_STRUCTURE: List[OrgDepartment] = [
    OrgDepartment(
        department=department,
        sections=[OrgSection(section=section, groups=list(_GROUPS)) for section in ("第一課", "第二課")],
    )
    for department in ("第一開発部", "第二開発部")
]

ORG_GROUPS: List[OrgGroup] = [
    OrgGroup(department=dept.department, section=sec.section, group=grp)
    for dept in ORG_STRUCTURE
    for sec in dept.sections
    for grp in sec.groups
]

DEFAULT_TITLES = {
    "recruiter": "採用担当",
    "interviewer": "面接官",
    "dept_manager": "部長",
    "tech_admin": "技術部門担当者",
}

FIRST_NAMES = ["太郎", "花子", "健太", "美咲", "大輔", "彩", "翔", "奈々", "蓮", "葵"]
LAST_NAMES = ["山田", "佐藤", "鈴木", "高橋", "田中", "伊藤", "渡辺", "中村", "小林", "加藤"]
APPLIED_ROLES = [
    "バックエンドエンジニア",
    "フロントエンドエンジニア",
    "モバイルエンジニア",
    "QAエンジニア",
    "SRE",
]


def _account(password: str, **fields) -> UserAccount:
    return UserAccount(
        active=True,
        password=password,
        created_at=ACCOUNTS_CREATED_AT,
        updated_at=ACCOUNTS_CREATED_AT,
        **fields,
    )


def build_users(initial_password: str) -> List[UserAccount]:
    """Seed accounts in a fixed order: recruiters, interviewers, managers, admins."""
    users = [
        _account(
            initial_password,
            id=f"recruiter_{i}",
            name=f"採用担当{i}",
            email=f"recruiter{i}@example.com",
            role="recruiter",
            title="採用担当",
        )
        for i in range(1, 4)
    ]
    users += [
        _account(
            initial_password,
            id=f"interviewer_gl_{i}",
            name=f"{g.department} {g.section} {g.group} リーダー",
            email=f"gl{i}@example.com",
            role="interviewer",
            title="グループリーダー",
            department=g.department,
            section=g.section,
            group=g.group,
        )
        for i, g in enumerate(ORG_GROUPS, start=1)
    ]
    users += [
        _account(
            initial_password,
            id=f"interviewer_sc_{d}_{s}",
            name=f"{dept.department} {sec.section} 課長",
            email=f"sc{d}{s}@example.com",
            role="interviewer",
            title="課長",
            department=dept.department,
            section=sec.section,
        )
        for d, dept in enumerate(ORG_STRUCTURE, start=1)
        for s, sec in enumerate(dept.sections, start=1)
    ]
    users += [
        _account(
            initial_password,
            id=f"manager_{i}",
            name=f"{dept.department} 部長",
            email=f"manager{i}@example.com",
            role="dept_manager",
            title="部長",
            department=dept.department,
        )
        for i, dept in enumerate(ORG_STRUCTURE, start=1)
    ]
    users += [
        _account(
            initial_password,
            id=f"tech_{i}",
            name=f"技術担当{i}",
            email=f"tech{i}@example.com",
            role="tech_admin",
            title="技術部門担当者",
        )
        for i in range(1, 3)
    ]
    return users


def _at_nine(day: date) -> datetime:
    return datetime.combine(day, time(9, 0), tzinfo=timezone.utc)


def _interview(
    interview_id: str,
    round_no: int,
    interviewer: Optional[UserAccount],
    day: date,
    notified: Optional[date],
    decision: str,
    interviewer_comment: Optional[str],
    recruiter_comment: Optional[str],
) -> InterviewRecord:
    return InterviewRecord(
        id=interview_id,
        round=round_no,
        interviewer_id=interviewer.id if interviewer else "interviewer_gl_1",
        scheduled_at=_at_nine(day),
        result_notified_at=_at_nine(notified) if notified else None,
        feedback=InterviewFeedback(
            interviewer_decision=decision,
            interviewer_comment=interviewer_comment or "",
            recruiter_comment=recruiter_comment,
        ),
    )


def build_candidates(
    users: List[UserAccount],
    count: int,
    now: datetime,
) -> List[CandidateRecord]:
    """
    Generate `count` candidates applied evenly between now-3y and now.

    Interviewer names are taken round-robin from the interviewer accounts.
    """
    interviewers = [u for u in users if u.role == "interviewer"]
    day = timedelta(days=1)
    three_years_ago = now - 365 * 3 * day
    one_month_ago = now - 30 * day

    def pick(offset: int) -> Optional[UserAccount]:
        if not interviewers:
            return None
        return interviewers[offset % len(interviewers)]

    def names(*accounts: Optional[UserAccount]) -> List[str]:
        return [a.name for a in accounts if a is not None][:2]

    rows: List[CandidateRecord] = []
    for i in range(1, count + 1):
        ratio = (i - 1) / max(1, count - 1)
        applied_at = three_years_ago + (now - three_years_ago) * ratio
        applied_at = applied_at.replace(microsecond=(applied_at.microsecond // 1000) * 1000)
        applied_date = applied_at.date()
        target = ORG_GROUPS[i % len(ORG_GROUPS)]
        bucket = i % 10

        first_a, first_b = pick(i), pick(i + 1)
        final_a, final_b = pick(i + 2), pick(i + 3)

        app = ApplicationRecord(
            id=f"app_{i}",
            department=target.department,
            section=target.section,
            group=target.group,
            applied_date=applied_date,
            status="SCREENING",
            applied_at=applied_at,
        )

        def decide_first(first_at: datetime, result_at: datetime, result: str,
                         interviewer_comment: str, recruiter_comment: str) -> None:
            app.first_interview_date = first_at.date()
            app.first_result_notified_date = result_at.date()
            app.first_interviewers = names(first_a, first_b)
            app.first_interview_result = result
            app.first_interviewer_comment = interviewer_comment
            app.first_recruiter_comment = recruiter_comment

        def decide_final(final_at: datetime, result_at: datetime, passed_comments, failed_comments) -> None:
            app.final_interview_date = final_at.date()
            app.final_result_notified_date = result_at.date()
            app.final_interviewers = names(final_a, final_b)
            app.final_interview_result = "PASS" if i % 2 == 0 else "FAIL"
            comments = passed_comments if app.final_interview_result == "PASS" else failed_comments
            app.final_interviewer_comment, app.final_recruiter_comment = comments
            app.status = "HIRED" if app.final_interview_result == "PASS" else "REJECTED"

        if applied_at <= one_month_ago:
            first_at = applied_at + (3 + i % 7) * day
            first_result_at = first_at + (i % 3) * day
            if bucket < 4:
                decide_first(first_at, first_result_at, "FAIL",
                             "一次面接時点で要件とのギャップが大きく、不合格。", "一次面接で見送り判断。")
                app.status = "REJECTED"
            else:
                decide_first(first_at, first_result_at, "PASS",
                             "一次面接は合格。最終面接へ進行。", "一次面接合格。最終面接を設定。")
                final_at = first_result_at + (2 + i % 6) * day
                decide_final(
                    final_at,
                    final_at + (i % 3) * day,
                    ("最終面接でも評価良好。採用可。", "最終合格。条件提示を実施。"),
                    ("最終面接で懸念点が解消せず不合格。", "最終面接で不合格。"),
                )
        elif bucket <= 2:
            first_at = applied_at + (2 + i % 5) * day
            decide_first(first_at, first_at + (i % 2) * day, "FAIL",
                         "一次面接で不合格。", "一次面接結果を連絡済み。")
            app.status = "REJECTED"
        elif bucket <= 4:
            first_at = applied_at + (2 + i % 4) * day
            first_result_at = first_at + (i % 2) * day
            decide_first(first_at, first_result_at, "PASS", "一次面接合格。", "最終面接へ進行。")
            final_at = first_result_at + (2 + i % 5) * day
            decide_final(
                final_at,
                final_at + (i % 2) * day,
                ("最終合格。", "採用決定。"),
                ("最終不合格。", "不採用決定。"),
            )
        elif bucket <= 6:
            app.status = "APPLIED" if bucket == 5 else "SCREENING"
        else:
            first_at = applied_at + (2 + i % 4) * day
            decide_first(first_at, first_at + (i % 2) * day, "PASS",
                         "一次面接合格、最終面接調整中。", "最終面接の日程調整中。")
            app.status = "INTERVIEW"

        if app.first_interview_date and app.first_interview_result:
            app.interviews.append(_interview(
                f"int_{i}_1", 1, first_a, app.first_interview_date,
                app.first_result_notified_date, app.first_interview_result,
                app.first_interviewer_comment, app.first_recruiter_comment,
            ))
        if app.final_interview_date and app.final_interview_result:
            app.interviews.append(_interview(
                f"int_{i}_2", 2, final_a, app.final_interview_date,
                app.final_result_notified_date, app.final_interview_result,
                app.final_interviewer_comment, app.final_recruiter_comment,
            ))

        app.status_history.append(
            StatusChange(from_status=None, to="APPLIED", changed_at=applied_at, changed_by_role="recruiter")
        )
        if app.status != "APPLIED":
            app.status_history.append(StatusChange(
                from_status="APPLIED",
                to=app.status,
                changed_at=applied_at + (1 + i % 3) * day,
                changed_by_role="recruiter" if i % 2 == 0 else "dept_manager",
            ))

        rows.append(CandidateRecord(
            id=f"cand_{i}",
            full_name=f"{LAST_NAMES[i % len(LAST_NAMES)]} {FIRST_NAMES[i % len(FIRST_NAMES)]}{i}",
            email=f"candidate{i}@example.com",
            phone=f"090-{1000 + i:04d}-{2000 + i:04d}",
            applied_role=APPLIED_ROLES[i % len(APPLIED_ROLES)],
            document_urls=[f"https://storage.example.com/docs/cand_{i}_resume.pdf"],
            created_at=applied_at,
            applications=[app],
        ))
    return rows
