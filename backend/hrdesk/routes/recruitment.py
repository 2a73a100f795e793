"""
HR Desk Backend - Recruitment Route Handlers
=============================================

What:  Login, dashboard and candidate endpoints of the recruitment app.
How:   Handlers resolve the in-memory store with Depends(get_store) and
       delegate to recruitment_service. Responses are camelCase.

Route Inventory:
    GET    /api/ping
    POST   /api/recruitment/auth/login
    GET    /api/recruitment/bootstrap
    GET    /api/recruitment/metrics
    GET    /api/recruitment/candidates
    GET    /api/recruitment/candidates/{candidate_id}
    POST   /api/recruitment/candidates
    PATCH  /api/recruitment/candidates/{candidate_id}
    PATCH  /api/recruitment/interviews/{interview_id}/feedback
    PATCH  /api/recruitment/applications/{application_id}/status
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from hrdesk.schemas.common import ErrorResponse, PingResponse
from hrdesk.schemas.recruitment import (
    ApplicationRecord,
    BootstrapResponse,
    CandidateInput,
    CandidateListResponse,
    CandidateRecord,
    FeedbackRequest,
    InterviewRecord,
    LoginRequest,
    LoginResponse,
    MetricsResponse,
    StatusChangeRequest,
)
from hrdesk.services.attendance_service import now_ms
from hrdesk.services.recruitment_service import recruitment_service
from hrdesk.services.recruitment_store import RecruitmentStore, get_store

APP_NAME = "recruitment-webapp"

ping_router = APIRouter(prefix="/api", tags=["Recruitment"])
router = APIRouter(prefix="/api/recruitment", tags=["Recruitment"])


class MetricQuery:
    """
    Period selection shared by /bootstrap and /metrics.

    Values stay strings: anything unparseable falls back to the current
    period instead of failing the request.
    """

    def __init__(
        self,
        period: Optional[str] = Query(default=None, description="monthly | quarterly | halfyearly | yearly"),
        target_month: Optional[str] = Query(default=None, alias="targetMonth"),
        target_quarter: Optional[str] = Query(default=None, alias="targetQuarter"),
        target_half: Optional[str] = Query(default=None, alias="targetHalf"),
        target_fiscal_year: Optional[str] = Query(default=None, alias="targetFiscalYear"),
    ):
        self.period = period
        self.target_month = target_month
        self.target_quarter = target_quarter
        self.target_half = target_half
        self.target_fiscal_year = target_fiscal_year

    def as_kwargs(self) -> dict:
        return dict(vars(self))


@ping_router.get("/ping", response_model=PingResponse, summary="Liveness ping")
async def ping() -> PingResponse:
    return PingResponse(app=APP_NAME, time=now_ms())


@router.post(
    "/auth/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Missing email or password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Email/password login",
)
async def login(
    body: LoginRequest,
    store: RecruitmentStore = Depends(get_store),
) -> LoginResponse:
    return recruitment_service.login(store, body)


@router.get(
    "/bootstrap",
    response_model=BootstrapResponse,
    summary="Initial payload for the recruitment frontend",
)
async def bootstrap(
    query: MetricQuery = Depends(),
    store: RecruitmentStore = Depends(get_store),
) -> BootstrapResponse:
    return recruitment_service.bootstrap(store, **query.as_kwargs())


@router.get(
    "/metrics",
    response_model=MetricsResponse,
    summary="Recruiting metrics for one period",
)
async def metrics(
    query: MetricQuery = Depends(),
    store: RecruitmentStore = Depends(get_store),
) -> MetricsResponse:
    return recruitment_service.metrics(store, **query.as_kwargs())


@router.get(
    "/candidates",
    response_model=CandidateListResponse,
    responses={400: {"description": "Unknown status filter", "model": ErrorResponse}},
    summary="List candidates with offset pagination",
)
async def list_candidates(
    response: Response,
    limit: int = Query(default=50, ge=1, le=200, description="Items per page (max 200)"),
    offset: int = Query(default=0, ge=0),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    department: Optional[str] = Query(default=None),
    store: RecruitmentStore = Depends(get_store),
) -> CandidateListResponse:
    result = recruitment_service.list_candidates(
        store, limit=limit, offset=offset, status=status_filter, department=department
    )
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get(
    "/candidates/{candidate_id}",
    response_model=CandidateRecord,
    responses={404: {"description": "Unknown candidate", "model": ErrorResponse}},
    summary="Get one candidate",
)
async def get_candidate(
    candidate_id: str,
    store: RecruitmentStore = Depends(get_store),
) -> CandidateRecord:
    return recruitment_service.get_candidate(store, candidate_id)


@router.post(
    "/candidates",
    response_model=CandidateRecord,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing contact fields", "model": ErrorResponse}},
    summary="Register a candidate",
)
async def create_candidate(
    body: CandidateInput,
    store: RecruitmentStore = Depends(get_store),
) -> CandidateRecord:
    return recruitment_service.create_candidate(store, body)


@router.patch(
    "/candidates/{candidate_id}",
    response_model=CandidateRecord,
    responses={
        400: {"description": "Missing contact fields", "model": ErrorResponse},
        404: {"description": "Unknown candidate", "model": ErrorResponse},
    },
    summary="Edit a candidate and its first application",
)
async def update_candidate(
    candidate_id: str,
    body: CandidateInput,
    store: RecruitmentStore = Depends(get_store),
) -> CandidateRecord:
    return recruitment_service.update_candidate(store, candidate_id, body)


@router.patch(
    "/interviews/{interview_id}/feedback",
    response_model=InterviewRecord,
    responses={
        400: {"description": "Missing decision or comment", "model": ErrorResponse},
        404: {"description": "Unknown interview", "model": ErrorResponse},
    },
    summary="Submit interviewer feedback",
)
async def submit_feedback(
    interview_id: str,
    body: FeedbackRequest,
    store: RecruitmentStore = Depends(get_store),
) -> InterviewRecord:
    return recruitment_service.submit_feedback(store, interview_id, body)


@router.patch(
    "/applications/{application_id}/status",
    response_model=ApplicationRecord,
    responses={
        400: {"description": "Invalid status", "model": ErrorResponse},
        403: {"description": "Role may not change status", "model": ErrorResponse},
        404: {"description": "Unknown application", "model": ErrorResponse},
    },
    summary="Change an application's status",
)
async def change_status(
    application_id: str,
    body: StatusChangeRequest,
    store: RecruitmentStore = Depends(get_store),
) -> ApplicationRecord:
    return recruitment_service.change_status(store, application_id, body)
