"""
HR Desk Backend - Recruitment Admin Route Handlers
===================================================

What:  Account and system-settings administration.
How:   Every handler passes the acting account id (`actorId` query parameter
       on GET, body field on writes) to the service, which rejects anyone but
       an active recruiter or tech_admin with 403.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from hrdesk.schemas.common import ErrorResponse
from hrdesk.schemas.recruitment import (
    AccountListResponse,
    AccountWriteRequest,
    PublicUserAccount,
    SettingsResponse,
    SettingsUpdateRequest,
)
from hrdesk.services.recruitment_service import recruitment_service
from hrdesk.services.recruitment_store import RecruitmentStore, get_store

router = APIRouter(
    prefix="/api/recruitment/admin",
    tags=["Recruitment Admin"],
    responses={403: {"description": "Actor is not an admin", "model": ErrorResponse}},
)


@router.get("/accounts", response_model=AccountListResponse, summary="List accounts")
async def list_accounts(
    actor_id: Optional[str] = Query(default=None, alias="actorId"),
    store: RecruitmentStore = Depends(get_store),
) -> AccountListResponse:
    return recruitment_service.list_accounts(store, actor_id)


@router.post(
    "/accounts",
    response_model=PublicUserAccount,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing name/email or invalid role", "model": ErrorResponse},
        409: {"description": "Email already exists", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def create_account(
    body: AccountWriteRequest,
    store: RecruitmentStore = Depends(get_store),
) -> PublicUserAccount:
    return recruitment_service.create_account(store, body)


@router.patch(
    "/accounts/{account_id}",
    response_model=PublicUserAccount,
    responses={
        400: {"description": "Invalid role", "model": ErrorResponse},
        404: {"description": "Unknown account", "model": ErrorResponse},
        409: {"description": "Email already exists", "model": ErrorResponse},
    },
    summary="Update an account",
)
async def update_account(
    account_id: str,
    body: AccountWriteRequest,
    store: RecruitmentStore = Depends(get_store),
) -> PublicUserAccount:
    return recruitment_service.update_account(store, account_id, body)


@router.get("/settings", response_model=SettingsResponse, summary="Read system settings")
async def get_settings(
    actor_id: Optional[str] = Query(default=None, alias="actorId"),
    store: RecruitmentStore = Depends(get_store),
) -> SettingsResponse:
    return recruitment_service.get_settings(store, actor_id)


@router.patch(
    "/settings",
    response_model=SettingsResponse,
    responses={400: {"description": "Unsupported fiscal year start month", "model": ErrorResponse}},
    summary="Update system settings",
)
async def update_settings(
    body: SettingsUpdateRequest,
    store: RecruitmentStore = Depends(get_store),
) -> SettingsResponse:
    return recruitment_service.update_settings(store, body)
