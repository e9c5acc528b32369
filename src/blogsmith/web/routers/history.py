from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from blogsmith.core.modules.history.models import SetupStepData, UsageInput, UsageRecord, UsageStats, WorkflowSession
from blogsmith.core.pagination import PaginationResult
from blogsmith.web.deps import AppDep, AuthTokenDep, RequestMetaDep
from blogsmith.web.openapi import ErrorResponse

router = APIRouter(tags=["history"])


class RecordedResponse(BaseModel):
    id: str = Field(..., description="ID of the stored history record")
    session_id: str = Field(..., description="Workflow session the record was stamped with")


class SetupProgressRequest(BaseModel):
    step_number: int | None = Field(None, description="Wizard step number, starting at 1")
    step_name: str | None = Field(None, description="Wizard step name, e.g. 'keywords'")
    step_data: SetupStepData | None = Field(None, description="Inputs collected so far")
    session_id: str | None = Field(None, description="Workflow session id; coalesced when omitted")


class WorkflowSessionResponse(BaseModel):
    session_id: str


@router.get(
    "/workflow/session",
    summary="Current workflow session",
    description="Workflow session id that groups the user's steps; reused while steps keep arriving within the window.",
    operation_id="getWorkflowSession",
    responses={
        200: {"description": "Current workflow session id"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_workflow_session(app: AppDep, auth_token: AuthTokenDep) -> WorkflowSessionResponse:
    return WorkflowSessionResponse(session_id=await app.get_workflow_session(auth_token))


@router.post(
    "/history",
    summary="Record usage",
    description="Store one workflow step with its token usage and cost.",
    operation_id="recordUsage",
    responses={
        200: {"description": "Usage recorded"},
        400: {"model": ErrorResponse, "description": "Missing operation_type, api_provider or model_id"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def record_usage(usage: UsageInput, app: AppDep, auth_token: AuthTokenDep, meta: RequestMetaDep) -> RecordedResponse:
    record = await app.record_usage(auth_token, usage, meta)
    return RecordedResponse(id=str(record.id), session_id=record.session_id)


@router.get(
    "/history",
    summary="List usage history",
    description="Get paginated usage history of the current user, newest first.",
    operation_id="listHistory",
    responses={
        200: {"description": "Paginated usage history"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_history(
    app: AppDep,
    auth_token: AuthTokenDep,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 20,
    operation_type: Annotated[str | None, Query(description="Only this operation type")] = None,
    api_provider: Annotated[str | None, Query(description="Only this provider")] = None,
    date_from: Annotated[datetime | None, Query(description="Created at or after")] = None,
    date_to: Annotated[datetime | None, Query(description="Created at or before")] = None,
) -> PaginationResult[UsageRecord]:
    return await app.get_history(auth_token, page, limit, operation_type, api_provider, date_from, date_to)


@router.get(
    "/history/sessions",
    summary="List workflow sessions",
    description="Get a page of usage history grouped into workflow sessions. Pagination counts history records.",
    operation_id="listHistorySessions",
    responses={
        200: {"description": "Workflow sessions, oldest first"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_history_sessions(
    app: AppDep,
    auth_token: AuthTokenDep,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[int, Query(ge=1, le=100, description="History records per page")] = 10,
    session_id: Annotated[str | None, Query(description="Only this workflow session")] = None,
) -> PaginationResult[WorkflowSession]:
    return await app.get_session_history(auth_token, page, limit, session_id)


@router.post(
    "/history/setup-progress",
    summary="Record setup step",
    description="Store a setup wizard step as a zero-cost history record.",
    operation_id="recordSetupProgress",
    responses={
        200: {"description": "Setup step recorded"},
        400: {"model": ErrorResponse, "description": "Missing step_number or step_name"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def record_setup_progress(
    request: SetupProgressRequest, app: AppDep, auth_token: AuthTokenDep, meta: RequestMetaDep
) -> RecordedResponse:
    record = await app.record_setup_progress(
        auth_token, request.step_number, request.step_name, request.step_data, request.session_id, meta
    )
    return RecordedResponse(id=str(record.id), session_id=record.session_id)


@router.get(
    "/history/stats",
    summary="Usage statistics",
    description="Totals, the ten most recent operations and daily usage for the last 30 days.",
    operation_id="getHistoryStats",
    responses={
        200: {"description": "Usage statistics"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_history_stats(app: AppDep, auth_token: AuthTokenDep) -> UsageStats:
    return await app.get_usage_stats(auth_token)
