"""Submission API endpoints."""

import datetime as dt
from typing import Annotated

from fastapi import APIRouter, Path, Query, Response, status

from movilidad.api.dependencies import Ledger
from movilidad.api.schemas import (
    DailyUsageResponse,
    ErrorResponse,
    SubmissionCreate,
    SubmissionHistoryItem,
    SubmissionHistoryResponse,
    SubmissionResponse,
)
from movilidad.services import LineItemInput

router = APIRouter(tags=["submissions"])


@router.post(
    "/submissions",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": SubmissionResponse, "description": "Idempotent replay"},
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def create_submission(
    ledger: Ledger,
    payload: SubmissionCreate,
    response: Response,
) -> SubmissionResponse:
    """Record a movilidad claim against the worker's daily cap."""
    result = await ledger.submit(
        payload.worker_id,
        payload.email,
        payload.date,
        [
            LineItemInput(
                destination=item.destination,
                reason=item.reason,
                project=item.project,
                cost_center=item.cost_center,
                amount=item.amount,
            )
            for item in payload.items
        ],
        idempotency_key=payload.idempotency_key,
    )
    if not result.is_new:
        response.status_code = status.HTTP_200_OK
    return SubmissionResponse.from_result(result)


@router.get(
    "/workers/{worker_id}/daily-usage",
    response_model=DailyUsageResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_daily_usage(
    ledger: Ledger,
    worker_id: Annotated[str, Path(min_length=1)],
    date: Annotated[dt.date, Query()],
) -> DailyUsageResponse:
    """Accumulated spend for a worker on a day, with the remaining allowance."""
    usage = await ledger.daily_usage(worker_id, date)
    return DailyUsageResponse.from_usage(usage)


@router.get(
    "/workers/{worker_id}/submissions",
    response_model=SubmissionHistoryResponse,
    responses={400: {"model": ErrorResponse}},
)
async def list_submissions(
    ledger: Ledger,
    worker_id: Annotated[str, Path(min_length=1)],
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> SubmissionHistoryResponse:
    """List a worker's submissions, newest first."""
    records = await ledger.history(worker_id, limit=limit)
    return SubmissionHistoryResponse(
        items=[SubmissionHistoryItem.from_record(r) for r in records],
        total=len(records),
    )
