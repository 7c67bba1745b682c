"""Pydantic schemas for API request/response models."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from movilidad.services import (
    CompanySnapshot,
    DailyUsage,
    SubmissionRecord,
    SubmissionResult,
)


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Submission schemas
# ============================================================================


class LineItemIn(CamelModel):
    """One expense line; amount may be a number or text like "S/ 12,50"."""

    destination: str = ""
    reason: str = ""
    project: str = ""
    cost_center: str = ""
    amount: Decimal | str | None = None


class SubmissionCreate(CamelModel):
    """Schema for submitting a movilidad claim."""

    worker_id: str = Field(min_length=1)
    email: str = Field(min_length=1)
    date: dt.date
    items: list[LineItemIn] = Field(min_length=1)
    idempotency_key: str | None = None


class CompanyResponse(CamelModel):
    employer_id: str
    legal_name: str
    tax_id: str
    address: str
    phone: str

    @classmethod
    def from_snapshot(cls, snapshot: CompanySnapshot | None) -> CompanyResponse | None:
        if snapshot is None:
            return None
        return cls(**snapshot.to_dict())


class SubmissionResponse(CamelModel):
    """Schema for an accepted submission."""

    submission_id: UUID
    worker_id: str
    date: dt.date
    voucher_serie: str
    voucher_number: str
    voucher_code: str
    total: Decimal
    accumulated: Decimal
    cap: Decimal
    company: CompanyResponse | None = None
    is_new: bool

    @classmethod
    def from_result(cls, result: SubmissionResult) -> SubmissionResponse:
        return cls(
            submission_id=result.submission_id,
            worker_id=result.worker_id,
            date=result.date,
            voucher_serie=result.voucher_serie,
            voucher_number=result.voucher_number_display,
            voucher_code=result.voucher_code,
            total=result.total,
            accumulated=result.accumulated,
            cap=result.cap,
            company=CompanyResponse.from_snapshot(result.company),
            is_new=result.is_new,
        )


class DailyUsageResponse(CamelModel):
    worker_id: str
    date: dt.date
    accumulated: Decimal
    cap: Decimal
    available: Decimal

    @classmethod
    def from_usage(cls, usage: DailyUsage) -> DailyUsageResponse:
        return cls(
            worker_id=usage.worker_id,
            date=usage.date,
            accumulated=usage.accumulated,
            cap=usage.cap,
            available=usage.available,
        )


class LineItemOut(CamelModel):
    destination: str
    reason: str
    project: str
    cost_center: str
    amount: Decimal


class SubmissionHistoryItem(CamelModel):
    submission_id: UUID
    worker_id: str
    email: str
    date: dt.date
    voucher_serie: str
    voucher_number: str
    voucher_code: str
    total: Decimal
    created_at: dt.datetime | None = None
    items: list[LineItemOut]

    @classmethod
    def from_record(cls, record: SubmissionRecord) -> SubmissionHistoryItem:
        return cls(
            submission_id=record.submission_id,
            worker_id=record.worker_id,
            email=record.email,
            date=record.date,
            voucher_serie=record.voucher_serie,
            voucher_number=record.voucher_number_display,
            voucher_code=record.voucher_code,
            total=record.total,
            created_at=record.created_at,
            items=[
                LineItemOut(
                    destination=item.destination,
                    reason=item.reason,
                    project=item.project,
                    cost_center=item.cost_center,
                    amount=item.amount,
                )
                for item in record.items
            ],
        )


class SubmissionHistoryResponse(CamelModel):
    items: list[SubmissionHistoryItem]
    total: int


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error responses; ledger errors add their figures."""

    model_config = ConfigDict(extra="allow")

    detail: str
    code: str
