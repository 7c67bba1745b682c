"""Submission ledger - the system of record for movilidad claims.

Provides transactional submission of expense claims with:
- Per-worker daily cap enforcement (sum of voucher headers)
- Gap-free per-worker voucher numbering
- All-or-nothing persistence of header and line items
- Optional caller-supplied idempotency keys
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from movilidad.database import LedgerStore, acquire_worker_lock
from movilidad.ledger.amounts import ZERO, clean_amount, money, sum_amounts
from movilidad.ledger.config import LedgerConfig
from movilidad.ledger.errors import (
    CapExceededError,
    EmptySubmissionError,
    LedgerError,
    PersistenceFailureError,
    SubmissionValidationError,
    WorkerInactiveError,
    WorkerNotFoundError,
)
from movilidad.ledger.voucher_codec import format_number, serie_from_name, voucher_code
from movilidad.models import IDEMPOTENCY_KEY_MAX_LENGTH, LineItem, Submission
from movilidad.services.cap_enforcer import CapEnforcer
from movilidad.services.directory import (
    CompanyDirectory,
    CompanySnapshot,
    WorkerDirectory,
    WorkerRecord,
)
from movilidad.services.sequence_allocator import SequenceAllocator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineItemInput:
    """One expense line as submitted by the caller (amount not yet cleaned)."""

    destination: str = ""
    reason: str = ""
    project: str = ""
    cost_center: str = ""
    amount: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LineItemInput:
        """Build from a dict using snake_case or camelCase keys."""
        cost_center = data.get("cost_center", data.get("costCenter"))
        return cls(
            destination=_text(data.get("destination")),
            reason=_text(data.get("reason")),
            project=_text(data.get("project")),
            cost_center=_text(cost_center),
            amount=data.get("amount"),
        )


@dataclass(frozen=True)
class CleanLineItem:
    """A line item that survived amount cleaning."""

    destination: str
    reason: str
    project: str
    cost_center: str
    amount: Decimal


@dataclass(frozen=True)
class SubmissionResult:
    """Result of a submission.

    IMPORTANT: check `is_new` before triggering downstream work. An
    idempotent replay returns the stored voucher with `is_new=False`.
    """

    submission_id: UUID
    worker_id: str
    date: date
    voucher_serie: str
    voucher_number: int
    total: Decimal
    accumulated: Decimal
    cap: Decimal
    company: CompanySnapshot | None
    is_new: bool = True
    voucher_width: int = 5

    @property
    def voucher_number_display(self) -> str:
        return format_number(self.voucher_number, self.voucher_width)

    @property
    def voucher_code(self) -> str:
        return voucher_code(self.voucher_serie, self.voucher_number, self.voucher_width)


@dataclass(frozen=True)
class DailyUsage:
    """A worker's spend for one day against the cap."""

    worker_id: str
    date: date
    accumulated: Decimal
    cap: Decimal

    @property
    def available(self) -> Decimal:
        return max(self.cap - self.accumulated, ZERO)


@dataclass(frozen=True)
class LineItemRecord:
    destination: str
    reason: str
    project: str
    cost_center: str
    amount: Decimal


@dataclass(frozen=True)
class SubmissionRecord:
    """A persisted submission with its line items, for history listings."""

    submission_id: UUID
    worker_id: str
    email: str
    date: date
    voucher_serie: str
    voucher_number: int
    total: Decimal
    created_at: datetime | None
    items: list[LineItemRecord] = field(default_factory=list)
    voucher_width: int = 5

    @property
    def voucher_number_display(self) -> str:
        return format_number(self.voucher_number, self.voucher_width)

    @property
    def voucher_code(self) -> str:
        return voucher_code(self.voucher_serie, self.voucher_number, self.voucher_width)


@dataclass(frozen=True)
class _SubmissionRequest:
    worker_id: str
    email: str
    date: date
    items: list[LineItemInput]
    idempotency_key: str | None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_submission_date(value: Any) -> date:
    """Accept a date or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _text(value)
    if not text:
        raise SubmissionValidationError("date is required", field="date")
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise SubmissionValidationError(
            f"date must be YYYY-MM-DD, got '{text}'", field="date"
        ) from None


class SubmissionLedger:
    """Orchestrates one movilidad submission end to end.

    Stateless between calls: all coordination lives in the store. Each
    `submit` is one transaction that:
    1. Resolves the worker (must exist and be active)
    2. Cleans line items and computes the candidate total
    3. Locks the worker, then checks the daily cap
    4. Allocates the next voucher number
    5. Inserts the header and line items

    Any failure rolls back the whole transaction, including the counter
    increment.
    """

    def __init__(self, store: LedgerStore, config: LedgerConfig | None = None):
        self.store = store
        self.config = config or LedgerConfig()

    async def submit(
        self,
        worker_id: str,
        email: str,
        submission_date: date | str,
        items: Sequence[LineItemInput | Mapping[str, Any]],
        *,
        idempotency_key: str | None = None,
    ) -> SubmissionResult:
        """Record a submission, or raise a LedgerError.

        Args:
            worker_id: Worker national id (falls back to email lookup)
            email: Worker email as entered by the caller
            submission_date: Calendar day claimed (date or YYYY-MM-DD)
            items: Line items; amounts may be free text ("S/ 12,50")
            idempotency_key: Optional token; a repeat returns the stored voucher

        Returns:
            SubmissionResult with the voucher serie/number and company snapshot
        """
        request = self._validate(worker_id, email, submission_date, items, idempotency_key)

        try:
            async with self.store.transaction() as session:
                result = await self._submit_in_transaction(session, request)
        except LedgerError as exc:
            logger.info(
                "Submission rejected for worker %s on %s: %s",
                request.worker_id,
                request.date,
                exc.kind.value,
            )
            raise
        except SQLAlchemyError as exc:
            logger.exception(
                "Submission for worker %s on %s failed in the store",
                request.worker_id,
                request.date,
            )
            raise PersistenceFailureError(
                f"Could not record submission: {exc.__class__.__name__}"
            ) from exc

        if result.is_new:
            logger.info(
                "Submission %s accepted for worker %s on %s: total %s",
                result.voucher_code,
                result.worker_id,
                result.date,
                result.total,
            )
        return result

    async def daily_usage(self, worker_id: str, day: date | str) -> DailyUsage:
        """Current accumulated spend for a worker/day against the cap."""
        worker_id = _text(worker_id)
        if not worker_id:
            raise SubmissionValidationError("worker_id is required", field="worker_id")
        parsed = parse_submission_date(day)

        try:
            async with self.store.transaction() as session:
                accumulated = await CapEnforcer(session, self.config).accumulated_total(
                    worker_id, parsed
                )
        except SQLAlchemyError as exc:
            raise PersistenceFailureError(
                f"Could not read daily usage: {exc.__class__.__name__}"
            ) from exc

        return DailyUsage(
            worker_id=worker_id,
            date=parsed,
            accumulated=accumulated,
            cap=self.config.daily_cap,
        )

    async def history(self, worker_id: str, limit: int = 100) -> list[SubmissionRecord]:
        """A worker's submissions, newest first, with their line items."""
        worker_id = _text(worker_id)
        if not worker_id:
            raise SubmissionValidationError("worker_id is required", field="worker_id")
        if limit < 1:
            raise SubmissionValidationError("limit must be positive", field="limit")

        try:
            async with self.store.transaction() as session:
                result = await session.execute(
                    select(Submission)
                    .options(selectinload(Submission.items))
                    .where(Submission.worker_id == worker_id)
                    .order_by(Submission.number.desc())
                    .limit(limit)
                )
                submissions = list(result.scalars().all())
                return [self._to_record(s) for s in submissions]
        except SQLAlchemyError as exc:
            raise PersistenceFailureError(
                f"Could not read history: {exc.__class__.__name__}"
            ) from exc

    def _validate(
        self,
        worker_id: Any,
        email: Any,
        submission_date: Any,
        items: Any,
        idempotency_key: Any,
    ) -> _SubmissionRequest:
        worker_id = _text(worker_id)
        email = _text(email).lower()
        if not worker_id:
            raise SubmissionValidationError("worker_id is required", field="worker_id")
        if not email:
            raise SubmissionValidationError("email is required", field="email")
        parsed_date = parse_submission_date(submission_date)

        if items is None or isinstance(items, (str, bytes, Mapping)) or not isinstance(
            items, Sequence
        ):
            raise SubmissionValidationError("items must be a list", field="items")
        if not items:
            raise SubmissionValidationError("items must not be empty", field="items")

        parsed_items: list[LineItemInput] = []
        for item in items:
            if isinstance(item, LineItemInput):
                parsed_items.append(item)
            elif isinstance(item, Mapping):
                parsed_items.append(LineItemInput.from_mapping(item))
            else:
                raise SubmissionValidationError(
                    "each item must be an object", field="items"
                )

        key = _text(idempotency_key) or None
        if key is not None and len(key) > IDEMPOTENCY_KEY_MAX_LENGTH:
            raise SubmissionValidationError(
                f"idempotency_key must be at most {IDEMPOTENCY_KEY_MAX_LENGTH} characters",
                field="idempotency_key",
            )
        return _SubmissionRequest(
            worker_id=worker_id,
            email=email,
            date=parsed_date,
            items=parsed_items,
            idempotency_key=key,
        )

    async def _resolve_worker(
        self, session: AsyncSession, request: _SubmissionRequest
    ) -> WorkerRecord:
        directory = WorkerDirectory(session)
        worker = await directory.find_by_identifier(request.worker_id)
        if worker is None:
            worker = await directory.find_by_identifier(request.email)
        if worker is None:
            raise WorkerNotFoundError(request.worker_id)
        if not worker.active:
            raise WorkerInactiveError(worker.worker_id)
        return worker

    def _clean_items(
        self, items: list[LineItemInput], worker: WorkerRecord
    ) -> list[CleanLineItem]:
        cleaned: list[CleanLineItem] = []
        for item in items:
            amount = clean_amount(item.amount)
            if amount <= 0:
                continue
            cleaned.append(
                CleanLineItem(
                    destination=item.destination,
                    reason=item.reason,
                    project=item.project or worker.default_project,
                    cost_center=item.cost_center,
                    amount=amount,
                )
            )
        return cleaned

    async def _submit_in_transaction(
        self, session: AsyncSession, request: _SubmissionRequest
    ) -> SubmissionResult:
        worker = await self._resolve_worker(session, request)

        lines = self._clean_items(request.items, worker)
        if not lines:
            raise EmptySubmissionError(len(request.items))
        candidate_total = sum_amounts(line.amount for line in lines)

        await acquire_worker_lock(
            session, worker.worker_id, self.store.lock_timeout_seconds
        )

        if request.idempotency_key:
            replay = await self._find_replay(session, worker, request)
            if replay is not None:
                return replay

        cap = CapEnforcer(session, self.config)
        check = await cap.evaluate(worker.worker_id, request.date, candidate_total)
        if check.exceeds:
            raise CapExceededError(
                accumulated=check.accumulated,
                attempted=candidate_total,
                cap=check.cap,
            )

        number = await SequenceAllocator(session).allocate_next(worker.worker_id)
        serie = serie_from_name(worker.first_name, worker.last_name)

        submission = await self._persist(
            session,
            worker=worker,
            request=request,
            serie=serie,
            number=number,
            total=candidate_total,
            accumulated=check.accumulated,
            lines=lines,
        )
        company = await CompanyDirectory(session).find_by_id(worker.employer_id)

        return SubmissionResult(
            submission_id=submission.id,
            worker_id=worker.worker_id,
            date=request.date,
            voucher_serie=serie,
            voucher_number=number,
            total=candidate_total,
            accumulated=check.accumulated,
            cap=check.cap,
            company=company,
            is_new=True,
            voucher_width=self.config.voucher_width,
        )

    async def _persist(
        self,
        session: AsyncSession,
        *,
        worker: WorkerRecord,
        request: _SubmissionRequest,
        serie: str,
        number: int,
        total: Decimal,
        accumulated: Decimal,
        lines: list[CleanLineItem],
    ) -> Submission:
        """Insert the header and its line items; flushed, not committed."""
        submission = Submission(
            worker_id=worker.worker_id,
            email=request.email,
            employer_id=worker.employer_id,
            date=request.date,
            serie=serie,
            number=number,
            total=total,
            accumulated_before=accumulated,
            idempotency_key=request.idempotency_key,
        )
        submission.items = [
            LineItem(
                position=position,
                destination=line.destination,
                reason=line.reason,
                project=line.project,
                cost_center=line.cost_center,
                amount=line.amount,
            )
            for position, line in enumerate(lines, start=1)
        ]
        session.add(submission)
        await session.flush()
        return submission

    async def _find_replay(
        self,
        session: AsyncSession,
        worker: WorkerRecord,
        request: _SubmissionRequest,
    ) -> SubmissionResult | None:
        result = await session.execute(
            select(Submission).where(
                Submission.worker_id == worker.worker_id,
                Submission.idempotency_key == request.idempotency_key,
            )
        )
        existing = result.scalar_one_or_none()
        if existing is None:
            return None

        company = await CompanyDirectory(session).find_by_id(existing.employer_id)
        return SubmissionResult(
            submission_id=existing.id,
            worker_id=existing.worker_id,
            date=existing.date,
            voucher_serie=existing.serie,
            voucher_number=existing.number,
            total=money(existing.total),
            accumulated=money(existing.accumulated_before),
            cap=self.config.daily_cap,
            company=company,
            is_new=False,
            voucher_width=self.config.voucher_width,
        )

    def _to_record(self, submission: Submission) -> SubmissionRecord:
        return SubmissionRecord(
            submission_id=submission.id,
            worker_id=submission.worker_id,
            email=submission.email,
            date=submission.date,
            voucher_serie=submission.serie,
            voucher_number=submission.number,
            total=money(submission.total),
            created_at=submission.created_at,
            items=[
                LineItemRecord(
                    destination=item.destination,
                    reason=item.reason,
                    project=item.project,
                    cost_center=item.cost_center,
                    amount=money(item.amount),
                )
                for item in submission.items
            ],
            voucher_width=self.config.voucher_width,
        )
