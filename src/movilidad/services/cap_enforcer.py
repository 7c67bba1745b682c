"""Daily cap (tope) enforcement."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from movilidad.ledger.amounts import ZERO, money
from movilidad.ledger.config import LedgerConfig
from movilidad.models import Submission


@dataclass(frozen=True)
class CapCheck:
    """Outcome of checking a candidate total against the daily cap."""

    accumulated: Decimal
    attempted: Decimal
    cap: Decimal
    exceeds: bool

    @property
    def available(self) -> Decimal:
        """Amount still claimable before this candidate."""
        return max(self.cap - self.accumulated, ZERO)


class CapEnforcer:
    """Computes a worker's daily spend and checks it against the cap.

    The accumulator sums submission headers only. A line item is not a
    spend event, so a three-item voucher counts once.

    Read-only; callers run it in the same transaction as the write and
    after taking the worker lock, so the figure cannot go stale before
    the insert.
    """

    def __init__(self, session: AsyncSession, config: LedgerConfig):
        self.session = session
        self.config = config

    async def accumulated_total(self, worker_id: str, day: date) -> Decimal:
        """Sum of accepted submission totals for a worker on a day."""
        result = await self.session.execute(
            select(func.coalesce(func.sum(Submission.total), 0)).where(
                Submission.worker_id == worker_id,
                Submission.date == day,
            )
        )
        return money(Decimal(str(result.scalar_one())))

    async def evaluate(
        self, worker_id: str, day: date, candidate_total: Decimal
    ) -> CapCheck:
        """Check a candidate total against the cap with a single read."""
        accumulated = await self.accumulated_total(worker_id, day)
        cap = self.config.daily_cap
        exceeds = accumulated + candidate_total > cap + self.config.cap_tolerance
        return CapCheck(
            accumulated=accumulated,
            attempted=candidate_total,
            cap=cap,
            exceeds=exceeds,
        )

    async def would_exceed(
        self, worker_id: str, day: date, candidate_total: Decimal
    ) -> bool:
        """True iff accepting the candidate would break the daily cap."""
        check = await self.evaluate(worker_id, day, candidate_total)
        return check.exceeds
