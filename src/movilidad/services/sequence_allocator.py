"""Per-worker voucher sequence allocation."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from movilidad.models import SequenceCounter


class SequenceAllocator:
    """Allocates strictly increasing voucher numbers per worker.

    Key invariants:
    1. One counter row per worker; the first allocation returns 1
    2. Allocation is a single upsert-and-increment, so the row lock taken
       by the database is the only serialization point for a worker
    3. Always runs inside the caller's transaction; a rollback there undoes
       the increment
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _insert(self):  # type: ignore[no-untyped-def]
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(SequenceCounter)
        if dialect == "sqlite":
            return sqlite_insert(SequenceCounter)
        raise NotImplementedError(f"Sequence allocation not supported on {dialect}")

    async def allocate_next(self, worker_id: str) -> int:
        """Increment the worker's counter and return the new value."""
        stmt = self._insert().values(worker_id=worker_id, n=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[SequenceCounter.worker_id],
            set_={"n": SequenceCounter.n + 1},
        ).returning(SequenceCounter.n)

        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def current(self, worker_id: str) -> int:
        """Return the last allocated number (0 if none yet)."""
        result = await self.session.execute(
            select(SequenceCounter.n).where(SequenceCounter.worker_id == worker_id)
        )
        value = result.scalar_one_or_none()
        return int(value) if value is not None else 0
