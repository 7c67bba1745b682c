"""Ledger test fixtures backed by a throwaway SQLite database."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy import text

from movilidad.database import LedgerStore
from movilidad.ledger import LedgerConfig
from movilidad.models import Company, Worker
from movilidad.services import SubmissionLedger


@dataclass(frozen=True)
class SeedData:
    """Identifiers of the directory rows every test starts with."""

    employer_id: str = "20100000001"
    active_worker_id: str = "W1"
    active_email: str = "ana.bravo@example.com"
    inactive_worker_id: str = "W2"
    inactive_email: str = "carlos.diaz@example.com"
    legacy_worker_id: str = "W3"
    legacy_email: str = "elena.funes@example.com"
    sparse_employer_id: str = "20600000002"
    sparse_worker_id: str = "W4"
    sparse_email: str = "gabriel.huaman@example.com"


SEED = SeedData()


def database_url(directory: Path) -> str:
    return f"sqlite+aiosqlite:///{directory / 'ledger.db'}"


async def seed_directory(store: LedgerStore) -> None:
    """Insert one company and the reference workers."""
    async with store.transaction() as session:
        session.add(
            Company(
                employer_id=SEED.employer_id,
                legal_name="Transportes Andinos SAC",
                tax_id="20100000001",
                address="Av. Arequipa 123, Lima",
                phone="01-555-0100",
            )
        )
        session.add(
            Company(
                employer_id=SEED.sparse_employer_id,
                legal_name="Empresa sin datos",
                tax_id="00000000000",
            )
        )
        await session.flush()
        session.add_all(
            [
                Worker(
                    worker_id=SEED.active_worker_id,
                    email=SEED.active_email,
                    first_name="Ana",
                    last_name="Bravo",
                    employer_id=SEED.employer_id,
                    default_project="PRJ-LIMA",
                    active=True,
                ),
                Worker(
                    worker_id=SEED.inactive_worker_id,
                    email=SEED.inactive_email,
                    first_name="Carlos",
                    last_name="Díaz",
                    employer_id=SEED.employer_id,
                    active=False,
                ),
                Worker(
                    worker_id=SEED.sparse_worker_id,
                    email=SEED.sparse_email,
                    first_name="Gabriel",
                    last_name="Huamán",
                    employer_id=SEED.sparse_employer_id,
                    active=True,
                ),
            ]
        )
        # Legacy rows carry the flag as a bare 't'
        await session.execute(
            text(
                "INSERT INTO workers "
                "(worker_id, email, first_name, last_name, employer_id, default_project, active) "
                "VALUES (:id, :email, 'Elena', 'Funes', :employer, NULL, 't')"
            ),
            {"id": SEED.legacy_worker_id, "email": SEED.legacy_email, "employer": SEED.employer_id},
        )


@pytest.fixture
def seed() -> SeedData:
    return SEED


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return LedgerConfig(daily_cap=Decimal("45.00"))


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> AsyncGenerator[LedgerStore, None]:
    """A fresh file-backed store with the schema and directory seeded."""
    ledger_store = LedgerStore(database_url(tmp_path), lock_timeout_seconds=10.0)
    await ledger_store.create_schema()
    await seed_directory(ledger_store)
    yield ledger_store
    await ledger_store.dispose()


@pytest.fixture
def ledger(store: LedgerStore, ledger_config: LedgerConfig) -> SubmissionLedger:
    return SubmissionLedger(store, ledger_config)


async def count_rows(store: LedgerStore, table: str) -> int:
    async with store.transaction() as session:
        result = await session.execute(text(f"SELECT COUNT(*) FROM {table}"))
        return int(result.scalar_one())


async def counter_value(store: LedgerStore, worker_id: str) -> int | None:
    async with store.transaction() as session:
        result = await session.execute(
            text("SELECT n FROM sequence_counters WHERE worker_id = :id"),
            {"id": worker_id},
        )
        value = result.scalar_one_or_none()
        return int(value) if value is not None else None
