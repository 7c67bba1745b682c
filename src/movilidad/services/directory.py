"""Read-only worker and company directory adapters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from movilidad.models import Company, Worker, coerce_active_flag

__all__ = [
    "CompanyDirectory",
    "CompanySnapshot",
    "WorkerDirectory",
    "WorkerRecord",
    "coerce_active_flag",
]


@dataclass(frozen=True)
class WorkerRecord:
    """Worker identity as seen by the ledger."""

    worker_id: str
    email: str
    first_name: str
    last_name: str
    employer_id: str
    default_project: str
    active: bool

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class CompanySnapshot:
    """Employer data returned with a voucher for receipt rendering."""

    employer_id: str
    legal_name: str
    tax_id: str
    address: str
    phone: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "employer_id": self.employer_id,
            "legal_name": self.legal_name,
            "tax_id": self.tax_id,
            "address": self.address,
            "phone": self.phone,
        }


class WorkerDirectory:
    """Resolves workers by national id or email."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_identifier(self, id_or_email: str) -> WorkerRecord | None:
        """Find a worker by exact id or case-insensitive email."""
        identifier = (id_or_email or "").strip()
        if not identifier:
            return None

        result = await self.session.execute(
            select(Worker)
            .where(
                or_(
                    Worker.worker_id == identifier,
                    func.lower(Worker.email) == identifier.lower(),
                )
            )
            # An id match wins over an email match
            .order_by((Worker.worker_id == identifier).desc())
            .limit(1)
        )
        worker = result.scalar_one_or_none()
        if worker is None:
            return None

        return WorkerRecord(
            worker_id=worker.worker_id,
            email=worker.email,
            first_name=worker.first_name,
            last_name=worker.last_name,
            employer_id=worker.employer_id,
            default_project=worker.default_project or "",
            active=coerce_active_flag(worker.active),
        )


class CompanyDirectory:
    """Resolves employers for receipt metadata."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, employer_id: str | None) -> CompanySnapshot | None:
        if not employer_id:
            return None

        company = await self.session.get(Company, employer_id)
        if company is None:
            return None

        return CompanySnapshot(
            employer_id=company.employer_id,
            legal_name=company.legal_name,
            tax_id=company.tax_id,
            address=company.address or "",
            phone=company.phone or "",
        )
