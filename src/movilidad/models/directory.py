"""Company and worker directory models.

These tables are owned by the directory maintenance tooling; the ledger
only reads them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import ForeignKey, String, TypeDecorator
from sqlalchemy.orm import Mapped, mapped_column, relationship

from movilidad.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect

TRUTHY_FLAGS = frozenset({"1", "t", "true", "y", "yes", "s", "si", "sí"})


def coerce_active_flag(value: Any) -> bool:
    """Normalize a stored active flag to a real boolean.

    Older schema revisions stored the flag as text ('1', 't', 'true') or as
    an integer; anything not recognizably true counts as inactive.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in TRUTHY_FLAGS


class ActiveFlag(TypeDecorator[bool]):
    """Text-backed boolean tolerant of legacy encodings."""

    impl = String(8)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        if value is None:
            return None
        return "true" if coerce_active_flag(value) else "false"

    def process_result_value(self, value: Any, dialect: Dialect) -> bool:
        return coerce_active_flag(value)


class Company(Base, TimestampMixin):
    """Employer affiliated with the allowance program."""

    __tablename__ = "companies"

    employer_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    legal_name: Mapped[str] = mapped_column(String, nullable=False)
    tax_id: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relationships
    workers: Mapped[list[Worker]] = relationship(back_populates="company")


class Worker(Base, TimestampMixin):
    """Worker who can submit movilidad claims."""

    __tablename__ = "workers"

    worker_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    employer_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("companies.employer_id"),
        nullable=False,
    )
    default_project: Mapped[str | None] = mapped_column(String, nullable=True)
    active: Mapped[bool] = mapped_column(ActiveFlag(), nullable=False, default=True)

    # Relationships
    company: Mapped[Company] = relationship(back_populates="workers")

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"
