"""Submission ledger models: sequence counters, submissions and line items."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from movilidad.models.base import Base, TimestampMixin


IDEMPOTENCY_KEY_MAX_LENGTH = 128


class SequenceCounter(Base):
    """Last voucher number allocated to a worker."""

    __tablename__ = "sequence_counters"

    worker_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    n: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (CheckConstraint("n >= 0", name="sequence_counter_n_non_negative"),)


class Submission(Base, TimestampMixin):
    """One accepted movilidad claim (voucher header).

    The header carries the only total; daily accumulation sums headers,
    never line items.
    """

    __tablename__ = "submissions"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    worker_id: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False)
    employer_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    serie: Mapped[str] = mapped_column(String(8), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # Day total before this voucher, as reported when it was accepted
    accumulated_before: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    idempotency_key: Mapped[str | None] = mapped_column(
        String(IDEMPOTENCY_KEY_MAX_LENGTH), nullable=True
    )

    __table_args__ = (
        Index("ix_submissions_worker_date", "worker_id", "date"),
        UniqueConstraint("worker_id", "number", name="submissions_worker_number_unique"),
        UniqueConstraint(
            "worker_id", "idempotency_key", name="submissions_worker_idempotency_unique"
        ),
        CheckConstraint("total > 0", name="submission_total_positive"),
        CheckConstraint("number > 0", name="submission_number_positive"),
    )

    # Relationships
    items: Mapped[list[LineItem]] = relationship(
        back_populates="submission",
        cascade="all, delete-orphan",
        order_by="LineItem.position",
    )


class LineItem(Base):
    """Itemized expense inside a submission."""

    __tablename__ = "line_items"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    submission_id: Mapped[UUID] = mapped_column(
        ForeignKey("submissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    destination: Mapped[str] = mapped_column(String, nullable=False, default="")
    reason: Mapped[str] = mapped_column(String, nullable=False, default="")
    project: Mapped[str] = mapped_column(String, nullable=False, default="")
    cost_center: Mapped[str] = mapped_column(String, nullable=False, default="")
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    __table_args__ = (CheckConstraint("amount > 0", name="line_item_amount_positive"),)

    # Relationships
    submission: Mapped[Submission] = relationship(back_populates="items")
