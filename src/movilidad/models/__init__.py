"""ORM models."""

from movilidad.models.base import Base, TimestampMixin
from movilidad.models.directory import ActiveFlag, Company, Worker, coerce_active_flag
from movilidad.models.ledger import (
    IDEMPOTENCY_KEY_MAX_LENGTH,
    LineItem,
    SequenceCounter,
    Submission,
)

__all__ = [
    "IDEMPOTENCY_KEY_MAX_LENGTH",
    "ActiveFlag",
    "Base",
    "Company",
    "LineItem",
    "SequenceCounter",
    "Submission",
    "TimestampMixin",
    "Worker",
    "coerce_active_flag",
]
