"""Submission ledger error taxonomy.

Every failure surfaces as a ``LedgerError`` subclass carrying a ``kind``
and the figures a caller needs to render its own message. Only
``PersistenceFailureError`` is safe to retry as-is.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Error kinds exposed to callers."""

    VALIDATION = "ValidationError"
    WORKER_NOT_FOUND = "WorkerNotFound"
    WORKER_INACTIVE = "WorkerInactive"
    EMPTY_SUBMISSION = "EmptySubmission"
    CAP_EXCEEDED = "CapExceeded"
    PERSISTENCE_FAILURE = "PersistenceFailure"


class LedgerError(Exception):
    """Base class for submission ledger failures."""

    kind: ErrorKind = ErrorKind.VALIDATION
    retryable: bool = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        """Structured figures for the caller (empty by default)."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, **self.details()}


class SubmissionValidationError(LedgerError):
    """Raised when the request is malformed or missing fields."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {"field": self.field} if self.field else {}


class WorkerNotFoundError(LedgerError):
    """Raised when no worker matches the identifier or email."""

    kind = ErrorKind.WORKER_NOT_FOUND

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Worker '{identifier}' not found")

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier}


class WorkerInactiveError(LedgerError):
    """Raised when the worker exists but is not active."""

    kind = ErrorKind.WORKER_INACTIVE

    def __init__(self, worker_id: str):
        self.worker_id = worker_id
        super().__init__(f"Worker '{worker_id}' is inactive")

    def details(self) -> dict[str, Any]:
        return {"worker_id": self.worker_id}


class EmptySubmissionError(LedgerError):
    """Raised when no line item survives amount cleaning."""

    kind = ErrorKind.EMPTY_SUBMISSION

    def __init__(self, received: int):
        self.received = received
        super().__init__(
            f"Submission has no line item with a positive amount ({received} received)"
        )

    def details(self) -> dict[str, Any]:
        return {"received": self.received}


class CapExceededError(LedgerError):
    """Raised when the submission would push the day's total over the cap."""

    kind = ErrorKind.CAP_EXCEEDED

    def __init__(self, accumulated: Decimal, attempted: Decimal, cap: Decimal):
        self.accumulated = accumulated
        self.attempted = attempted
        self.cap = cap
        super().__init__(
            f"Submission of {attempted} exceeds daily cap of {cap}; "
            f"already used {accumulated}"
        )

    @property
    def available(self) -> Decimal:
        """Amount still claimable for the day."""
        return max(self.cap - self.accumulated, Decimal("0.00"))

    def details(self) -> dict[str, Any]:
        return {
            "accumulated": str(self.accumulated),
            "attempted": str(self.attempted),
            "cap": str(self.cap),
            "available": str(self.available),
        }


class PersistenceFailureError(LedgerError):
    """Raised when the store fails; the transaction was rolled back."""

    kind = ErrorKind.PERSISTENCE_FAILURE
    retryable = True
