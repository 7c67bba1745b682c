"""Movilidad ledger services."""

from movilidad.services.cap_enforcer import CapCheck, CapEnforcer
from movilidad.services.directory import (
    CompanyDirectory,
    CompanySnapshot,
    WorkerDirectory,
    WorkerRecord,
)
from movilidad.services.sequence_allocator import SequenceAllocator
from movilidad.services.submission_ledger import (
    DailyUsage,
    LineItemInput,
    SubmissionLedger,
    SubmissionRecord,
    SubmissionResult,
)

__all__ = [
    "CapCheck",
    "CapEnforcer",
    "CompanyDirectory",
    "CompanySnapshot",
    "DailyUsage",
    "LineItemInput",
    "SequenceAllocator",
    "SubmissionLedger",
    "SubmissionRecord",
    "SubmissionResult",
    "WorkerDirectory",
    "WorkerRecord",
]
