"""Movilidad ledger - daily travel-allowance claims with per-worker caps.

Usage:
    store = LedgerStore("postgresql+asyncpg://...")
    ledger = SubmissionLedger(store, LedgerConfig(daily_cap=Decimal("45.00")))
    result = await ledger.submit("44081950", "ana@example.com", "2024-01-10", items)
"""

from movilidad.database import LedgerStore
from movilidad.ledger import LedgerConfig, LedgerError
from movilidad.services import SubmissionLedger, SubmissionResult

__version__ = "0.1.0"

__all__ = [
    "LedgerConfig",
    "LedgerError",
    "LedgerStore",
    "SubmissionLedger",
    "SubmissionResult",
    "__version__",
]
