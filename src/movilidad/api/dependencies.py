"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Request

from movilidad.database import LedgerStore
from movilidad.services import SubmissionLedger


def get_store(request: Request) -> LedgerStore:
    """Store handle created by the application factory."""
    return request.app.state.store


def get_ledger(request: Request) -> SubmissionLedger:
    """Submission ledger bound to the application's store."""
    return request.app.state.ledger


# Type aliases for cleaner dependency injection
Store = Annotated[LedgerStore, Depends(get_store)]
Ledger = Annotated[SubmissionLedger, Depends(get_ledger)]
