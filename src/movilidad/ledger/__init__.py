"""Pure ledger building blocks: configuration, amounts, voucher codes, errors."""

from movilidad.ledger.amounts import clean_amount, money, sum_amounts
from movilidad.ledger.config import LedgerConfig
from movilidad.ledger.errors import (
    CapExceededError,
    EmptySubmissionError,
    ErrorKind,
    LedgerError,
    PersistenceFailureError,
    SubmissionValidationError,
    WorkerInactiveError,
    WorkerNotFoundError,
)
from movilidad.ledger.voucher_codec import format_number, serie_from_name, voucher_code

__all__ = [
    "CapExceededError",
    "EmptySubmissionError",
    "ErrorKind",
    "LedgerConfig",
    "LedgerError",
    "PersistenceFailureError",
    "SubmissionValidationError",
    "WorkerInactiveError",
    "WorkerNotFoundError",
    "clean_amount",
    "format_number",
    "money",
    "serie_from_name",
    "sum_amounts",
    "voucher_code",
]
