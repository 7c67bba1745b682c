"""Currency amount cleaning.

Amounts arrive from forms and spreadsheets as numbers, as text with a
currency prefix ("S/ 12,50"), or not at all. Everything is reduced to a
non-negative Decimal with two places, rounded half-up.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from movilidad.ledger.errors import SubmissionValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Largest value a NUMERIC(12,2) column holds
MAX_AMOUNT = Decimal("9999999999.99")

_NUMBER_RUN = re.compile(r"-?\d[\d.,]*")


def money(value: Decimal | int | str) -> Decimal:
    """Quantize a numeric value to cents (ROUND_HALF_UP)."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _normalize_separators(number: str) -> str:
    """Turn a locale-formatted number into a plain decimal literal."""
    number = number.rstrip(".,")
    has_comma = "," in number
    has_dot = "." in number

    if has_comma and has_dot:
        decimal_sep = "," if number.rfind(",") > number.rfind(".") else "."
        thousands_sep = "." if decimal_sep == "," else ","
        number = number.replace(thousands_sep, "")
        return number.replace(decimal_sep, ".")

    if has_comma:
        if number.count(",") > 1:
            return number.replace(",", "")
        return number.replace(",", ".")

    if number.count(".") > 1:
        return number.replace(".", "")
    return number


def _parse_text(text: str) -> Decimal | None:
    match = _NUMBER_RUN.search(text)
    if match is None:
        return None
    try:
        return Decimal(_normalize_separators(match.group(0)))
    except InvalidOperation:
        return None


def clean_amount(value: Any) -> Decimal:
    """Coerce a raw amount into a non-negative two-decimal Decimal.

    Unparseable, missing and negative input all clean to 0.00, which the
    ledger treats as "drop this line". Amounts above MAX_AMOUNT raise
    SubmissionValidationError.

    >>> clean_amount("S/ 45,00")
    Decimal('45.00')
    >>> clean_amount("45.005")
    Decimal('45.01')
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        parsed: Decimal | None = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    else:
        parsed = _parse_text(str(value))

    if parsed is None or not parsed.is_finite() or parsed <= 0:
        return ZERO
    if parsed > MAX_AMOUNT:
        raise SubmissionValidationError(
            f"amount exceeds the maximum of {MAX_AMOUNT}", field="items"
        )
    return money(parsed)


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    """Sum amounts and quantize the result to cents."""
    return money(sum(amounts, ZERO))
