"""Voucher serie and display-code derivation.

A voucher code is the worker's initials followed by the zero-padded
per-worker sequence number: Ana Bravo's first voucher is ``AB00001``.
"""

from __future__ import annotations

import unicodedata

FALLBACK_INITIAL = "X"
DEFAULT_WIDTH = 5


def strip_accents(text: str) -> str:
    """Remove combining marks (á -> a, Ñ -> N)."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _initial(name: str | None) -> str:
    tokens = strip_accents(name or "").split()
    if not tokens:
        return FALLBACK_INITIAL
    first = tokens[0][0].upper()
    return first if first.isalpha() else FALLBACK_INITIAL


def serie_from_name(first_name: str | None, last_name: str | None) -> str:
    """Derive the voucher serie from the first token of each name."""
    return _initial(first_name) + _initial(last_name)


def format_number(number: int, width: int = DEFAULT_WIDTH) -> str:
    """Zero-pad a sequence number for display."""
    return str(number).zfill(width)


def voucher_code(serie: str, number: int, width: int = DEFAULT_WIDTH) -> str:
    """Combine a serie and a sequence number into the display code."""
    return f"{serie}{format_number(number, width)}"
