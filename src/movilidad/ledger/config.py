"""Ledger configuration objects.

Explicit configuration for the submission ledger.

Pattern:
    ledger = SubmissionLedger(
        store=LedgerStore("postgresql+asyncpg://..."),
        config=LedgerConfig(daily_cap=Decimal("45.00")),
    )

Rules:
    1. No env vars here. ``Settings.ledger_config()`` does the env mapping.
    2. No globals. Each ledger instance receives its own config.
    3. Immutable after creation (frozen dataclasses).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

DEFAULT_DAILY_CAP = Decimal("45.00")
DEFAULT_CAP_TOLERANCE = Decimal("0.000001")
DEFAULT_VOUCHER_WIDTH = 5


@dataclass(frozen=True)
class LedgerConfig:
    """
    Submission ledger configuration.

    Attributes:
        daily_cap: Maximum total a worker may claim per calendar day (TOPE).
            Default 45.00.
        cap_tolerance: Slack added to the cap before rejecting, to absorb
            rounding in legacy totals. Default 0.000001.
        voucher_width: Zero-padding width of displayed voucher numbers.
            Default 5.
    """

    daily_cap: Decimal = DEFAULT_DAILY_CAP
    cap_tolerance: Decimal = DEFAULT_CAP_TOLERANCE
    voucher_width: int = DEFAULT_VOUCHER_WIDTH

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not isinstance(self.daily_cap, Decimal):
            object.__setattr__(self, "daily_cap", Decimal(str(self.daily_cap)))
        if not isinstance(self.cap_tolerance, Decimal):
            object.__setattr__(self, "cap_tolerance", Decimal(str(self.cap_tolerance)))
        if self.daily_cap <= 0:
            raise ValueError("daily_cap must be positive")
        if self.cap_tolerance < 0:
            raise ValueError("cap_tolerance cannot be negative")
        if not 1 <= self.voucher_width <= 12:
            raise ValueError("voucher_width must be between 1 and 12")
