"""Configuration management for the movilidad ledger."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv

from movilidad.ledger.config import LedgerConfig


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    daily_cap: Decimal
    lock_timeout_seconds: float
    host: str
    port: int
    debug: bool
    log_level: str

    @property
    def HOST(self) -> str:
        """Alias for host."""
        return self.host

    @property
    def PORT(self) -> int:
        """Alias for port."""
        return self.port

    @property
    def DEBUG(self) -> bool:
        """Alias for debug."""
        return self.debug

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables.

        ``TOPE`` is accepted as a legacy name for ``DAILY_CAP``.
        """
        load_dotenv()

        return cls(
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./movilidad.db",
            ),
            daily_cap=Decimal(os.getenv("DAILY_CAP", os.getenv("TOPE", "45.00"))),
            lock_timeout_seconds=float(os.getenv("LOCK_TIMEOUT_SECONDS", "5")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def ledger_config(self) -> LedgerConfig:
        """Build the explicit ledger configuration from these settings."""
        return LedgerConfig(daily_cap=self.daily_cap)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
