"""Tests for ledger configuration and environment settings."""

from decimal import Decimal

import pytest

from movilidad.config import Settings
from movilidad.ledger import LedgerConfig


class TestLedgerConfig:
    def test_defaults(self):
        config = LedgerConfig()
        assert config.daily_cap == Decimal("45.00")
        assert config.voucher_width == 5

    def test_cap_is_coerced_to_decimal(self):
        config = LedgerConfig(daily_cap="30")
        assert config.daily_cap == Decimal("30")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"daily_cap": Decimal("0")},
            {"daily_cap": Decimal("-1")},
            {"cap_tolerance": Decimal("-0.01")},
            {"voucher_width": 0},
            {"voucher_width": 13},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            LedgerConfig(**kwargs)

    def test_frozen(self):
        config = LedgerConfig()
        with pytest.raises(AttributeError):
            config.daily_cap = Decimal("1")  # type: ignore[misc]


class TestSettings:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        monkeypatch.setenv("DAILY_CAP", "60.00")
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.database_url == "sqlite+aiosqlite:///:memory:"
        assert settings.daily_cap == Decimal("60.00")
        assert settings.PORT == 9000
        assert settings.DEBUG is True
        assert settings.log_level == "DEBUG"
        assert settings.ledger_config().daily_cap == Decimal("60.00")

    def test_legacy_tope_variable(self, monkeypatch):
        monkeypatch.delenv("DAILY_CAP", raising=False)
        monkeypatch.setenv("TOPE", "50")

        assert Settings.from_env().daily_cap == Decimal("50")

    def test_daily_cap_wins_over_tope(self, monkeypatch):
        monkeypatch.setenv("DAILY_CAP", "40")
        monkeypatch.setenv("TOPE", "50")

        assert Settings.from_env().daily_cap == Decimal("40")
