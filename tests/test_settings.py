"""Tests for configuration loading."""

import pytest
from decimal import Decimal

from rentbook.config import (
    AppSettings,
    LedgerSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run each test from an empty directory with no ledger variables set."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "LEDGER_PARTNERS",
        "LEDGER_CURRENCY_SYMBOL",
        "LOG_LEVEL",
        "STORAGE_BACKEND",
        "GOOGLE_SHEETS_CREDENTIALS_PATH",
        "GOOGLE_SHEETS_SPREADSHEET_ID",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestLedgerSettings:
    """Tests for partner and currency configuration."""

    def test_defaults(self):
        """Test the default partners and currency."""
        settings = LedgerSettings()
        assert settings.partner_config.names == ["Desmond", "Bethel"]
        assert settings.currency_code == "NGN"
        assert settings.currency_symbol == "₦"

    def test_partners_from_environment(self, monkeypatch):
        """Test partners load from a JSON list."""
        monkeypatch.setenv(
            "LEDGER_PARTNERS",
            '[{"id": "1", "name": "A", "share_percentage": 60},'
            ' {"id": "2", "name": "B", "share_percentage": 40}]',
        )
        config = LedgerSettings().partner_config
        assert config.get("A").share_percentage == Decimal("60")

    def test_bad_partner_split_rejected(self, monkeypatch):
        """Test shares that do not sum to 100 fail at load time."""
        monkeypatch.setenv(
            "LEDGER_PARTNERS",
            '[{"id": "1", "name": "A", "share_percentage": 60}]',
        )
        with pytest.raises(ValueError, match="sum to 100"):
            LedgerSettings()


class TestAppSettings:
    """Tests for application settings."""

    def test_log_level_normalised(self, monkeypatch):
        """Test log levels are upper-cased."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert AppSettings().log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        """Test unsupported log levels are rejected."""
        with pytest.raises(ValueError, match="Unsupported log level"):
            AppSettings(log_level="LOUD")

    def test_storage_backend_choices(self):
        """Test only known backends are accepted."""
        assert AppSettings(storage_backend="memory").storage_backend == "memory"
        with pytest.raises(ValueError):
            AppSettings(storage_backend="postgres")


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_memory_backend_needs_no_google_settings(self, monkeypatch):
        """Test the memory backend skips the Google Sheets check."""
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        results = validate_all_settings()
        assert results == {"ledger": True, "app": True}

    def test_missing_google_settings_reported(self):
        """Test missing spreadsheet configuration is reported, not raised."""
        results = validate_all_settings()
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results
