"""
Configuration Management for Rentbook

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here, including the
partner list. Nothing in the calculation or storage code reads the
environment directly; components receive the settings objects they need.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rentbook.models.partner import DEFAULT_PARTNERS, Partner, PartnerConfig


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the spreadsheet holding the ledger"
    )

    # One worksheet per logical table
    incomes_sheet_name: str = Field(
        default="incomes",
        description="Worksheet holding income entries"
    )
    expenses_sheet_name: str = Field(
        default="expenses",
        description="Worksheet holding expenses"
    )
    withdrawals_sheet_name: str = Field(
        default="withdrawals",
        description="Worksheet holding partner withdrawals"
    )

    read_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for read calls before giving up"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class LedgerSettings(BaseSettings):
    """
    Business configuration: partners and display currency.

    LEDGER_PARTNERS takes a JSON list, e.g.
    [{"id": "1", "name": "Desmond", "share_percentage": 50}, ...]
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    partners: list[Partner] = Field(
        default_factory=lambda: list(DEFAULT_PARTNERS.partners),
        description="Partners and their profit shares (must sum to 100)"
    )
    manager_label: str = Field(
        default="Manager",
        description="Label for the commission recipient"
    )
    currency_code: str = Field(
        default="NGN",
        min_length=3,
        max_length=3,
        description="ISO currency code"
    )
    currency_symbol: str = Field(
        default="₦",
        description="Symbol used when formatting amounts"
    )

    @field_validator('partners')
    @classmethod
    def validate_partners(cls, v: list[Partner]) -> list[Partner]:
        """Shares must sum to 100 and names must be unique."""
        PartnerConfig(partners=v)
        return v

    @property
    def partner_config(self) -> PartnerConfig:
        """Partner set for the calculator and validator."""
        return PartnerConfig(partners=self.partners, manager_label=self.manager_label)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="json",
        description="Log renderer"
    )

    # Storage
    storage_backend: Literal["google_sheets", "memory"] = Field(
        default="google_sheets",
        description="Where records are persisted"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the memory backend runs
    # without Google credentials

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries describing failures. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    sections = {
        "ledger": lambda: settings.ledger,
        "app": lambda: settings.app,
    }
    try:
        needs_sheets = settings.app.storage_backend == "google_sheets"
    except Exception:
        # Reported under "app" below
        needs_sheets = True
    if needs_sheets:
        sections["google_sheets"] = lambda: settings.google_sheets

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
