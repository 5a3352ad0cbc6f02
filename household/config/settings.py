"""
Configuration Management for Household Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here, including the
loan terms. The loan is a single fixed agreement, but keeping its numbers
out of the code means a new loan is an .env change, not a code change.
"""

from datetime import date
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from household.models.loan import LoanTerms


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
        description="ID of the Google Sheets spreadsheet to use"
    )

    # One worksheet per table
    loan_payments_sheet_name: str = Field(
        default="LoanPayments",
        description="Name of the sheet for the loan payment ledger"
    )
    snapshots_sheet_name: str = Field(
        default="Snapshots",
        description="Name of the sheet for weekly balance snapshots"
    )
    chores_sheet_name: str = Field(
        default="ChoreCompletions",
        description="Name of the sheet for chore completions"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
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


class LoanSettings(BaseSettings):
    """Terms of the tracked loan and projection limits."""

    model_config = SettingsConfigDict(
        env_prefix="LOAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    name: str = Field(
        default="O'Meara Loan",
        description="Display name of the loan"
    )
    principal: Decimal = Field(
        default=Decimal("22000"),
        gt=0,
        description="Initial balance"
    )
    annual_rate: Decimal = Field(
        default=Decimal("0.05"),
        ge=0,
        lt=1,
        description="Nominal annual interest rate (0.05 = 5%)"
    )
    payment_amount: Decimal = Field(
        default=Decimal("275"),
        gt=0,
        description="Fixed scheduled payment per period"
    )
    period_days: int = Field(
        default=14,
        ge=1,
        description="Days between scheduled payments"
    )
    start_date: date = Field(
        default=date(2026, 3, 6),
        description="Date of the first scheduled payment"
    )

    # View limits
    upcoming_count: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Number of upcoming payments to list"
    )
    max_projection_periods: int = Field(
        default=1000,
        ge=1,
        description="Iteration guard for the payoff projection"
    )

    def to_terms(self) -> LoanTerms:
        """Build the immutable loan terms used by the engine."""
        return LoanTerms(
            principal=self.principal,
            annual_rate=self.annual_rate,
            payment_amount=self.payment_amount,
            period_days=self.period_days,
            start_date=self.start_date,
        )


class ChoreSettings(BaseSettings):
    """Chores tracker configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHORES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    areas: str = Field(
        default="Kitchen,Dining,Living,Bathrooms,Bedrooms",
        description="Comma-separated list of household areas"
    )
    tasks: str = Field(
        default="Mop,Vacuum,Counters,Baseboards,Cabinets",
        description="Comma-separated list of chore tasks"
    )
    priority_count: int = Field(
        default=5,
        ge=1,
        description="How many priority chores to show"
    )
    recent_days: int = Field(
        default=7,
        ge=1,
        description="A chore done within this many days counts as recent"
    )
    recent_activity_limit: int = Field(
        default=20,
        ge=1,
        description="How many completions to list under recent activity"
    )

    @property
    def areas_list(self) -> list[str]:
        """Get areas as a list."""
        return [a.strip() for a in self.areas.split(",") if a.strip()]

    @property
    def tasks_list(self) -> list[str]:
        """Get tasks as a list."""
        return [t.strip() for t in self.tasks.split(",") if t.strip()]


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

    log_level: str = Field(
        default="INFO",
        description="Minimum level for local structured logs"
    )

    # Sanity limits for form input
    max_amount_dollars: Decimal = Field(
        default=Decimal("10000000"),
        gt=0,
        description="Largest amount accepted in any form field"
    )
    max_notes_length: int = Field(
        default=500,
        ge=1,
        description="Maximum length of free-text notes"
    )


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def loan(self) -> LoanSettings:
        return LoanSettings()

    @property
    def chores(self) -> ChoreSettings:
        return ChoreSettings()

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

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    sections = {
        "google_sheets": lambda: settings.google_sheets,
        "loan": lambda: settings.loan,
        "chores": lambda: settings.chores,
        "app": lambda: settings.app,
    }

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
