"""Configuration package."""

from household.config.settings import (
    AppSettings,
    ChoreSettings,
    GoogleSheetsSettings,
    LoanSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ChoreSettings",
    "GoogleSheetsSettings",
    "LoanSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
