"""Tests for settings loaded from the environment."""

from datetime import date
from decimal import Decimal

from household.config.settings import ChoreSettings, LoanSettings, validate_all_settings


class TestLoanSettings:
    """Tests for loan terms configuration."""

    def test_defaults(self):
        """Test the default loan terms."""
        terms = LoanSettings().to_terms()

        assert terms.principal == Decimal("22000")
        assert terms.annual_rate == Decimal("0.05")
        assert terms.payment_amount == Decimal("275")
        assert terms.period_days == 14
        assert terms.start_date == date(2026, 3, 6)

    def test_env_override(self, monkeypatch):
        """Test that LOAN_* variables override the defaults."""
        monkeypatch.setenv("LOAN_PAYMENT_AMOUNT", "300")
        monkeypatch.setenv("LOAN_START_DATE", "2026-04-03")

        terms = LoanSettings().to_terms()
        assert terms.payment_amount == Decimal("300")
        assert terms.start_date == date(2026, 4, 3)


class TestChoreSettings:
    """Tests for chore list configuration."""

    def test_comma_separated_lists(self, monkeypatch):
        """Test list parsing trims blanks."""
        monkeypatch.setenv("CHORES_AREAS", " Kitchen, Garage ,,")
        settings = ChoreSettings()
        assert settings.areas_list == ["Kitchen", "Garage"]


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_missing_sheets_config_reported(self, monkeypatch):
        """Test that missing Google Sheets settings are reported, not raised."""
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        monkeypatch.chdir("/")

        status = validate_all_settings()

        assert status["loan"] is True
        assert status["google_sheets"] is False
        assert "google_sheets_error" in status
