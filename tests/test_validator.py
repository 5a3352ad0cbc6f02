"""Tests for form input validation."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from household.validation import FormValidator, InputValidationError


@pytest.fixture
def validator(areas, tasks):
    return FormValidator(areas=areas, tasks=tasks)


class TestExtraPaymentForm:
    """Tests for the extra payment form."""

    def test_valid_input(self, validator):
        """Test that dollar formatting is accepted."""
        result = validator.validate_extra_payment("$1,250.50", "2026-03-16")

        assert result.is_valid
        assert result.values["amount"] == Decimal("1250.50")
        assert result.values["payment_date"] == date(2026, 3, 16)

    @pytest.mark.parametrize("amount, issue_type", [
        ("", "missing"),
        (None, "missing"),
        ("abc", "not_a_number"),
        ("0", "out_of_range"),
        ("-20", "out_of_range"),
        ("99999999999", "out_of_range"),
    ])
    def test_bad_amount_rejected(self, validator, amount, issue_type):
        """Test that malformed amounts are rejected, never coerced."""
        result = validator.validate_extra_payment(amount, date(2026, 3, 16))

        assert result.has_errors
        assert result.issues[0].field == "amount"
        assert result.issues[0].issue_type == issue_type
        assert result.values == {}

    def test_bad_date_rejected(self, validator):
        """Test that an unparseable date is rejected."""
        result = validator.validate_extra_payment("100", "16/03/2026")
        assert result.has_errors
        assert result.issues[0].issue_type == "invalid_format"

    def test_date_before_last_payment(self, validator):
        """Test that a payment cannot be dated before the last ledger row."""
        result = validator.validate_extra_payment(
            "100", date(2026, 3, 1), last_payment_date=date(2026, 3, 6)
        )
        assert result.has_errors
        assert result.issues[0].issue_type == "before_last_payment"

    def test_date_before_loan_start(self, validator):
        """Test that a payment on a fresh loan cannot predate its first period."""
        result = validator.validate_extra_payment(
            "500", "2026-01-01", accrual_start=date(2026, 2, 20)
        )
        assert result.has_errors
        assert result.issues[0].field == "payment_date"
        assert result.issues[0].issue_type == "before_loan_start"
        assert result.values == {}

    def test_date_on_loan_start_allowed(self, validator):
        """Test that the first period's start date itself is accepted."""
        result = validator.validate_extra_payment(
            "500", date(2026, 2, 20), accrual_start=date(2026, 2, 20)
        )
        assert result.is_valid

    def test_future_date_is_warning(self, validator):
        """Test that a future date warns but does not block."""
        result = validator.validate_extra_payment("100", date.today() + timedelta(days=3))

        assert result.is_valid
        assert len(result.warnings) == 1


class TestSnapshotForm:
    """Tests for the weekly balances form."""

    def test_zero_balance_allowed(self, validator):
        """Test that a zero credit card balance is fine."""
        result = validator.validate_snapshot("2026-04-06", "1,250.50", "0", "  payday ")

        assert result.is_valid
        assert result.values["savings"] == Decimal("1250.50")
        assert result.values["credit_card"] == Decimal("0")
        assert result.values["notes"] == "payday"

    def test_non_numeric_rejected(self, validator):
        """Test that malformed snapshot input is rejected like the loan form."""
        result = validator.validate_snapshot(date(2026, 4, 6), "lots", "")

        assert result.has_errors
        assert {i.field for i in result.issues} == {"savings", "credit_card"}

    def test_notes_too_long(self, validator):
        """Test the notes length limit."""
        result = validator.validate_snapshot(date(2026, 4, 6), "1", "1", "x" * 501)
        assert result.has_errors
        assert result.issues[0].issue_type == "too_long"


class TestChoreForm:
    """Tests for the mark-complete form."""

    def test_valid_chore(self, validator):
        """Test a known area and task."""
        result = validator.validate_chore("Kitchen", "Mop")
        assert result.is_valid
        assert result.values["area"] == "Kitchen"
        assert result.values["notes"] is None

    def test_missing_selection(self, validator):
        """Test that both area and task must be chosen."""
        result = validator.validate_chore("Kitchen", "")
        assert result.has_errors
        assert result.issues[0].message == "Please select both area and task"

    def test_unknown_value(self, validator):
        """Test that values outside the configured lists are rejected."""
        result = validator.validate_chore("Garage", "Mop")
        assert result.has_errors
        assert result.issues[0].issue_type == "unknown_value"


class TestRequireValid:
    """Tests for turning results into values or errors."""

    def test_raises_with_result(self, validator):
        """Test that the error carries the validation result."""
        result = validator.validate_chore(None, None)
        with pytest.raises(InputValidationError) as exc_info:
            validator.require_valid(result)
        assert exc_info.value.result is result

    def test_user_friendly_summary(self, validator):
        """Test the summary shown next to the form."""
        result = validator.validate_extra_payment("abc", date(2026, 3, 16))
        summary = validator.get_user_friendly_summary(result)

        assert "Please fix the following" in summary
        assert "must be a number" in summary
