"""
Form Input Validation

DESIGN DECISION: Every form goes through the same parsing rules before any
computation or storage call:

- Amounts must be numbers. Malformed input is REJECTED, never coerced to
  zero. This applies to every tracker (loan, snapshots), so the same typo
  gets the same answer everywhere.
- Blank amounts are rejected too; a zero balance must be entered as 0.
- Dates must be present and ISO formatted (YYYY-MM-DD) when given as text.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the UI can show them next to the form.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from household.config import get_settings
from household.models.validation import ValidationIssue, ValidationResult


class InputValidationError(ValueError):
    """Raised when a caller asks for validated values from an invalid form."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(issue.message for issue in result.issues if issue.severity == "error")
        super().__init__(f"Invalid {result.form.replace('_', ' ')}: {messages}")


class FormValidator:
    """
    Validates raw form input for the three trackers.

    Each validate_* method returns a ValidationResult. On success,
    result.values holds the parsed values ready for the orchestrator.
    """

    def __init__(
        self,
        areas: Optional[Sequence[str]] = None,
        tasks: Optional[Sequence[str]] = None,
    ):
        """
        Initialize validator.

        Args:
            areas: Allowed chore areas. Defaults to configured areas.
            tasks: Allowed chore tasks. Defaults to configured tasks.
        """
        settings = get_settings()
        self._settings = settings.app
        chores = settings.chores
        self._areas = list(areas) if areas is not None else chores.areas_list
        self._tasks = list(tasks) if tasks is not None else chores.tasks_list

    # -------------------------------------------------------------------------
    # Field parsers
    # -------------------------------------------------------------------------

    def _parse_amount(
        self,
        raw: Any,
        field: str,
        label: str,
        allow_zero: bool,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        """Parse a money amount, appending an issue and returning None on failure."""
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
                suggested_fix="Enter 0 if there is nothing to record" if allow_zero else None,
            ))
            return None

        if isinstance(raw, bool):
            raw = str(raw)

        text = raw.strip().replace(",", "").lstrip("$") if isinstance(raw, str) else str(raw)
        try:
            amount = Decimal(text)
        except InvalidOperation:
            amount = None

        if amount is None or not amount.is_finite():
            issues.append(ValidationIssue(
                field=field,
                issue_type="not_a_number",
                message=f"{label} must be a number (got {raw!r})",
                suggested_fix="Use digits only, e.g. 1250.50",
            ))
            return None

        if amount < 0 or (amount == 0 and not allow_zero):
            issues.append(ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message=(
                    f"{label} cannot be negative" if amount < 0
                    else f"{label} must be greater than zero"
                ),
            ))
            return None

        if amount > self._settings.max_amount_dollars:
            issues.append(ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message=f"{label} (${amount:,.2f}) is larger than the allowed maximum",
                suggested_fix="Check for an extra digit",
            ))
            return None

        return amount

    def _parse_date(
        self,
        raw: Any,
        field: str,
        label: str,
        issues: list[ValidationIssue],
    ) -> Optional[date]:
        """Parse a date from a date object or ISO text."""
        if isinstance(raw, datetime):
            return raw.date()
        if isinstance(raw, date):
            return raw

        if raw is None or (isinstance(raw, str) and not raw.strip()):
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            ))
            return None

        try:
            return date.fromisoformat(str(raw).strip())
        except ValueError:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{label} is not a valid date (got {raw!r})",
                suggested_fix="Use the YYYY-MM-DD format",
            ))
            return None

    def _parse_notes(
        self,
        raw: Optional[str],
        issues: list[ValidationIssue],
    ) -> Optional[str]:
        notes = (raw or "").strip()
        if len(notes) > self._settings.max_notes_length:
            issues.append(ValidationIssue(
                field="notes",
                issue_type="too_long",
                message=f"Notes must be at most {self._settings.max_notes_length} characters",
            ))
            return None
        return notes or None

    # -------------------------------------------------------------------------
    # Forms
    # -------------------------------------------------------------------------

    def validate_extra_payment(
        self,
        amount: Any,
        payment_date: Any,
        last_payment_date: Optional[date] = None,
        accrual_start: Optional[date] = None,
    ) -> ValidationResult:
        """
        Validate the extra payment form.

        Args:
            amount: Raw amount input
            payment_date: Raw date input
            last_payment_date: Date of the latest cleared payment, if any.
                An extra payment cannot be dated before it.
            accrual_start: Start of the loan's first payment period. Bounds
                the date when no payment has been recorded yet.
        """
        issues: list[ValidationIssue] = []

        parsed_amount = self._parse_amount(amount, "amount", "Payment amount", False, issues)
        parsed_date = self._parse_date(payment_date, "payment_date", "Payment date", issues)

        if parsed_date and last_payment_date and parsed_date < last_payment_date:
            issues.append(ValidationIssue(
                field="payment_date",
                issue_type="before_last_payment",
                message=(
                    f"Payment date ({parsed_date}) is before the last recorded "
                    f"payment ({last_payment_date})"
                ),
                suggested_fix="Delete the later payment first, or pick a later date",
            ))
        elif parsed_date and accrual_start and parsed_date < accrual_start:
            issues.append(ValidationIssue(
                field="payment_date",
                issue_type="before_loan_start",
                message=(
                    f"Payment date ({parsed_date}) is before the loan's first "
                    f"payment period ({accrual_start})"
                ),
                suggested_fix=f"Pick a date on or after {accrual_start}",
            ))

        if parsed_date and parsed_date > date.today():
            issues.append(ValidationIssue(
                field="payment_date",
                issue_type="future_date",
                message=f"Payment date ({parsed_date}) is in the future",
                severity="warning",
            ))

        return self._result(
            "extra_payment",
            issues,
            amount=parsed_amount,
            payment_date=parsed_date,
        )

    def validate_snapshot(
        self,
        week_of: Any,
        savings: Any,
        credit_card: Any,
        notes: Optional[str] = None,
    ) -> ValidationResult:
        """Validate the weekly balances form. Amounts are returned as Decimal dollars."""
        issues: list[ValidationIssue] = []

        parsed_week = self._parse_date(week_of, "week_of", "Week", issues)
        parsed_savings = self._parse_amount(savings, "savings", "Savings balance", True, issues)
        parsed_credit = self._parse_amount(
            credit_card, "credit_card", "Credit card balance", True, issues
        )
        parsed_notes = self._parse_notes(notes, issues)

        return self._result(
            "snapshot",
            issues,
            week_of=parsed_week,
            savings=parsed_savings,
            credit_card=parsed_credit,
            notes=parsed_notes,
        )

    def validate_chore(
        self,
        area: Optional[str],
        task: Optional[str],
        notes: Optional[str] = None,
    ) -> ValidationResult:
        """Validate the mark-complete form."""
        issues: list[ValidationIssue] = []

        area = (area or "").strip()
        task = (task or "").strip()

        for field, value, allowed in (
            ("area", area, self._areas),
            ("task", task, self._tasks),
        ):
            if not value:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message="Please select both area and task",
                ))
            elif value not in allowed:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="unknown_value",
                    message=f"Unknown {field}: {value}",
                    suggested_fix=f"Choose one of: {', '.join(allowed)}",
                ))

        parsed_notes = self._parse_notes(notes, issues)

        return self._result("chore", issues, area=area, task=task, notes=parsed_notes)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _result(form: str, issues: list[ValidationIssue], **values: Any) -> ValidationResult:
        has_errors = any(issue.severity == "error" for issue in issues)
        return ValidationResult(
            form=form,
            issues=issues,
            values={} if has_errors else values,
        )

    @staticmethod
    def require_valid(result: ValidationResult) -> dict[str, Any]:
        """Return the parsed values, or raise InputValidationError."""
        if result.has_errors:
            raise InputValidationError(result)
        return result.values

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what we show next to the form.
        """
        if result.is_valid and not result.warnings:
            return "✅ All good."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please double-check:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
