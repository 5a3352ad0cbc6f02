"""
Tests for Household Tracker models

Test strategy:
1. Unit tests for individual components (models, validators, engine)
2. Integration tests for flows (with in-memory storage)
3. No real API calls in tests
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from household.models.loan import (
    ClearedPayment,
    LoanState,
    LoanTerms,
    PaymentStatus,
    to_cents,
)
from household.models.chore import ChoreCompletion, ChorePriority
from household.models.snapshot import WeeklySnapshot
from household.models.validation import ValidationIssue, ValidationResult
from household.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestLoanModels:
    """Tests for loan-related Pydantic models."""

    def test_loan_terms_rates(self, terms):
        """Test the per-period and per-day rates."""
        assert terms.periodic_rate == Decimal("0.05") / 26
        assert terms.daily_rate == Decimal("0.05") / 365
        assert terms.period.days == 14

    def test_loan_terms_rejects_zero_principal(self):
        """Test that the principal must be positive."""
        with pytest.raises(ValueError):
            LoanTerms(
                principal=Decimal("0"),
                annual_rate=Decimal("0.05"),
                payment_amount=Decimal("275"),
                start_date=date(2026, 3, 6),
            )

    def test_to_cents_rounds_half_up(self):
        """Test money rounding."""
        assert to_cents(Decimal("29.815")) == Decimal("29.82")
        assert to_cents(Decimal("21767.3076923")) == Decimal("21767.31")

    def test_cleared_payment_defaults(self):
        """Test ClearedPayment defaults to pending."""
        payment = ClearedPayment(
            payment_date=date(2026, 3, 6),
            amount_paid=Decimal("275.00"),
            principal_portion=Decimal("232.69"),
            interest_portion=Decimal("42.31"),
            remaining_balance=Decimal("21767.31"),
        )
        assert payment.status == PaymentStatus.PENDING
        assert payment.id is not None

    def test_cleared_payment_portions_must_add_up(self):
        """Test that amount paid must equal principal plus interest."""
        with pytest.raises(ValueError, match="principal portion plus interest portion"):
            ClearedPayment(
                payment_date=date(2026, 3, 6),
                amount_paid=Decimal("300.00"),
                principal_portion=Decimal("232.69"),
                interest_portion=Decimal("42.31"),
                remaining_balance=Decimal("21767.31"),
            )

    def test_cleared_payment_rejects_negative_balance(self):
        """Test that the remaining balance cannot go negative."""
        with pytest.raises(ValueError):
            ClearedPayment(
                payment_date=date(2026, 3, 6),
                amount_paid=Decimal("275.00"),
                principal_portion=Decimal("232.69"),
                interest_portion=Decimal("42.31"),
                remaining_balance=Decimal("-1"),
            )

    def test_naive_created_at_becomes_utc(self):
        """Test that naive and aware ledger timestamps can be compared."""
        naive = ClearedPayment(
            payment_date=date(2026, 3, 6),
            amount_paid=Decimal("275.00"),
            principal_portion=Decimal("232.69"),
            interest_portion=Decimal("42.31"),
            remaining_balance=Decimal("21767.31"),
            created_at=datetime(2026, 3, 6, 9, 0),
        )
        fresh = naive.model_copy(update={"created_at": datetime.now(timezone.utc)})

        assert naive.created_at.tzinfo == timezone.utc
        assert fresh.created_at > naive.created_at

    def test_loan_state_paid_off(self):
        """Test is_paid_off property."""
        state = LoanState(
            remaining_balance=Decimal("0"),
            total_interest_paid=Decimal("2000"),
            total_principal_paid=Decimal("22000"),
            last_payment_date=date(2029, 6, 1),
            next_payment_date=date(2029, 6, 15),
            payment_count=90,
        )
        assert state.is_paid_off is True


class TestChoreModels:
    """Tests for chore models."""

    def test_naive_completed_at_becomes_utc(self):
        """Test that naive timestamps are taken as UTC."""
        completion = ChoreCompletion(
            area="Kitchen",
            task="Mop",
            completed_at=datetime(2026, 4, 1, 9, 30),
        )
        assert completion.completed_at.tzinfo == timezone.utc

    def test_empty_notes_become_none(self):
        """Test that blank notes are stored as None."""
        completion = ChoreCompletion(area="Kitchen", task="Mop", notes="   ")
        assert completion.notes is None

    def test_area_is_required(self):
        """Test that area cannot be empty."""
        with pytest.raises(ValueError):
            ChoreCompletion(area="", task="Mop")

    def test_priority_label(self):
        """Test ChorePriority helpers."""
        priority = ChorePriority(area="Kitchen", task="Mop")
        assert priority.label == "Kitchen - Mop"
        assert priority.never_done is True


class TestSnapshotModels:
    """Tests for weekly snapshot model."""

    def test_net_worth_is_savings_minus_credit_card(self):
        """Test net worth ignores checking."""
        snapshot = WeeklySnapshot(
            week_of=date(2026, 4, 6),
            checking_cents=99900,
            savings_cents=125050,
            credit_card_cents=34015,
        )
        assert snapshot.net_worth_cents == 91035

    def test_negative_balances_rejected(self):
        """Test that balances cannot be negative."""
        with pytest.raises(ValueError):
            WeeklySnapshot(week_of=date(2026, 4, 6), savings_cents=-1)

    def test_created_at_is_utc(self):
        """Test that snapshots are stamped with an aware UTC time."""
        assert WeeklySnapshot(week_of=date(2026, 4, 6)).created_at.tzinfo == timezone.utc
        naive = WeeklySnapshot(week_of=date(2026, 4, 6), created_at=datetime(2026, 4, 6, 8, 0))
        assert naive.created_at.tzinfo == timezone.utc


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.PAYMENT_CLEARED,
            description="Payment cleared",
        )
        assert event.event_type == AuditEventType.PAYMENT_CLEARED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.SNAPSHOT_SAVED,
            description="Snapshot saved",
            details={"week_of": "2026-04-06", "net_worth": "910.35"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "snapshot_saved"
        assert log_dict["details"]["net_worth"] == "910.35"

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.CHORE_COMPLETED,
            description="Chore completed",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 11
        assert row[2] == "chore_completed"
        assert row[10] == "True"

    def test_audit_event_builder_extra_payment(self):
        """Test AuditEventBuilder.extra_payment_recorded."""
        payment_id = uuid4()
        correlation_id = uuid4()

        event = AuditEventBuilder.extra_payment_recorded(
            payment_id=payment_id,
            payment_date="2026-03-16",
            amount="500.00",
            interest="29.82",
            principal="470.18",
            remaining_balance="21297.13",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.EXTRA_PAYMENT_RECORDED
        assert event.entity_id == payment_id
        assert event.correlation_id == correlation_id
        assert event.details["interest"] == "29.82"
        assert event.is_user_action is True

    def test_audit_event_builder_entity_deleted(self):
        """Test AuditEventBuilder.entity_deleted."""
        snapshot_id = uuid4()

        event = AuditEventBuilder.entity_deleted(
            event_type=AuditEventType.SNAPSHOT_DELETED,
            entity_type="snapshot",
            entity_id=snapshot_id,
            correlation_id=uuid4(),
        )

        assert event.event_type == AuditEventType.SNAPSHOT_DELETED
        assert event.entity_type == "snapshot"
        assert event.entity_id == snapshot_id


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            form="extra_payment",
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Payment amount is required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.is_valid is False
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            form="extra_payment",
            issues=[
                ValidationIssue(
                    field="payment_date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0
        assert result.warnings == ["Date in future"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
