"""
Integration tests for the tracker flows.

Flows run against in-memory storage and an audit logger backed by an
in-memory audit store, so every persisted row and audit event can be
inspected.
"""

import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from household.audit import AuditLogger
from household.engine import PaymentBelowInterestError
from household.models.audit import AuditEventType
from household.models.chore import Freshness
from household.orchestrator import ChoreFlow, LoanFlow, SnapshotFlow, create_app_components
from household.services.storage import (
    InMemoryAuditStorage,
    InMemoryChoreStorage,
    InMemoryLoanPaymentStorage,
    InMemorySnapshotStorage,
    StorageError,
)
from household.validation import FormValidator, InputValidationError


class FailingLoanPaymentStorage(InMemoryLoanPaymentStorage):
    async def insert_payment(self, payment):
        raise StorageError("Failed to save loan payment: network down")


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def validator(areas, tasks):
    return FormValidator(areas=areas, tasks=tasks)


@pytest.fixture
def loan_flow(terms, validator, audit_logger):
    return LoanFlow(
        payment_storage=InMemoryLoanPaymentStorage(),
        terms=terms,
        upcoming_count=20,
        validator=validator,
        audit_logger=audit_logger,
    )


def event_types(audit_storage):
    return [e.event_type for e in audit_storage.events]


class TestLoanFlow:
    """Tests for the loan tracker flow."""

    def test_fresh_dashboard(self, loan_flow):
        """Test the dashboard of a loan with no payments."""
        dashboard = asyncio.run(loan_flow.load_dashboard())

        assert dashboard.state.remaining_balance == Decimal("22000")
        assert len(dashboard.upcoming) == 20
        assert dashboard.upcoming[0].payment_date == date(2026, 3, 6)
        assert dashboard.next_payment_amount == Decimal("275")
        assert dashboard.payoff.schedule[-1].balance == 0
        assert dashboard.projection_error is None
        assert len(dashboard.chart) == 1

    def test_mark_cleared_then_reload(self, loan_flow, audit_storage):
        """Test that clearing a payment moves the schedule forward."""
        dashboard = asyncio.run(loan_flow.load_dashboard())
        asyncio.run(loan_flow.mark_cleared(dashboard.upcoming[0]))

        dashboard = asyncio.run(loan_flow.load_dashboard())
        assert dashboard.state.remaining_balance == Decimal("21767.31")
        assert dashboard.upcoming[0].payment_date == date(2026, 3, 20)
        assert len(dashboard.ledger) == 1
        assert len(dashboard.chart) == 2
        assert event_types(audit_storage) == [AuditEventType.PAYMENT_CLEARED]

    def test_extra_payment(self, loan_flow, audit_storage):
        """Test an extra payment ten days after the first cleared payment."""
        dashboard = asyncio.run(loan_flow.load_dashboard())
        asyncio.run(loan_flow.mark_cleared(dashboard.upcoming[0]))

        row = asyncio.run(loan_flow.record_extra_payment("500", "2026-03-16"))

        assert row.interest_portion == Decimal("29.82")
        assert row.principal_portion == Decimal("470.18")
        assert row.remaining_balance == Decimal("21297.13")

        dashboard = asyncio.run(loan_flow.load_dashboard())
        assert dashboard.state.remaining_balance == Decimal("21297.13")
        assert dashboard.upcoming[0].payment_date == date(2026, 3, 30)
        assert event_types(audit_storage)[-1] == AuditEventType.EXTRA_PAYMENT_RECORDED

    def test_extra_payment_invalid_input(self, loan_flow, audit_storage):
        """Test that bad input is audited and nothing is saved."""
        with pytest.raises(InputValidationError):
            asyncio.run(loan_flow.record_extra_payment("abc", "2026-03-16"))

        assert asyncio.run(loan_flow.load_ledger()) == []
        assert event_types(audit_storage) == [AuditEventType.VALIDATION_FAILED]

    def test_extra_payment_below_interest(self, loan_flow, audit_storage):
        """Test that an amount below accrued interest is rejected and audited."""
        with pytest.raises(PaymentBelowInterestError):
            asyncio.run(loan_flow.record_extra_payment("1", "2026-03-06"))

        assert asyncio.run(loan_flow.load_ledger()) == []
        assert event_types(audit_storage) == [AuditEventType.COMPUTATION_REJECTED]

    def test_extra_payment_before_last_payment(self, loan_flow):
        """Test that back-dated extra payments are rejected by validation."""
        dashboard = asyncio.run(loan_flow.load_dashboard())
        asyncio.run(loan_flow.mark_cleared(dashboard.upcoming[0]))

        with pytest.raises(InputValidationError):
            asyncio.run(loan_flow.record_extra_payment("100", "2026-03-01"))

    def test_extra_payment_before_loan_start(self, loan_flow, audit_storage):
        """Test that a fresh loan rejects a date before its first period as bad input."""
        with pytest.raises(InputValidationError) as exc_info:
            asyncio.run(loan_flow.record_extra_payment("500", "2026-01-01"))

        assert exc_info.value.result.issues[0].issue_type == "before_loan_start"
        assert asyncio.run(loan_flow.load_ledger()) == []
        assert event_types(audit_storage) == [AuditEventType.VALIDATION_FAILED]

    def test_overpayment_pays_off_loan(self, loan_flow, audit_storage):
        """Test that an extra payment above the balance closes the loan."""
        dashboard = asyncio.run(loan_flow.load_dashboard())
        asyncio.run(loan_flow.mark_cleared(dashboard.upcoming[0]))

        row = asyncio.run(loan_flow.record_extra_payment("30000", "2026-03-16"))
        assert row.remaining_balance == Decimal("0")
        assert row.amount_paid < Decimal("30000")

        balances = [p.remaining_balance for p in asyncio.run(loan_flow.load_ledger())]
        assert balances == sorted(balances, reverse=True)
        assert balances[-1] == Decimal("0")

        dashboard = asyncio.run(loan_flow.load_dashboard())
        assert dashboard.state.is_paid_off
        assert dashboard.upcoming == []
        assert dashboard.payoff.payoff_date is None
        assert dashboard.projection_error is None
        assert event_types(audit_storage) == [
            AuditEventType.PAYMENT_CLEARED,
            AuditEventType.EXTRA_PAYMENT_RECORDED,
        ]

    def test_dashboard_carries_loan_name(self, terms, validator):
        """Test that the configured loan name reaches the dashboard."""
        flow = LoanFlow(
            payment_storage=InMemoryLoanPaymentStorage(),
            terms=terms,
            name="Car Loan",
            validator=validator,
        )
        assert asyncio.run(flow.load_dashboard()).name == "Car Loan"

    def test_delete_payment(self, loan_flow, audit_storage):
        """Test that deleting the last row rolls the state back."""
        dashboard = asyncio.run(loan_flow.load_dashboard())
        row = asyncio.run(loan_flow.mark_cleared(dashboard.upcoming[0]))

        assert asyncio.run(loan_flow.delete_payment(row.id)) is True
        dashboard = asyncio.run(loan_flow.load_dashboard())
        assert dashboard.state.remaining_balance == Decimal("22000")
        assert event_types(audit_storage)[-1] == AuditEventType.PAYMENT_DELETED

    def test_projection_error_does_not_fail_dashboard(self, terms, validator):
        """Test that payment below interest is reported on the dashboard."""
        flow = LoanFlow(
            payment_storage=InMemoryLoanPaymentStorage(),
            terms=terms.model_copy(update={"payment_amount": Decimal("40")}),
            validator=validator,
        )
        dashboard = asyncio.run(flow.load_dashboard())

        assert dashboard.upcoming == []
        assert dashboard.payoff is None
        assert "does not cover" in dashboard.projection_error

    def test_storage_error_reraised_and_audited(self, terms, validator, audit_logger, audit_storage):
        """Test that a failed write surfaces and is logged."""
        flow = LoanFlow(
            payment_storage=FailingLoanPaymentStorage(),
            terms=terms,
            validator=validator,
            audit_logger=audit_logger,
        )
        dashboard = asyncio.run(flow.load_dashboard())

        with pytest.raises(StorageError):
            asyncio.run(flow.mark_cleared(dashboard.upcoming[0]))

        assert event_types(audit_storage) == [AuditEventType.STORAGE_ERROR]


class TestSnapshotFlow:
    """Tests for the weekly balances flow."""

    def test_save_and_chart(self, validator, audit_logger, audit_storage):
        """Test saving a week and reading the chart back."""
        flow = SnapshotFlow(InMemorySnapshotStorage(), validator, audit_logger)

        saved = asyncio.run(flow.save_snapshot("2026-04-06", "$1,250.50", "340.15", "payday"))
        snapshots, series = asyncio.run(flow.load_chart())

        assert saved.savings_cents == 125050
        assert saved.credit_card_cents == 34015
        assert len(snapshots) == 1
        assert series[0].net_worth == Decimal("910.35")
        assert audit_storage.events[0].details["net_worth"] == "910.35"

    def test_same_week_replaced(self, validator):
        """Test that a second save for the same week replaces the first."""
        flow = SnapshotFlow(InMemorySnapshotStorage(), validator)

        asyncio.run(flow.save_snapshot(date(2026, 4, 6), "100", "0"))
        asyncio.run(flow.save_snapshot(date(2026, 4, 6), "200", "0"))

        snapshots = asyncio.run(flow.load_snapshots())
        assert len(snapshots) == 1
        assert snapshots[0].savings_cents == 20000

    def test_invalid_input_rejected(self, validator):
        """Test that malformed amounts are not coerced to zero."""
        flow = SnapshotFlow(InMemorySnapshotStorage(), validator)

        with pytest.raises(InputValidationError):
            asyncio.run(flow.save_snapshot(date(2026, 4, 6), "lots", "0"))
        assert asyncio.run(flow.load_snapshots()) == []

    def test_delete(self, validator):
        """Test deleting a week."""
        flow = SnapshotFlow(InMemorySnapshotStorage(), validator)
        saved = asyncio.run(flow.save_snapshot(date(2026, 4, 6), "100", "0"))

        assert asyncio.run(flow.delete_snapshot(saved.id)) is True
        assert asyncio.run(flow.load_snapshots()) == []


class TestChoreFlow:
    """Tests for the chores flow."""

    def test_mark_complete_updates_board(self, areas, tasks, validator, audit_logger, audit_storage, now):
        """Test that a completion shows up in the grid and recent activity."""
        flow = ChoreFlow(InMemoryChoreStorage(), areas, tasks, validator, audit_logger)

        asyncio.run(flow.mark_complete(
            "Kitchen", "Mop", completed_at=now - timedelta(days=1)
        ))
        board = asyncio.run(flow.load_board(now))

        assert board.grid[0][0].freshness == Freshness.RECENT
        assert board.recent[0].area == "Kitchen"
        assert board.priorities[0].never_done is True
        assert [p.label for p in board.priorities][-1] == "Kitchen - Mop"
        assert event_types(audit_storage) == [AuditEventType.CHORE_COMPLETED]

    def test_missing_selection_rejected(self, areas, tasks, validator):
        """Test that area and task must both be chosen."""
        flow = ChoreFlow(InMemoryChoreStorage(), areas, tasks, validator)

        with pytest.raises(InputValidationError, match="Please select both area and task"):
            asyncio.run(flow.mark_complete("Kitchen", None))

    def test_delete(self, areas, tasks, validator, now):
        """Test deleting a completion."""
        flow = ChoreFlow(InMemoryChoreStorage(), areas, tasks, validator)
        completion = asyncio.run(flow.mark_complete("Kitchen", "Mop"))

        assert asyncio.run(flow.delete_completion(completion.id)) is True
        board = asyncio.run(flow.load_board(now))
        assert board.recent == []


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_in_memory_components(self):
        """Test that the factory runs without storage configured."""
        loan_flow, snapshot_flow, chore_flow, sheets_client = create_app_components(
            use_storage=False
        )

        assert sheets_client is None
        dashboard = asyncio.run(loan_flow.load_dashboard())
        assert dashboard.state.remaining_balance == Decimal("22000")
