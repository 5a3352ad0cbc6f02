"""
Main Orchestrator for Household Tracker

This module ties together storage, validation, the calculation engine and
audit logging, and defines one flow per tracker:
1. Loan (load dashboard, mark payment cleared, extra payment, delete)
2. Weekly snapshots (load chart, save week, delete)
3. Chores (load board, mark complete, delete)

DESIGN DECISION: Each user action is one sequential round trip:
validate -> compute -> persist -> audit. Nothing is applied to in-memory
state; the caller reloads afterwards and every derived value is recomputed
from storage. If the write fails, nothing changed and the error goes back
to the caller to show.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from household.audit import AuditLogger, create_correlation_id
from household.config import get_settings
from household.engine import (
    AmortizationError,
    balance_history,
    cents_to_dollars,
    dollars_to_cents,
    net_worth_series,
    project_payoff,
    project_upcoming,
    recent_activity,
    reconcile_current_state,
    record_cleared_payment,
    record_extra_payment,
    status_grid,
    top_priorities,
)
from household.models.audit import AuditEventType
from household.models.chore import ChoreCell, ChoreCompletion, ChorePriority
from household.models.loan import (
    ClearedPayment,
    LoanChartPoint,
    LoanState,
    LoanTerms,
    PaymentStatus,
    PayoffProjection,
    ScheduledPayment,
)
from household.models.snapshot import SnapshotChartPoint, WeeklySnapshot
from household.models.validation import ValidationResult
from household.services.storage import (
    ChoreStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsChoreStorage,
    GoogleSheetsClient,
    GoogleSheetsLoanPaymentStorage,
    GoogleSheetsSnapshotStorage,
    InMemoryChoreStorage,
    InMemoryLoanPaymentStorage,
    InMemorySnapshotStorage,
    LoanPaymentStorageInterface,
    SnapshotStorageInterface,
    StorageError,
)
from household.validation import FormValidator, InputValidationError


logger = structlog.get_logger(__name__)


class LoanDashboard(BaseModel):
    """Everything the loan page shows, derived from one ledger read."""

    name: str = Field(default="", description="Display name of the loan")
    terms: LoanTerms
    ledger: list[ClearedPayment] = Field(default_factory=list)
    state: LoanState
    upcoming: list[ScheduledPayment] = Field(default_factory=list)
    payoff: Optional[PayoffProjection] = None
    projection_error: Optional[str] = Field(
        default=None,
        description="Why no schedule could be projected (e.g., payment below interest)"
    )
    chart: list[LoanChartPoint] = Field(default_factory=list)

    @property
    def next_payment_amount(self) -> Decimal:
        return self.upcoming[0].amount if self.upcoming else Decimal("0")


class ChoreBoard(BaseModel):
    """Everything the chores page shows, derived from one read."""

    completions: list[ChoreCompletion] = Field(default_factory=list)
    priorities: list[ChorePriority] = Field(default_factory=list)
    grid: list[list[ChoreCell]] = Field(default_factory=list)
    recent: list[ChoreCompletion] = Field(default_factory=list)


class _Flow:
    """Shared plumbing: validation failures and storage errors are audited, then re-raised."""

    def __init__(
        self,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._validator = validator or FormValidator()
        self._audit_logger = audit_logger

    @property
    def validator(self) -> FormValidator:
        return self._validator

    async def _require_valid(
        self,
        result: ValidationResult,
        correlation_id: UUID,
    ) -> dict[str, Any]:
        if result.has_errors:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    form=result.form,
                    issues=[
                        {"field": i.field, "type": i.issue_type, "message": i.message}
                        for i in result.issues
                    ],
                    correlation_id=correlation_id,
                )
            raise InputValidationError(result)
        return result.values

    async def _storage_call(self, operation: str, call, correlation_id: Optional[UUID] = None):
        """Await a storage coroutine, auditing a StorageError before re-raising it."""
        try:
            return await call
        except StorageError as e:
            logger.error("storage_call_failed", operation=operation, error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation=operation,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise


class LoanFlow(_Flow):
    """
    Orchestrates the loan tracker.

    The cleared ledger in storage is the single source of truth. The
    dashboard, the upcoming schedule and the payoff estimate are recomputed
    from it on every load.
    """

    def __init__(
        self,
        payment_storage: LoanPaymentStorageInterface,
        terms: Optional[LoanTerms] = None,
        upcoming_count: Optional[int] = None,
        max_projection_periods: Optional[int] = None,
        name: Optional[str] = None,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(validator, audit_logger)
        loan_settings = get_settings().loan
        self._storage = payment_storage
        self._terms = terms or loan_settings.to_terms()
        self._upcoming_count = upcoming_count or loan_settings.upcoming_count
        self._max_periods = max_projection_periods or loan_settings.max_projection_periods
        self._name = name or loan_settings.name

    @property
    def terms(self) -> LoanTerms:
        return self._terms

    async def load_ledger(self) -> list[ClearedPayment]:
        """Fetch cleared payments, oldest first."""
        return await self._storage_call(
            "list_loan_payments",
            self._storage.list_payments(status=PaymentStatus.CLEARED),
        )

    async def load_dashboard(self) -> LoanDashboard:
        """
        Load the ledger and compute every derived view.

        Computation edge cases do not fail the page: they are reported in
        projection_error with an empty schedule.
        """
        ledger = await self.load_ledger()
        state = reconcile_current_state(ledger, self._terms)

        upcoming: list[ScheduledPayment] = []
        payoff = None
        projection_error = None
        try:
            upcoming = project_upcoming(ledger, self._terms, self._upcoming_count)
            payoff = project_payoff(ledger, self._terms, self._max_periods)
        except AmortizationError as e:
            projection_error = str(e)
            logger.warning("loan_projection_failed", error=projection_error)

        return LoanDashboard(
            name=self._name,
            terms=self._terms,
            ledger=ledger,
            state=state,
            upcoming=upcoming,
            payoff=payoff,
            projection_error=projection_error,
            chart=balance_history(ledger, self._terms),
        )

    async def mark_cleared(
        self,
        scheduled: ScheduledPayment,
        correlation_id: Optional[UUID] = None,
    ) -> ClearedPayment:
        """
        Record a scheduled payment as cleared.

        Append-only: no earlier row is touched. The schedule is rebuilt
        from the new ledger tail on the next load.
        """
        correlation_id = correlation_id or create_correlation_id()

        payment = record_cleared_payment(scheduled)
        payment = await self._storage_call(
            "insert_loan_payment",
            self._storage.insert_payment(payment),
            correlation_id,
        )

        if self._audit_logger:
            await self._audit_logger.log_payment_cleared(
                payment_id=payment.id,
                payment_date=payment.payment_date.isoformat(),
                amount=str(payment.amount_paid),
                remaining_balance=str(payment.remaining_balance),
                correlation_id=correlation_id,
            )

        return payment

    async def record_extra_payment(
        self,
        amount: Any,
        payment_date: Any,
        correlation_id: Optional[UUID] = None,
    ) -> ClearedPayment:
        """
        Validate and record an out-of-cycle payment.

        Raises:
            InputValidationError: Bad form input (nothing computed or saved)
            AmortizationError: Amount does not cover accrued interest, or loan paid off
            StorageError: The write failed (nothing saved)
        """
        correlation_id = correlation_id or create_correlation_id()

        ledger = await self.load_ledger()
        state = reconcile_current_state(ledger, self._terms)

        # On a fresh loan last_payment_date is the start of the first period,
        # not a recorded payment.
        last_real_payment = ledger[-1].payment_date if ledger else None
        values = await self._require_valid(
            self._validator.validate_extra_payment(
                amount,
                payment_date,
                last_payment_date=last_real_payment,
                accrual_start=state.last_payment_date,
            ),
            correlation_id,
        )

        try:
            payment = record_extra_payment(
                amount=values["amount"],
                payment_date=values["payment_date"],
                current_balance=state.remaining_balance,
                last_payment_date=state.last_payment_date,
                terms=self._terms,
            )
        except AmortizationError as e:
            if self._audit_logger:
                await self._audit_logger.log_computation_rejected(
                    operation="record_extra_payment",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        payment = await self._storage_call(
            "insert_loan_payment",
            self._storage.insert_payment(payment),
            correlation_id,
        )

        if self._audit_logger:
            await self._audit_logger.log_extra_payment(
                payment_id=payment.id,
                payment_date=payment.payment_date.isoformat(),
                amount=str(payment.amount_paid),
                interest=str(payment.interest_portion),
                principal=str(payment.principal_portion),
                remaining_balance=str(payment.remaining_balance),
                correlation_id=correlation_id,
            )

        return payment

    async def delete_payment(
        self,
        payment_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete a ledger row. Returns False if it was already gone."""
        correlation_id = correlation_id or create_correlation_id()

        deleted = await self._storage_call(
            "delete_loan_payment",
            self._storage.delete_payment(payment_id),
            correlation_id,
        )

        if deleted and self._audit_logger:
            await self._audit_logger.log_deleted(
                event_type=AuditEventType.PAYMENT_DELETED,
                entity_type="loan_payment",
                entity_id=payment_id,
                correlation_id=correlation_id,
            )

        return deleted


class SnapshotFlow(_Flow):
    """Orchestrates the weekly balances tracker."""

    def __init__(
        self,
        snapshot_storage: SnapshotStorageInterface,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(validator, audit_logger)
        self._storage = snapshot_storage

    async def load_snapshots(self) -> list[WeeklySnapshot]:
        """Fetch all snapshots, oldest week first."""
        return await self._storage_call("list_snapshots", self._storage.list_snapshots())

    async def load_chart(self) -> tuple[list[WeeklySnapshot], list[SnapshotChartPoint]]:
        snapshots = await self.load_snapshots()
        return snapshots, net_worth_series(snapshots)

    async def save_snapshot(
        self,
        week_of: Any,
        savings: Any,
        credit_card: Any,
        notes: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> WeeklySnapshot:
        """
        Validate and upsert the balances for one week.

        Raises:
            InputValidationError: Bad form input
            StorageError: The write failed
        """
        correlation_id = correlation_id or create_correlation_id()

        values = await self._require_valid(
            self._validator.validate_snapshot(week_of, savings, credit_card, notes),
            correlation_id,
        )

        snapshot = WeeklySnapshot(
            week_of=values["week_of"],
            checking_cents=0,
            savings_cents=dollars_to_cents(values["savings"]),
            credit_card_cents=dollars_to_cents(values["credit_card"]),
            notes=values["notes"],
        )

        snapshot = await self._storage_call(
            "upsert_snapshot",
            self._storage.upsert_snapshot(snapshot),
            correlation_id,
        )

        if self._audit_logger:
            await self._audit_logger.log_snapshot_saved(
                snapshot_id=snapshot.id,
                week_of=snapshot.week_of.isoformat(),
                net_worth=str(cents_to_dollars(snapshot.net_worth_cents)),
                correlation_id=correlation_id,
            )

        return snapshot

    async def delete_snapshot(
        self,
        snapshot_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        correlation_id = correlation_id or create_correlation_id()

        deleted = await self._storage_call(
            "delete_snapshot",
            self._storage.delete_snapshot(snapshot_id),
            correlation_id,
        )

        if deleted and self._audit_logger:
            await self._audit_logger.log_deleted(
                event_type=AuditEventType.SNAPSHOT_DELETED,
                entity_type="snapshot",
                entity_id=snapshot_id,
                correlation_id=correlation_id,
            )

        return deleted


class ChoreFlow(_Flow):
    """Orchestrates the chores tracker."""

    def __init__(
        self,
        chore_storage: ChoreStorageInterface,
        areas: Optional[list[str]] = None,
        tasks: Optional[list[str]] = None,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        chore_settings = get_settings().chores
        self._areas = areas or chore_settings.areas_list
        self._tasks = tasks or chore_settings.tasks_list
        super().__init__(
            validator or FormValidator(areas=self._areas, tasks=self._tasks),
            audit_logger,
        )
        self._storage = chore_storage
        self._priority_count = chore_settings.priority_count
        self._recent_days = chore_settings.recent_days
        self._recent_limit = chore_settings.recent_activity_limit

    @property
    def areas(self) -> list[str]:
        return list(self._areas)

    @property
    def tasks(self) -> list[str]:
        return list(self._tasks)

    async def load_board(self, now: Optional[datetime] = None) -> ChoreBoard:
        """Fetch completions and compute priorities, status grid and recent activity."""
        now = now or datetime.now(timezone.utc)
        completions = await self._storage_call(
            "list_chore_completions",
            self._storage.list_completions(),
        )

        return ChoreBoard(
            completions=completions,
            priorities=top_priorities(
                completions, self._areas, self._tasks, now, self._priority_count
            ),
            grid=status_grid(completions, self._areas, self._tasks, now, self._recent_days),
            recent=recent_activity(completions, self._recent_limit),
        )

    async def mark_complete(
        self,
        area: Optional[str],
        task: Optional[str],
        notes: Optional[str] = None,
        completed_at: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ChoreCompletion:
        """
        Validate and log a chore completion (defaults to now).

        Raises:
            InputValidationError: Area or task missing or unknown
            StorageError: The write failed
        """
        correlation_id = correlation_id or create_correlation_id()

        values = await self._require_valid(
            self._validator.validate_chore(area, task, notes),
            correlation_id,
        )

        completion = ChoreCompletion(
            area=values["area"],
            task=values["task"],
            notes=values["notes"],
            completed_at=completed_at or datetime.now(timezone.utc),
        )

        completion = await self._storage_call(
            "insert_chore_completion",
            self._storage.insert_completion(completion),
            correlation_id,
        )

        if self._audit_logger:
            await self._audit_logger.log_chore_completed(
                completion_id=completion.id,
                area=completion.area,
                task=completion.task,
                correlation_id=correlation_id,
            )

        return completion

    async def delete_completion(
        self,
        completion_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        correlation_id = correlation_id or create_correlation_id()

        deleted = await self._storage_call(
            "delete_chore_completion",
            self._storage.delete_completion(completion_id),
            correlation_id,
        )

        if deleted and self._audit_logger:
            await self._audit_logger.log_deleted(
                event_type=AuditEventType.CHORE_DELETED,
                entity_type="chore",
                entity_id=completion_id,
                correlation_id=correlation_id,
            )

        return deleted


def create_app_components(
    use_storage: bool = True,
) -> tuple[LoanFlow, SnapshotFlow, ChoreFlow, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to run on in-memory storage.

    Returns:
        (loan_flow, snapshot_flow, chore_flow, sheets_client)
    """
    sheets_client = None

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            sheets_client.get_spreadsheet()
            payment_storage = GoogleSheetsLoanPaymentStorage(sheets_client)
            snapshot_storage = GoogleSheetsSnapshotStorage(sheets_client)
            chore_storage = GoogleSheetsChoreStorage(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            use_storage = False

    if not use_storage:
        payment_storage = InMemoryLoanPaymentStorage()
        snapshot_storage = InMemorySnapshotStorage()
        chore_storage = InMemoryChoreStorage()
        audit_logger = AuditLogger()  # Local-only logging

    validator = FormValidator()

    loan_flow = LoanFlow(
        payment_storage=payment_storage,
        validator=validator,
        audit_logger=audit_logger,
    )
    snapshot_flow = SnapshotFlow(
        snapshot_storage=snapshot_storage,
        validator=validator,
        audit_logger=audit_logger,
    )
    chore_flow = ChoreFlow(
        chore_storage=chore_storage,
        validator=validator,
        audit_logger=audit_logger,
    )

    return loan_flow, snapshot_flow, chore_flow, sheets_client
