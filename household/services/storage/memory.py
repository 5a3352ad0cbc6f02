"""
In-Memory Storage Implementation

Dict-backed implementations of every storage interface. Used by the test
suite and when the app runs without Google credentials (data is lost when
the process exits).
"""

from typing import Optional
from uuid import UUID

from household.models.audit import AuditEvent
from household.models.chore import ChoreCompletion
from household.models.loan import ClearedPayment, PaymentStatus
from household.models.snapshot import WeeklySnapshot
from household.services.storage.interface import (
    AuditStorageInterface,
    ChoreStorageInterface,
    LoanPaymentStorageInterface,
    SnapshotStorageInterface,
    StorageError,
)


class InMemoryLoanPaymentStorage(LoanPaymentStorageInterface):
    """Loan ledger kept in a dict keyed by payment ID."""

    def __init__(self, payments: Optional[list[ClearedPayment]] = None):
        self._payments: dict[UUID, ClearedPayment] = {}
        for payment in payments or []:
            self._payments[payment.id] = payment

    async def list_payments(
        self,
        status: Optional[PaymentStatus] = PaymentStatus.CLEARED,
    ) -> list[ClearedPayment]:
        payments = [
            p for p in self._payments.values()
            if status is None or p.status == status
        ]
        return sorted(payments, key=lambda p: (p.payment_date, p.created_at))

    async def insert_payment(self, payment: ClearedPayment) -> ClearedPayment:
        if payment.id in self._payments:
            raise StorageError(f"Loan payment already exists: {payment.id}")
        self._payments[payment.id] = payment
        return payment

    async def delete_payment(self, payment_id: UUID) -> bool:
        return self._payments.pop(payment_id, None) is not None


class InMemorySnapshotStorage(SnapshotStorageInterface):
    """Weekly snapshots kept in a dict keyed by week."""

    def __init__(self):
        self._snapshots = {}

    async def list_snapshots(self) -> list[WeeklySnapshot]:
        return sorted(self._snapshots.values(), key=lambda s: s.week_of)

    async def upsert_snapshot(self, snapshot: WeeklySnapshot) -> WeeklySnapshot:
        existing = self._snapshots.get(snapshot.week_of)
        if existing is not None:
            snapshot = snapshot.model_copy(update={"id": existing.id})
        self._snapshots[snapshot.week_of] = snapshot
        return snapshot

    async def delete_snapshot(self, snapshot_id: UUID) -> bool:
        for week, snapshot in list(self._snapshots.items()):
            if snapshot.id == snapshot_id:
                del self._snapshots[week]
                return True
        return False


class InMemoryChoreStorage(ChoreStorageInterface):
    """Chore completions kept in a dict keyed by completion ID."""

    def __init__(self):
        self._completions: dict[UUID, ChoreCompletion] = {}

    async def list_completions(self) -> list[ChoreCompletion]:
        return sorted(
            self._completions.values(),
            key=lambda c: c.completed_at,
            reverse=True,
        )

    async def insert_completion(self, completion: ChoreCompletion) -> ChoreCompletion:
        self._completions[completion.id] = completion
        return completion

    async def delete_completion(self, completion_id: UUID) -> bool:
        return self._completions.pop(completion_id, None) is not None


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True
