"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally small: select, insert, upsert (snapshots
only) and delete by id. Loan payments have no update operation because
ledger rows are immutable once written.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from household.models.audit import AuditEvent
from household.models.chore import ChoreCompletion
from household.models.loan import ClearedPayment, PaymentStatus
from household.models.snapshot import WeeklySnapshot


class LoanPaymentStorageInterface(ABC):
    """
    Abstract interface for the loan payment ledger.

    The ledger is append-only: rows are inserted or deleted, never edited.
    """

    @abstractmethod
    async def list_payments(
        self,
        status: Optional[PaymentStatus] = PaymentStatus.CLEARED,
    ) -> list[ClearedPayment]:
        """
        List ledger rows ordered by payment_date ascending.

        Args:
            status: Only return rows with this status (None for all)

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def insert_payment(self, payment: ClearedPayment) -> ClearedPayment:
        """
        Append one ledger row.

        Returns:
            The row as stored

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_payment(self, payment_id: UUID) -> bool:
        """
        Delete a ledger row by ID.

        Returns:
            True if a row was deleted, False if no row had that ID
        """
        pass


class SnapshotStorageInterface(ABC):
    """Abstract interface for weekly balance snapshots."""

    @abstractmethod
    async def list_snapshots(self) -> list[WeeklySnapshot]:
        """List snapshots ordered by week_of ascending."""
        pass

    @abstractmethod
    async def upsert_snapshot(self, snapshot: WeeklySnapshot) -> WeeklySnapshot:
        """
        Insert a snapshot, or replace the existing one for the same week.

        The existing row keeps its ID when replaced.

        Returns:
            The snapshot as stored
        """
        pass

    @abstractmethod
    async def delete_snapshot(self, snapshot_id: UUID) -> bool:
        """Delete a snapshot by ID."""
        pass


class ChoreStorageInterface(ABC):
    """Abstract interface for chore completions."""

    @abstractmethod
    async def list_completions(self) -> list[ChoreCompletion]:
        """List completions ordered by completed_at, newest first."""
        pass

    @abstractmethod
    async def insert_completion(self, completion: ChoreCompletion) -> ChoreCompletion:
        """Append one completion."""
        pass

    @abstractmethod
    async def delete_completion(self, completion_id: UUID) -> bool:
        """Delete a completion by ID."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
