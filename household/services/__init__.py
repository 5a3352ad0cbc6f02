"""Services package."""

from household.services.storage import (
    AuditStorageInterface,
    ChoreStorageInterface,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsChoreStorage,
    GoogleSheetsClient,
    GoogleSheetsLoanPaymentStorage,
    GoogleSheetsSnapshotStorage,
    InMemoryAuditStorage,
    InMemoryChoreStorage,
    InMemoryLoanPaymentStorage,
    InMemorySnapshotStorage,
    LoanPaymentStorageInterface,
    SnapshotStorageInterface,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "ChoreStorageInterface",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsChoreStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLoanPaymentStorage",
    "GoogleSheetsSnapshotStorage",
    "InMemoryAuditStorage",
    "InMemoryChoreStorage",
    "InMemoryLoanPaymentStorage",
    "InMemorySnapshotStorage",
    "LoanPaymentStorageInterface",
    "SnapshotStorageInterface",
    "StorageError",
]
