"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the hosted backend; the in-memory backend is for tests and
running without credentials.
"""

from household.services.storage.interface import (
    AuditStorageInterface,
    ChoreStorageInterface,
    ConnectionError,
    LoanPaymentStorageInterface,
    SnapshotStorageInterface,
    StorageError,
)
from household.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsChoreStorage,
    GoogleSheetsClient,
    GoogleSheetsLoanPaymentStorage,
    GoogleSheetsSnapshotStorage,
)
from household.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryChoreStorage,
    InMemoryLoanPaymentStorage,
    InMemorySnapshotStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ChoreStorageInterface",
    "LoanPaymentStorageInterface",
    "SnapshotStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsChoreStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLoanPaymentStorage",
    "GoogleSheetsSnapshotStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryChoreStorage",
    "InMemoryLoanPaymentStorage",
    "InMemorySnapshotStorage",
]
