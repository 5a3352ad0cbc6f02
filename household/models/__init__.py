"""
Data Models Package

This package contains all Pydantic models used in the Household Tracker.
All data flowing through the system must conform to these schemas.
"""

from household.models.loan import (
    ClearedPayment,
    LoanChartPoint,
    LoanState,
    LoanTerms,
    PaymentStatus,
    PayoffProjection,
    ScheduledPayment,
    to_cents,
)
from household.models.chore import (
    ChoreCell,
    ChoreCompletion,
    ChorePriority,
    Freshness,
)
from household.models.snapshot import (
    SnapshotChartPoint,
    WeeklySnapshot,
)
from household.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from household.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Loan models
    "ClearedPayment",
    "LoanChartPoint",
    "LoanState",
    "LoanTerms",
    "PaymentStatus",
    "PayoffProjection",
    "ScheduledPayment",
    "to_cents",
    # Chore models
    "ChoreCell",
    "ChoreCompletion",
    "ChorePriority",
    "Freshness",
    # Snapshot models
    "SnapshotChartPoint",
    "WeeklySnapshot",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
