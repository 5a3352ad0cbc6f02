"""
Audit Models for Household Tracker

Every user action that touches storage is logged for audit purposes.
This provides:
1. A history of what was recorded and deleted, and when
2. Debugging information when a write fails
3. A way to reconstruct the ledger if a row is deleted by mistake

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Loan ledger
    PAYMENT_CLEARED = "payment_cleared"
    EXTRA_PAYMENT_RECORDED = "extra_payment_recorded"
    PAYMENT_DELETED = "payment_deleted"

    # Weekly snapshots
    SNAPSHOT_SAVED = "snapshot_saved"
    SNAPSHOT_DELETED = "snapshot_deleted"

    # Chores
    CHORE_COMPLETED = "chore_completed"
    CHORE_DELETED = "chore_deleted"

    # Rejections
    VALIDATION_FAILED = "validation_failed"
    COMPUTATION_REJECTED = "computation_rejected"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every user action creates at least one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'loan_payment', 'snapshot', 'chore')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate the events of one user action"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.payment_cleared(payment_id, ...)
        event = AuditEventBuilder.chore_completed(completion_id, ...)
    """

    @staticmethod
    def payment_cleared(
        payment_id: UUID,
        payment_date: str,
        amount: str,
        remaining_balance: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_CLEARED,
            entity_type="loan_payment",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description=f"Scheduled payment of ${amount} for {payment_date} marked cleared",
            details={
                "payment_date": payment_date,
                "amount": amount,
                "remaining_balance": remaining_balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def extra_payment_recorded(
        payment_id: UUID,
        payment_date: str,
        amount: str,
        interest: str,
        principal: str,
        remaining_balance: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRA_PAYMENT_RECORDED,
            entity_type="loan_payment",
            entity_id=payment_id,
            correlation_id=correlation_id,
            description=f"Extra payment of ${amount} recorded for {payment_date}",
            details={
                "payment_date": payment_date,
                "amount": amount,
                "interest": interest,
                "principal": principal,
                "remaining_balance": remaining_balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def entity_deleted(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: UUID,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Deleted {entity_type.replace('_', ' ')} {entity_id}",
            is_user_action=True,
        )

    @staticmethod
    def snapshot_saved(
        snapshot_id: UUID,
        week_of: str,
        net_worth: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_SAVED,
            entity_type="snapshot",
            entity_id=snapshot_id,
            correlation_id=correlation_id,
            description=f"Snapshot saved for week of {week_of}",
            details={
                "week_of": week_of,
                "net_worth": net_worth,
            },
            is_user_action=True,
        )

    @staticmethod
    def chore_completed(
        completion_id: UUID,
        area: str,
        task: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHORE_COMPLETED,
            entity_type="chore",
            entity_id=completion_id,
            correlation_id=correlation_id,
            description=f"Chore completed: {area} - {task}",
            details={
                "area": area,
                "task": task,
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        form: str,
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{form.replace('_', ' ').capitalize()} rejected with {len(issues)} issues",
            details={
                "form": form,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def computation_rejected(
        operation: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMPUTATION_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Computation rejected: {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
            correlation_id=correlation_id,
        )
