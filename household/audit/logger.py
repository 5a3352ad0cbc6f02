"""
Audit Logger

DESIGN DECISION: Every user action that changes stored data is logged.
This provides:
1. Complete traceability of the ledger and logs
2. Debugging capability when a write fails
3. A record to rebuild a row that was deleted by mistake

The audit logger:
- Is async to match the storage interface
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from household.config import get_settings
from household.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from household.services.storage import AuditStorageInterface


def configure_logging(level: Optional[str] = None) -> None:
    """Configure stdlib logging and structlog for local JSON logs."""
    level = (level or get_settings().app.log_level).upper()
    logging.basicConfig(format="%(message)s", level=level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("household.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_payment_cleared(
        self,
        payment_id: UUID,
        payment_date: str,
        amount: str,
        remaining_balance: str,
        correlation_id: UUID,
    ) -> None:
        """Log a scheduled payment being marked cleared."""
        await self.log(AuditEventBuilder.payment_cleared(
            payment_id=payment_id,
            payment_date=payment_date,
            amount=amount,
            remaining_balance=remaining_balance,
            correlation_id=correlation_id,
        ))

    async def log_extra_payment(
        self,
        payment_id: UUID,
        payment_date: str,
        amount: str,
        interest: str,
        principal: str,
        remaining_balance: str,
        correlation_id: UUID,
    ) -> None:
        """Log an extra payment."""
        await self.log(AuditEventBuilder.extra_payment_recorded(
            payment_id=payment_id,
            payment_date=payment_date,
            amount=amount,
            interest=interest,
            principal=principal,
            remaining_balance=remaining_balance,
            correlation_id=correlation_id,
        ))

    async def log_deleted(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: UUID,
        correlation_id: UUID,
    ) -> None:
        """Log a row deletion."""
        await self.log(AuditEventBuilder.entity_deleted(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    async def log_snapshot_saved(
        self,
        snapshot_id: UUID,
        week_of: str,
        net_worth: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.snapshot_saved(
            snapshot_id=snapshot_id,
            week_of=week_of,
            net_worth=net_worth,
            correlation_id=correlation_id,
        ))

    async def log_chore_completed(
        self,
        completion_id: UUID,
        area: str,
        task: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.chore_completed(
            completion_id=completion_id,
            area=area,
            task=task,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        form: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log rejected form input."""
        await self.log(AuditEventBuilder.validation_failed(
            form=form,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_computation_rejected(
        self,
        operation: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a computation edge case (e.g., payment below interest)."""
        await self.log(AuditEventBuilder.computation_rejected(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed storage call."""
        await self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., marking a payment cleared).
    Pass it through all subsequent operations.
    """
    return uuid4()
