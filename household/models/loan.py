"""
Loan Data Models

These models describe the tracked loan:
1. LoanTerms - the fixed agreement (principal, rate, payment, cadence)
2. ClearedPayment - one row of the append-only payment ledger
3. ScheduledPayment - a projected payment, recomputed on every read
4. Derived views (LoanState, PayoffProjection, LoanChartPoint)

DESIGN DECISION: Money is Decimal everywhere. Projections keep full
precision; a ledger row is rounded to cents at the moment it is created,
because that is what the store keeps.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Bi-weekly periods in a year. The scheduled-payment rate is annual / 26.
PERIODS_PER_YEAR = 26

# Simple-interest day count for out-of-cycle (extra) payments.
DAYS_PER_YEAR = 365

CENT = Decimal("0.01")

# Two independently rounded portions can differ from the rounded total by a cent each.
ROUNDING_TOLERANCE = Decimal("0.02")


def to_cents(value: Decimal) -> Decimal:
    """Round a money amount to whole cents (half up)."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class PaymentStatus(str, Enum):
    """Ledger row status. Only CLEARED rows feed the engine."""
    PENDING = "pending"
    CLEARED = "cleared"


class LoanTerms(BaseModel):
    """
    The fixed terms of the loan.

    Loaded once from configuration and never mutated.
    """
    model_config = ConfigDict(frozen=True)

    principal: Decimal = Field(..., gt=0, description="Initial balance")
    annual_rate: Decimal = Field(..., ge=0, lt=1, description="Nominal annual rate")
    payment_amount: Decimal = Field(..., gt=0, description="Scheduled payment per period")
    period_days: int = Field(default=14, ge=1, description="Days between payments")
    start_date: date = Field(..., description="Date of the first scheduled payment")

    @property
    def periodic_rate(self) -> Decimal:
        """Rate applied per scheduled period (annual / 26)."""
        return self.annual_rate / PERIODS_PER_YEAR

    @property
    def daily_rate(self) -> Decimal:
        """Simple daily rate used for extra payments (annual / 365)."""
        return self.annual_rate / DAYS_PER_YEAR

    @property
    def period(self) -> timedelta:
        return timedelta(days=self.period_days)


class ScheduledPayment(BaseModel):
    """
    A projected payment.

    Never persisted as-is; it becomes a ClearedPayment only when the
    user marks it cleared.
    """
    model_config = ConfigDict(frozen=True)

    payment_date: date
    amount: Decimal
    interest: Decimal
    principal: Decimal
    balance: Decimal = Field(..., ge=0)


class ClearedPayment(BaseModel):
    """
    One row of the loan payment ledger.

    CRITICAL: Rows are append-only. They are created (from a scheduled
    payment or an extra payment) and may be deleted, but never edited.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique row ID, assigned on creation"
    )
    payment_date: date = Field(
        ...,
        description="Date the payment was applied"
    )
    amount_paid: Decimal = Field(..., description="Interest plus principal")
    principal_portion: Decimal
    interest_portion: Decimal
    remaining_balance: Decimal = Field(
        ...,
        ge=0,
        description="Balance after this payment"
    )
    status: PaymentStatus = Field(
        default=PaymentStatus.PENDING,
        description="Ledger status"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the row was written (UTC)"
    )

    @field_validator('created_at')
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are taken to be UTC so ledger rows sort together."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode='after')
    def validate_portions(self) -> 'ClearedPayment':
        """The paid amount must be the sum of its portions."""
        difference = abs(self.amount_paid - (self.principal_portion + self.interest_portion))
        if difference > ROUNDING_TOLERANCE:
            raise ValueError(
                "Amount paid must equal principal portion plus interest portion"
            )
        return self


class LoanState(BaseModel):
    """Current position of the loan, reconciled from the cleared ledger."""

    remaining_balance: Decimal
    total_interest_paid: Decimal
    total_principal_paid: Decimal
    last_payment_date: date
    next_payment_date: date
    payment_count: int = Field(ge=0)

    @property
    def is_paid_off(self) -> bool:
        return self.remaining_balance <= 0


class PayoffProjection(BaseModel):
    """Full projection from the current state until the balance reaches zero."""

    schedule: list[ScheduledPayment] = Field(default_factory=list)
    payoff_date: Optional[date] = Field(
        default=None,
        description="Date of the final payment, None if already paid off"
    )
    projected_interest: Decimal = Field(
        default=Decimal("0"),
        description="Interest still to be paid under the schedule"
    )
    estimated_total_interest: Decimal = Field(
        default=Decimal("0"),
        description="Interest already paid plus projected interest"
    )

    @property
    def payments_left(self) -> int:
        return len(self.schedule)


class LoanChartPoint(BaseModel):
    """One point of the balance / cumulative interest charts."""

    day: date
    balance: Decimal
    cumulative_interest: Decimal
