"""
Weekly Snapshot Models

One snapshot per week records the household's account balances.
Balances are stored as integer cents to keep sums exact.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WeeklySnapshot(BaseModel):
    """
    Account balances for one week.

    DESIGN DECISION: week_of is the natural key. Saving a snapshot for a
    week that already has one replaces it (upsert), it never adds a second row.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    week_of: date = Field(..., description="Date identifying the week")
    checking_cents: int = Field(default=0, ge=0)
    savings_cents: int = Field(default=0, ge=0)
    credit_card_cents: int = Field(default=0, ge=0)
    notes: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator('created_at')
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def net_worth_cents(self) -> int:
        """Savings minus credit card debt. Checking is not part of net worth."""
        return self.savings_cents - self.credit_card_cents


class SnapshotChartPoint(BaseModel):
    """One point of the finance overview chart, in dollars."""

    week: date
    savings: Decimal
    credit_card: Decimal
    net_worth: Decimal
