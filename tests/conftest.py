"""Shared fixtures: the default loan terms and a small chore list."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from household.models.loan import LoanTerms


@pytest.fixture
def terms() -> LoanTerms:
    """$22,000 at 5%, $275 every 14 days, first payment 2026-03-06."""
    return LoanTerms(
        principal=Decimal("22000"),
        annual_rate=Decimal("0.05"),
        payment_amount=Decimal("275"),
        period_days=14,
        start_date=date(2026, 3, 6),
    )


@pytest.fixture
def areas() -> list[str]:
    return ["Kitchen", "Bathrooms"]


@pytest.fixture
def tasks() -> list[str]:
    return ["Mop", "Vacuum"]


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
