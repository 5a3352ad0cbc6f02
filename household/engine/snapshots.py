"""
Weekly snapshot helpers: cents conversion and the net worth series.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List

from household.models.snapshot import SnapshotChartPoint, WeeklySnapshot


def dollars_to_cents(amount: Decimal) -> int:
    """Convert a dollar amount to whole cents, rounding half up."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_dollars(cents: int) -> Decimal:
    """Convert whole cents back to a 2dp dollar amount."""
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def net_worth_series(snapshots: Iterable[WeeklySnapshot]) -> List[SnapshotChartPoint]:
    """Chart points for savings, credit card and net worth, oldest week first."""
    return [
        SnapshotChartPoint(
            week=s.week_of,
            savings=cents_to_dollars(s.savings_cents),
            credit_card=cents_to_dollars(s.credit_card_cents),
            net_worth=cents_to_dollars(s.net_worth_cents),
        )
        for s in sorted(snapshots, key=lambda s: s.week_of)
    ]
