"""Pure calculation package: loan amortization, chores, snapshots."""

from household.engine.amortization import (
    AmortizationError,
    LoanDoesNotAmortizeError,
    LoanPaidOffError,
    PaymentBelowInterestError,
    balance_history,
    project_payoff,
    project_schedule,
    project_upcoming,
    reconcile_current_state,
    record_cleared_payment,
    record_extra_payment,
)
from household.engine.chores import (
    days_since,
    format_time_ago,
    last_completed,
    recent_activity,
    status_grid,
    top_priorities,
)
from household.engine.snapshots import (
    cents_to_dollars,
    dollars_to_cents,
    net_worth_series,
)

__all__ = [
    # Amortization
    "AmortizationError",
    "LoanDoesNotAmortizeError",
    "LoanPaidOffError",
    "PaymentBelowInterestError",
    "balance_history",
    "project_payoff",
    "project_schedule",
    "project_upcoming",
    "reconcile_current_state",
    "record_cleared_payment",
    "record_extra_payment",
    # Chores
    "days_since",
    "format_time_ago",
    "last_completed",
    "recent_activity",
    "status_grid",
    "top_priorities",
    # Snapshots
    "cents_to_dollars",
    "dollars_to_cents",
    "net_worth_series",
]
