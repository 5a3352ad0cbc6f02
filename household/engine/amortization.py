"""
Amortization Engine

Pure functions for the bi-weekly loan:

- ``project_schedule`` projects scheduled payments forward from a balance.
- ``reconcile_current_state`` reads the cleared ledger into a LoanState.
- ``project_upcoming`` / ``project_payoff`` compose the two.
- ``record_cleared_payment`` / ``record_extra_payment`` build new ledger rows.
- ``balance_history`` builds the chart series from the ledger.

Nothing here touches storage. Every view is recomputed from the ledger on
each read, so calling any function twice with the same ledger gives the
same answer.

TWO INTEREST CONVENTIONS: scheduled payments accrue a fixed per-period
rate (annual / 26) regardless of the period length in days. Extra payments
accrue simple daily interest (annual / 365 * elapsed days) since the last
ledger row. Both are kept as they are; a single computation never mixes them.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterable, Iterator, List, Optional

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


ZERO = Decimal("0")


class AmortizationError(Exception):
    """Base exception for computation edge cases."""
    pass


class PaymentBelowInterestError(AmortizationError):
    """A payment does not cover the interest accrued, so principal would not go down."""

    def __init__(self, payment: Decimal, interest: Decimal):
        self.payment = payment
        self.interest = interest
        super().__init__(
            f"Payment of ${to_cents(payment)} does not cover "
            f"${to_cents(interest)} of accrued interest"
        )


class LoanDoesNotAmortizeError(AmortizationError):
    """The balance did not reach zero within the projection guard."""

    def __init__(self, max_periods: int, balance: Decimal):
        self.max_periods = max_periods
        self.balance = balance
        super().__init__(
            f"Loan does not amortize under current terms: "
            f"${to_cents(balance)} still owed after {max_periods} payments"
        )


class LoanPaidOffError(AmortizationError):
    """A payment was recorded against a loan with no balance left."""
    pass


def _cleared_in_order(ledger: Iterable[ClearedPayment]) -> List[ClearedPayment]:
    """Cleared rows only, oldest first. Same-day rows keep creation order."""
    cleared = [p for p in ledger if p.status == PaymentStatus.CLEARED]
    return sorted(cleared, key=lambda p: (p.payment_date, p.created_at))


def project_schedule(
    start_balance: Decimal,
    start_date: date,
    period_count: int,
    terms: LoanTerms,
) -> Iterator[ScheduledPayment]:
    """Yield up to ``period_count`` scheduled payments starting on ``start_date``.

    Each period accrues ``balance * annual_rate / 26``; the rest of the fixed
    payment goes to principal, capped at the remaining balance so the final
    payment is smaller and leaves the balance at exactly zero. Payment dates
    are ``period_days`` calendar days apart.

    The sequence ends early once the balance is paid off.

    Raises
    ------
    PaymentBelowInterestError
        When the scheduled payment does not exceed the period's interest.
    """
    balance = Decimal(start_balance)
    current_date = start_date
    rate = terms.periodic_rate

    for _ in range(period_count):
        if balance <= 0:
            return

        interest = balance * rate
        principal = min(terms.payment_amount - interest, balance)
        if principal <= 0:
            raise PaymentBelowInterestError(terms.payment_amount, interest)

        payment = interest + principal
        balance = max(ZERO, balance - principal)

        yield ScheduledPayment(
            payment_date=current_date,
            amount=payment,
            interest=interest,
            principal=principal,
            balance=balance,
        )

        current_date = current_date + terms.period


def reconcile_current_state(
    ledger: Iterable[ClearedPayment],
    terms: LoanTerms,
) -> LoanState:
    """Summarise the cleared ledger.

    An empty ledger means a fresh loan: the full principal is owed and the
    last payment date is placed one period before ``start_date`` so that the
    next payment falls on ``start_date``.
    """
    payments = _cleared_in_order(ledger)

    if payments:
        last = payments[-1]
        remaining_balance = last.remaining_balance
        last_payment_date = last.payment_date
    else:
        remaining_balance = terms.principal
        last_payment_date = terms.start_date - terms.period

    return LoanState(
        remaining_balance=remaining_balance,
        total_interest_paid=sum((p.interest_portion for p in payments), ZERO),
        total_principal_paid=sum((p.principal_portion for p in payments), ZERO),
        last_payment_date=last_payment_date,
        next_payment_date=last_payment_date + terms.period,
        payment_count=len(payments),
    )


def project_upcoming(
    ledger: Iterable[ClearedPayment],
    terms: LoanTerms,
    count: int,
) -> List[ScheduledPayment]:
    """The next ``count`` scheduled payments from the current ledger state."""
    state = reconcile_current_state(ledger, terms)
    return list(
        project_schedule(state.remaining_balance, state.next_payment_date, count, terms)
    )


def project_payoff(
    ledger: Iterable[ClearedPayment],
    terms: LoanTerms,
    max_periods: int = 1000,
) -> PayoffProjection:
    """Project every remaining payment until the balance reaches zero.

    ``max_periods`` is an iteration guard, not a view limit: if the balance
    is still positive after that many payments, LoanDoesNotAmortizeError is
    raised instead of returning a schedule that never pays the loan off.
    """
    ledger = list(ledger)
    state = reconcile_current_state(ledger, terms)

    schedule = list(
        project_schedule(
            state.remaining_balance,
            state.next_payment_date,
            max_periods,
            terms,
        )
    )

    if schedule and schedule[-1].balance > 0:
        raise LoanDoesNotAmortizeError(max_periods, schedule[-1].balance)

    projected_interest = sum((p.interest for p in schedule), ZERO)

    return PayoffProjection(
        schedule=schedule,
        payoff_date=schedule[-1].payment_date if schedule else None,
        projected_interest=projected_interest,
        estimated_total_interest=state.total_interest_paid + projected_interest,
    )


def record_cleared_payment(scheduled: ScheduledPayment) -> ClearedPayment:
    """Turn a scheduled payment into a cleared ledger row."""
    return ClearedPayment(
        payment_date=scheduled.payment_date,
        amount_paid=to_cents(scheduled.amount),
        principal_portion=to_cents(scheduled.principal),
        interest_portion=to_cents(scheduled.interest),
        remaining_balance=to_cents(scheduled.balance),
        status=PaymentStatus.CLEARED,
    )


def record_extra_payment(
    amount: Decimal,
    payment_date: Optional[date],
    current_balance: Decimal,
    last_payment_date: date,
    terms: LoanTerms,
) -> ClearedPayment:
    """Build the ledger row for an out-of-cycle payment.

    Interest is simple daily interest on ``current_balance`` for the whole
    days elapsed since ``last_payment_date``. What is left of ``amount``
    goes to principal, capped at the balance. The amount recorded as paid is
    the amount actually applied (interest plus principal), so a payment
    larger than the payoff amount records the payoff amount.

    Raises
    ------
    ValueError
        Missing date, non-numeric or non-positive amount, or a date before
        the last ledger row.
    LoanPaidOffError
        Nothing is owed.
    PaymentBelowInterestError
        The amount does not exceed the accrued interest.
    """
    if payment_date is None:
        raise ValueError("Payment date is required")

    try:
        amount = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Payment amount is not a number: {amount!r}")
    if not amount.is_finite() or amount <= 0:
        raise ValueError("Payment amount must be greater than zero")

    balance = Decimal(current_balance)
    if balance <= 0:
        raise LoanPaidOffError("The loan is already paid off")

    days_since_last_payment = (payment_date - last_payment_date).days
    if days_since_last_payment < 0:
        raise ValueError(
            f"Payment date {payment_date} is before the last payment on {last_payment_date}"
        )

    interest = balance * terms.daily_rate * days_since_last_payment
    principal = min(amount - interest, balance)
    if principal <= 0:
        raise PaymentBelowInterestError(amount, interest)

    new_balance = max(ZERO, balance - principal)

    return ClearedPayment(
        payment_date=payment_date,
        amount_paid=to_cents(interest + principal),
        principal_portion=to_cents(principal),
        interest_portion=to_cents(interest),
        remaining_balance=to_cents(new_balance),
        status=PaymentStatus.CLEARED,
    )


def balance_history(
    ledger: Iterable[ClearedPayment],
    terms: LoanTerms,
) -> List[LoanChartPoint]:
    """Balance and cumulative interest after each cleared payment.

    The series starts with the untouched principal on ``start_date``.
    """
    points = [
        LoanChartPoint(
            day=terms.start_date,
            balance=terms.principal,
            cumulative_interest=ZERO,
        )
    ]

    cumulative_interest = ZERO
    for payment in _cleared_in_order(ledger):
        cumulative_interest += payment.interest_portion
        points.append(
            LoanChartPoint(
                day=payment.payment_date,
                balance=payment.remaining_balance,
                cumulative_interest=cumulative_interest,
            )
        )

    return points
