"""
Streamlit Frontend for Household Tracker

Three trackers behind a sidebar:
- Finance: weekly savings / credit card balances and net worth
- Chores: what to do next, a status grid and recent activity
- Loan: bi-weekly loan balance, upcoming payments and extra payments

DESIGN PRINCIPLES:
1. Every write is an explicit button press
2. After a write the page reruns and recomputes from storage
3. Validation errors are shown next to the form, in plain language
4. Storage errors are shown as a banner; nothing is half-saved
"""

import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal

import streamlit as st

from household.audit import create_correlation_id
from household.engine import AmortizationError, format_time_ago
from household.models import Freshness
from household.orchestrator import ChoreFlow, LoanFlow, SnapshotFlow, create_app_components
from household.services.storage import StorageError
from household.validation import InputValidationError


# Page configuration
st.set_page_config(
    page_title="Household Tracker",
    page_icon="🏠",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .cell-recent {
        padding: 8px;
        background-color: #d4edda;
        border-radius: 6px;
        margin: 2px 0;
    }
    .cell-stale {
        padding: 8px;
        background-color: #fff3cd;
        border-radius: 6px;
        margin: 2px 0;
    }
    .cell-never {
        padding: 8px;
        background-color: #f8d7da;
        border-radius: 6px;
        margin: 2px 0;
    }
</style>
""", unsafe_allow_html=True)

FRESHNESS_CLASS = {
    Freshness.RECENT: "cell-recent",
    Freshness.STALE: "cell-stale",
    Freshness.NEVER: "cell-never",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


def money(value: Decimal) -> str:
    return f"${value:,.2f}"


def show_validation_error(flow, error: InputValidationError):
    st.error(flow.validator.get_user_friendly_summary(error.result))


def main():
    """Main application entry point."""
    loan_flow, snapshot_flow, chore_flow, sheets_client = get_components()

    st.sidebar.title("🏠 Household Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["💵 Finance", "🧹 Chores", "🏦 Loan", "⚙️ Settings"],
        index=0,
    )

    if sheets_client is None:
        st.sidebar.warning("Storage not configured. Data is kept in memory only.")

    if page == "💵 Finance":
        render_finance_page(snapshot_flow)
    elif page == "🧹 Chores":
        render_chores_page(chore_flow)
    elif page == "🏦 Loan":
        render_loan_page(loan_flow)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_finance_page(snapshot_flow: SnapshotFlow):
    """Render the weekly balances page."""
    st.title("💵 Weekly Balances")

    with st.form("snapshot_form", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            week_of = st.date_input("Week of", value=date.today())
        with col2:
            savings = st.text_input("Savings balance ($)", placeholder="1,250.00")
        with col3:
            credit_card = st.text_input("Credit card balance ($)", placeholder="340.15")
        notes = st.text_area("Notes (optional)")
        submitted = st.form_submit_button("💾 Save Week", type="primary")

    if submitted:
        try:
            run_async(snapshot_flow.save_snapshot(
                week_of=week_of,
                savings=savings,
                credit_card=credit_card,
                notes=notes,
                correlation_id=create_correlation_id(),
            ))
            st.success(f"Saved balances for week of {week_of:%b %d, %Y}")
        except InputValidationError as e:
            show_validation_error(snapshot_flow, e)
        except StorageError as e:
            st.error(f"Failed to save: {e}")

    try:
        snapshots, series = run_async(snapshot_flow.load_chart())
    except StorageError as e:
        st.error(f"Failed to load balances: {e}")
        return

    if not snapshots:
        st.info("No weeks recorded yet. Add your first week above.")
        return

    latest = series[-1]
    col1, col2, col3 = st.columns(3)
    col1.metric("Savings", money(latest.savings))
    col2.metric("Credit card", money(latest.credit_card))
    col3.metric("Net worth", money(latest.net_worth))

    st.line_chart(
        {
            "Savings": [float(p.savings) for p in series],
            "Credit card": [float(p.credit_card) for p in series],
            "Net worth": [float(p.net_worth) for p in series],
        },
    )

    st.markdown("### History")
    for snapshot, point in reversed(list(zip(snapshots, series))):
        col1, col2, col3, col4, col5 = st.columns([2, 2, 2, 2, 1])
        col1.write(f"{snapshot.week_of:%b %d, %Y}")
        col2.write(money(point.savings))
        col3.write(money(point.credit_card))
        col4.write(money(point.net_worth))
        if col5.button("🗑️", key=f"del_snapshot_{snapshot.id}"):
            try:
                run_async(snapshot_flow.delete_snapshot(snapshot.id))
                st.rerun()
            except StorageError as e:
                st.error(f"Failed to delete: {e}")


def render_chores_page(chore_flow: ChoreFlow):
    """Render the chores page."""
    st.title("🧹 Chores")
    now = datetime.now(timezone.utc)

    with st.form("chore_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            area = st.selectbox("Area", options=[""] + chore_flow.areas)
        with col2:
            task = st.selectbox("Task", options=[""] + chore_flow.tasks)
        notes = st.text_input("Notes (optional)")
        submitted = st.form_submit_button("✅ Mark Complete", type="primary")

    if submitted:
        try:
            completion = run_async(chore_flow.mark_complete(
                area=area,
                task=task,
                notes=notes,
                correlation_id=create_correlation_id(),
            ))
            st.success(f"Logged: {completion.task} in {completion.area}")
        except InputValidationError as e:
            show_validation_error(chore_flow, e)
        except StorageError as e:
            st.error(f"Failed to save: {e}")

    try:
        board = run_async(chore_flow.load_board(now))
    except StorageError as e:
        st.error(f"Failed to load chores: {e}")
        return

    st.markdown("### Do Next")
    for priority in board.priorities:
        age = "Never done" if priority.never_done else format_time_ago(priority.last_completed, now)
        st.markdown(f"- **{priority.label}**: {age}")

    st.markdown("### Status")
    header = st.columns(len(chore_flow.tasks) + 1)
    header[0].markdown("**Area**")
    for col, task_name in zip(header[1:], chore_flow.tasks):
        col.markdown(f"**{task_name}**")

    for row in board.grid:
        cols = st.columns(len(row) + 1)
        cols[0].write(row[0].area if row else "")
        for col, cell in zip(cols[1:], row):
            text = format_time_ago(cell.last_completed, now) if cell.last_completed else "Never"
            col.markdown(
                f'<div class="{FRESHNESS_CLASS[cell.freshness]}">{text}</div>',
                unsafe_allow_html=True,
            )

    st.markdown("### Recent Activity")
    if not board.recent:
        st.info("Nothing logged yet.")
    for completion in board.recent:
        col1, col2, col3 = st.columns([4, 2, 1])
        col1.write(f"{completion.area}: {completion.task}")
        col2.write(format_time_ago(completion.completed_at, now))
        if col3.button("🗑️", key=f"del_chore_{completion.id}"):
            try:
                run_async(chore_flow.delete_completion(completion.id))
                st.rerun()
            except StorageError as e:
                st.error(f"Failed to delete: {e}")


LOAN_FLASH_KEY = "loan_flash"


def set_loan_flash(kind: str, message: str):
    """Keep a message for the loan page across the next rerun."""
    st.session_state[LOAN_FLASH_KEY] = (kind, message)


def show_loan_flash():
    flash = st.session_state.pop(LOAN_FLASH_KEY, None)
    if flash:
        kind, message = flash
        getattr(st, kind)(message)


def clear_payment_callback(loan_flow: LoanFlow, scheduled, widget_key: str):
    """Record a ticked payment; untick the box again if the write fails."""
    if not st.session_state.get(widget_key):
        return
    try:
        run_async(loan_flow.mark_cleared(scheduled, create_correlation_id()))
        set_loan_flash("success", f"Marked the {scheduled.payment_date:%b %d, %Y} payment as cleared")
    except StorageError as e:
        st.session_state[widget_key] = False
        set_loan_flash("error", f"Failed to save: {e}")


def render_loan_page(loan_flow: LoanFlow):
    """Render the loan tracker page."""
    st.title("🏦 Loan Tracker")
    show_loan_flash()

    try:
        dashboard = run_async(loan_flow.load_dashboard())
    except StorageError as e:
        st.error(f"Failed to load loan payments: {e}")
        return

    terms = dashboard.terms
    state = dashboard.state
    st.caption(
        f"{dashboard.name}: {money(terms.principal)} at {terms.annual_rate:.2%}, "
        f"{money(terms.payment_amount)} every {terms.period_days} days"
    )

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Remaining balance", money(state.remaining_balance))
    col2.metric("Interest paid", money(state.total_interest_paid))
    col3.metric("Next payment", money(dashboard.next_payment_amount))
    col4.metric("Payments made", state.payment_count)

    if state.is_paid_off:
        st.success("🎉 This loan is paid off!")

    if dashboard.projection_error:
        st.warning(f"Cannot project the schedule: {dashboard.projection_error}")
    elif dashboard.payoff and dashboard.payoff.payoff_date:
        payoff = dashboard.payoff
        st.info(
            f"Paid off on {payoff.payoff_date:%b %d, %Y} after {payoff.payments_left} "
            f"more payments. Estimated total interest: "
            f"{money(payoff.estimated_total_interest)}"
        )
        with st.expander("📅 Full payoff schedule"):
            st.dataframe(
                [
                    {
                        "Date": p.payment_date.isoformat(),
                        "Payment": float(p.amount),
                        "Interest": float(p.interest),
                        "Principal": float(p.principal),
                        "Balance": float(p.balance),
                    }
                    for p in payoff.schedule
                ],
                use_container_width=True,
                hide_index=True,
            )

    st.line_chart({
        "Balance": [float(p.balance) for p in dashboard.chart],
        "Interest paid": [float(p.cumulative_interest) for p in dashboard.chart],
    })

    st.markdown("### Upcoming Payments")
    st.markdown("*Tick a payment once it has cleared your bank.*")
    for index, scheduled in enumerate(dashboard.upcoming):
        col1, col2, col3, col4, col5 = st.columns([1, 2, 2, 2, 2])
        widget_key = f"clear_{scheduled.payment_date.isoformat()}_{index}"
        col1.checkbox(
            "Cleared",
            key=widget_key,
            label_visibility="collapsed",
            on_change=clear_payment_callback,
            args=(loan_flow, scheduled, widget_key),
        )
        col2.write(f"{scheduled.payment_date:%b %d, %Y}")
        col3.write(money(scheduled.amount))
        col4.write(f"Interest {money(scheduled.interest)}")
        col5.write(f"Balance {money(scheduled.balance)}")
    st.markdown("### Extra Payment")
    with st.form("extra_payment_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.text_input("Amount ($)", placeholder="500.00")
        with col2:
            payment_date = st.date_input("Date", value=date.today())
        submitted = st.form_submit_button("💸 Record Extra Payment", type="primary")

    if submitted:
        try:
            payment = run_async(loan_flow.record_extra_payment(
                amount=amount,
                payment_date=payment_date,
                correlation_id=create_correlation_id(),
            ))
            set_loan_flash(
                "success",
                f"Recorded {money(payment.amount_paid)}: "
                f"{money(payment.interest_portion)} interest, "
                f"{money(payment.principal_portion)} principal",
            )
            st.rerun()
        except InputValidationError as e:
            show_validation_error(loan_flow, e)
        except AmortizationError as e:
            st.error(str(e))
        except StorageError as e:
            st.error(f"Failed to save: {e}")

    st.markdown("### Payment History")
    if not dashboard.ledger:
        st.info("No payments recorded yet.")
    for payment in reversed(dashboard.ledger):
        col1, col2, col3, col4, col5 = st.columns([2, 2, 2, 2, 1])
        col1.write(f"{payment.payment_date:%b %d, %Y}")
        col2.write(money(payment.amount_paid))
        col3.write(f"Principal {money(payment.principal_portion)}")
        col4.write(f"Balance {money(payment.remaining_balance)}")
        if col5.button("🗑️", key=f"del_payment_{payment.id}"):
            try:
                run_async(loan_flow.delete_payment(payment.id))
                st.rerun()
            except StorageError as e:
                st.error(f"Failed to delete: {e}")


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    from household.config import validate_all_settings

    status = validate_all_settings()

    sections = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Loan terms", "loan"),
        ("Chore lists", "chores"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your settings. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
