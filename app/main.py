"""
Streamlit Frontend for Smart Spend

The dashboard and the three ways of adding an expense:
1. Manual form
2. Free text ("AI Text"), read by Gemini
3. Receipt photo ("Receipt"), read by Gemini

DESIGN PRINCIPLES:
1. The page holds no numbers of its own; everything shown is read
   from the tracker on each rerun
2. AI buttons are disabled while an extraction is pending
3. Errors are shown inline and never lose existing data
"""

import asyncio
from datetime import date

import pandas as pd
import streamlit as st

from smart_spend.analytics import format_currency
from smart_spend.config import get_settings, validate_all_settings
from smart_spend.models.expense import ExpenseCategory
from smart_spend.orchestrator import (
    STORAGE_WRITE_FAILED,
    ExpenseTracker,
    create_app_components,
)
from smart_spend.services.storage import StorageError
from smart_spend.validation import ValidationError


# Page configuration
st.set_page_config(
    page_title="Smart Spend",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="collapsed",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_tracker() -> ExpenseTracker:
    """One tracker per browser session, loaded from storage once."""
    if "tracker" not in st.session_state:
        st.session_state.tracker = create_app_components(use_ai=True)
    return st.session_state.tracker


def main():
    """Main application entry point."""
    tracker = get_tracker()
    currency = get_settings().app.currency_symbol

    st.title("💸 Smart Spend")
    st.caption("Track expenses by hand, by description, or from a receipt photo.")

    render_sidebar(tracker)

    left, right = st.columns([2, 1], gap="large")

    with left:
        render_dashboard(tracker, currency)
        render_expense_list(tracker, currency)

    with right:
        st.subheader("Add Transaction")
        render_add_expense(tracker)


def render_sidebar(tracker: ExpenseTracker):
    """Configuration status, so a disabled AI entry can be explained."""
    settings = get_settings()
    status = validate_all_settings()

    with st.sidebar:
        st.markdown("### Configuration")
        st.caption(f"Environment: {settings.app.app_environment}")

        sections = [
            ("Gemini (AI entry)", "gemini"),
            ("Storage", "storage"),
            ("App", "app"),
        ]
        for name, key in sections:
            if status.get(key, False):
                st.success(f"✅ {name}")
            else:
                error = status.get(f"{key}_error", "Not configured")
                st.error(f"❌ {name} - {error}")

        if status.get("gemini") and not tracker.ai_enabled:
            st.warning("Gemini is configured but the extraction agent failed to start.")

        st.markdown(
            "Configure the app with a `.env` file. "
            "See `.env.example` for the available variables."
        )


def render_dashboard(tracker: ExpenseTracker, currency: str):
    """Top stat cards plus category and 7-day charts."""
    summary = tracker.dashboard()

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Spent", format_currency(summary.total_spent, currency))
    col2.metric("Transactions", summary.transaction_count)
    col3.metric(
        "Avg. Transaction",
        format_currency(summary.average_transaction, currency),
    )

    chart_left, chart_right = st.columns(2)

    with chart_left:
        st.markdown("#### Spending by Category")
        if summary.categories:
            df = pd.DataFrame(
                {
                    "category": [c.name.value for c in summary.categories],
                    "amount": [float(c.value) for c in summary.categories],
                    "color": [c.color for c in summary.categories],
                }
            )
            st.bar_chart(df, x="category", y="amount", color="color")
        else:
            st.info("No data available yet")

    with chart_right:
        st.markdown("#### Last 7 Days Activity")
        df = pd.DataFrame(
            {
                "day": [f"{d.date.isoformat()} {d.label}" for d in summary.weekly_trend],
                "spent": [float(d.total) for d in summary.weekly_trend],
            }
        )
        st.bar_chart(df, x="day", y="spent")


def render_expense_list(tracker: ExpenseTracker, currency: str):
    """Recent transactions, newest first, each with a delete button."""
    st.markdown("#### Recent Transactions")

    if not tracker.expenses:
        st.info("No transactions yet. Add your first one on the right.")
        return

    for expense in tracker.expenses:
        col1, col2, col3, col4 = st.columns([4, 2, 2, 1])
        col1.markdown(f"**{expense.description}**  \n{expense.date.strftime('%d %b %Y')}")
        col2.markdown(
            f"<span style='color:{expense.category.color}'>●</span> "
            f"{expense.category.value}",
            unsafe_allow_html=True,
        )
        col3.markdown(f"**{format_currency(expense.amount, currency)}**")
        if col4.button("🗑️", key=f"delete-{expense.id}", help="Delete"):
            try:
                tracker.delete(expense.id)
            except StorageError:
                st.error(STORAGE_WRITE_FAILED)
                return
            st.rerun()


def render_add_expense(tracker: ExpenseTracker):
    """Manual / AI Text / Receipt tabs."""
    if tracker.task.has_error:
        st.error(tracker.task.error_message)

    manual_tab, text_tab, image_tab = st.tabs(["✍️ Manual", "✨ AI Text", "🧾 Receipt"])

    with manual_tab:
        render_manual_form(tracker)

    with text_tab:
        render_text_form(tracker)

    with image_tab:
        render_image_form(tracker)


MANUAL_FORM_DEFAULTS = {
    "manual-description": "",
    "manual-amount": 0.0,
    "manual-category": ExpenseCategory.FOOD,
}


def render_manual_form(tracker: ExpenseTracker):
    # Fields keep their values after a rejected entry; reset only on success
    if st.session_state.pop("clear-manual-form", False):
        for key in (*MANUAL_FORM_DEFAULTS, "manual-date"):
            st.session_state.pop(key, None)
    for key, default in MANUAL_FORM_DEFAULTS.items():
        st.session_state.setdefault(key, default)
    st.session_state.setdefault("manual-date", date.today())

    with st.form("manual-entry"):
        description = st.text_input(
            "Description",
            key="manual-description",
            placeholder="e.g. Lunch at Subway",
        )
        amount = st.number_input(
            "Amount",
            key="manual-amount",
            min_value=0.0,
            step=1.0,
            format="%.2f",
        )
        expense_date = st.date_input("Date", key="manual-date")
        category = st.selectbox(
            "Category",
            key="manual-category",
            options=list(ExpenseCategory),
            format_func=lambda c: c.value,
        )
        submitted = st.form_submit_button("Add Expense", type="primary")

    if submitted:
        try:
            tracker.add_manual(
                description=description,
                amount=amount,
                expense_date=expense_date,
                category=category,
            )
        except ValidationError as e:
            for issue in e.issues:
                st.error(issue.message)
            return
        except StorageError:
            st.error(STORAGE_WRITE_FAILED)
            return
        st.session_state["clear-manual-form"] = True
        st.rerun()


def render_text_form(tracker: ExpenseTracker):
    if not tracker.ai_enabled:
        st.warning("Set GEMINI_API_KEY to enable AI entry.")

    # Widget values can only be changed before the widget is drawn
    if st.session_state.pop("clear-nlp-text", False):
        st.session_state["nlp-text"] = ""

    text = st.text_area(
        "Describe your expense",
        key="nlp-text",
        placeholder="e.g. Spent 450 on groceries at the supermarket yesterday",
    )

    if st.button(
        "✨ Add with AI",
        type="primary",
        disabled=tracker.task.is_pending,
        key="nlp-submit",
    ):
        with st.spinner("Reading your description..."):
            expense = run_async(tracker.add_from_text(text))
        if expense is not None:
            st.session_state["clear-nlp-text"] = True
        st.rerun()


def render_image_form(tracker: ExpenseTracker):
    settings = get_settings().app

    if not tracker.ai_enabled:
        st.warning("Set GEMINI_API_KEY to enable receipt scanning.")

    uploaded_file = st.file_uploader(
        "Upload a receipt",
        type=settings.supported_formats_list,
        help="Take a clear, well-lit photo of the receipt",
    )

    if uploaded_file and st.button(
        "🧾 Analyze Receipt",
        type="primary",
        disabled=tracker.task.is_pending,
        key="image-submit",
    ):
        with st.spinner("Analyzing receipt..."):
            try:
                run_async(
                    tracker.add_from_image(uploaded_file.getvalue(), uploaded_file.type)
                )
            except ValidationError as e:
                for issue in e.issues:
                    st.error(issue.message)
                return
        # The uploader is not reset after a successful extraction
        st.rerun()


if __name__ == "__main__":
    main()
