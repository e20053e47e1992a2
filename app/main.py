"""
Streamlit Frontend for Expense Tracker

One page:
- the expense form (add, or edit when a record is loaded into it)
- the expense list with a category filter and running total
- a pie chart of spending by category
- a sidebar toggle between local storage and the remote API

Every action goes through ExpenseController and is followed by a full
reload, so the page always shows what the active backend holds.
"""

import asyncio
from datetime import date

import altair as alt
import pandas as pd
import streamlit as st

from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.models.result import OperationResult
from expense_tracker.orchestrator import ExpenseController, ExpenseForm, create_app_components
from expense_tracker.queries import ExpenseSummary, expense_row_html


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .meta {
        color: #6b7280;
        font-size: 0.9em;
    }
    .big-number {
        font-size: 2.2em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_controller() -> ExpenseController:
    """One controller (and repository) per browser session."""
    if "controller" not in st.session_state:
        controller = create_app_components()
        show_result(run_async(controller.refresh()))
        st.session_state.controller = controller
    return st.session_state.controller


def show_result(result: OperationResult) -> None:
    """Surface a failed operation; successes speak through the re-render."""
    if result is not None and not result.success:
        st.error(
            f"Could not {result.operation.value} expenses "
            f"({result.mode.value} mode): {result.error_message}"
        )


def reset_form_state() -> None:
    st.session_state.form = ExpenseForm()
    st.session_state.form_version = st.session_state.get("form_version", 0) + 1


def main():
    """Main application entry point."""
    controller = get_controller()
    if "form" not in st.session_state:
        reset_form_state()

    render_sidebar(controller)

    st.title("💰 Expense Tracker")
    st.caption(f"Mode: {controller.mode_label}")

    col_form, col_list = st.columns([1, 2])

    with col_form:
        render_form(controller)

    with col_list:
        render_list(controller)


def render_sidebar(controller: ExpenseController):
    st.sidebar.title("💰 Expense Tracker")
    st.sidebar.markdown("---")
    st.sidebar.markdown(f"**Storage:** {controller.mode_label}")

    if st.sidebar.button("🔁 Switch storage mode"):
        result = run_async(controller.toggle_mode())
        reset_form_state()
        st.session_state.flash = f"Switched to {controller.mode_label}."
        show_result(result)

    if st.sidebar.button("🔄 Reload"):
        show_result(run_async(controller.refresh()))

    if st.session_state.get("flash"):
        st.sidebar.info(st.session_state.pop("flash"))

    with st.sidebar.expander("⚙️ Settings"):
        status = validate_all_settings()
        for key in ("local_store", "remote_api", "server", "app"):
            if status.get(key, False):
                st.success(f"✅ {key}")
            else:
                st.error(f"❌ {key}: {status.get(f'{key}_error', 'Not configured')}")
        remote = get_settings().remote_api
        st.markdown(f"Remote endpoint: `{remote.base_url}`")


def render_form(controller: ExpenseController):
    form_state: ExpenseForm = st.session_state.form
    version = st.session_state.form_version
    editing = form_state.expense_id is not None

    st.subheader("✏️ Edit Expense" if editing else "➕ Add Expense")

    categories = controller.categories
    current_category = form_state.category or (categories[0] if categories else "")
    if current_category and current_category not in categories:
        categories = categories + [current_category]

    with st.form(key=f"expense_form_{version}"):
        amount = st.number_input(
            "Amount",
            min_value=0.0,
            step=0.01,
            format="%.2f",
            value=float(form_state.amount) if form_state.amount is not None else 0.0,
        )
        category = st.selectbox(
            "Category",
            options=categories,
            index=categories.index(current_category) if current_category in categories else 0,
        )
        description = st.text_input(
            "Description",
            value=form_state.description,
            placeholder="Optional",
        )
        expense_date = st.date_input(
            "Date",
            value=form_state.date if isinstance(form_state.date, date) else date.today(),
        )

        col1, col2 = st.columns(2)
        with col1:
            submitted = st.form_submit_button("💾 Save", type="primary")
        with col2:
            cleared = st.form_submit_button("🧹 Clear")

    if cleared:
        controller.clear_form()
        reset_form_state()
        st.rerun()

    if submitted:
        form = ExpenseForm(
            amount=amount,
            category=category,
            description=description,
            date=expense_date,
            expense_id=form_state.expense_id,
        )
        result = run_async(controller.submit(form))
        if result.success:
            reset_form_state()
            st.rerun()
        show_result(result)


def render_list(controller: ExpenseController):
    st.subheader("📋 Expenses")

    options = controller.filter_options()
    selected = st.selectbox("Filter by Category", options=options, index=0)
    summary = controller.summary(selected)

    st.markdown(
        f'Total: <span class="big-number">'
        f'{get_settings().app.currency_symbol}{summary.total_display}</span>',
        unsafe_allow_html=True,
    )

    if summary.is_empty:
        st.markdown("<p class='meta'>No expenses to display.</p>", unsafe_allow_html=True)
    else:
        render_rows(controller, summary)

    st.markdown("---")
    render_chart(summary)


def render_rows(controller: ExpenseController, summary: ExpenseSummary):
    symbol = get_settings().app.currency_symbol
    pending = controller.pending_delete

    for record in summary.records:
        identifier = record.identifier
        col_text, col_edit, col_delete = st.columns([6, 1, 1])
        with col_text:
            st.markdown(expense_row_html(record, symbol), unsafe_allow_html=True)
        with col_edit:
            if st.button("✏️", key=f"edit_{identifier}"):
                form = controller.begin_edit(identifier)
                if form is not None:
                    st.session_state.form = form
                    st.session_state.form_version += 1
                    st.rerun()
        with col_delete:
            if st.button("🗑️", key=f"delete_{identifier}"):
                controller.request_delete(identifier)
                st.rerun()

        if pending == identifier:
            st.warning("Delete this expense?")
            col_yes, col_no = st.columns(2)
            with col_yes:
                if st.button("Yes, delete", key=f"confirm_{identifier}"):
                    result = run_async(controller.delete(identifier, confirmed=True))
                    if not result.success:
                        show_result(result)
                    else:
                        if st.session_state.form.expense_id == identifier:
                            reset_form_state()
                        st.rerun()
            with col_no:
                if st.button("Cancel", key=f"cancel_{identifier}"):
                    controller.cancel_delete()
                    st.rerun()


def render_chart(summary: ExpenseSummary):
    st.subheader("📊 Spending by Category")
    if not summary.slices:
        st.info("Add an expense to see the breakdown.")
        return

    data = pd.DataFrame(
        {
            "category": [s.category for s in summary.slices],
            "total": [float(s.total) for s in summary.slices],
            "color": [s.color for s in summary.slices],
        }
    )
    chart = (
        alt.Chart(data)
        .mark_arc(stroke="#111827", strokeWidth=2)
        .encode(
            theta=alt.Theta("total:Q"),
            color=alt.Color(
                "category:N",
                scale=alt.Scale(domain=list(data["category"]), range=list(data["color"])),
                legend=alt.Legend(orient="bottom"),
            ),
            tooltip=["category:N", alt.Tooltip("total:Q", format=".2f")],
        )
    )
    st.altair_chart(chart, use_container_width=True)


if __name__ == "__main__":
    main()
