# streamlit_app.py
"""
Expense Tracker dashboard (Streamlit).

One ledger per browser session, backed by the JSON storage file
(EXPENSE_TRACKER_STORAGE, default expense_tracker.json).
Run with: streamlit run streamlit_app.py
"""

from datetime import date

import pandas as pd
import plotly.express as px
import streamlit as st

from analysis import (
    category_breakdown, current_budget_status, filter_by_date, filter_by_search_term,
    month_total, recent_transactions, sort_newest_first, today_total, txs_to_df, daily_summary, monthly_summary,
)
from ledger import Ledger
from logging_setup import configure_logging
from models import CATEGORIES, DEFAULT_CATEGORY, TransactionDraft, display_category
from storage import STORAGE_PATH, JsonFileStorage, format_budget, transactions_to_csv_bytes
from validation import InvalidBudgetError, parse_budget, validate_transaction_form
from viz import CHART_COLORS, pie_labels

configure_logging()
st.set_page_config(page_title="Expense Tracker", layout="wide")

BUDGET_INPUT_KEY = "budget_input"

SEVERITY_MESSAGES = {
    "normal": st.success,
    "warning": st.warning,
    "over": st.error,
}

# -----------------------
# Session state
# -----------------------
if "ledger" not in st.session_state:
    st.session_state.ledger = Ledger(JsonFileStorage(STORAGE_PATH))
if "form_errors" not in st.session_state:
    st.session_state.form_errors = {}
if "pending_delete" not in st.session_state:
    st.session_state.pending_delete = None

ledger = st.session_state.ledger
now = date.today()


def tx_table(txs):
    df = txs_to_df(txs)
    if df.empty:
        return df
    df["category"] = df["category"].map(display_category)
    return df[["date", "description", "category", "amount"]].rename(columns=str.capitalize)


# -----------------------
# Sidebar
# -----------------------
st.sidebar.title("Expense Tracker")
st.sidebar.caption(f"Storage: `{STORAGE_PATH}`")
if st.sidebar.button("Reload from storage"):
    ledger.reload()
    st.rerun()

transactions = ledger.transactions

st.title("Expense Tracker Dashboard")

# -----------------------
# Summary cards
# -----------------------
col1, col2 = st.columns(2)
with col1:
    today = today_total(transactions, now.isoformat())
    st.metric("Today's Expenses", f"₹{today.total:,.2f}")
    st.caption(f"{today.count} transaction(s) today")
with col2:
    month = month_total(transactions, now.year, now.month)
    st.metric(now.strftime("%B %Y"), f"₹{month.total:,.2f}")
    if month.top_categories:
        st.markdown("**Top Categories:**")
        for category, amount in month.top_categories:
            st.markdown(f"- {display_category(category)}: ₹{amount:,.2f}")

# -----------------------
# Monthly budget
# -----------------------
st.subheader("Monthly Budget")
budget = ledger.budget
if "editing_budget" not in st.session_state:
    st.session_state.editing_budget = budget is None

if st.session_state.editing_budget:
    # Widget state can only be replaced before the widget is drawn, so a reset is applied on the next run.
    if st.session_state.pop("reset_budget_input", False) or BUDGET_INPUT_KEY not in st.session_state:
        st.session_state[BUDGET_INPUT_KEY] = "" if budget is None else format_budget(budget)
    budget_error = st.session_state.pop("budget_error", None)
    with st.form("budget_form"):
        raw_budget = st.text_input("Set monthly budget (e.g., 5000)", key=BUDGET_INPUT_KEY)
        if st.form_submit_button("Save Budget"):
            try:
                value = parse_budget(raw_budget)
            except InvalidBudgetError as e:
                st.session_state.budget_error = str(e)
                st.session_state.reset_budget_input = True
            else:
                ledger.set_budget(value)
                st.session_state.editing_budget = False
            st.rerun()
    if budget_error:
        st.error(budget_error)
else:
    status = current_budget_status(transactions, budget, now)
    b1, b2, b3 = st.columns(3)
    b1.metric("Budget", f"₹{status.budget:,.2f}")
    b2.metric("Spent", f"₹{status.spent:,.2f}")
    b3.metric("Remaining", f"₹{status.remaining:,.2f}")
    st.progress(status.percent_used / 100)
    SEVERITY_MESSAGES[status.severity](f"{status.percent_used:.0f}% used")
    if st.button("Edit Budget"):
        st.session_state.editing_budget = True
        st.session_state.reset_budget_input = True
        st.rerun()

# -----------------------
# Add transaction
# -----------------------
st.subheader("Add Expense")
with st.form("add_tx_form", clear_on_submit=True):
    c1, c2, c3 = st.columns(3)
    with c1:
        desc = st.text_input("Description", placeholder="e.g., Groceries, Rent")
    with c2:
        amount = st.text_input("Amount (₹)", placeholder="0.00")
    with c3:
        category = st.selectbox("Category", options=CATEGORIES, index=CATEGORIES.index(DEFAULT_CATEGORY),
                                format_func=display_category)
    submitted = st.form_submit_button("Add Expense")
    if submitted:
        errors = validate_transaction_form(desc, amount, category)
        st.session_state.form_errors = errors
        if not errors:
            ledger.add(TransactionDraft(description=desc.strip(), amount=float(amount), category=category))
            st.rerun()
for field, message in st.session_state.form_errors.items():
    st.error(f"{field.capitalize()}: {message}")

# -----------------------
# Recent activity, date filter, chart
# -----------------------
left, right = st.columns(2)
with left:
    st.subheader("Recent Transactions")
    recent = recent_transactions(transactions, 5)
    if not recent:
        st.info("No recent activity")
    else:
        for t in recent:
            st.markdown(f"**{t.description}** ₹{t.amount:,.2f}  \n{t.date} · {display_category(t.category)}")

    st.subheader("Filter by Date")
    selected_date = st.date_input("Date", value=None)
    if selected_date:
        result = filter_by_date(transactions, selected_date.isoformat())
        if result.count:
            st.write(f"Total for {selected_date}: **₹{result.total:,.2f}** ({result.count} transaction(s))")
        else:
            st.info(f"No transactions found for {selected_date}.")

with right:
    st.subheader("Spending by Category")
    breakdown = category_breakdown(transactions)
    if not breakdown:
        st.info("No expense data to display.")
    else:
        chart_df = pd.DataFrame({
            "label": pie_labels(breakdown),
            "amount": [s.amount for s in breakdown],
        })
        fig = px.pie(chart_df, names="label", values="amount", color_discrete_sequence=CHART_COLORS)
        fig.update_traces(marker=dict(line=dict(color="#ffffff", width=2)), textinfo="none")
        st.plotly_chart(fig, use_container_width=True)

# -----------------------
# Spending over time
# -----------------------
if transactions:
    st.subheader("Spending over time")
    daily = daily_summary(txs_to_df(transactions))
    daily["rolling"] = daily["total_spent"].rolling(window=7, min_periods=1).mean()
    fig_daily = px.line(daily, x="date", y="total_spent", labels={"date": "Date", "total_spent": "Amount"})
    fig_daily.add_scatter(x=daily["date"], y=daily["rolling"], mode="lines", name="7-day rolling")
    st.plotly_chart(fig_daily, use_container_width=True)

    monthly = monthly_summary(txs_to_df(transactions))
    fig_month = px.bar(monthly, x="date", y="total_spent", title="Spending per month",
                       labels={"date": "Month", "total_spent": "Amount"})
    st.plotly_chart(fig_month, use_container_width=True)

# -----------------------
# All transactions (search + delete)
# -----------------------
st.subheader("All Transactions")
if not transactions:
    st.info("No transactions yet. Add your first expense above.")
else:
    search = st.text_input("Search by description or category...")
    filtered = sort_newest_first(filter_by_search_term(transactions, search))
    if not filtered and search:
        st.info(f'No transactions match "{search}".')

    for t in filtered:
        row = st.columns([2, 4, 2, 2, 1])
        row[0].write(t.date)
        row[1].write(t.description)
        row[2].write(display_category(t.category))
        row[3].write(f"₹{t.amount:,.2f}")
        if row[4].button("Delete", key=f"delete_{t.id}"):
            st.session_state.pending_delete = t.id
            st.rerun()

    pending = st.session_state.pending_delete
    if pending is not None:
        st.warning("Are you sure you want to delete this transaction? This action cannot be undone.")
        yes, no = st.columns(2)
        if yes.button("Yes, delete"):
            ledger.delete(pending)
            st.session_state.pending_delete = None
            st.rerun()
        if no.button("Cancel"):
            st.session_state.pending_delete = None
            st.rerun()

    st.dataframe(tx_table(filtered), use_container_width=True)
    st.download_button("Download filtered CSV", transactions_to_csv_bytes(filtered),
                       file_name="transactions.csv", mime="text/csv")
