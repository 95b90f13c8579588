import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd

from moneywise.charts import (
    allocation_figure, series_figure, goals_figure, format_currency, format_date,
)
from moneywise.config import Settings, configure_logging
from moneywise.domain import CATEGORIES, PERIODS, category_label
from moneywise.errors import MoneywiseError
from moneywise.pending import PendingDeltas
from moneywise.services import (
    ExpenseService, SalaryService, GoalService, ReportService, LiveOverview,
)
from moneywise.store import InMemoryStore, load_seed

settings = Settings.from_env()
configure_logging(settings)

st.set_page_config(page_title="Moneywise", layout="wide")

if "store" not in st.session_state:
    if os.path.exists(settings.seed_path):
        st.session_state.store = load_seed(settings.seed_path)
    else:
        st.session_state.store = InMemoryStore()
if "pending" not in st.session_state:
    st.session_state.pending = PendingDeltas()

store = st.session_state.store
pending = st.session_state.pending
expenses = ExpenseService(store)
salaries = SalaryService(store)
goals = GoalService(store)
reports = ReportService(store, recent_limit=settings.recent_limit)

st.sidebar.markdown("### 👤 Profile")
user_id = st.sidebar.text_input("User", value=st.session_state.get("user_id", "demo"))
st.session_state["user_id"] = user_id

if st.session_state.get("live_user") != user_id:
    old = st.session_state.get("live")
    if old is not None:
        old.stop()
    st.session_state.live = LiveOverview(reports, user_id, settings.default_period)
    st.session_state.live.start()
    st.session_state.live_user = user_id
live = st.session_state.live

menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "💼 Salary", "🧾 Expenses", "🎯 Savings", "📑 Reports"])


def money(amount) -> str:
    return format_currency(amount, settings.currency)


def run(action, success: str) -> None:
    try:
        action()
    except MoneywiseError as e:
        st.error(str(e))
    else:
        st.success(success)


if menu == "🏠 Dashboard":
    st.title("Financial Dashboard")
    overview = live.refresh()
    snap = overview.snapshot
    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Monthly Salary", money(snap.salary) if overview.salary else "No salary set")
    k2.metric("Expenses this month", money(snap.total_expenses))
    k3.metric("Remaining", money(snap.remaining))
    k4.metric("Savings Rate", f"{snap.savings_rate_percent}%")

    if overview.failed:
        st.warning("Some figures could not be loaded: " + ", ".join(overview.failed))

    st.subheader("Recent Expenses")
    if overview.recent_expenses:
        st.table(pd.DataFrame([
            {"Date": format_date(e.occurred_at), "Description": e.description, "Amount": money(e.amount)}
            for e in overview.recent_expenses
        ]))
    else:
        st.info("No recent expenses found.")

elif menu == "💼 Salary":
    st.title("Salary Management")
    with st.form("salary_form", clear_on_submit=True):
        amount = st.text_input("Monthly salary")
        if st.form_submit_button("Save Salary"):
            run(lambda: salaries.add(user_id, amount), "Salary saved successfully!")

    stats = salaries.stats(user_id)
    c1, c2, c3 = st.columns(3)
    c1.metric("Records", stats.count)
    c2.metric("Total", money(stats.total))
    c3.metric("Average", money(stats.average))

    for record in salaries.history(user_id):
        col_a, col_b, col_c = st.columns([3, 2, 1])
        col_a.write(f"{money(record.monthly_amount)} · {format_date(record.created_at)}")
        new_amount = col_b.text_input("Edit", key=f"edit_{record.id}", label_visibility="collapsed")
        if col_c.button("Update", key=f"upd_{record.id}"):
            run(lambda: salaries.edit(record.id, new_amount), "Salary updated successfully!")
        if col_c.button("Delete", key=f"del_{record.id}"):
            run(lambda: salaries.delete(record.id), "Salary deleted.")

elif menu == "🧾 Expenses":
    st.title("Expenses")
    with st.form("expense_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            description = st.text_input("Description")
            amount = st.text_input("Amount")
        with col2:
            category = st.selectbox("Category", list(CATEGORIES), format_func=category_label)
            day = st.date_input("Date")
        if st.form_submit_button("Add Expense"):
            occurred = pd.Timestamp(day).to_pydatetime()
            run(lambda: expenses.add(user_id, description, amount, category, occurred),
                "Expense added successfully!")

    rows = expenses.list(user_id)
    if rows:
        for e in rows:
            col_a, col_b = st.columns([5, 1])
            col_a.write(f"{format_date(e.occurred_at)} · {e.description} · "
                        f"{category_label(e.category)} · {money(e.amount)}")
            if col_b.button("Delete", key=f"del_{e.id}"):
                run(lambda: expenses.delete(e.id), "Expense deleted successfully!")
    else:
        st.info("No expenses recorded yet.")

elif menu == "🎯 Savings":
    st.title("Savings Management")
    with st.form("goal_form", clear_on_submit=True):
        name = st.text_input("Goal name")
        target = st.text_input("Goal amount")
        if st.form_submit_button("Set Goal"):
            run(lambda: goals.create(user_id, name, target), "Savings goal added successfully!")

    overview = live.refresh()
    for progress in overview.goals:
        goal = progress.goal
        st.markdown(f"**{goal.name}** · Goal: {money(goal.target_amount)}")
        st.progress(progress.percent / 100, text=f"{money(goal.current_amount)} ({progress.percent}%)")
        col_a, col_b, col_c = st.columns([3, 1, 1])
        pending.set(goal.id, col_a.text_input(
            "Add/Subtract amount", value=pending.get(goal.id), key=f"delta_{goal.id}",
        ))
        if col_b.button("Update", key=f"upd_{goal.id}"):
            run(lambda: goals.adjust_pending(pending, goal.id), "Savings goal updated successfully!")
        if col_c.button("Delete", key=f"del_{goal.id}"):
            run(lambda: goals.delete(goal.id), "Savings goal deleted successfully!")
    if not overview.goals:
        st.info("No savings goals set yet")

elif menu == "📑 Reports":
    st.title("Financial Reports")
    period = st.radio("Period", PERIODS, index=PERIODS.index(settings.default_period), horizontal=True)
    overview = reports.overview(user_id, period)
    if overview.salary is None:
        st.info("Please set your monthly salary to view reports.")
    else:
        left, right = st.columns(2)
        with left:
            st.plotly_chart(allocation_figure(overview.allocation, settings.currency), use_container_width=True)
        with right:
            snap = overview.snapshot
            st.write(f"Monthly Salary: **{money(snap.salary)}**")
            st.write(f"Expenses: **{money(snap.total_expenses)}**")
            st.write(f"Savings: **{money(snap.total_savings_contributions)}**")
            st.write(f"Remaining: **{money(snap.remaining)}**")
        st.plotly_chart(series_figure(overview.series, period), use_container_width=True)
        if overview.goals:
            st.plotly_chart(goals_figure(overview.goals), use_container_width=True)
