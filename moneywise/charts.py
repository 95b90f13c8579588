from datetime import datetime
from decimal import Decimal
from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from moneywise.domain import AllocationSlice, GoalProgress, PeriodBucket

SLICE_COLORS = {
    "Expenses": "#ef4444",
    "Savings": "#3b82f6",
    "Remaining": "#22c55e",
}


def format_currency(amount, symbol: str = "$") -> str:
    if amount is None:
        return f"{symbol}0.00"
    value = Decimal(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_date(ts: datetime) -> str:
    return ts.strftime("%b ") + f"{ts.day}, {ts.year}"


def allocation_figure(slices: Sequence[AllocationSlice], symbol: str = "$") -> go.Figure:
    df = pd.DataFrame(
        [{"Part": s.name, "Amount": float(s.value)} for s in slices],
        columns=["Part", "Amount"],
    )
    fig = px.pie(
        df,
        values="Amount",
        names="Part",
        color="Part",
        color_discrete_map=SLICE_COLORS,
        title="Salary Distribution",
    )
    fig.update_traces(hovertemplate="%{label}: " + symbol + "%{value:,.2f}<extra></extra>")
    return fig


def series_figure(buckets: Sequence[PeriodBucket], period: str) -> go.Figure:
    df = pd.DataFrame(
        [{"Label": b.label, "Amount": float(b.total)} for b in buckets],
        columns=["Label", "Amount"],
    )
    fig = px.bar(
        df,
        x="Label",
        y="Amount",
        labels={"Label": "", "Amount": "Amount"},
        title=f"Expenses Over Time ({period})",
    )
    fig.update_traces(marker_color=SLICE_COLORS["Expenses"])
    fig.update_layout(xaxis_tickangle=-45, margin=dict(t=40, b=10, l=10, r=10))
    return fig


def goals_figure(goals: Sequence[GoalProgress]) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=[p.percent for p in goals],
        y=[p.goal.name for p in goals],
        orientation="h",
        text=[f"{p.percent}%" for p in goals],
        marker_color=SLICE_COLORS["Remaining"],
    ))
    fig.update_layout(title="Savings Goals", xaxis=dict(range=[0, 100], title="% complete"))
    return fig
