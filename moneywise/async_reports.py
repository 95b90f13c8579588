import asyncio
import logging
from datetime import datetime
from decimal import Decimal

from moneywise.aggregation import bucket_series, current_salary, recent, sum_in_range
from moneywise.domain import EXPENSES, MONTHLY, SALARIES, SAVINGS, GoalProgress, Overview
from moneywise.errors import InvalidGoalError, PersistenceError
from moneywise.functional import Either, Left, Right
from moneywise.goals import progress_percent
from moneywise.periods import normalize_period, resolve_range
from moneywise.reconciliation import allocation, reconcile
from moneywise.store import RecordStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


async def fetch(store: RecordStore, name: str, collection: str, user_id: str, **filters) -> Either:
    """Run one blocking store query off the event loop.

    A PersistenceError comes back as Left so sibling fetches are unaffected.
    """
    try:
        rows = await asyncio.to_thread(store.query, collection, user_id, **filters)
    except PersistenceError as e:
        logger.warning("Fetch %r for user %s failed: %s", name, user_id, e)
        return Left(e)
    return Right(rows)


def _goal_progress(goals) -> tuple[GoalProgress, ...]:
    out = []
    for g in goals:
        try:
            out.append(GoalProgress(goal=g, percent=progress_percent(g)))
        except InvalidGoalError as e:
            logger.warning("Skipping goal: %s", e)
    return tuple(out)


async def load_overview(
    store: RecordStore,
    user_id: str,
    period: str = MONTHLY,
    reference: datetime | None = None,
    recent_limit: int = 5,
) -> Overview:
    """Fetch everything a dashboard needs concurrently and derive the overview.

    Salary, expense and savings totals are scoped to the reference month; the
    chart series covers `period`. Failed fetches count as empty.
    """
    reference = reference or datetime.now()
    period = normalize_period(period)
    month = resolve_range(MONTHLY, reference)
    window = resolve_range(period, reference)

    names = ("salary", "month_expenses", "month_savings", "series", "recent", "goals")
    results = await asyncio.gather(
        fetch(store, "salary", SALARIES, user_id, order_by="created_at", descending=True, limit=1),
        fetch(store, "month_expenses", EXPENSES, user_id, date_range=month),
        fetch(store, "month_savings", SAVINGS, user_id, date_range=month),
        fetch(store, "series", EXPENSES, user_id, date_range=window, order_by="occurred_at"),
        fetch(store, "recent", EXPENSES, user_id, order_by="occurred_at", descending=True, limit=recent_limit),
        fetch(store, "goals", SAVINGS, user_id, order_by="created_at", descending=True),
    )
    rows = {name: r.get_or_else([]) for name, r in zip(names, results)}
    failed = tuple(name for name, r in zip(names, results) if r.is_left())

    salary = current_salary(rows["salary"]).get_or_else(None)
    snapshot = reconcile(
        salary.monthly_amount if salary else ZERO,
        sum_in_range(rows["month_expenses"], *month),
        sum_in_range(rows["month_savings"], *month, key="created_at", amount="current_amount"),
    )

    return Overview(
        user_id=user_id,
        period=period,
        salary=salary,
        snapshot=snapshot,
        allocation=allocation(snapshot),
        series=bucket_series(rows["series"], period),
        recent_expenses=recent(rows["recent"], recent_limit),
        goals=_goal_progress(rows["goals"]),
        failed=failed,
    )
