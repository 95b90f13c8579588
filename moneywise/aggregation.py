from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from functools import reduce
from typing import Iterable, Sequence

from moneywise.domain import (
    DAILY, WEEKLY, MONTHLY,
    Expense, PeriodBucket, SalaryRecord, SalaryStats, category_label,
)
from moneywise.functional import Maybe, Some, Nothing
from moneywise.periods import normalize_period

ZERO = Decimal("0")

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def sum_in_range(
    records: Iterable,
    start: datetime,
    end: datetime,
    key: str = "occurred_at",
    amount: str = "amount",
) -> Decimal:
    """Sum `amount` over records whose `key` timestamp lies in [start, end].

    Both bounds are inclusive.
    """
    return reduce(
        lambda acc, r: acc + getattr(r, amount) if start <= getattr(r, key) <= end else acc,
        records,
        ZERO,
    )


def short_date(ts: datetime) -> str:
    return f"{ts.month}/{ts.day}/{ts.year}"


def month_label(ts: datetime) -> str:
    return f"{MONTH_ABBR[ts.month - 1]} {ts.year}"


def record_label(e: Expense) -> str:
    name = e.description or category_label(e.category)
    return f"{name} ({short_date(e.occurred_at)})"


def bucket_series(records: Sequence[Expense], period: str) -> tuple[PeriodBucket, ...]:
    """Chart series for an expense list already fetched for `period`.

    Daily and weekly views list every expense as its own bucket in the order
    given. Monthly and yearly views group by month or year label, keeping the
    order in which each label first appears.
    """
    period = normalize_period(period)

    if period in (DAILY, WEEKLY):
        return tuple(PeriodBucket(label=record_label(e), total=e.amount) for e in records)

    label_of = month_label if period == MONTHLY else (lambda ts: str(ts.year))
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for e in records:
        totals[label_of(e.occurred_at)] += e.amount

    return tuple(PeriodBucket(label=label, total=total) for label, total in totals.items())


def current_salary(salaries: Iterable[SalaryRecord]) -> Maybe[SalaryRecord]:
    latest = max(salaries, key=lambda s: s.created_at, default=None)
    if latest is None:
        return Nothing()
    return Some(latest)


def salary_stats(salaries: Sequence[SalaryRecord]) -> SalaryStats:
    total = sum((s.monthly_amount for s in salaries), ZERO)
    if not salaries:
        return SalaryStats(count=0, total=ZERO, average=ZERO)
    return SalaryStats(count=len(salaries), total=total, average=total / len(salaries))


def recent(records: Iterable[Expense], limit: int = 5) -> tuple[Expense, ...]:
    ordered = sorted(records, key=lambda e: e.occurred_at, reverse=True)
    return tuple(ordered[: max(0, limit)])
