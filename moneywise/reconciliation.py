from decimal import Decimal, ROUND_HALF_UP

from moneywise.domain import AllocationSlice, ReconciliationSnapshot

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def percent(part: Decimal, whole: Decimal) -> int:
    """part / whole as a whole percentage, halves rounded up. Caller guards whole > 0."""
    return int((Decimal(part) / Decimal(whole) * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def reconcile(salary: Decimal, total_expenses: Decimal, total_savings: Decimal) -> ReconciliationSnapshot:
    salary = Decimal(salary)
    total_expenses = Decimal(total_expenses)
    total_savings = Decimal(total_savings)

    remaining = salary - total_expenses - total_savings
    rate = percent(total_savings, salary) if salary > 0 else 0

    return ReconciliationSnapshot(
        salary=salary,
        total_expenses=total_expenses,
        total_savings_contributions=total_savings,
        remaining=remaining,
        savings_rate_percent=rate,
    )


def allocation(snapshot: ReconciliationSnapshot) -> tuple[AllocationSlice, ...]:
    """Expenses / Savings / Remaining slices for the salary pie.

    Negative remaining shows as nothing; empty slices are left out.
    """
    slices = (
        AllocationSlice("Expenses", snapshot.total_expenses),
        AllocationSlice("Savings", snapshot.total_savings_contributions),
        AllocationSlice("Remaining", max(snapshot.remaining, ZERO)),
    )
    return tuple(s for s in slices if s.value > 0)
