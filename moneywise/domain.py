from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

EXPENSES = "expenses"
SAVINGS = "savings"
SALARIES = "salaries"

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
YEARLY = "yearly"

PERIODS = (DAILY, WEEKLY, MONTHLY, YEARLY)

# category value -> display label
CATEGORIES = {
    "food": "Food & Dining",
    "transport": "Transportation",
    "housing": "Housing",
    "utilities": "Utilities",
    "entertainment": "Entertainment",
    "health": "Health & Fitness",
    "shopping": "Shopping",
    "tuition": "Tuition",
    "other": "Other",
}


def category_label(category: Optional[str]) -> str:
    return CATEGORIES.get(category or "other", CATEGORIES["other"])


@dataclass(frozen=True)
class Expense:
    id: str
    user_id: str
    amount: Decimal           # always >= 0
    category: Optional[str]   # key of CATEGORIES or None
    occurred_at: datetime
    created_at: datetime
    description: str = ""


@dataclass(frozen=True)
class SavingsGoal:
    id: str
    user_id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal   # may exceed target
    created_at: datetime


@dataclass(frozen=True)
class SalaryRecord:
    id: str
    user_id: str
    monthly_amount: Decimal
    created_at: datetime


@dataclass(frozen=True)
class PeriodBucket:
    label: str
    total: Decimal


@dataclass(frozen=True)
class ReconciliationSnapshot:
    salary: Decimal
    total_expenses: Decimal
    total_savings_contributions: Decimal
    remaining: Decimal        # unclamped, may be negative
    savings_rate_percent: int


@dataclass(frozen=True)
class AllocationSlice:
    name: str
    value: Decimal


@dataclass(frozen=True)
class SalaryStats:
    count: int
    total: Decimal
    average: Decimal


@dataclass(frozen=True)
class GoalProgress:
    goal: SavingsGoal
    percent: int


@dataclass(frozen=True)
class Overview:
    """Everything one dashboard refresh derives from the store."""
    user_id: str
    period: str
    salary: Optional[SalaryRecord]
    snapshot: ReconciliationSnapshot
    allocation: tuple[AllocationSlice, ...]
    series: tuple[PeriodBucket, ...]
    recent_expenses: tuple[Expense, ...]
    goals: tuple[GoalProgress, ...]
    failed: tuple[str, ...] = field(default=())
