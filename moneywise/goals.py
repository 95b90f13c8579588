from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from moneywise.domain import SavingsGoal
from moneywise.errors import InvalidGoalError, ValidationError
from moneywise.reconciliation import percent
from moneywise.validation import require_positive, require_text, to_amount


def new_goal(user_id: str, name: str, target_amount, created_at: Optional[datetime] = None) -> SavingsGoal:
    """A fresh goal always starts from zero; there is no way to set the amount directly."""
    return SavingsGoal(
        id=str(uuid4()),
        user_id=user_id,
        name=require_text(name, "Goal name"),
        target_amount=require_positive(target_amount, "Goal amount"),
        current_amount=Decimal("0"),
        created_at=created_at or datetime.now(),
    )


def apply_delta(goal: SavingsGoal, delta) -> SavingsGoal:
    """Return a copy of `goal` with `delta` added (deposit if positive, withdrawal if negative)."""
    updated = goal.current_amount + to_amount(delta, "delta")
    if updated < 0:
        raise ValidationError("Current amount cannot be negative.")
    return replace(goal, current_amount=updated)


def progress_percent(goal: SavingsGoal) -> int:
    if goal.target_amount <= 0:
        raise InvalidGoalError(f"Goal {goal.id} has non-positive target {goal.target_amount}")
    return min(max(percent(goal.current_amount, goal.target_amount), 0), 100)
