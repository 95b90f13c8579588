from decimal import Decimal

from moneywise.errors import ValidationError
from moneywise.validation import to_amount


class PendingDeltas:
    """Unsubmitted per-goal adjustment inputs, keyed by goal id.

    Owned by the caller (one per view/session); the goal tracker never sees it.
    """

    def __init__(self):
        self._inputs: dict[str, str] = {}

    def set(self, goal_id: str, text: str) -> None:
        self._inputs[goal_id] = text

    def get(self, goal_id: str) -> str:
        return self._inputs.get(goal_id, "")

    def clear(self, goal_id: str) -> None:
        self._inputs.pop(goal_id, None)

    def parse(self, goal_id: str) -> Decimal:
        """Parse the pending input for `goal_id` without clearing it."""
        text = self.get(goal_id)
        if not text.strip():
            raise ValidationError("Please enter an amount to update.")
        try:
            return to_amount(text, "delta")
        except ValidationError:
            raise ValidationError("Please enter an amount to update.") from None

    def __contains__(self, goal_id: str) -> bool:
        return goal_id in self._inputs

    def __len__(self) -> int:
        return len(self._inputs)
