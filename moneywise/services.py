import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from moneywise.aggregation import current_salary, salary_stats
from moneywise.async_reports import load_overview
from moneywise.domain import (
    EXPENSES, MONTHLY, SALARIES, SAVINGS,
    Expense, Overview, SalaryRecord, SalaryStats, SavingsGoal,
)
from moneywise.events import ChangeEvent
from moneywise.functional import Maybe
from moneywise.goals import apply_delta, new_goal
from moneywise.pending import PendingDeltas
from moneywise.store import RecordStore
from moneywise.validation import require_category, require_positive, require_text

logger = logging.getLogger(__name__)


class ExpenseService:
    """Validated writes and listings for one store's expenses collection."""

    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def add(self, user_id: str, description: str, amount, category: Optional[str] = "food",
            occurred_at: Optional[datetime] = None) -> Expense:
        now = self.clock()
        expense = Expense(
            id=str(uuid4()),
            user_id=user_id,
            amount=require_positive(amount, "Amount"),
            category=require_category(category),
            occurred_at=occurred_at or now,
            created_at=now,
            description=require_text(description, "Description"),
        )
        self.store.insert(EXPENSES, expense)
        return expense

    def delete(self, expense_id: str) -> None:
        self.store.delete(EXPENSES, expense_id)

    def list(self, user_id: str) -> list[Expense]:
        return self.store.query(EXPENSES, user_id, order_by="occurred_at", descending=True)


class SalaryService:
    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def add(self, user_id: str, monthly_amount) -> SalaryRecord:
        record = SalaryRecord(
            id=str(uuid4()),
            user_id=user_id,
            monthly_amount=require_positive(monthly_amount, "Salary"),
            created_at=self.clock(),
        )
        self.store.insert(SALARIES, record)
        return record

    def edit(self, salary_id: str, monthly_amount) -> SalaryRecord:
        return self.store.update(SALARIES, salary_id, monthly_amount=require_positive(monthly_amount, "Salary"))

    def delete(self, salary_id: str) -> None:
        self.store.delete(SALARIES, salary_id)

    def history(self, user_id: str) -> list[SalaryRecord]:
        return self.store.query(SALARIES, user_id, order_by="created_at", descending=True)

    def current(self, user_id: str) -> Maybe[SalaryRecord]:
        return current_salary(self.history(user_id))

    def stats(self, user_id: str) -> SalaryStats:
        return salary_stats(self.history(user_id))


class GoalService:
    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def create(self, user_id: str, name: str, target_amount) -> SavingsGoal:
        goal = new_goal(user_id, name, target_amount, created_at=self.clock())
        self.store.insert(SAVINGS, goal)
        return goal

    def delete(self, goal_id: str) -> None:
        self.store.delete(SAVINGS, goal_id)

    def list(self, user_id: str) -> list[SavingsGoal]:
        return self.store.query(SAVINGS, user_id, order_by="created_at", descending=True)

    def adjust(self, goal_id: str, delta) -> SavingsGoal:
        """Read-modify-write of one goal's current amount.

        Two sessions adjusting the same goal can lose an update; use the
        store's atomic increment where that matters.
        """
        goal = self.store.get(SAVINGS, goal_id)
        updated = apply_delta(goal, delta)
        return self.store.update(SAVINGS, goal_id, current_amount=updated.current_amount)

    def adjust_pending(self, pending: PendingDeltas, goal_id: str) -> SavingsGoal:
        """Apply the caller's pending input for `goal_id`; the input survives a failed write."""
        goal = self.adjust(goal_id, pending.parse(goal_id))
        pending.clear(goal_id)
        return goal


class ReportService:
    """Explicit recompute entry point: every call re-reads the store."""

    def __init__(self, store: RecordStore, recent_limit: int = 5, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.recent_limit = recent_limit
        self.clock = clock

    async def overview_async(self, user_id: str, period: str = MONTHLY,
                             reference: Optional[datetime] = None) -> Overview:
        return await load_overview(self.store, user_id, period, reference or self.clock(), self.recent_limit)

    def overview(self, user_id: str, period: str = MONTHLY, reference: Optional[datetime] = None) -> Overview:
        return asyncio.run(self.overview_async(user_id, period, reference))


class LiveOverview:
    """Keeps one user's overview current by recomputing on every store change.

    Falls back to manual `refresh()` when the store cannot push changes.
    Inside a running event loop recomputes are scheduled as tasks instead of
    blocking the writer; the newest one is kept on `task`.
    """

    def __init__(self, reports: ReportService, user_id: str, period: str = MONTHLY,
                 on_update: Optional[Callable[[Overview], None]] = None):
        self.reports = reports
        self.user_id = user_id
        self.period = period
        self.on_update = on_update
        self.latest: Optional[Overview] = None
        self.live = False
        self.task: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()

    def start(self) -> bool:
        try:
            self.reports.store.subscribe_to_changes(self.user_id, self._on_change)
        except NotImplementedError:
            logger.info("Store has no change feed; overview for %s refreshes manually", self.user_id)
            self.live = False
        else:
            self.live = True
        self._recompute()
        return self.live

    def stop(self) -> None:
        if self.live:
            self.reports.store.unsubscribe(self.user_id, self._on_change)
            self.live = False

    def _publish(self, overview: Overview) -> Overview:
        self.latest = overview
        if self.on_update is not None:
            self.on_update(overview)
        return overview

    def refresh(self) -> Overview:
        """Blocking recompute; use `refresh_async` from inside an event loop."""
        return self._publish(self.reports.overview(self.user_id, self.period))

    async def refresh_async(self) -> Overview:
        return self._publish(await self.reports.overview_async(self.user_id, self.period))

    def _recompute(self):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return self.refresh()

        task = asyncio.ensure_future(self.refresh_async())
        self.task = task
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Overview recompute for %s failed", self.user_id, exc_info=task.exception())

    def _on_change(self, event: ChangeEvent):
        logger.debug("Change %s on %s/%s, recomputing", event.kind, event.collection, event.record_id)
        return self._recompute()
