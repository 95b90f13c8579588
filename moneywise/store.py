import json
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from moneywise.domain import EXPENSES, SAVINGS, SALARIES, Expense, SalaryRecord, SavingsGoal
from moneywise.errors import PersistenceError, ValidationError
from moneywise.events import DELETE, INSERT, UPDATE, ChangeEvent, EventBus, topic_for

logger = logging.getLogger(__name__)

# timestamp used by date_range filters for each collection
DATE_FIELDS = {
    EXPENSES: "occurred_at",
    SAVINGS: "created_at",
    SALARIES: "created_at",
}

RECORD_TYPES = {
    EXPENSES: Expense,
    SAVINGS: SavingsGoal,
    SALARIES: SalaryRecord,
}


class RecordStore(ABC):
    """User-scoped persistence for the expenses, savings and salaries collections.

    Every failure is reported as PersistenceError.
    """

    @abstractmethod
    def query(
        self,
        collection: str,
        user_id: str,
        date_range: Optional[Tuple[datetime, datetime]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list:
        pass

    @abstractmethod
    def get(self, collection: str, record_id: str):
        pass

    @abstractmethod
    def insert(self, collection: str, record) -> str:
        pass

    @abstractmethod
    def update(self, collection: str, record_id: str, **fields):
        pass

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> None:
        pass

    def subscribe_to_changes(self, user_id: str, handler: Callable[[ChangeEvent], object]) -> None:
        raise NotImplementedError("this store does not push change notifications")

    def unsubscribe(self, user_id: str, handler: Callable[[ChangeEvent], object]) -> None:
        raise NotImplementedError("this store does not push change notifications")


class InMemoryStore(RecordStore):
    """Dict-backed store; safe to call from worker threads."""

    def __init__(self, bus: Optional[EventBus] = None):
        self.bus = bus or EventBus()
        self._lock = threading.RLock()
        self._data: Dict[str, Dict[str, object]] = {name: {} for name in RECORD_TYPES}

    def _table(self, collection: str) -> Dict[str, object]:
        try:
            return self._data[collection]
        except KeyError:
            raise PersistenceError(f"Unknown collection {collection!r}") from None

    def _get(self, collection: str, record_id: str):
        table = self._table(collection)
        if record_id not in table:
            raise PersistenceError(f"{collection} record {record_id!r} not found")
        return table[record_id]

    def _notify(self, collection: str, kind: str, record) -> None:
        self.bus.publish(topic_for(record.user_id), collection, kind, record.user_id, record.id)

    def query(self, collection, user_id, date_range=None, order_by=None, descending=False, limit=None):
        with self._lock:
            rows = [r for r in self._table(collection).values() if r.user_id == user_id]

        if date_range is not None:
            start, end = date_range
            field = DATE_FIELDS[collection]
            rows = [r for r in rows if start <= getattr(r, field) <= end]

        if order_by is not None:
            try:
                rows.sort(key=lambda r: getattr(r, order_by), reverse=descending)
            except AttributeError:
                raise PersistenceError(f"{collection} has no column {order_by!r}") from None

        if limit is not None:
            rows = rows[: max(0, limit)]
        return rows

    def get(self, collection: str, record_id: str):
        with self._lock:
            return self._get(collection, record_id)

    def insert(self, collection, record):
        with self._lock:
            table = self._table(collection)
            if not isinstance(record, RECORD_TYPES[collection]):
                raise PersistenceError(f"{type(record).__name__} cannot be stored in {collection}")
            if record.id in table:
                raise PersistenceError(f"{collection} record {record.id!r} already exists")
            table[record.id] = record
        logger.info("Inserted %s/%s for user %s", collection, record.id, record.user_id)
        self._notify(collection, INSERT, record)
        return record.id

    def update(self, collection, record_id, **fields):
        if "id" in fields or "user_id" in fields:
            raise PersistenceError("id and user_id cannot be changed")
        with self._lock:
            current = self._get(collection, record_id)
            try:
                updated = replace(current, **fields)
            except TypeError as e:
                raise PersistenceError(f"Invalid update for {collection}: {e}") from None
            self._data[collection][record_id] = updated
        logger.info("Updated %s/%s fields=%s", collection, record_id, sorted(fields))
        self._notify(collection, UPDATE, updated)
        return updated

    def delete(self, collection, record_id):
        with self._lock:
            record = self._get(collection, record_id)
            del self._data[collection][record_id]
        logger.info("Deleted %s/%s", collection, record_id)
        self._notify(collection, DELETE, record)

    def increment(self, collection: str, record_id: str, field: str, delta: Decimal,
                  minimum: Optional[Decimal] = None):
        """Add `delta` to a numeric field in one locked step.

        Raises ValidationError, leaving the record untouched, if the result
        would fall below `minimum`.
        """
        with self._lock:
            current = self._get(collection, record_id)
            value = getattr(current, field) + delta
            if minimum is not None and value < minimum:
                raise ValidationError(f"{field} cannot go below {minimum}.")
            updated = replace(current, **{field: value})
            self._data[collection][record_id] = updated
        self._notify(collection, UPDATE, updated)
        return updated

    def subscribe_to_changes(self, user_id, handler):
        self.bus.subscribe(topic_for(user_id), handler)

    def unsubscribe(self, user_id, handler):
        self.bus.unsubscribe(topic_for(user_id), handler)


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


def load_seed(path: str, bus: Optional[EventBus] = None) -> InMemoryStore:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    store = InMemoryStore(bus)
    for e in data.get(EXPENSES, []):
        store.insert(EXPENSES, Expense(
            id=e["id"],
            user_id=e["user_id"],
            amount=Decimal(str(e["amount"])),
            category=e.get("category"),
            occurred_at=_ts(e["occurred_at"]),
            created_at=_ts(e.get("created_at", e["occurred_at"])),
            description=e.get("description", ""),
        ))
    for g in data.get(SAVINGS, []):
        store.insert(SAVINGS, SavingsGoal(
            id=g["id"],
            user_id=g["user_id"],
            name=g["name"],
            target_amount=Decimal(str(g["target_amount"])),
            current_amount=Decimal(str(g.get("current_amount", 0))),
            created_at=_ts(g["created_at"]),
        ))
    for s in data.get(SALARIES, []):
        store.insert(SALARIES, SalaryRecord(
            id=s["id"],
            user_id=s["user_id"],
            monthly_amount=Decimal(str(s["monthly_amount"])),
            created_at=_ts(s["created_at"]),
        ))

    logger.info("Loaded seed %s: %s", path, {name: len(data.get(name, [])) for name in RECORD_TYPES})
    return store
