import json
import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from moneywise.domain import Expense, SavingsGoal, EXPENSES, SAVINGS, SALARIES
from moneywise.errors import PersistenceError, ValidationError
from moneywise.events import INSERT, UPDATE, DELETE
from moneywise.store import InMemoryStore, load_seed

SEED = Path(__file__).resolve().parent.parent / "data" / "seed.json"


def make_expense(id, amount, ts, user_id="u1"):
    return Expense(id=id, user_id=user_id, amount=Decimal(amount), category="food",
                   occurred_at=ts, created_at=ts, description=id)


def make_goal(id, current="0", target="100", user_id="u1"):
    return SavingsGoal(id=id, user_id=user_id, name=id, target_amount=Decimal(target),
                       current_amount=Decimal(current), created_at=datetime(2024, 1, 1))


def test_query_is_scoped_to_user():
    store = InMemoryStore()
    store.insert(EXPENSES, make_expense("a", "1", datetime(2024, 1, 1)))
    store.insert(EXPENSES, make_expense("b", "2", datetime(2024, 1, 2), user_id="u2"))
    assert [e.id for e in store.query(EXPENSES, "u1")] == ["a"]
    assert store.query(SALARIES, "u1") == []


def test_query_date_range_order_and_limit():
    store = InMemoryStore()
    for day in (5, 1, 20, 31):
        store.insert(EXPENSES, make_expense(f"d{day}", "1", datetime(2024, 1, day)))
    store.insert(EXPENSES, make_expense("feb", "1", datetime(2024, 2, 1)))

    rows = store.query(EXPENSES, "u1", date_range=(datetime(2024, 1, 1), datetime(2024, 1, 31)),
                       order_by="occurred_at")
    assert [e.id for e in rows] == ["d1", "d5", "d20", "d31"]

    newest = store.query(EXPENSES, "u1", order_by="occurred_at", descending=True, limit=2)
    assert [e.id for e in newest] == ["feb", "d31"]


def test_query_unknown_column_or_collection():
    store = InMemoryStore()
    store.insert(EXPENSES, make_expense("a", "1", datetime(2024, 1, 1)))
    with pytest.raises(PersistenceError):
        store.query(EXPENSES, "u1", order_by="nope")
    with pytest.raises(PersistenceError):
        store.query("profiles", "u1")


def test_insert_rejects_duplicates_and_wrong_type():
    store = InMemoryStore()
    store.insert(SAVINGS, make_goal("g1"))
    with pytest.raises(PersistenceError):
        store.insert(SAVINGS, make_goal("g1"))
    with pytest.raises(PersistenceError):
        store.insert(SAVINGS, make_expense("e1", "1", datetime(2024, 1, 1)))


def test_update_and_delete():
    store = InMemoryStore()
    store.insert(SAVINGS, make_goal("g1"))
    updated = store.update(SAVINGS, "g1", current_amount=Decimal("40"))
    assert updated.current_amount == Decimal("40")
    assert store.get(SAVINGS, "g1").current_amount == Decimal("40")

    store.delete(SAVINGS, "g1")
    with pytest.raises(PersistenceError):
        store.get(SAVINGS, "g1")
    with pytest.raises(PersistenceError):
        store.delete(SAVINGS, "g1")


def test_update_errors():
    store = InMemoryStore()
    store.insert(SAVINGS, make_goal("g1"))
    with pytest.raises(PersistenceError):
        store.update(SAVINGS, "missing", current_amount=Decimal("1"))
    with pytest.raises(PersistenceError):
        store.update(SAVINGS, "g1", colour="red")
    with pytest.raises(PersistenceError):
        store.update(SAVINGS, "g1", user_id="u2")


def test_increment_is_guarded():
    store = InMemoryStore()
    store.insert(SAVINGS, make_goal("g1", current="30"))
    assert store.increment(SAVINGS, "g1", "current_amount", Decimal("20"), minimum=Decimal("0")).current_amount == 50
    with pytest.raises(ValidationError):
        store.increment(SAVINGS, "g1", "current_amount", Decimal("-60"), minimum=Decimal("0"))
    assert store.get(SAVINGS, "g1").current_amount == Decimal("50")


def test_change_notifications():
    store = InMemoryStore()
    events = []
    store.subscribe_to_changes("u1", events.append)

    store.insert(SAVINGS, make_goal("g1"))
    store.update(SAVINGS, "g1", current_amount=Decimal("5"))
    store.delete(SAVINGS, "g1")
    store.insert(SAVINGS, make_goal("other", user_id="u2"))

    assert [(e.kind, e.collection, e.record_id) for e in events] == [
        (INSERT, SAVINGS, "g1"),
        (UPDATE, SAVINGS, "g1"),
        (DELETE, SAVINGS, "g1"),
    ]

    store.unsubscribe("u1", events.append)
    store.insert(SAVINGS, make_goal("g2"))
    assert len(events) == 3


def test_load_seed():
    store = load_seed(str(SEED))
    assert len(store.query(EXPENSES, "demo")) == 5
    assert len(store.query(SAVINGS, "demo")) == 2
    salaries = store.query(SALARIES, "demo", order_by="created_at", descending=True)
    assert salaries[0].monthly_amount == Decimal("5000.00")
    assert isinstance(store.get(EXPENSES, "e2").amount, Decimal)


def test_load_seed_logs_counts_per_collection(tmp_path, caplog):
    seed = tmp_path / "seed.json"
    seed.write_text(json.dumps({EXPENSES: [{
        "id": "e1", "user_id": "u1", "amount": 12.5, "category": "food",
        "occurred_at": "2024-03-01T09:00:00",
    }]}), encoding="utf-8")

    with caplog.at_level(logging.INFO, logger="moneywise.store"):
        store = load_seed(str(seed))

    assert store.get(EXPENSES, "e1").amount == Decimal("12.5")
    assert "{'expenses': 1, 'savings': 0, 'salaries': 0}" in caplog.text
