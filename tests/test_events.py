from moneywise.events import ChangeEvent, EventBus, INSERT, DELETE, topic_for


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    seen = []

    def handler(event: ChangeEvent):
        seen.append(event)
        return {"processed": True}

    bus.subscribe(topic_for("u1"), handler)
    results = bus.publish(topic_for("u1"), "expenses", INSERT, "u1", "e1")

    assert results == [{"processed": True}]
    assert len(seen) == 1
    assert seen[0].collection == "expenses"
    assert seen[0].kind == INSERT
    assert seen[0].record_id == "e1"
    assert seen[0].ts


def test_publish_without_subscribers_returns_empty():
    bus = EventBus()
    assert bus.publish(topic_for("nobody"), "savings", DELETE, "nobody", "g1") == []


def test_multiple_subscribers_same_topic():
    bus = EventBus()
    calls = []
    bus.subscribe("t", lambda e: calls.append(1) or 1)
    bus.subscribe("t", lambda e: calls.append(2) or 2)

    assert bus.publish("t", "salaries", INSERT, "u1", "s1") == [1, 2]
    assert calls == [1, 2]
    assert bus.subscribers("t") == 2


def test_topics_are_scoped_per_user():
    bus = EventBus()
    calls = []
    bus.subscribe(topic_for("u1"), calls.append)
    bus.publish(topic_for("u2"), "expenses", INSERT, "u2", "e9")
    assert calls == []


def test_unsubscribe():
    bus = EventBus()
    calls = []
    bus.subscribe("t", calls.append)
    bus.unsubscribe("t", calls.append)
    bus.unsubscribe("missing", calls.append)

    bus.publish("t", "expenses", INSERT, "u1", "e1")
    assert calls == []


def test_handler_may_unsubscribe_itself_during_publish():
    bus = EventBus()
    calls = []

    def once(event):
        calls.append(event.record_id)
        bus.unsubscribe("t", once)

    bus.subscribe("t", once)
    bus.publish("t", "expenses", INSERT, "u1", "e1")
    bus.publish("t", "expenses", INSERT, "u1", "e2")
    assert calls == ["e1"]


def test_failing_handler_does_not_stop_the_others():
    bus = EventBus()
    calls = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe("t", broken)
    bus.subscribe("t", lambda e: calls.append(e.record_id) or "ok")

    assert bus.publish("t", "expenses", INSERT, "u1", "e1") == ["ok"]
    assert calls == ["e1"]
