import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, NamedTuple

__all__ = ['INSERT', 'UPDATE', 'DELETE', 'ChangeEvent', 'EventBus', 'topic_for']

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


class ChangeEvent(NamedTuple):
    collection: str
    kind: str
    user_id: str
    record_id: str
    ts: str


Handler = Callable[[ChangeEvent], Any]


def topic_for(user_id: str) -> str:
    return f"changes:{user_id}"


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)

    def subscribers(self, name: str) -> int:
        return len(self._subscribers.get(name, ()))

    def publish(self, name: str, collection: str, kind: str, user_id: str, record_id: str) -> List[Any]:
        if name not in self._subscribers:
            return []

        event = ChangeEvent(
            collection=collection,
            kind=kind,
            user_id=user_id,
            record_id=record_id,
            ts=datetime.now().isoformat(),
        )
        logger.debug("Publishing %s %s/%s to %d handler(s)",
                     kind, collection, record_id, len(self._subscribers[name]))

        results = []
        # copy: a handler may unsubscribe while we iterate
        for handler in list(self._subscribers[name]):
            try:
                results.append(handler(event))
            except Exception:
                # the change is already stored; keep notifying the rest
                logger.exception("Handler %r failed on %s %s/%s", handler, kind, collection, record_id)
        return results
