"""Row-level change notifications.

The store is the only shared mutable resource between clients; repositories
publish a ``ChangeEvent`` after every committed write and subscribers re-fetch
whatever they mirror. Events carry the changed row so subscriptions can be
filtered (``department = X``, ``session_id = Y``) but no diff is computed.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional

from ..core.enums import ChangeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    kind: ChangeKind
    row: Mapping[str, Any] = field(default_factory=dict)


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    """A live feed scoped to one table and one ``column = value`` filter.

    Close it when the view that owns it goes away; closing twice is harmless.
    """

    def __init__(self, feed: "ChangeFeed", *, table: str, column: str, value: Any, callback: ChangeCallback):
        self._feed = feed
        self.table = table
        self.column = column
        self.value = value
        self._callback = callback
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def matches(self, event: ChangeEvent) -> bool:
        if self._closed or event.table != self.table:
            return False
        return event.row.get(self.column) == self.value

    def deliver(self, event: ChangeEvent) -> None:
        self._callback(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._feed._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Subscription {self.table} {self.column}={self.value!r} {state}>"


class ChangeFeed:
    """Thread-safe in-process publish/subscribe hub.

    Callbacks run on the publishing thread, outside the feed lock. A failing
    subscriber is logged and skipped; it never fails the write that produced
    the event.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []

    def subscribe(self, table: str, *, column: str, value: Any, callback: ChangeCallback) -> Subscription:
        sub = Subscription(self, table=table, column=column, value=value, callback=callback)
        with self._lock:
            self._subscriptions.append(sub)
        logger.debug("Subscribed %r", sub)
        return sub

    def publish(self, event: ChangeEvent) -> int:
        """Deliver ``event`` to matching subscriptions; returns how many were notified."""

        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(event)]

        delivered = 0
        for sub in targets:
            if sub.closed:
                continue
            try:
                sub.deliver(event)
                delivered += 1
            except Exception:
                logger.exception("Subscriber %r failed on %s %s", sub, event.kind.value, event.table)
        return delivered

    def active_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            return sum(1 for s in self._subscriptions if table is None or s.table == table)

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            try:
                self._subscriptions.remove(sub)
            except ValueError:
                return
        logger.debug("Unsubscribed %r", sub)
