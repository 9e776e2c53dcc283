"""Engine collaborator interface: query execution plus change notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from taskbase.errors import QueryError
from taskbase.models import Node, TaskNode

logger = logging.getLogger(__name__)

# Events emitted by engines
INITIALIZED = "initialized"
UPDATE = "update"


class Subscription:
    """Opaque handle returned by ``EventSource.on``; pass it to ``off``."""

    __slots__ = ("event", "callback")

    def __init__(self, event: str, callback: Callable[[], None]):
        self.event = event
        self.callback = callback

    def __repr__(self) -> str:
        return f"<Subscription {self.event!r}>"


class EventSource:
    """Minimal observer registry keyed by event name."""

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscription]] = {}

    def on(self, event: str, callback: Callable[[], None]) -> Subscription:
        sub = Subscription(event, callback)
        self._subscriptions.setdefault(event, []).append(sub)
        return sub

    def off(self, subscription: Subscription) -> None:
        """Release a subscription. Releasing twice is harmless."""
        subs = self._subscriptions.get(subscription.event, [])
        if subscription in subs:
            subs.remove(subscription)

    def subscriber_count(self, event: str) -> int:
        return len(self._subscriptions.get(event, []))

    def emit(self, event: str) -> None:
        # Copy: callbacks may unsubscribe themselves
        for sub in list(self._subscriptions.get(event, [])):
            try:
                sub.callback()
            except Exception:
                logger.exception("Subscriber for %r failed", event)


class Engine(EventSource):
    """Base class for query engines.

    Subclasses implement ``_execute`` returning raw records; ``query`` turns
    them into nodes and wraps failures in ``QueryError``.
    """

    def __init__(self) -> None:
        super().__init__()
        self.initialized = False

    def mark_initialized(self) -> None:
        """Flip the readiness flag and fire the one-shot ``initialized`` event."""
        if self.initialized:
            return
        self.initialized = True
        self.emit(INITIALIZED)

    def notify_updated(self) -> None:
        self.emit(UPDATE)

    def _execute(self, query: str) -> list[Any]:
        raise NotImplementedError

    def query(self, query: str) -> list[Node]:
        """Run a query and return result nodes.

        Raises:
            QueryError: If the engine rejects the query or returns bad records.

        """
        records = self._execute(query)
        if not isinstance(records, list):
            raise QueryError("Engine returned a non-list result", query)
        try:
            return [TaskNode.from_record(r) for r in records]
        except (TypeError, ValueError) as e:
            raise QueryError(f"Malformed result record: {e}", query) from e
