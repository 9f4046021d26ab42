"""Post-commit event dispatch.

Handlers publish events only after their unit of work has committed.
Subscribers are fire-and-forget: an exception in one is logged and
dropped, so a failing notification can never undo (or fail) an order
mutation that is already durable.  With an ``executor`` the subscribers
run off the caller's thread and are not awaited.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import Executor, Future
from typing import Any, Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], None]


class EventDispatcher:

    def __init__(self, executor: Executor | None = None) -> None:
        self._executor = executor
        self._subscribers: dict[type, list[Subscriber]] = defaultdict(list)

    def subscribe(self, event_type: type, subscriber: Subscriber) -> None:
        self._subscribers[event_type].append(subscriber)

    def publish(self, event: Any) -> None:
        for subscriber in self._subscribers.get(type(event), []):
            if self._executor is None:
                self._run(subscriber, event)
            else:
                future = self._executor.submit(self._run, subscriber, event)
                future.add_done_callback(_log_unexpected)

    @staticmethod
    def _run(subscriber: Subscriber, event: Any) -> None:
        try:
            subscriber(event)
        except Exception:
            logger.exception(
                "Subscriber %r failed on %s", subscriber, type(event).__name__
            )


def _log_unexpected(future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        logger.error("Event dispatch crashed: %r", exc)
