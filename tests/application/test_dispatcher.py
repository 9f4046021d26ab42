"""Tests for post-commit event dispatch."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from ordercore.application.dispatcher import EventDispatcher
from ordercore.domain.events import OrderPlaced, OrderStatusChanged
from ordercore.domain.model.status import OrderStatus


def _placed(order_id: int = 1) -> OrderPlaced:
    return OrderPlaced(
        order_id=order_id,
        order_number="20261019-0001",
        user_id=7,
        client_type="retail",
        contact_name="Olena",
        contact_phone="+380501234567",
        total_amount=Decimal("350.00"),
        items_count=5,
    )


class TestInlineDispatch:

    def test_delivers_to_matching_subscribers_only(self):
        dispatcher = EventDispatcher()
        placed, changed = [], []
        dispatcher.subscribe(OrderPlaced, placed.append)
        dispatcher.subscribe(OrderStatusChanged, changed.append)

        dispatcher.publish(_placed())

        assert len(placed) == 1
        assert changed == []

    def test_no_subscribers(self):
        EventDispatcher().publish(_placed())

    def test_failing_subscriber_isolated(self, caplog):
        dispatcher = EventDispatcher()
        received = []

        def boom(event):
            raise RuntimeError("smtp unreachable")

        dispatcher.subscribe(OrderPlaced, boom)
        dispatcher.subscribe(OrderPlaced, received.append)

        with caplog.at_level(logging.ERROR):
            dispatcher.publish(_placed())

        assert len(received) == 1
        assert "smtp unreachable" in caplog.text


class TestExecutorDispatch:

    def test_runs_on_executor(self):
        seen = []
        done = threading.Event()

        def record(event):
            seen.append((event.order_id, threading.current_thread().name))
            done.set()

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="events") as executor:
            dispatcher = EventDispatcher(executor)
            dispatcher.subscribe(OrderStatusChanged, record)
            dispatcher.publish(
                OrderStatusChanged(
                    order_id=3,
                    order_number="20261019-0003",
                    user_id=7,
                    old_status=OrderStatus.NEW_ORDER,
                    new_status=OrderStatus.PROCESSING,
                    total_amount=Decimal("10.00"),
                )
            )
            assert done.wait(timeout=5)

        assert seen[0][0] == 3
        assert seen[0][1].startswith("events")

    def test_executor_failure_logged(self, caplog):
        def boom(event):
            raise ValueError("bad payload")

        with caplog.at_level(logging.ERROR):
            with ThreadPoolExecutor(max_workers=1) as executor:
                dispatcher = EventDispatcher(executor)
                dispatcher.subscribe(OrderPlaced, boom)
                dispatcher.publish(_placed())

        assert "bad payload" in caplog.text
