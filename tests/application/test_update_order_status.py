"""Integration tests for the UpdateOrderStatus use case."""

from decimal import Decimal

import pytest

from ordercore.application.create_order import CreateOrderHandler
from ordercore.application.dispatcher import EventDispatcher
from ordercore.application.subscribers import LoyaltySubscriber, NotificationSubscriber
from ordercore.application.update_order_status import UpdateOrderStatusHandler
from ordercore.domain.exceptions import ErrorCode, OrderError
from ordercore.domain.model.order import ClientType
from ordercore.domain.model.status import ALLOWED_TRANSITIONS, ChangeSource, OrderStatus
from tests.fakes import (
    RecordingLoyalty,
    RecordingNotifier,
    make_checkout,
    make_line,
    make_product,
    seeded_uow,
)


def _setup(status: OrderStatus = OrderStatus.NEW_ORDER, qty: int = 10, user_id=7):
    """One order for product 3 (qty units) forced into ``status``."""
    product = make_product(3, "25.00", 100, name="Crate")
    uow = seeded_uow(product)
    dispatcher = EventDispatcher()
    notifier = RecordingNotifier()
    loyalty = RecordingLoyalty()
    NotificationSubscriber(notifier).register(dispatcher)
    LoyaltySubscriber(loyalty).register(dispatcher)

    created = CreateOrderHandler(uow, EventDispatcher()).handle(
        user_id, make_checkout(), [make_line(product, qty)], ClientType.RETAIL
    )
    uow.stored_order(created.id).status = status
    handler = UpdateOrderStatusHandler(uow, dispatcher)
    return handler, uow, created.id, notifier, loyalty


class TestLegalTransitions:

    def test_manager_advances_order(self):
        handler, uow, order_id, _, _ = _setup()
        dto = handler.handle(order_id, OrderStatus.PROCESSING, 1, ChangeSource.MANAGER)

        assert dto.status == "processing"
        saved = uow.stored_order(order_id)
        assert saved.status == OrderStatus.PROCESSING
        assert len(saved.history) == 2
        entry = saved.history[-1]
        assert entry.old_status == OrderStatus.NEW_ORDER
        assert entry.new_status == OrderStatus.PROCESSING
        assert entry.actor_id == 1
        assert entry.change_source == ChangeSource.MANAGER

    def test_history_shown_newest_first(self):
        handler, _, order_id, _, _ = _setup()
        dto = handler.handle(order_id, OrderStatus.PROCESSING, 1, ChangeSource.MANAGER)
        assert [h.new_status for h in dto.history] == ["processing", "new_order"]

    def test_return_restores_stock(self):
        handler, uow, order_id, _, _ = _setup(OrderStatus.SHIPPED, qty=10)
        assert uow.stock(3) == 90

        dto = handler.handle(order_id, OrderStatus.RETURNED, 1, ChangeSource.MANAGER)

        assert dto.status == "returned"
        assert uow.stock(3) == 100
        saved = uow.stored_order(order_id)
        assert len(saved.history) == 2
        assert saved.history[-1].change_source == ChangeSource.MANAGER

    def test_cancel_restores_stock_and_records_reason(self):
        handler, uow, order_id, _, _ = _setup(OrderStatus.PAID, qty=4)
        handler.handle(order_id, OrderStatus.CANCELLED, 1, ChangeSource.MANAGER, "Out of season")

        saved = uow.stored_order(order_id)
        assert uow.stock(3) == 100
        assert saved.cancelled_reason == "Out of season"
        assert saved.cancelled_by == "manager"
        assert saved.history[-1].comment == "Out of season"

    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.NEW_ORDER, OrderStatus.PROCESSING),
            (OrderStatus.PROCESSING, OrderStatus.CONFIRMED),
            (OrderStatus.CONFIRMED, OrderStatus.PAID),
            (OrderStatus.CONFIRMED, OrderStatus.SHIPPED),
            (OrderStatus.PAID, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.COMPLETED),
        ],
    )
    def test_non_restoring_transitions_leave_stock(self, current, target):
        handler, uow, order_id, _, _ = _setup(current, qty=10)
        handler.handle(order_id, target, 1, ChangeSource.MANAGER)
        assert uow.stock(3) == 90


class TestRejectedTransitions:

    def test_skip_ahead_rejected(self):
        handler, uow, order_id, _, _ = _setup()
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, OrderStatus.COMPLETED, 1, ChangeSource.MANAGER)
        assert exc_info.value.code == ErrorCode.INVALID_TRANSITION
        assert uow.stored_order(order_id).status == OrderStatus.NEW_ORDER
        assert len(uow.stored_order(order_id).history) == 1

    @pytest.mark.parametrize(
        "current,target",
        [
            (current, target)
            for current in OrderStatus
            for target in OrderStatus
            if target not in ALLOWED_TRANSITIONS[current]
        ],
    )
    def test_every_absent_pair_rejected(self, current, target):
        handler, uow, order_id, _, _ = _setup(current, qty=10)
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, target, 1, ChangeSource.MANAGER)
        assert exc_info.value.code == ErrorCode.INVALID_TRANSITION
        assert uow.stock(3) == 90
        assert uow.stored_order(order_id).status == current

    def test_client_cannot_cancel_confirmed(self):
        handler, uow, order_id, _, _ = _setup(OrderStatus.CONFIRMED)
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, OrderStatus.CANCELLED, 7, ChangeSource.CLIENT_ACTION)
        assert exc_info.value.code == ErrorCode.FORBIDDEN
        assert uow.stock(3) == 90

    def test_client_cancels_processing_order(self):
        handler, uow, order_id, _, _ = _setup(OrderStatus.PROCESSING)
        handler.handle(order_id, OrderStatus.CANCELLED, 7, ChangeSource.CLIENT_ACTION, "Too slow")
        saved = uow.stored_order(order_id)
        assert saved.cancelled_by == "client_action"
        assert uow.stock(3) == 100

    def test_unknown_order(self):
        handler, _, _, _, _ = _setup()
        with pytest.raises(OrderError) as exc_info:
            handler.handle(999, OrderStatus.PROCESSING, 1, ChangeSource.MANAGER)
        assert exc_info.value.code == ErrorCode.NOT_FOUND


class TestStockRestoredOnce:

    def test_second_cancel_rejected(self):
        handler, uow, order_id, _, _ = _setup(qty=10)
        handler.handle(order_id, OrderStatus.CANCELLED, 1, ChangeSource.MANAGER)
        with pytest.raises(OrderError):
            handler.handle(order_id, OrderStatus.CANCELLED, 1, ChangeSource.MANAGER)
        assert uow.stock(3) == 100

    def test_stale_read_loses_race(self, monkeypatch):
        handler, uow, order_id, _, _ = _setup(OrderStatus.PROCESSING, qty=10)
        read = uow.orders.get_by_id

        def read_then_concurrent_cancel(oid):
            order = read(oid)
            # Another request cancels (and restores) between our read and write.
            uow.db.orders[oid].status = OrderStatus.CANCELLED
            uow.db.products[3].quantity += 10
            return order

        monkeypatch.setattr(uow.orders, "get_by_id", read_then_concurrent_cancel)
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, OrderStatus.CANCELLED, 1, ChangeSource.MANAGER)
        assert exc_info.value.code == ErrorCode.INVALID_TRANSITION
        assert uow.commits == 1  # only the order creation


class TestStatusEvents:

    def test_client_notified(self):
        handler, _, order_id, notifier, _ = _setup()
        handler.handle(order_id, OrderStatus.PROCESSING, 1, ChangeSource.MANAGER)
        assert len(notifier.status_changes) == 1
        user_id, _, old, new, tracking = notifier.status_changes[0]
        assert (user_id, old, new, tracking) == (7, "new_order", "processing", None)

    def test_guest_not_notified(self):
        handler, _, order_id, notifier, _ = _setup(user_id=None)
        handler.handle(order_id, OrderStatus.PROCESSING, 1, ChangeSource.MANAGER)
        assert notifier.status_changes == []

    def test_no_event_when_rejected(self):
        handler, _, order_id, notifier, _ = _setup()
        with pytest.raises(OrderError):
            handler.handle(order_id, OrderStatus.SHIPPED, 1, ChangeSource.MANAGER)
        assert notifier.status_changes == []

    def test_loyalty_earned_on_completion(self):
        handler, _, order_id, _, loyalty = _setup(OrderStatus.SHIPPED, qty=2)
        handler.handle(order_id, OrderStatus.COMPLETED, 1, ChangeSource.MANAGER)
        assert loyalty.earned == [(7, order_id, Decimal("50.00"))]

    def test_loyalty_revoked_on_return(self):
        handler, _, order_id, _, loyalty = _setup(OrderStatus.COMPLETED)
        handler.handle(order_id, OrderStatus.RETURNED, 1, ChangeSource.MANAGER)
        assert loyalty.revoked == [(7, order_id)]
