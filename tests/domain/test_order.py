"""Unit tests for the Order aggregate and its business rules."""

import random
from datetime import datetime, timezone

import pytest

from ordercore.domain.exceptions import ErrorCode, OrderError
from ordercore.domain.model.order import (
    ITEMS_EDITED_COMMENT,
    ORDER_CREATED_COMMENT,
    ClientType,
    ContactInfo,
    DeliveryInfo,
    DeliveryMethod,
    Order,
    OrderItem,
    PaymentMethod,
    generate_order_number,
)
from ordercore.domain.model.status import ChangeSource, OrderStatus
from ordercore.domain.model.value_objects import Money, Quantity


def _make_item(product_id: int = 1, qty: int = 1, price: str = "100.00", item_id=None) -> OrderItem:
    """Helper to build a valid line item."""
    return OrderItem(
        product_id=product_id,
        product_code=f"P-{product_id:03d}",
        product_name=f"Product {product_id}",
        price_at_order=Money.of(price),
        quantity=Quantity(qty),
        id=item_id,
    )


def _make_order(*items: OrderItem, user_id=7) -> Order:
    return Order.place(
        order_number="20261019-0001",
        user_id=user_id,
        client_type=ClientType.RETAIL,
        contact=ContactInfo("Olena", "+380501234567", "olena@example.com"),
        delivery=DeliveryInfo(DeliveryMethod.NOVA_POSHTA, city="Kyiv"),
        payment_method=PaymentMethod.COD,
        items=list(items) or [_make_item()],
    )


def _order_in(status: OrderStatus, *items: OrderItem) -> Order:
    order = _make_order(*items)
    order.status = status
    return order


class TestOrderPlacement:

    def test_happy_path(self):
        order = _make_order(_make_item(1, qty=2, price="100.00"), _make_item(2, qty=1, price="50.00"))
        assert order.status == OrderStatus.NEW_ORDER
        assert order.total_amount == Money.of("250.00")
        assert order.items_count == 3
        assert order.id is None  # assigned by repository

    def test_creation_history_row(self):
        order = _make_order()
        assert len(order.history) == 1
        entry = order.history[0]
        assert entry.old_status is None
        assert entry.new_status == OrderStatus.NEW_ORDER
        assert entry.change_source == ChangeSource.SYSTEM
        assert entry.comment == ORDER_CREATED_COMMENT
        assert entry.created_at == order.created_at

    def test_empty_items_rejected(self):
        with pytest.raises(OrderError) as exc_info:
            Order.place(
                order_number="20261019-0001",
                user_id=None,
                client_type=ClientType.RETAIL,
                contact=ContactInfo("Guest", "+380", "g@example.com"),
                delivery=DeliveryInfo(DeliveryMethod.PICKUP),
                payment_method=PaymentMethod.COD,
                items=[],
            )
        assert exc_info.value.code == ErrorCode.EMPTY_CART

    def test_order_number_format(self):
        number = generate_order_number(
            now=datetime(2026, 10, 19, tzinfo=timezone.utc), rng=random.Random(1)
        )
        date_part, seq = number.split("-")
        assert date_part == "20261019"
        assert len(seq) == 4 and seq.isdigit()


class TestTransitions:

    def test_manager_moves_forward(self):
        order = _make_order()
        entry = order.transition_to(OrderStatus.PROCESSING, ChangeSource.MANAGER, actor_id=3)
        assert order.status == OrderStatus.PROCESSING
        assert entry.old_status == OrderStatus.NEW_ORDER
        assert entry.actor_id == 3
        assert order.history[-1] is entry

    def test_absent_pair_is_invalid_transition(self):
        order = _make_order()
        with pytest.raises(OrderError, match='from "new_order" to "shipped"') as exc_info:
            order.transition_to(OrderStatus.SHIPPED, ChangeSource.MANAGER)
        assert exc_info.value.code == ErrorCode.INVALID_TRANSITION
        assert order.status == OrderStatus.NEW_ORDER
        assert len(order.history) == 1

    def test_terminal_status_has_no_exits(self):
        order = _order_in(OrderStatus.CANCELLED)
        assert order.is_terminal
        with pytest.raises(OrderError) as exc_info:
            order.transition_to(OrderStatus.NEW_ORDER, ChangeSource.MANAGER)
        assert exc_info.value.code == ErrorCode.INVALID_TRANSITION

    def test_client_may_cancel_new_order(self):
        order = _make_order()
        order.transition_to(OrderStatus.CANCELLED, ChangeSource.CLIENT_ACTION, actor_id=7, comment="Changed my mind")
        assert order.status == OrderStatus.CANCELLED
        assert order.cancelled_reason == "Changed my mind"
        assert order.cancelled_by == "client_action"

    def test_client_cannot_cancel_confirmed_order(self):
        order = _order_in(OrderStatus.CONFIRMED)
        with pytest.raises(OrderError) as exc_info:
            order.transition_to(OrderStatus.CANCELLED, ChangeSource.CLIENT_ACTION)
        assert exc_info.value.code == ErrorCode.FORBIDDEN
        assert exc_info.value.status_code == 403

    def test_client_cannot_advance_order(self):
        order = _make_order()
        with pytest.raises(OrderError) as exc_info:
            order.transition_to(OrderStatus.PROCESSING, ChangeSource.CLIENT_ACTION)
        assert exc_info.value.code == ErrorCode.FORBIDDEN

    def test_table_checked_before_client_rule(self):
        order = _order_in(OrderStatus.SHIPPED)
        with pytest.raises(OrderError) as exc_info:
            order.transition_to(OrderStatus.CANCELLED, ChangeSource.CLIENT_ACTION)
        assert exc_info.value.code == ErrorCode.INVALID_TRANSITION

    def test_manager_cancel_records_source(self):
        order = _order_in(OrderStatus.PAID)
        order.transition_to(OrderStatus.CANCELLED, ChangeSource.MANAGER, actor_id=1)
        assert order.cancelled_by == "manager"
        assert order.cancelled_reason is None


class TestItemEditing:

    def test_editable_statuses(self):
        for status in (OrderStatus.NEW_ORDER, OrderStatus.PROCESSING, OrderStatus.CONFIRMED):
            assert _order_in(status).is_editable
        for status in (OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.CANCELLED):
            assert not _order_in(status).is_editable

    def test_ensure_editable_names_current_status(self):
        order = _order_in(OrderStatus.SHIPPED)
        with pytest.raises(OrderError, match="current: shipped") as exc_info:
            order.ensure_editable()
        assert exc_info.value.code == ErrorCode.INVALID_STATE

    def test_find_item_missing(self):
        order = _make_order(_make_item(item_id=10))
        with pytest.raises(OrderError) as exc_info:
            order.find_item(99)
        assert exc_info.value.code == ErrorCode.NOT_FOUND

    def test_resize_returns_delta(self):
        item = _make_item(qty=2)
        assert item.resize(5) == 3
        assert item.resize(1) == -4
        assert item.quantity == Quantity(1)

    def test_record_items_edited(self):
        item = _make_item(qty=2, price="100.00", item_id=10)
        order = _make_order(item)
        order.find_item(10).resize(3)
        entry = order.record_items_edited(actor_id=5)

        assert order.total_amount == Money.of("300.00")
        assert order.items_count == 3
        assert entry.old_status == entry.new_status == OrderStatus.NEW_ORDER
        assert entry.change_source == ChangeSource.MANAGER
        assert entry.comment == ITEMS_EDITED_COMMENT

    def test_add_item_rejected_when_not_editable(self):
        order = _order_in(OrderStatus.SHIPPED)
        with pytest.raises(OrderError):
            order.add_item(_make_item(2))
