"""Integration tests for the EditOrderItems use case."""

import pytest

from ordercore.application.create_order import CreateOrderHandler
from ordercore.application.dispatcher import EventDispatcher
from ordercore.application.dto import ItemChange
from ordercore.application.edit_order_items import EditOrderItemsHandler
from ordercore.domain.exceptions import ErrorCode, OrderError
from ordercore.domain.model.order import ITEMS_EDITED_COMMENT, ClientType
from ordercore.domain.model.status import ChangeSource, OrderStatus
from ordercore.domain.model.value_objects import Money
from tests.fakes import make_checkout, make_line, make_product, seeded_uow


def _setup(status: OrderStatus = OrderStatus.NEW_ORDER):
    """Order with item 1 = product 1 x2 (100.00) and item 2 = product 2 x3 (50.00).

    Stock after creation: product 1 -> 8, product 2 -> 7, product 3 -> 5.
    """
    p1 = make_product(1, "100.00", 10, name="Widget")
    p2 = make_product(2, "50.00", 10, name="Gadget")
    p3 = make_product(3, "20.00", 5, name="Gizmo")
    uow = seeded_uow(p1, p2, p3)
    created = CreateOrderHandler(uow, EventDispatcher()).handle(
        7, make_checkout(), [make_line(p1, 2), make_line(p2, 3)], ClientType.RETAIL
    )
    uow.stored_order(created.id).status = status
    return EditOrderItemsHandler(uow), uow, created.id


class TestResize:

    def test_increase_reserves_difference(self):
        handler, uow, order_id = _setup()
        dto = handler.handle(order_id, [ItemChange(item_id=1, quantity=5)], actor_id=9)

        assert uow.stock(1) == 5
        assert dto.items_count == 8
        assert dto.total_amount == "650.00"

    def test_decrease_restores_difference(self):
        handler, uow, order_id = _setup()
        handler.handle(order_id, [ItemChange(item_id=2, quantity=1)], actor_id=9)
        assert uow.stock(2) == 9

    def test_increase_beyond_stock_rolls_back(self):
        handler, uow, order_id = _setup()
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, [ItemChange(item_id=1, quantity=11)], actor_id=9)
        assert exc_info.value.code == ErrorCode.INSUFFICIENT_STOCK
        assert uow.stock(1) == 8
        assert uow.stored_order(order_id).items[0].quantity.value == 2

    def test_price_is_not_refreshed(self):
        handler, uow, order_id = _setup()
        product = uow.products.get_by_id(1)
        product.price_retail = Money.of("150.00")
        uow.products.save(product)

        dto = handler.handle(order_id, [ItemChange(item_id=1, quantity=3)], actor_id=9)
        assert dto.items[0].price_at_order == "100.00"

    def test_negative_quantity_rejected(self):
        handler, uow, order_id = _setup()
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, [ItemChange(item_id=1, quantity=-1)], actor_id=9)
        assert exc_info.value.code == ErrorCode.INVALID_INPUT
        assert uow.stock(1) == 8


class TestRemoveAndAdd:

    def test_remove_restores_full_quantity(self):
        handler, uow, order_id = _setup()
        dto = handler.handle(order_id, [ItemChange(item_id=2, remove=True)], actor_id=9)
        assert uow.stock(2) == 10
        assert [i.product_id for i in dto.items] == [1]
        assert dto.total_amount == "200.00"

    def test_zero_quantity_removes(self):
        handler, uow, order_id = _setup()
        handler.handle(order_id, [ItemChange(item_id=1, quantity=0)], actor_id=9)
        assert uow.stock(1) == 10
        assert len(uow.stored_order(order_id).items) == 1

    def test_add_new_product_at_current_price(self):
        handler, uow, order_id = _setup()
        dto = handler.handle(order_id, [ItemChange(product_id=3, quantity=2)], actor_id=9)

        assert uow.stock(3) == 3
        new_line = dto.items[-1]
        assert new_line.product_id == 3
        assert new_line.price_at_order == "20.00"
        assert new_line.id is not None
        assert dto.total_amount == "390.00"

    def test_add_existing_product_resizes_line(self):
        handler, uow, order_id = _setup()
        dto = handler.handle(order_id, [ItemChange(product_id=1, quantity=4)], actor_id=9)
        assert len(dto.items) == 2
        assert dto.items[0].quantity == 4
        assert uow.stock(1) == 6

    def test_add_unknown_product(self):
        handler, _, order_id = _setup()
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, [ItemChange(product_id=42, quantity=1)], actor_id=9)
        assert exc_info.value.code == ErrorCode.NOT_FOUND

    def test_remove_product_not_in_order(self):
        handler, _, order_id = _setup()
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, [ItemChange(product_id=3, remove=True)], actor_id=9)
        assert exc_info.value.code == ErrorCode.NOT_FOUND

    def test_change_without_target(self):
        handler, _, order_id = _setup()
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, [ItemChange(quantity=2)], actor_id=9)
        assert exc_info.value.code == ErrorCode.INVALID_INPUT

    def test_unknown_item(self):
        handler, _, order_id = _setup()
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, [ItemChange(item_id=99, quantity=1)], actor_id=9)
        assert exc_info.value.code == ErrorCode.NOT_FOUND


class TestBatchAndHistory:

    def test_history_row_appended(self):
        handler, uow, order_id = _setup(OrderStatus.CONFIRMED)
        handler.handle(order_id, [ItemChange(item_id=1, quantity=1)], actor_id=9)

        entry = uow.stored_order(order_id).history[-1]
        assert entry.old_status == entry.new_status == OrderStatus.CONFIRMED
        assert entry.change_source == ChangeSource.MANAGER
        assert entry.actor_id == 9
        assert entry.comment == ITEMS_EDITED_COMMENT

    def test_failing_change_undoes_whole_batch(self):
        handler, uow, order_id = _setup()
        changes = [
            ItemChange(item_id=2, remove=True),
            ItemChange(product_id=3, quantity=2),
            ItemChange(item_id=1, quantity=50),
        ]
        with pytest.raises(OrderError):
            handler.handle(order_id, changes, actor_id=9)

        assert (uow.stock(1), uow.stock(2), uow.stock(3)) == (8, 7, 5)
        saved = uow.stored_order(order_id)
        assert [i.product_id for i in saved.items] == [1, 2]
        assert len(saved.history) == 1

    def test_conserves_units(self):
        handler, uow, order_id = _setup()
        handler.handle(
            order_id,
            [ItemChange(item_id=1, quantity=4), ItemChange(product_id=3, quantity=5)],
            actor_id=9,
        )
        saved = uow.stored_order(order_id)
        held = {i.product_id: i.quantity.value for i in saved.items}
        assert uow.stock(1) + held[1] == 10
        assert uow.stock(2) + held[2] == 10
        assert uow.stock(3) + held[3] == 5

    def test_empty_batch_recomputes_totals(self):
        handler, uow, order_id = _setup()
        stored = uow.stored_order(order_id)
        stored.total_amount = Money.of("1.00")
        stored.items_count = 99

        dto = handler.handle(order_id, [], actor_id=9)

        assert dto.total_amount == "350.00"
        assert dto.items_count == 5
        saved = uow.stored_order(order_id)
        assert saved.total_amount == Money.of("350.00")
        assert saved.items_count == 5
        assert [h.comment for h in saved.history[1:]] == [ITEMS_EDITED_COMMENT]
        assert (uow.stock(1), uow.stock(2)) == (8, 7)


class TestEditability:

    @pytest.mark.parametrize(
        "status",
        [OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.RETURNED],
    )
    def test_locked_statuses(self, status):
        handler, uow, order_id = _setup(status)
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, [ItemChange(item_id=1, quantity=1)], actor_id=9)
        assert exc_info.value.code == ErrorCode.INVALID_STATE
        assert uow.stock(1) == 8

    def test_unknown_order(self):
        handler, _, _ = _setup()
        with pytest.raises(OrderError) as exc_info:
            handler.handle(404, [ItemChange(item_id=1, quantity=1)], actor_id=9)
        assert exc_info.value.code == ErrorCode.NOT_FOUND

    def test_cancel_committed_after_load_wins(self, monkeypatch):
        handler, uow, order_id = _setup()
        read = uow.orders.get_by_id

        def read_then_concurrent_cancel(oid):
            order = read(oid)
            # Another request cancels (and restores) between our read and write.
            uow.db.orders[oid].status = OrderStatus.CANCELLED
            uow.db.products[1].quantity += 2
            uow.db.products[2].quantity += 3
            return order

        monkeypatch.setattr(uow.orders, "get_by_id", read_then_concurrent_cancel)
        with pytest.raises(OrderError) as exc_info:
            handler.handle(order_id, [ItemChange(item_id=1, quantity=5)], actor_id=9)
        assert exc_info.value.code == ErrorCode.INVALID_STATE
        assert uow.commits == 1  # only the order creation

