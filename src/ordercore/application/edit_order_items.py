"""Application service: Edit Order Items use case.

Staff can remove lines, resize them, or add new products while the order
is still editable.  Each change moves stock by exactly the difference it
causes, and the whole batch is one unit of work: a single failing change
leaves both the order and the stock untouched.
"""

from __future__ import annotations

import logging

from ordercore.application.dto import ItemChange, OrderDTO, order_to_dto
from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.order import Order, OrderItem
from ordercore.domain.model.value_objects import Quantity
from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class EditOrderItemsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int, changes: list[ItemChange], actor_id: int | None) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderError.not_found(f"Order #{order_id} not found")
            order.ensure_editable()
            # Claim the row before moving stock; a concurrent cancel or
            # return that already committed makes this fail.
            if not uow.orders.compare_and_set_status(order_id, order.status, order.status):
                raise OrderError.invalid_state(
                    f"Order {order.order_number} changed status while being edited"
                )

            ledger = StockLedger(uow.products)
            for change in changes:
                self._apply(uow, ledger, order, change)

            order.record_items_edited(actor_id)
            uow.orders.save(order)
            uow.commit()

        logger.info(
            "Order %s items edited by %s: %d change(s), total=%s items=%s",
            order.order_number,
            actor_id,
            len(changes),
            order.total_amount,
            order.items_count,
        )
        return order_to_dto(order)

    # --- Internal helpers -----------------------------------------------------

    def _apply(self, uow: UnitOfWork, ledger: StockLedger, order: Order, change: ItemChange) -> None:
        if change.item_id is not None:
            item = order.find_item(change.item_id)
            if change.remove or change.quantity == 0:
                self._remove(ledger, order, item)
            else:
                self._resize(ledger, item, change.quantity)
            return

        if change.product_id is None:
            raise OrderError.invalid_input("Each change needs an item_id or a product_id")

        existing = order.find_item_for_product(change.product_id)
        if existing is not None:
            if change.remove or change.quantity == 0:
                self._remove(ledger, order, existing)
            else:
                self._resize(ledger, existing, change.quantity)
            return

        if change.remove:
            raise OrderError.not_found(
                f"Product #{change.product_id} is not part of order {order.order_number}"
            )

        product = uow.products.get_by_id(change.product_id)
        if product is None:
            raise OrderError.not_found(f"Product #{change.product_id} not found")

        quantity = Quantity(change.quantity)
        ledger.reserve(product.id, quantity.value, product.name)  # type: ignore[arg-type]
        order.add_item(
            OrderItem(
                product_id=product.id,  # type: ignore[arg-type]
                product_code=product.code,
                product_name=product.name,
                price_at_order=product.price_retail,  # <-- snapshot taken now
                quantity=quantity,
            )
        )

    @staticmethod
    def _remove(ledger: StockLedger, order: Order, item: OrderItem) -> None:
        ledger.restore(item.product_id, item.quantity.value)
        order.remove_item(item)

    @staticmethod
    def _resize(ledger: StockLedger, item: OrderItem, new_quantity: int) -> None:
        # Validate before touching stock; the price is never re-fetched.
        target = Quantity(new_quantity)
        delta = target.value - item.quantity.value
        ledger.adjust(item.product_id, delta, item.product_name)
        item.resize(target.value)
