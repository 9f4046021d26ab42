"""Application service: Update Order Status use case.

Validates the requested transition on the Order aggregate, restores stock
when the order is cancelled or returned, and appends the history row,
all in one unit of work.

The status write is a compare-and-set on the previous status.  Two
concurrent requests for the same order cannot both pass it, so an order's
units are given back to stock at most once per restoring transition.
"""

from __future__ import annotations

import logging

from ordercore.application.dispatcher import EventDispatcher
from ordercore.application.dto import OrderDTO, order_to_dto
from ordercore.domain.events import OrderStatusChanged
from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.status import STOCK_RESTORING, ChangeSource, OrderStatus
from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class UpdateOrderStatusHandler:

    def __init__(self, uow: UnitOfWork, dispatcher: EventDispatcher) -> None:
        self._uow = uow
        self._dispatcher = dispatcher

    def handle(
        self,
        order_id: int,
        target_status: OrderStatus,
        actor_id: int | None,
        actor_role: ChangeSource,
        comment: str | None = None,
    ) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderError.not_found(f"Order #{order_id} not found")

            old_status = order.status
            order.transition_to(target_status, actor_role, actor_id, comment)

            if not uow.orders.compare_and_set_status(order_id, old_status, target_status):
                # Someone else moved the order first; our view is stale.
                raise OrderError.invalid_transition(old_status.value, target_status.value)

            if target_status in STOCK_RESTORING:
                StockLedger(uow.products).restore_items(order.items)

            uow.orders.save(order)
            uow.commit()

        logger.info(
            "Order %s status %s -> %s by %s (actor_id=%s)",
            order.order_number,
            old_status.value,
            target_status.value,
            actor_role.value,
            actor_id,
        )
        self._dispatcher.publish(
            OrderStatusChanged(
                order_id=order_id,
                order_number=order.order_number,
                user_id=order.user_id,
                old_status=old_status,
                new_status=target_status,
                total_amount=order.total_amount.amount,
                tracking_number=order.tracking_number,
            )
        )
        return order_to_dto(order)
