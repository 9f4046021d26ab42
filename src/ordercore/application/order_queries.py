"""Application service: read-only order accessors (queries)."""

from __future__ import annotations

from ordercore.application.dto import (
    OrderDTO,
    OrderPage,
    order_to_dto,
    order_to_summary,
)
from ordercore.domain.exceptions import OrderError
from ordercore.domain.repository.order_repository import OrderFilter
from ordercore.domain.repository.unit_of_work import UnitOfWork


class OrderQueryService:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def get_order_by_id(self, order_id: int, user_id: int | None = None) -> OrderDTO:
        """Return one order.

        When ``user_id`` is given the order must belong to that user;
        someone else's order is reported as not found rather than forbidden
        so its existence is not leaked.
        """
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
        if order is None or (user_id is not None and order.user_id != user_id):
            raise OrderError.not_found(f"Order #{order_id} not found")
        return order_to_dto(order)

    def get_order_by_number(self, order_number: str) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_number(order_number)
        if order is None:
            raise OrderError.not_found(f"Order {order_number} not found")
        return order_to_dto(order)

    def get_user_orders(self, user_id: int, filters: OrderFilter) -> OrderPage:
        # Free-text search is a staff feature.
        if filters.search:
            raise OrderError.invalid_input("Search is only available for staff listings")
        with self._uow as uow:
            orders, total = uow.orders.list(filters, user_id=user_id)
        return OrderPage(orders=[order_to_summary(o) for o in orders], total=total)

    def get_all_orders(self, filters: OrderFilter) -> OrderPage:
        with self._uow as uow:
            orders, total = uow.orders.list(filters)
        return OrderPage(orders=[order_to_summary(o) for o in orders], total=total)
