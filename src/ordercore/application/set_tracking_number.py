"""Application service: attach a carrier tracking number to an order."""

from __future__ import annotations

from ordercore.domain.exceptions import OrderError
from ordercore.domain.repository.unit_of_work import UnitOfWork


class SetTrackingNumberHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int, tracking_number: str) -> None:
        """Record the tracking number once; it is never overwritten."""
        tracking_number = tracking_number.strip()
        if not tracking_number:
            raise OrderError.invalid_input("Tracking number is required")

        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise OrderError.not_found(f"Order #{order_id} not found")
            if order.tracking_number:
                raise OrderError.invalid_state(
                    f"Tracking number already set: {order.tracking_number}"
                )
            if order.is_terminal:
                raise OrderError.invalid_state(
                    f"Order {order.order_number} is {order.status.value}"
                )
            if not uow.orders.compare_and_set_status(order_id, order.status, order.status):
                raise OrderError.invalid_state(
                    f"Order {order.order_number} changed status, try again"
                )
            order.tracking_number = tracking_number
            uow.orders.save(order)
            uow.commit()
