"""Event subscribers translating order events into collaborator calls."""

from __future__ import annotations

from ordercore.application.dispatcher import EventDispatcher
from ordercore.application.ports import LoyaltyHooks, Notifier
from ordercore.domain.events import OrderPlaced, OrderStatusChanged
from ordercore.domain.model.status import STOCK_RESTORING, OrderStatus


class NotificationSubscriber:

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier

    def register(self, dispatcher: EventDispatcher) -> None:
        dispatcher.subscribe(OrderPlaced, self.on_order_placed)
        dispatcher.subscribe(OrderStatusChanged, self.on_status_changed)

    def on_order_placed(self, event: OrderPlaced) -> None:
        self._notifier.notify_manager_new_order(event)

    def on_status_changed(self, event: OrderStatusChanged) -> None:
        # Guest orders have nobody to notify.
        if event.user_id is None:
            return
        self._notifier.notify_client_status_change(
            event.user_id,
            event.order_number,
            event.old_status.value,
            event.new_status.value,
            event.tracking_number,
        )


class LoyaltySubscriber:
    """Earn points on completion, revoke them on cancellation or return."""

    def __init__(self, hooks: LoyaltyHooks) -> None:
        self._hooks = hooks

    def register(self, dispatcher: EventDispatcher) -> None:
        dispatcher.subscribe(OrderStatusChanged, self.on_status_changed)

    def on_status_changed(self, event: OrderStatusChanged) -> None:
        if event.user_id is None:
            return
        if event.new_status == OrderStatus.COMPLETED:
            self._hooks.earn_points(event.user_id, event.order_id, event.total_amount)
        elif event.new_status in STOCK_RESTORING:
            self._hooks.revoke_points(event.user_id, event.order_id)
