"""Outbound ports to collaborators outside the order core.

Implementations live in the infrastructure layer (or in the host
application).  They are only ever called after a unit of work commits,
through the ``EventDispatcher``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ordercore.domain.events import OrderPlaced


class Notifier(ABC):

    @abstractmethod
    def notify_manager_new_order(self, summary: OrderPlaced) -> None:
        """Tell staff a new order arrived."""

    @abstractmethod
    def notify_client_status_change(
        self,
        user_id: int,
        order_number: str,
        old_status: str,
        new_status: str,
        tracking_number: str | None = None,
    ) -> None:
        """Tell the order's owner its status changed."""


class LoyaltyHooks(ABC):

    @abstractmethod
    def earn_points(self, user_id: int, order_id: int, amount: Decimal) -> None:
        """Credit points for a completed order."""

    @abstractmethod
    def revoke_points(self, user_id: int, order_id: int) -> None:
        """Take back points earned by an order that was cancelled or returned."""
