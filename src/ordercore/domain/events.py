"""Domain events published after a unit of work commits.

Events carry plain snapshots so subscribers never touch the aggregate
(or the session it came from) after the transaction is over.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ordercore.domain.model.status import OrderStatus


@dataclass(frozen=True)
class OrderPlaced:
    order_id: int
    order_number: str
    user_id: int | None
    client_type: str
    contact_name: str
    contact_phone: str
    total_amount: Decimal
    items_count: int


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: int
    order_number: str
    user_id: int | None
    old_status: OrderStatus
    new_status: OrderStatus
    total_amount: Decimal
    tracking_number: str | None = None
