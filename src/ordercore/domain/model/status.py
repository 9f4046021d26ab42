"""Order status state machine.

The adjacency table is the single source of truth for which status
changes are legal.  Every ``OrderStatus`` must appear as a key, even the
terminal ones, so adding a status without deciding its outgoing edges
fails at import time.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class OrderStatus(Enum):
    NEW_ORDER = "new_order"
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    PAID = "paid"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class ChangeSource(Enum):
    """Actor category recorded on every status history row."""

    SYSTEM = "system"
    MANAGER = "manager"
    CLIENT_ACTION = "client_action"
    CRON = "cron"


ALLOWED_TRANSITIONS = MappingProxyType({
    OrderStatus.NEW_ORDER: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset(
        {OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.CANCELLED}
    ),
    OrderStatus.PAID: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.COMPLETED, OrderStatus.RETURNED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.RETURNED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.RETURNED: frozenset(),
})

# Statuses a client may cancel from by themselves.
CLIENT_CANCELLABLE = (OrderStatus.NEW_ORDER, OrderStatus.PROCESSING)

# Statuses in which staff may change the order's items.
EDITABLE_STATUSES = (OrderStatus.NEW_ORDER, OrderStatus.PROCESSING, OrderStatus.CONFIRMED)

# Entering one of these gives the order's units back to stock.
STOCK_RESTORING = frozenset({OrderStatus.CANCELLED, OrderStatus.RETURNED})


def _validate_table() -> None:
    missing = set(OrderStatus) - set(ALLOWED_TRANSITIONS)
    if missing:
        names = ", ".join(sorted(s.value for s in missing))
        raise RuntimeError(f"Transition table has no entry for: {names}")
    for source, targets in ALLOWED_TRANSITIONS.items():
        if source in targets:
            raise RuntimeError(f"Status {source.value} may not transition to itself")


_validate_table()


def is_allowed(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def is_terminal(status: OrderStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


def format_statuses(statuses) -> str:
    return ", ".join(s.value for s in statuses)
