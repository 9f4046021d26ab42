"""Order aggregate: the core of the domain.

The Order is an aggregate root that owns its line items and its status
history.  It enforces the status state machine and the totals invariant;
stock is never stored here, the application layer moves it through the
product repository's atomic primitives.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.status import (
    CLIENT_CANCELLABLE,
    EDITABLE_STATUSES,
    ChangeSource,
    OrderStatus,
    format_statuses,
    is_allowed,
    is_terminal,
)
from ordercore.domain.model.value_objects import Money, Quantity


class ClientType(Enum):
    RETAIL = "retail"
    WHOLESALE = "wholesale"


class DeliveryMethod(Enum):
    NOVA_POSHTA = "nova_poshta"
    UKRPOSHTA = "ukrposhta"
    PICKUP = "pickup"
    PALLET = "pallet"


class PaymentMethod(Enum):
    COD = "cod"
    BANK_TRANSFER = "bank_transfer"
    ONLINE = "online"
    CARD_PREPAY = "card_prepay"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    PARTIAL = "partial"
    REFUNDED = "refunded"


ORDER_CREATED_COMMENT = "Order created"
ITEMS_EDITED_COMMENT = "Order items edited"


@dataclass(frozen=True)
class ContactInfo:
    """Contact snapshot taken at checkout; later profile edits never touch it."""

    name: str
    phone: str
    email: str


@dataclass(frozen=True)
class DeliveryInfo:
    method: DeliveryMethod
    city: str | None = None
    warehouse_ref: str | None = None
    address: str | None = None


@dataclass
class OrderItem:
    """A line of the order with the product data frozen at order time.

    ``price_at_order`` never changes after the line is created; only the
    quantity may be resized while the order is editable.
    """

    product_id: int
    product_code: str
    product_name: str
    price_at_order: Money
    quantity: Quantity
    is_promo: bool = False
    id: int | None = None

    @property
    def subtotal(self) -> Money:
        return self.price_at_order * self.quantity.value

    def resize(self, new_quantity: int) -> int:
        """Set a new quantity and return the delta (new - old)."""
        delta = new_quantity - self.quantity.value
        self.quantity = Quantity(new_quantity)
        return delta


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One immutable row of the order's status log."""

    old_status: OrderStatus | None
    new_status: OrderStatus
    change_source: ChangeSource
    actor_id: int | None = None
    comment: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None


def generate_order_number(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """Date-coded order number, e.g. ``20261019-0042``."""
    now = now or datetime.now(timezone.utc)
    rng = rng or random
    return f"{now:%Y%m%d}-{rng.randint(0, 9999):04d}"


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use ``Order.place()`` for new orders.  The ``__init__`` stays plain so
    the repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    order_number: str
    user_id: int | None
    client_type: ClientType
    contact: ContactInfo
    delivery: DeliveryInfo
    payment_method: PaymentMethod
    items: list[OrderItem]
    status: OrderStatus = OrderStatus.NEW_ORDER
    payment_status: PaymentStatus = PaymentStatus.PENDING
    total_amount: Money = field(default_factory=Money.zero)
    items_count: int = 0
    comment: str | None = None
    tracking_number: str | None = None
    cancelled_reason: str | None = None
    cancelled_by: str | None = None
    history: list[StatusHistoryEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        order_number: str,
        user_id: int | None,
        client_type: ClientType,
        contact: ContactInfo,
        delivery: DeliveryInfo,
        payment_method: PaymentMethod,
        items: list[OrderItem],
        comment: str | None = None,
    ) -> Order:
        """Create a new order in ``new_order`` with its creation history row."""
        if not items:
            raise OrderError.empty_cart()

        order = Order(
            id=None,
            order_number=order_number,
            user_id=user_id,
            client_type=client_type,
            contact=contact,
            delivery=delivery,
            payment_method=payment_method,
            items=list(items),
            comment=comment,
        )
        order.recalculate_totals()
        order.history.append(
            StatusHistoryEntry(
                old_status=None,
                new_status=OrderStatus.NEW_ORDER,
                change_source=ChangeSource.SYSTEM,
                comment=ORDER_CREATED_COMMENT,
                created_at=order.created_at,
            )
        )
        return order

    # --- State transitions ----------------------------------------------------

    def check_transition(self, target: OrderStatus, source: ChangeSource) -> None:
        """Raise unless ``source`` may move this order to ``target``.

        Pairs missing from the table are always INVALID_TRANSITION; a legal
        pair requested by a client is still FORBIDDEN unless it is a
        self-service cancellation.
        """
        if not is_allowed(self.status, target):
            raise OrderError.invalid_transition(self.status.value, target.value)

        if source == ChangeSource.CLIENT_ACTION:
            if target != OrderStatus.CANCELLED or self.status not in CLIENT_CANCELLABLE:
                raise OrderError.forbidden(
                    "You can only cancel an order while it is in one of: "
                    f"{format_statuses(CLIENT_CANCELLABLE)}"
                )

    def transition_to(
        self,
        target: OrderStatus,
        source: ChangeSource,
        actor_id: int | None = None,
        comment: str | None = None,
    ) -> StatusHistoryEntry:
        """Move to ``target`` and append the history row.

        Stock restoration for cancelled/returned orders must happen in the
        same unit of work (coordinated by the application handler).
        """
        self.check_transition(target, source)

        entry = StatusHistoryEntry(
            old_status=self.status,
            new_status=target,
            change_source=source,
            actor_id=actor_id,
            comment=comment,
        )
        if target == OrderStatus.CANCELLED:
            self.cancelled_reason = comment
            self.cancelled_by = source.value
        self.status = target
        self.history.append(entry)
        return entry

    # --- Item editing ---------------------------------------------------------

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    def ensure_editable(self) -> None:
        if not self.is_editable:
            raise OrderError.invalid_state(
                "Order items can only be edited while the order is in one of: "
                f"{format_statuses(EDITABLE_STATUSES)} (current: {self.status.value})"
            )

    def find_item(self, item_id: int) -> OrderItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise OrderError.not_found(f"Item #{item_id} not found in order {self.order_number}")

    def find_item_for_product(self, product_id: int) -> OrderItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def remove_item(self, item: OrderItem) -> None:
        self.ensure_editable()
        self.items.remove(item)

    def add_item(self, item: OrderItem) -> None:
        self.ensure_editable()
        self.items.append(item)

    def record_items_edited(self, actor_id: int | None) -> StatusHistoryEntry:
        """Recompute totals and log the edit with old status == new status."""
        self.recalculate_totals()
        entry = StatusHistoryEntry(
            old_status=self.status,
            new_status=self.status,
            change_source=ChangeSource.MANAGER,
            actor_id=actor_id,
            comment=ITEMS_EDITED_COMMENT,
        )
        self.history.append(entry)
        return entry

    # --- Totals ---------------------------------------------------------------

    def recalculate_totals(self) -> None:
        total = Money.zero()
        for item in self.items:
            total = total + item.subtotal
        self.total_amount = total
        self.items_count = sum(item.quantity.value for item in self.items)

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)
