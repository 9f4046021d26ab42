"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI (or any other caller) and the application
layer without exposing the aggregates themselves.
"""

from __future__ import annotations

from dataclasses import dataclass

from ordercore.domain.model.order import (
    ContactInfo,
    DeliveryInfo,
    DeliveryMethod,
    Order,
    PaymentMethod,
)

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


# --- Inputs ---------------------------------------------------------------


@dataclass(frozen=True)
class CheckoutDetails:
    """Input: what the customer filled in at checkout."""

    contact_name: str
    contact_phone: str
    contact_email: str
    delivery_method: DeliveryMethod
    payment_method: PaymentMethod
    delivery_city: str | None = None
    delivery_warehouse_ref: str | None = None
    delivery_address: str | None = None
    comment: str | None = None

    def contact(self) -> ContactInfo:
        return ContactInfo(
            name=self.contact_name.strip(),
            phone=self.contact_phone.strip(),
            email=self.contact_email.strip(),
        )

    def delivery(self) -> DeliveryInfo:
        return DeliveryInfo(
            method=self.delivery_method,
            city=self.delivery_city,
            warehouse_ref=self.delivery_warehouse_ref,
            address=self.delivery_address,
        )


@dataclass(frozen=True)
class CartItemSpec:
    """Input: a guest cart line (product id + quantity)."""

    product_id: int
    quantity: int


@dataclass(frozen=True)
class ItemChange:
    """Input: one requested change to an order's items.

    ``item_id`` targets an existing line (resize, or drop with ``remove``
    or a quantity of 0); ``product_id`` alone adds a new line.
    """

    quantity: int = 1
    item_id: int | None = None
    product_id: int | None = None
    remove: bool = False


# --- Outputs --------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemDTO:
    id: int | None
    product_id: int
    product_code: str
    product_name: str
    price_at_order: str  # formatted, e.g. "100.00"
    quantity: int
    subtotal: str
    is_promo: bool


@dataclass(frozen=True)
class StatusHistoryDTO:
    old_status: str | None
    new_status: str
    change_source: str
    actor_id: int | None
    comment: str | None
    created_at: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a fully loaded order."""

    id: int
    order_number: str
    user_id: int | None
    status: str
    client_type: str
    total_amount: str
    items_count: int
    contact_name: str
    contact_phone: str
    contact_email: str
    delivery_method: str
    delivery_city: str | None
    delivery_address: str | None
    payment_method: str
    payment_status: str
    tracking_number: str | None
    comment: str | None
    cancelled_reason: str | None
    cancelled_by: str | None
    created_at: str
    items: list[OrderItemDTO]
    history: list[StatusHistoryDTO]


@dataclass(frozen=True)
class OrderSummaryDTO:
    """Output: one row of an order listing."""

    id: int
    order_number: str
    status: str
    client_type: str
    total_amount: str
    items_count: int
    contact_name: str
    contact_phone: str
    payment_method: str
    payment_status: str
    delivery_method: str
    created_at: str


@dataclass(frozen=True)
class OrderPage:
    orders: list[OrderSummaryDTO]
    total: int


# --- Mapping --------------------------------------------------------------


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        user_id=order.user_id,
        status=order.status.value,
        client_type=order.client_type.value,
        total_amount=str(order.total_amount),
        items_count=order.items_count,
        contact_name=order.contact.name,
        contact_phone=order.contact.phone,
        contact_email=order.contact.email,
        delivery_method=order.delivery.method.value,
        delivery_city=order.delivery.city,
        delivery_address=order.delivery.address,
        payment_method=order.payment_method.value,
        payment_status=order.payment_status.value,
        tracking_number=order.tracking_number,
        comment=order.comment,
        cancelled_reason=order.cancelled_reason,
        cancelled_by=order.cancelled_by,
        created_at=order.created_at.strftime(_TIMESTAMP_FORMAT),
        items=[
            OrderItemDTO(
                id=item.id,
                product_id=item.product_id,
                product_code=item.product_code,
                product_name=item.product_name,
                price_at_order=str(item.price_at_order),
                quantity=item.quantity.value,
                subtotal=str(item.subtotal),
                is_promo=item.is_promo,
            )
            for item in order.items
        ],
        # Newest first, like the admin order page shows it.
        history=[
            StatusHistoryDTO(
                old_status=entry.old_status.value if entry.old_status else None,
                new_status=entry.new_status.value,
                change_source=entry.change_source.value,
                actor_id=entry.actor_id,
                comment=entry.comment,
                created_at=entry.created_at.strftime(_TIMESTAMP_FORMAT),
            )
            for entry in reversed(order.history)
        ],
    )


def order_to_summary(order: Order) -> OrderSummaryDTO:
    return OrderSummaryDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        status=order.status.value,
        client_type=order.client_type.value,
        total_amount=str(order.total_amount),
        items_count=order.items_count,
        contact_name=order.contact.name,
        contact_phone=order.contact.phone,
        payment_method=order.payment_method.value,
        payment_status=order.payment_status.value,
        delivery_method=order.delivery.method.value,
        created_at=order.created_at.strftime(_TIMESTAMP_FORMAT),
    )
