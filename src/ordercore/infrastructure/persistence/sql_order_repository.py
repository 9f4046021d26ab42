"""SQLAlchemy implementation of OrderRepository."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session, selectinload

from ordercore.domain.model.order import (
    ClientType,
    ContactInfo,
    DeliveryInfo,
    DeliveryMethod,
    Order,
    OrderItem,
    PaymentMethod,
    PaymentStatus,
    StatusHistoryEntry,
)
from ordercore.domain.model.status import ChangeSource, OrderStatus
from ordercore.domain.model.value_objects import Money, Quantity
from ordercore.domain.repository.order_repository import OrderFilter, OrderRepository
from ordercore.infrastructure.persistence.models import (
    OrderItemRow,
    OrderRow,
    OrderStatusHistoryRow,
)


def to_db_time(value: datetime) -> datetime:
    """Aware datetimes are stored as naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def from_db_time(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        row = self._load_one(OrderRow.id == order_id)
        return self._to_domain(row) if row is not None else None

    def get_by_number(self, order_number: str) -> Order | None:
        row = self._load_one(OrderRow.order_number == order_number)
        return self._to_domain(row) if row is not None else None

    def number_exists(self, order_number: str) -> bool:
        found = self._session.scalar(
            select(OrderRow.id).where(OrderRow.order_number == order_number)
        )
        return found is not None

    def add(self, order: Order) -> None:
        row = OrderRow(
            order_number=order.order_number,
            status=order.status.value,
            created_at=to_db_time(order.created_at),
        )
        self._copy_fields(order, row)
        item_rows = [self._new_item_row(item) for item in order.items]
        history_rows = [self._new_history_row(entry) for entry in order.history]
        row.items.extend(item_rows)
        row.history.extend(history_rows)

        self._session.add(row)
        self._session.flush()

        order.id = row.id
        for item, item_row in zip(order.items, item_rows):
            item.id = item_row.id
        order.history = [
            replace(entry, id=history_row.id)
            for entry, history_row in zip(order.history, history_rows)
        ]

    def save(self, order: Order) -> None:
        row = self._session.get(OrderRow, order.id)
        if row is None:
            raise LookupError(f"Order #{order.id} is not persisted")
        self._copy_fields(order, row)

        # Items: update survivors, drop removed lines, insert new ones.
        rows_by_id = {item_row.id: item_row for item_row in row.items}
        kept_ids = {item.id for item in order.items if item.id is not None}
        for item_row in list(row.items):
            if item_row.id not in kept_ids:
                row.items.remove(item_row)

        new_items: list[tuple[OrderItem, OrderItemRow]] = []
        for item in order.items:
            if item.id is None:
                item_row = self._new_item_row(item)
                row.items.append(item_row)
                new_items.append((item, item_row))
            else:
                item_row = rows_by_id[item.id]
                item_row.quantity = item.quantity.value
                item_row.subtotal = item.subtotal.amount

        # History is append-only.
        new_history: list[tuple[int, OrderStatusHistoryRow]] = []
        for index, entry in enumerate(order.history):
            if entry.id is None:
                history_row = self._new_history_row(entry)
                row.history.append(history_row)
                new_history.append((index, history_row))

        self._session.flush()

        for item, item_row in new_items:
            item.id = item_row.id
        for index, history_row in new_history:
            order.history[index] = replace(order.history[index], id=history_row.id)

    def compare_and_set_status(
        self, order_id: int, expected: OrderStatus, new: OrderStatus
    ) -> bool:
        result = self._session.execute(
            update(OrderRow)
            .where(OrderRow.id == order_id, OrderRow.status == expected.value)
            .values(status=new.value)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def list(self, filters: OrderFilter, user_id: int | None = None) -> tuple[list[Order], int]:
        conditions = []
        if user_id is not None:
            conditions.append(OrderRow.user_id == user_id)
        if filters.status is not None:
            conditions.append(OrderRow.status == filters.status.value)
        if filters.date_from is not None:
            conditions.append(OrderRow.created_at >= to_db_time(filters.date_from))
        if filters.date_to is not None:
            conditions.append(OrderRow.created_at <= to_db_time(filters.date_to))
        if filters.search:
            pattern = f"%{filters.search.lower()}%"
            conditions.append(
                or_(
                    func.lower(OrderRow.order_number).like(pattern),
                    func.lower(OrderRow.contact_name).like(pattern),
                    func.lower(OrderRow.contact_phone).like(pattern),
                )
            )

        total = self._session.scalar(
            select(func.count()).select_from(OrderRow).where(*conditions)
        )
        rows = self._session.scalars(
            select(OrderRow)
            .where(*conditions)
            .options(selectinload(OrderRow.items), selectinload(OrderRow.history))
            .order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return [self._to_domain(row) for row in rows], int(total or 0)

    def list_ids_created_before(self, status: OrderStatus, cutoff: datetime) -> list[int]:
        return list(
            self._session.scalars(
                select(OrderRow.id)
                .where(OrderRow.status == status.value, OrderRow.created_at < to_db_time(cutoff))
                .order_by(OrderRow.id)
            )
        )

    # --- Serialization --------------------------------------------------------

    def _load_one(self, condition) -> OrderRow | None:
        return self._session.scalars(
            select(OrderRow)
            .where(condition)
            .options(selectinload(OrderRow.items), selectinload(OrderRow.history))
            .execution_options(populate_existing=True)
        ).one_or_none()

    @staticmethod
    def _copy_fields(order: Order, row: OrderRow) -> None:
        # status is written only by add() and compare_and_set_status().
        row.user_id = order.user_id
        row.client_type = order.client_type.value
        row.total_amount = order.total_amount.amount
        row.items_count = order.items_count
        row.contact_name = order.contact.name
        row.contact_phone = order.contact.phone
        row.contact_email = order.contact.email
        row.delivery_method = order.delivery.method.value
        row.delivery_city = order.delivery.city
        row.delivery_warehouse_ref = order.delivery.warehouse_ref
        row.delivery_address = order.delivery.address
        row.payment_method = order.payment_method.value
        row.payment_status = order.payment_status.value
        row.comment = order.comment
        row.tracking_number = order.tracking_number
        row.cancelled_reason = order.cancelled_reason
        row.cancelled_by = order.cancelled_by

    @staticmethod
    def _new_item_row(item: OrderItem) -> OrderItemRow:
        return OrderItemRow(
            product_id=item.product_id,
            product_code=item.product_code,
            product_name=item.product_name,
            price_at_order=item.price_at_order.amount,
            quantity=item.quantity.value,
            subtotal=item.subtotal.amount,
            is_promo=item.is_promo,
        )

    @staticmethod
    def _new_history_row(entry: StatusHistoryEntry) -> OrderStatusHistoryRow:
        return OrderStatusHistoryRow(
            old_status=entry.old_status.value if entry.old_status else None,
            new_status=entry.new_status.value,
            changed_by=entry.actor_id,
            change_source=entry.change_source.value,
            comment=entry.comment,
            created_at=to_db_time(entry.created_at),
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        items = [
            OrderItem(
                id=i.id,
                product_id=i.product_id,
                product_code=i.product_code,
                product_name=i.product_name,
                price_at_order=Money(Decimal(i.price_at_order)),
                quantity=Quantity(i.quantity),
                is_promo=i.is_promo,
            )
            for i in row.items
        ]
        history = [
            StatusHistoryEntry(
                id=h.id,
                old_status=OrderStatus(h.old_status) if h.old_status else None,
                new_status=OrderStatus(h.new_status),
                change_source=ChangeSource(h.change_source),
                actor_id=h.changed_by,
                comment=h.comment,
                created_at=from_db_time(h.created_at),
            )
            for h in row.history
        ]
        return Order(
            id=row.id,
            order_number=row.order_number,
            user_id=row.user_id,
            client_type=ClientType(row.client_type),
            contact=ContactInfo(
                name=row.contact_name,
                phone=row.contact_phone,
                email=row.contact_email,
            ),
            delivery=DeliveryInfo(
                method=DeliveryMethod(row.delivery_method),
                city=row.delivery_city,
                warehouse_ref=row.delivery_warehouse_ref,
                address=row.delivery_address,
            ),
            payment_method=PaymentMethod(row.payment_method),
            items=items,
            status=OrderStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            total_amount=Money(Decimal(row.total_amount)),
            items_count=row.items_count,
            comment=row.comment,
            tracking_number=row.tracking_number,
            cancelled_reason=row.cancelled_reason,
            cancelled_by=row.cancelled_by,
            history=history,
            created_at=from_db_time(row.created_at),
        )
