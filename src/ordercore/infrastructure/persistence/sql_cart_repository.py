"""SQLAlchemy implementation of CartRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, joinedload

from ordercore.domain.model.cart import CartLine
from ordercore.domain.model.value_objects import Money, Quantity
from ordercore.domain.repository.cart_repository import CartRepository
from ordercore.infrastructure.persistence.models import CartItemRow


class SqlCartRepository(CartRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def lines_for_user(self, user_id: int) -> list[CartLine]:
        rows = self._session.scalars(
            select(CartItemRow)
            .where(CartItemRow.user_id == user_id)
            .options(joinedload(CartItemRow.product))
            .order_by(CartItemRow.id)
        )
        return [
            CartLine(
                product_id=row.product_id,
                product_code=row.product.code,
                product_name=row.product.name,
                price=Money(Decimal(row.product.price_retail)),
                quantity=Quantity(row.quantity),
            )
            for row in rows
        ]

    def add_item(self, user_id: int, product_id: int, quantity: int) -> None:
        row = self._session.scalars(
            select(CartItemRow).where(
                CartItemRow.user_id == user_id, CartItemRow.product_id == product_id
            )
        ).one_or_none()
        if row is None:
            self._session.add(
                CartItemRow(user_id=user_id, product_id=product_id, quantity=quantity)
            )
        else:
            row.quantity += quantity
        self._session.flush()

    def clear(self, user_id: int) -> None:
        self._session.execute(
            delete(CartItemRow)
            .where(CartItemRow.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
