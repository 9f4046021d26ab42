"""SQLAlchemy implementation of ProductRepository.

Stock changes are single UPDATE statements evaluated by the database, so
the ``quantity >= n`` guard and the decrement happen atomically even when
several sessions reserve the same product at once.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ordercore.domain.model.product import Product
from ordercore.domain.model.value_objects import Money
from ordercore.domain.repository.product_repository import ProductRepository
from ordercore.infrastructure.persistence.models import ProductRow


class SqlProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: int) -> Product | None:
        row = self._fetch_one(select(ProductRow).where(ProductRow.id == product_id))
        return self._to_domain(row) if row is not None else None

    def get_by_code(self, code: str) -> Product | None:
        row = self._fetch_one(select(ProductRow).where(ProductRow.code == code))
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        rows = self._session.scalars(
            select(ProductRow)
            .order_by(ProductRow.id)
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(row) for row in rows]

    def add(self, product: Product) -> None:
        row = ProductRow(
            code=product.code,
            name=product.name,
            price_retail=product.price_retail.amount,
            quantity=product.quantity,
        )
        self._session.add(row)
        self._session.flush()
        product.id = row.id

    def save(self, product: Product) -> None:
        row = self._session.get(ProductRow, product.id)
        if row is None:
            raise LookupError(f"Product #{product.id} is not persisted")
        row.code = product.code
        row.name = product.name
        row.price_retail = product.price_retail.amount
        row.quantity = product.quantity
        self._session.flush()

    def try_decrement_stock(self, product_id: int, quantity: int) -> bool:
        result = self._session.execute(
            update(ProductRow)
            .where(ProductRow.id == product_id, ProductRow.quantity >= quantity)
            .values(quantity=ProductRow.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def increment_stock(self, product_id: int, quantity: int) -> None:
        self._session.execute(
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .values(quantity=ProductRow.quantity + quantity)
            .execution_options(synchronize_session=False)
        )

    # --- Serialization --------------------------------------------------------

    def _fetch_one(self, stmt) -> ProductRow | None:
        # Stock is changed behind the identity map; always re-read the row.
        return self._session.scalars(
            stmt.execution_options(populate_existing=True)
        ).one_or_none()

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            code=row.code,
            name=row.name,
            price_retail=Money(Decimal(row.price_retail)),
            quantity=row.quantity,
        )
