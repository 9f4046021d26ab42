"""Application service: Set Stock use case (inventory count)."""

from __future__ import annotations

from ordercore.domain.exceptions import OrderError
from ordercore.domain.repository.unit_of_work import UnitOfWork


class SetStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: int, quantity: int) -> None:
        """Overwrite a product's stock level after a physical count."""
        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise OrderError.not_found(f"Product #{product_id} not found")
            product.set_stock(quantity)
            uow.products.save(product)
            uow.commit()
