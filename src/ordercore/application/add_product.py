"""Application service: Add Product use case."""

from __future__ import annotations

from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.product import Product
from ordercore.domain.model.value_objects import Money
from ordercore.domain.repository.unit_of_work import UnitOfWork


class AddProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, code: str, name: str, price: str, quantity: int = 0) -> Product:
        """Add a new product to the catalog."""
        if not name or not name.strip():
            raise OrderError.invalid_input("Product name is required")
        if not code or not code.strip():
            raise OrderError.invalid_input("Product code is required")

        product = Product(
            id=None,
            code=code.strip(),
            name=name.strip(),
            price_retail=Money.of(price),
        )
        product.set_stock(quantity)

        with self._uow as uow:
            if uow.products.get_by_code(product.code) is not None:
                raise OrderError.invalid_input(f"Product '{product.code}' already exists")
            uow.products.add(product)
            uow.commit()
        return product
