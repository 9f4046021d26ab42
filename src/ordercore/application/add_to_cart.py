"""Application service: Add To Cart use case.

Cart storage belongs to the storefront; this exists so the CLI can stage
a server-side cart for an authenticated checkout.
"""

from __future__ import annotations

from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.value_objects import Quantity
from ordercore.domain.repository.unit_of_work import UnitOfWork


class AddToCartHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, user_id: int, product_id: int, quantity: int) -> None:
        qty = Quantity(quantity)
        with self._uow as uow:
            if uow.products.get_by_id(product_id) is None:
                raise OrderError.not_found(f"Product #{product_id} not found")
            uow.carts.add_item(user_id, product_id, qty.value)
            uow.commit()
