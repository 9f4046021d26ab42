"""Product: the catalog entity whose ``quantity`` is the stock of record.

Orders never keep their own copy of stock.  Reservation and restoration go
through ``ProductRepository.try_decrement_stock`` / ``increment_stock``,
which the persistence layer implements as single atomic statements.
"""

from __future__ import annotations

from dataclasses import dataclass

from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.value_objects import Money


@dataclass
class Product:

    id: int | None
    code: str
    name: str
    price_retail: Money
    quantity: int = 0

    def set_stock(self, quantity: int) -> None:
        """Overwrite the stock level (inventory count, not an order flow)."""
        if quantity < 0:
            raise OrderError.invalid_input("Stock level cannot be negative")
        self.quantity = quantity
