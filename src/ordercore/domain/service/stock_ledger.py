"""Domain service: Stock Ledger.

Coordinates reservation and restoration of product stock for orders on
top of the repository's atomic primitives.  It performs no rollback of
its own: it must run inside a unit of work, and raising out of that unit
discards every decrement already applied.
"""

from __future__ import annotations

import logging

from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.order import OrderItem
from ordercore.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class StockLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def reserve(self, product_id: int, quantity: int, product_name: str) -> None:
        """Take ``quantity`` units or raise INSUFFICIENT_STOCK."""
        if quantity <= 0:
            raise OrderError.invalid_input("Reservation quantity must be positive")
        if not self._product_repo.try_decrement_stock(product_id, quantity):
            logger.warning(
                "Stock reservation rejected: product_id=%s requested=%s",
                product_id,
                quantity,
            )
            raise OrderError.insufficient_stock(product_name, product_id)

    def restore(self, product_id: int, quantity: int) -> None:
        """Give ``quantity`` units back to stock."""
        if quantity <= 0:
            raise OrderError.invalid_input("Restore quantity must be positive")
        self._product_repo.increment_stock(product_id, quantity)

    def restore_items(self, items: list[OrderItem]) -> None:
        """Return every line's full quantity, exactly once per line."""
        for item in items:
            self.restore(item.product_id, item.quantity.value)

    def adjust(self, product_id: int, delta: int, product_name: str) -> None:
        """Apply an order-side quantity change.

        A positive ``delta`` means the order takes more units (guarded
        decrement); a negative one gives units back.
        """
        if delta > 0:
            self.reserve(product_id, delta, product_name)
        elif delta < 0:
            self.restore(product_id, -delta)
