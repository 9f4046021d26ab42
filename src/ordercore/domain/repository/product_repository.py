"""Abstract repository for Product, including the stock ledger primitives.

Stock is only ever changed through ``try_decrement_stock`` and
``increment_stock``.  Implementations must execute each as one atomic
store-level statement (never a read followed by a write), so concurrent
reservations on the same product cannot both succeed past the guard.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: int) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_code(self, code: str) -> Product | None:
        """Return a product by its catalog code, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def add(self, product: Product) -> None:
        """Insert a new product; assigns its id."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist catalog fields and stock level of an existing product."""

    @abstractmethod
    def try_decrement_stock(self, product_id: int, quantity: int) -> bool:
        """``quantity -= n WHERE id = product_id AND quantity >= n``.

        Returns False when no row matched (unknown product or not enough stock).
        """

    @abstractmethod
    def increment_stock(self, product_id: int, quantity: int) -> None:
        """Unconditionally ``quantity += n`` (returning reserved units)."""
