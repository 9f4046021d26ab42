"""Abstract repository for server-side carts.

Cart storage belongs to the cart collaborator; the order core only reads
a user's lines at checkout and clears them inside the order's unit of work.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.model.cart import CartLine


class CartRepository(ABC):

    @abstractmethod
    def lines_for_user(self, user_id: int) -> list[CartLine]:
        """Resolved cart lines (current product data and retail price)."""

    @abstractmethod
    def add_item(self, user_id: int, product_id: int, quantity: int) -> None:
        """Add units of a product to the user's cart."""

    @abstractmethod
    def clear(self, user_id: int) -> None:
        """Remove every line from the user's cart."""
