"""Unit of Work: the transaction boundary for multi-step operations.

Usage::

    with uow:
        uow.products.try_decrement_stock(...)
        uow.orders.add(order)
        uow.commit()

Leaving the block without ``commit()`` (normally, or through an
exception) rolls back every change made inside it, stock included.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.repository.cart_repository import CartRepository
from ordercore.domain.repository.order_repository import OrderRepository
from ordercore.domain.repository.product_repository import ProductRepository
from ordercore.domain.repository.wholesale_rule_repository import (
    WholesaleRuleRepository,
)


class UnitOfWork(ABC):

    orders: OrderRepository
    products: ProductRepository
    rules: WholesaleRuleRepository
    carts: CartRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Anything not explicitly committed is discarded.
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change of this unit durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every uncommitted change of this unit."""
