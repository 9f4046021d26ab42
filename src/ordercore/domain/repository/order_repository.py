"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.order import Order
from ordercore.domain.model.status import OrderStatus

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class OrderFilter:
    """Pagination and filtering for order listings (newest first)."""

    page: int = 1
    limit: int = 20
    status: OrderStatus | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    search: str | None = None

    def __post_init__(self) -> None:
        if self.page < 1:
            raise OrderError.invalid_input("Page must be 1 or greater")
        if not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise OrderError.invalid_input(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order with its items and history, or None."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Order | None:
        """Return an order by its public number, or None."""

    @abstractmethod
    def number_exists(self, order_number: str) -> bool:
        """True if an order already uses this number."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Insert a new order with items and history; assigns ids."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist order fields, item changes and new history rows.

        Items missing from ``order.items`` are deleted; history rows are
        only ever appended.  The stored status is left alone: it changes
        only through ``compare_and_set_status``.
        """

    @abstractmethod
    def compare_and_set_status(
        self, order_id: int, expected: OrderStatus, new: OrderStatus
    ) -> bool:
        """Atomically move ``expected`` -> ``new``; False if the status moved on.

        With ``expected == new`` it guards a write against a concurrent
        status change without changing anything.
        """

    @abstractmethod
    def list(self, filters: OrderFilter, user_id: int | None = None) -> tuple[list[Order], int]:
        """Return one page of orders plus the total matching count."""

    @abstractmethod
    def list_ids_created_before(self, status: OrderStatus, cutoff: datetime) -> list[int]:
        """Ids of orders in ``status`` created strictly before ``cutoff``."""
