"""Abstract repository for WholesaleRule."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.model.wholesale_rule import WholesaleRule


class WholesaleRuleRepository(ABC):

    @abstractmethod
    def list_active(self, product_ids: list[int]) -> list[WholesaleRule]:
        """Active global rules plus active rules for any of ``product_ids``."""

    @abstractmethod
    def list_all(self) -> list[WholesaleRule]:
        """Every rule, active or not."""

    @abstractmethod
    def add(self, rule: WholesaleRule) -> None:
        """Insert a new rule; assigns its id."""
