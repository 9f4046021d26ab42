"""Application service: Add Wholesale Rule use case."""

from __future__ import annotations

from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.value_objects import Money
from ordercore.domain.model.wholesale_rule import RuleType, WholesaleRule
from ordercore.domain.repository.unit_of_work import UnitOfWork


class AddWholesaleRuleHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, rule_type: RuleType, value: str, product_id: int | None = None) -> WholesaleRule:
        rule = WholesaleRule.create(rule_type, Money.of(value).amount, product_id)
        with self._uow as uow:
            if product_id is not None and uow.products.get_by_id(product_id) is None:
                raise OrderError.not_found(f"Product #{product_id} not found")
            uow.rules.add(rule)
            uow.commit()
        return rule
