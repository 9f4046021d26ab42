"""Wholesale ordering rules."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ordercore.domain.exceptions import OrderError


class RuleType(Enum):
    MIN_ORDER_AMOUNT = "min_order_amount"
    MIN_QUANTITY = "min_quantity"
    MULTIPLICITY = "multiplicity"


@dataclass
class WholesaleRule:
    """A constraint applied to wholesale carts only.

    ``product_id`` of ``None`` makes the rule global; per-product rules
    only apply to the cart line for that product.
    """

    id: int | None
    rule_type: RuleType
    value: Decimal
    product_id: int | None = None
    is_active: bool = True

    @staticmethod
    def create(rule_type: RuleType, value: Decimal, product_id: int | None = None) -> WholesaleRule:
        if value <= 0:
            raise OrderError.invalid_input("Rule value must be greater than zero")
        if rule_type == RuleType.MIN_ORDER_AMOUNT and product_id is not None:
            raise OrderError.invalid_input("min_order_amount rules are global")
        if rule_type != RuleType.MIN_ORDER_AMOUNT and product_id is None:
            raise OrderError.invalid_input(f"{rule_type.value} rules need a product")
        if rule_type != RuleType.MIN_ORDER_AMOUNT and value != value.to_integral_value():
            raise OrderError.invalid_input(f"{rule_type.value} rules need a whole number")
        return WholesaleRule(id=None, rule_type=rule_type, value=value, product_id=product_id)

    @property
    def is_global(self) -> bool:
        return self.product_id is None
