"""Domain service: Wholesale Rule Evaluator.

Pure function over a resolved cart and the rules that apply to it.  It
never raises; the caller decides how a failed check is surfaced.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ordercore.domain.model.cart import CartLine, cart_total
from ordercore.domain.model.order import ClientType
from ordercore.domain.model.value_objects import Money
from ordercore.domain.model.wholesale_rule import RuleType, WholesaleRule


@dataclass(frozen=True)
class RuleCheckResult:
    passed: bool
    message: str | None = None

    @staticmethod
    def ok() -> RuleCheckResult:
        return RuleCheckResult(passed=True)

    @staticmethod
    def violation(message: str) -> RuleCheckResult:
        return RuleCheckResult(passed=False, message=message)


class WholesaleRuleEvaluator:

    def evaluate(
        self,
        client_type: ClientType,
        lines: list[CartLine],
        rules: list[WholesaleRule],
    ) -> RuleCheckResult:
        """Check a cart against active wholesale rules.

        Retail carts always pass.  Global minimum-amount rules are checked
        first against the cart total, then per-product quantity rules
        against their matching lines.  The first violation is returned.
        """
        if client_type != ClientType.WHOLESALE:
            return RuleCheckResult.ok()

        active = [rule for rule in rules if rule.is_active]
        total = cart_total(lines)

        for rule in active:
            if rule.is_global and rule.rule_type == RuleType.MIN_ORDER_AMOUNT:
                minimum = Money(rule.value)
                if total < minimum:
                    return RuleCheckResult.violation(
                        f"Minimum order amount is {minimum}; "
                        f"your cart total is {total}"
                    )

        for line in lines:
            for rule in active:
                if rule.product_id != line.product_id:
                    continue
                result = self._check_line(line, rule)
                if not result.passed:
                    return result

        return RuleCheckResult.ok()

    @staticmethod
    def _check_line(line: CartLine, rule: WholesaleRule) -> RuleCheckResult:
        qty = line.quantity.value
        required = int(rule.value)
        if rule.rule_type == RuleType.MIN_QUANTITY and Decimal(qty) < rule.value:
            return RuleCheckResult.violation(
                f'Minimum quantity for "{line.product_name}" is {required} pcs.'
            )
        if rule.rule_type == RuleType.MULTIPLICITY and qty % required != 0:
            return RuleCheckResult.violation(
                f'"{line.product_name}" is sold in multiples of {required} pcs.'
            )
        return RuleCheckResult.ok()
