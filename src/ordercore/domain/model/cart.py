"""Cart line items as handed over by the cart collaborator.

Prices arrive already resolved (retail or wholesale); this package only
validates and snapshots them.
"""

from __future__ import annotations

from dataclasses import dataclass

from ordercore.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class CartLine:

    product_id: int
    product_code: str
    product_name: str
    price: Money
    quantity: Quantity
    is_promo: bool = False

    @property
    def subtotal(self) -> Money:
        return self.price * self.quantity.value


def cart_total(lines: list[CartLine]) -> Money:
    total = Money.zero()
    for line in lines:
        total = total + line.subtotal
    return total
