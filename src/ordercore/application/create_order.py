"""Application service: Create Order use case.

Turns a resolved cart into a persisted order.  Every line's stock is
reserved with a guarded decrement inside one unit of work, so either all
reservations and the order are committed together or nothing is.
"""

from __future__ import annotations

import logging

from ordercore.application.dispatcher import EventDispatcher
from ordercore.application.dto import CartItemSpec, CheckoutDetails, OrderDTO, order_to_dto
from ordercore.domain.events import OrderPlaced
from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.cart import CartLine
from ordercore.domain.model.order import (
    ClientType,
    Order,
    OrderItem,
    generate_order_number,
)
from ordercore.domain.model.value_objects import Quantity
from ordercore.domain.repository.order_repository import OrderRepository
from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.domain.service.stock_ledger import StockLedger
from ordercore.domain.service.wholesale_rule_evaluator import WholesaleRuleEvaluator

logger = logging.getLogger(__name__)

ORDER_NUMBER_MAX_ATTEMPTS = 5


class CreateOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        dispatcher: EventDispatcher,
        evaluator: WholesaleRuleEvaluator | None = None,
        number_generator=generate_order_number,
    ) -> None:
        self._uow = uow
        self._dispatcher = dispatcher
        self._evaluator = evaluator or WholesaleRuleEvaluator()
        self._number_generator = number_generator

    def handle(
        self,
        user_id: int | None,
        checkout: CheckoutDetails,
        cart_lines: list[CartLine],
        client_type: ClientType,
    ) -> OrderDTO:
        """Create an order from ``cart_lines``.

        Steps:
        1. Reject an empty cart.
        2. Check wholesale rules (wholesale clients only).
        3. Reserve stock line by line with the guarded decrement.
        4. Persist order, items and the initial history row; clear the
           user's cart in the same unit of work.
        5. After commit, announce the order.
        """
        if not cart_lines:
            raise OrderError.empty_cart()

        with self._uow as uow:
            if client_type == ClientType.WHOLESALE:
                rules = uow.rules.list_active([line.product_id for line in cart_lines])
            else:
                rules = []
            result = self._evaluator.evaluate(client_type, cart_lines, rules)
            if not result.passed:
                raise OrderError.rule_violation(result.message or "Wholesale rule violated")

            ledger = StockLedger(uow.products)
            for line in cart_lines:
                ledger.reserve(line.product_id, line.quantity.value, line.product_name)

            order = Order.place(
                order_number=self._unique_order_number(uow.orders),
                user_id=user_id,
                client_type=client_type,
                contact=checkout.contact(),
                delivery=checkout.delivery(),
                payment_method=checkout.payment_method,
                items=[
                    OrderItem(
                        product_id=line.product_id,
                        product_code=line.product_code,
                        product_name=line.product_name,
                        price_at_order=line.price,  # <-- price snapshot
                        quantity=line.quantity,
                        is_promo=line.is_promo,
                    )
                    for line in cart_lines
                ],
                comment=checkout.comment,
            )
            uow.orders.add(order)

            if user_id is not None:
                uow.carts.clear(user_id)

            uow.commit()

        logger.info(
            "Order %s created: id=%s total=%s items=%s",
            order.order_number,
            order.id,
            order.total_amount,
            order.items_count,
        )
        self._dispatcher.publish(
            OrderPlaced(
                order_id=order.id,  # type: ignore[arg-type]
                order_number=order.order_number,
                user_id=order.user_id,
                client_type=order.client_type.value,
                contact_name=order.contact.name,
                contact_phone=order.contact.phone,
                total_amount=order.total_amount.amount,
                items_count=order.items_count,
            )
        )
        return order_to_dto(order)

    # --- Cart resolution ------------------------------------------------------

    def lines_for_user(self, user_id: int) -> list[CartLine]:
        """Read the user's server-side cart."""
        with self._uow as uow:
            return uow.carts.lines_for_user(user_id)

    def lines_from_specs(self, specs: list[CartItemSpec]) -> list[CartLine]:
        """Resolve a guest cart against the catalog at retail prices."""
        lines: list[CartLine] = []
        with self._uow as uow:
            for spec in specs:
                product = uow.products.get_by_id(spec.product_id)
                if product is None:
                    raise OrderError.not_found(f"Product #{spec.product_id} not found")
                lines.append(
                    CartLine(
                        product_id=product.id,  # type: ignore[arg-type]
                        product_code=product.code,
                        product_name=product.name,
                        price=product.price_retail,
                        quantity=Quantity(spec.quantity),
                    )
                )
        return lines

    # --- Internal helpers -----------------------------------------------------

    def _unique_order_number(self, orders: OrderRepository) -> str:
        for _ in range(ORDER_NUMBER_MAX_ATTEMPTS):
            number = self._number_generator()
            if not orders.number_exists(number):
                return number
        raise RuntimeError(
            f"Could not allocate a unique order number in {ORDER_NUMBER_MAX_ATTEMPTS} attempts"
        )
