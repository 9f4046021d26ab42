"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url

from ordercore.application.add_product import AddProductHandler
from ordercore.application.add_to_cart import AddToCartHandler
from ordercore.application.add_wholesale_rule import AddWholesaleRuleHandler
from ordercore.application.auto_cancel_orders import AutoCancelStaleOrdersHandler
from ordercore.application.create_order import CreateOrderHandler
from ordercore.application.dispatcher import EventDispatcher
from ordercore.application.edit_order_items import EditOrderItemsHandler
from ordercore.application.order_queries import OrderQueryService
from ordercore.application.set_stock import SetStockHandler
from ordercore.application.set_tracking_number import SetTrackingNumberHandler
from ordercore.application.subscribers import LoyaltySubscriber, NotificationSubscriber
from ordercore.application.update_order_status import UpdateOrderStatusHandler
from ordercore.infrastructure.config import Settings
from ordercore.infrastructure.notifications.logging_loyalty import LoggingLoyaltyHooks
from ordercore.infrastructure.notifications.logging_notifier import LoggingNotifier
from ordercore.infrastructure.persistence.database import (
    create_db_engine,
    create_schema,
    create_session_factory,
)
from ordercore.infrastructure.persistence.sql_unit_of_work import SqlUnitOfWork


@dataclass
class Container:
    settings: Settings
    engine: Engine
    dispatcher: EventDispatcher
    session_factory: object

    def uow(self) -> SqlUnitOfWork:
        return SqlUnitOfWork(self.session_factory)  # type: ignore[arg-type]

    def init_schema(self) -> None:
        create_schema(self.engine)

    # --- Handlers -------------------------------------------------------------

    def create_order(self) -> CreateOrderHandler:
        return CreateOrderHandler(self.uow(), self.dispatcher)

    def update_order_status(self) -> UpdateOrderStatusHandler:
        return UpdateOrderStatusHandler(self.uow(), self.dispatcher)

    def edit_order_items(self) -> EditOrderItemsHandler:
        return EditOrderItemsHandler(self.uow())

    def order_queries(self) -> OrderQueryService:
        return OrderQueryService(self.uow())

    def auto_cancel(self) -> AutoCancelStaleOrdersHandler:
        return AutoCancelStaleOrdersHandler(
            self.uow(), self.update_order_status(), self.settings.auto_cancel_hours
        )

    def set_tracking_number(self) -> SetTrackingNumberHandler:
        return SetTrackingNumberHandler(self.uow())

    def add_product(self) -> AddProductHandler:
        return AddProductHandler(self.uow())

    def set_stock(self) -> SetStockHandler:
        return SetStockHandler(self.uow())

    def add_wholesale_rule(self) -> AddWholesaleRuleHandler:
        return AddWholesaleRuleHandler(self.uow())

    def add_to_cart(self) -> AddToCartHandler:
        return AddToCartHandler(self.uow())


def build_container(settings: Settings | None = None) -> Container:
    settings = settings or Settings()

    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(settings.database_url)
    dispatcher = EventDispatcher()
    NotificationSubscriber(LoggingNotifier()).register(dispatcher)
    LoyaltySubscriber(LoggingLoyaltyHooks()).register(dispatcher)

    return Container(
        settings=settings,
        engine=engine,
        dispatcher=dispatcher,
        session_factory=create_session_factory(engine),
    )
