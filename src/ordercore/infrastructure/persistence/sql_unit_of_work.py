"""SQLAlchemy implementation of UnitOfWork.

Each ``with`` block opens a fresh session (one database transaction) and
binds new repositories to it.  An instance may be entered repeatedly but
not from two threads at once; give each worker its own instance.
"""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.infrastructure.persistence.sql_cart_repository import SqlCartRepository
from ordercore.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from ordercore.infrastructure.persistence.sql_product_repository import (
    SqlProductRepository,
)
from ordercore.infrastructure.persistence.sql_wholesale_rule_repository import (
    SqlWholesaleRuleRepository,
)


class SqlUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlUnitOfWork:
        self._session = self._session_factory()
        self.orders = SqlOrderRepository(self._session)
        self.products = SqlProductRepository(self._session)
        self.rules = SqlWholesaleRuleRepository(self._session)
        self.carts = SqlCartRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._session.close()
            self._session = None

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
