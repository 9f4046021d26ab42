"""SQLAlchemy implementation of WholesaleRuleRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ordercore.domain.model.wholesale_rule import RuleType, WholesaleRule
from ordercore.domain.repository.wholesale_rule_repository import (
    WholesaleRuleRepository,
)
from ordercore.infrastructure.persistence.models import WholesaleRuleRow


class SqlWholesaleRuleRepository(WholesaleRuleRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_active(self, product_ids: list[int]) -> list[WholesaleRule]:
        rows = self._session.scalars(
            select(WholesaleRuleRow)
            .where(
                WholesaleRuleRow.is_active.is_(True),
                or_(
                    WholesaleRuleRow.product_id.is_(None),
                    WholesaleRuleRow.product_id.in_(product_ids),
                ),
            )
            .order_by(WholesaleRuleRow.id)
        )
        return [self._to_domain(row) for row in rows]

    def list_all(self) -> list[WholesaleRule]:
        rows = self._session.scalars(select(WholesaleRuleRow).order_by(WholesaleRuleRow.id))
        return [self._to_domain(row) for row in rows]

    def add(self, rule: WholesaleRule) -> None:
        row = WholesaleRuleRow(
            rule_type=rule.rule_type.value,
            product_id=rule.product_id,
            value=rule.value,
            is_active=rule.is_active,
        )
        self._session.add(row)
        self._session.flush()
        rule.id = row.id

    @staticmethod
    def _to_domain(row: WholesaleRuleRow) -> WholesaleRule:
        return WholesaleRule(
            id=row.id,
            rule_type=RuleType(row.rule_type),
            value=Decimal(row.value),
            product_id=row.product_id,
            is_active=row.is_active,
        )
