"""Loyalty hooks that only log; the points ledger lives outside the order core."""

from __future__ import annotations

import logging
from decimal import Decimal

from ordercore.application.ports import LoyaltyHooks

logger = logging.getLogger(__name__)


class LoggingLoyaltyHooks(LoyaltyHooks):

    def earn_points(self, user_id: int, order_id: int, amount: Decimal) -> None:
        logger.info("User %s earns points for order #%s (amount %s)", user_id, order_id, amount)

    def revoke_points(self, user_id: int, order_id: int) -> None:
        logger.info("User %s loses points for order #%s", user_id, order_id)
