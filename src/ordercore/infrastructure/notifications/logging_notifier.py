"""Notifier that writes notifications to the log.

Stands in for the messenger integrations (Telegram, Viber, email), which
live outside the order core.
"""

from __future__ import annotations

import logging

from ordercore.application.ports import Notifier
from ordercore.domain.events import OrderPlaced

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):

    def notify_manager_new_order(self, summary: OrderPlaced) -> None:
        logger.info(
            "New order %s from %s (%s): %s item(s), total %s",
            summary.order_number,
            summary.contact_name,
            summary.contact_phone,
            summary.items_count,
            summary.total_amount,
        )

    def notify_client_status_change(
        self,
        user_id: int,
        order_number: str,
        old_status: str,
        new_status: str,
        tracking_number: str | None = None,
    ) -> None:
        suffix = f" (tracking {tracking_number})" if tracking_number else ""
        logger.info(
            "User %s: order %s changed %s -> %s%s",
            user_id,
            order_number,
            old_status,
            new_status,
            suffix,
        )
