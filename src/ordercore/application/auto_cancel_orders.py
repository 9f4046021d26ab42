"""Application service: auto-cancel orders nobody picked up.

Orders left in ``new_order`` longer than the configured age are cancelled
through the regular transition handler, so their stock is restored and
the history records ``cron`` as the change source.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from ordercore.application.update_order_status import UpdateOrderStatusHandler
from ordercore.domain.exceptions import OrderError
from ordercore.domain.model.status import ChangeSource, OrderStatus
from ordercore.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_HOURS = 72


class AutoCancelStaleOrdersHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        transition_handler: UpdateOrderStatusHandler,
        max_age_hours: int = DEFAULT_MAX_AGE_HOURS,
    ) -> None:
        self._uow = uow
        self._transition_handler = transition_handler
        self._max_age_hours = max_age_hours

    def handle(self, now: datetime | None = None) -> int:
        """Cancel every stale order; return how many were cancelled."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(hours=self._max_age_hours)

        with self._uow as uow:
            order_ids = uow.orders.list_ids_created_before(OrderStatus.NEW_ORDER, cutoff)

        reason = f"Auto-cancelled: not processed within {self._max_age_hours} hours"
        cancelled = 0
        for order_id in order_ids:
            try:
                self._transition_handler.handle(
                    order_id, OrderStatus.CANCELLED, None, ChangeSource.CRON, reason
                )
            except OrderError as exc:
                # Picked up by staff (or cancelled) since the listing.
                logger.warning("Skipping auto-cancel of order #%s: %s", order_id, exc)
                continue
            cancelled += 1

        logger.info("Auto-cancel: %d of %d stale order(s) cancelled", cancelled, len(order_ids))
        return cancelled
