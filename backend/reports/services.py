"""
Sales reporting over the in-memory order store.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from django.utils import timezone

logger = logging.getLogger(__name__)


class SalesReportService:
    """Daily revenue summary for paid orders."""

    @staticmethod
    def daily_summary(orders: Iterable, paid_statuses: Iterable[str], day: Optional[date] = None) -> Dict[str, Any]:
        """
        Sum ``price * quantity`` and ``quantity`` over every paid order created
        on ``day`` (local date; defaults to today).
        """
        day = day or timezone.localdate()
        paid_statuses = set(paid_statuses)

        total_revenue = Decimal("0")
        total_items = 0
        order_count = 0
        for order in orders:
            if order.status not in paid_statuses:
                continue
            if timezone.localdate(order.created_at) != day:
                continue
            total_revenue += order.total
            total_items += order.item_count
            order_count += 1

        logger.debug(f"Sales summary for {day}: {order_count} paid orders, revenue {total_revenue}")
        return {
            "date": day.isoformat(),
            "total_revenue": total_revenue,
            "total_items": total_items,
            "order_count": order_count,
        }
