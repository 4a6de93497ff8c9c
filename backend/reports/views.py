from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status
import logging

from orders.desk import get_order_desk

from .services import SalesReportService

logger = logging.getLogger(__name__)


@api_view(["GET"])
def sales_today(request):
    """Revenue and item count of today's paid orders."""
    desk = get_order_desk()
    summary = SalesReportService.daily_summary(
        desk.lifecycle.orders(), desk.pipeline.paid_statuses()
    )
    summary["total_revenue"] = str(summary["total_revenue"])
    return Response(summary, status=status.HTTP_200_OK)
