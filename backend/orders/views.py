from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
import logging

from .desk import get_order_desk
from .serializers import AdvanceOrderSerializer, OrderSerializer, OrderSubmitSerializer
from .services import OrderValidationError

logger = logging.getLogger(__name__)


class OrderListCreateView(APIView):
    """
    GET: every order created since the process started, oldest first.
    POST: submit a new order.
    """

    def get(self, request, *args, **kwargs):
        orders = get_order_desk().lifecycle.orders()
        return Response(OrderSerializer(orders, many=True).data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = OrderSubmitSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = get_order_desk().lifecycle.submit_order(serializer.get_order_items())
        except OrderValidationError as e:
            return Response({"message": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "message": "Order received. Please wait for your number to be called.",
                "order_id": order.id,
            },
            status=status.HTTP_201_CREATED,
        )


class OrderDetailView(APIView):
    def get(self, request, order_id, *args, **kwargs):
        order = get_order_desk().lifecycle.get_order(order_id)
        if order is None:
            return Response({"message": "Order not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class AdvanceOrderView(APIView):
    """
    Advance an order to its next stage, by target status or by command name.

    Commands that do not apply (already advanced, wrong stage, wrong role) are
    not errors: the response says ``applied: false`` and nothing changes.
    """

    def post(self, request, order_id, *args, **kwargs):
        serializer = AdvanceOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        lifecycle = get_order_desk().lifecycle
        role = serializer.validated_data.get("role")
        if serializer.validated_data.get("status"):
            order = lifecycle.advance(order_id, serializer.validated_data["status"], role=role)
        else:
            order = lifecycle.advance_by_command(order_id, serializer.validated_data["command"], role=role)

        return Response(
            {
                "applied": order is not None,
                "order": OrderSerializer(order).data if order is not None else None,
            },
            status=status.HTTP_200_OK,
        )
