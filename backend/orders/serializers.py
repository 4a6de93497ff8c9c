from rest_framework import serializers

from .models import OrderItem, OrderStatus
from .pipeline import OPERATOR_ROLES


class OrderItemSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    def create(self, validated_data):
        return OrderItem(**validated_data)


class OrderSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    status = serializers.CharField(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class OrderSubmitSerializer(serializers.Serializer):
    """
    Validates the shape of each submitted line item. An empty or missing item
    list is left to the lifecycle service, which owns that rule.
    """

    items = OrderItemSerializer(many=True, required=False, allow_empty=True)

    def get_order_items(self):
        return [OrderItem(**item) for item in self.validated_data.get("items") or []]


class AdvanceOrderSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    command = serializers.CharField(max_length=50, required=False)
    role = serializers.ChoiceField(choices=OPERATOR_ROLES, required=False)

    def validate(self, attrs):
        if not attrs.get("status") and not attrs.get("command"):
            raise serializers.ValidationError("Provide either 'status' or 'command'.")
        return attrs


def serialize_order(order):
    """Plain-dict representation used for websocket payloads."""
    data = OrderSerializer(order).data
    return {**data, "items": [dict(item) for item in data["items"]]}
