from rest_framework import serializers


class PushSubscriptionKeysSerializer(serializers.Serializer):
    p256dh = serializers.CharField()
    auth = serializers.CharField()


class PushSubscriptionInfoSerializer(serializers.Serializer):
    """The browser's PushSubscription.toJSON() shape."""

    endpoint = serializers.URLField(max_length=2048)
    expirationTime = serializers.IntegerField(required=False, allow_null=True)
    keys = PushSubscriptionKeysSerializer()


class SubscribeSerializer(serializers.Serializer):
    subscription = PushSubscriptionInfoSerializer()
    order_id = serializers.IntegerField(min_value=1)
