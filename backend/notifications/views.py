from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from django.conf import settings

from orders.desk import get_order_desk

from .serializers import SubscribeSerializer


class PushSubscribeView(APIView):
    """Store the customer's push subscription for the order they are waiting on."""

    def post(self, request, *args, **kwargs):
        serializer = SubscribeSerializer(data=request.data)
        if serializer.is_valid():
            subscription = dict(serializer.validated_data["subscription"])
            subscription["keys"] = dict(subscription["keys"])
            get_order_desk().notifications.subscribe(
                serializer.validated_data["order_id"], subscription
            )
            return Response(
                {"detail": "Subscribed to order notifications."},
                status=status.HTTP_201_CREATED,
            )
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class PushPublicKeyView(APIView):
    """VAPID application server key the customer page subscribes with."""

    def get(self, request, *args, **kwargs):
        public_key = getattr(settings, "WEBPUSH_VAPID_PUBLIC_KEY", "")
        if not public_key:
            return Response(
                {"detail": "Push notifications are not configured."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response({"public_key": public_key}, status=status.HTTP_200_OK)
