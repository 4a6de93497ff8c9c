from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    re_path(r"ws/operators/(?P<role>[a-z]+)/$", consumers.OperatorConsumer.as_asgi()),
    re_path(r"ws/customer/$", consumers.CustomerConsumer.as_asgi()),
]
