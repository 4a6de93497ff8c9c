from django.urls import path

from . import views

app_name = "notifications"

urlpatterns = [
    path("subscribe/", views.PushSubscribeView.as_view(), name="push-subscribe"),
    path("push/public-key/", views.PushPublicKeyView.as_view(), name="push-public-key"),
]
