from django.urls import path, include

urlpatterns = [
    path("api/", include("orders.urls")),
    path("api/", include("notifications.urls")),
    path("api/", include("reports.urls")),
]
