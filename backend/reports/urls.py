from django.urls import path

from . import views

app_name = "reports"

urlpatterns = [
    path("sales/today/", views.sales_today, name="sales-today"),
]
