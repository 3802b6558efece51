from django.urls import path

from .views import DashboardStatsView, ProductAnalyticsView, ShipmentAnalyticsView


urlpatterns = [
    path("stats/", DashboardStatsView.as_view(), name="dashboard-stats"),
    path("analytics/shipments/", ShipmentAnalyticsView.as_view(), name="dashboard-shipment-analytics"),
    path("analytics/products/", ProductAnalyticsView.as_view(), name="dashboard-product-analytics"),
]
