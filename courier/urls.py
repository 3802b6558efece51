from django.urls import path

from .views import (
    ActiveCourierListView,
    CourierDetailView,
    CourierListCreateView,
    ShipmentDetailView,
    ShipmentListCreateView,
    ShipmentTrackView,
    ShippingCostView,
)


urlpatterns = [
    path("couriers/", CourierListCreateView.as_view(), name="courier-list"),
    path("couriers/active/", ActiveCourierListView.as_view(), name="courier-active-list"),
    path("couriers/calculate-shipping/", ShippingCostView.as_view(), name="courier-calculate-shipping"),
    path("couriers/<uuid:pk>/", CourierDetailView.as_view(), name="courier-detail"),
    path("shipments/", ShipmentListCreateView.as_view(), name="shipment-list"),
    path("shipments/track/<str:tracking_number>/", ShipmentTrackView.as_view(), name="shipment-track"),
    path("shipments/<uuid:pk>/", ShipmentDetailView.as_view(), name="shipment-detail"),
]
