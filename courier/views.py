import logging

from django.db import transaction
from rest_framework import permissions
from rest_framework.generics import ListAPIView, ListCreateAPIView, RetrieveAPIView, RetrieveUpdateDestroyAPIView
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import unique_fields
from core.views import EnvelopeMixin, ListQueryMixin, ResourceDetailMixin
from .models import Courier, Shipment
from .serializers import (
    CourierSerializer,
    CourierSummarySerializer,
    ShipmentSerializer,
    ShippingQuoteSerializer,
)
from .services import delete_courier, get_courier, shipping_quote

logger = logging.getLogger(__name__)


class CourierListCreateView(ListQueryMixin, EnvelopeMixin, ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    queryset = Courier.objects.select_related("created_by").all()
    serializer_class = CourierSerializer
    success_messages = {"POST": "Courier created successfully"}
    filter_params = {"status": "status"}
    search_fields = ("name", "code")
    sort_fields = ("name", "code", "created_at", "updated_at", "base_rate", "status")
    default_sort = "name"
    default_order = "asc"

    def perform_create(self, serializer):
        with unique_fields("code", "name"), transaction.atomic():
            courier = serializer.save(created_by=self.request.user)
        logger.info("Created courier=%s name=%s", courier.code, courier.name)


class CourierDetailView(ResourceDetailMixin, RetrieveUpdateDestroyAPIView):
    permission_classes = [permissions.IsAuthenticated]
    queryset = Courier.objects.select_related("created_by").all()
    serializer_class = CourierSerializer
    success_messages = {
        "PUT": "Courier updated successfully",
        "PATCH": "Courier updated successfully",
        "DELETE": "Courier deleted successfully",
    }

    def perform_update(self, serializer):
        with unique_fields("code", "name"), transaction.atomic():
            serializer.save()

    def perform_destroy(self, instance):
        delete_courier(instance)


class ActiveCourierListView(EnvelopeMixin, ListAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = CourierSummarySerializer
    pagination_class = None

    def get_queryset(self):
        return Courier.objects.filter(status=Courier.Status.ACTIVE).order_by("name")


class ShippingCostView(EnvelopeMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = ShippingQuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        courier = get_courier(serializer.validated_data["courier_id"])
        quote = shipping_quote(
            courier,
            weight=serializer.validated_data.get("weight"),
            distance=serializer.validated_data.get("distance"),
        )
        return Response(quote)


class ShipmentListCreateView(ListQueryMixin, EnvelopeMixin, ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    queryset = Shipment.objects.select_related("courier", "created_by").prefetch_related("tracking_history")
    serializer_class = ShipmentSerializer
    success_messages = {"POST": "Shipment created successfully"}
    filter_params = {"status": "status", "courier": "courier_id"}
    search_fields = ("tracking_number", "sender__name", "receiver__name")
    sort_fields = (
        "created_at",
        "updated_at",
        "status",
        "tracking_number",
        "shipping_cost",
        "estimated_delivery",
        "actual_delivery",
    )

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)


class ShipmentDetailView(ResourceDetailMixin, RetrieveUpdateDestroyAPIView):
    permission_classes = [permissions.IsAuthenticated]
    queryset = Shipment.objects.select_related("courier", "created_by").prefetch_related("tracking_history")
    serializer_class = ShipmentSerializer
    success_messages = {
        "PUT": "Shipment updated successfully",
        "PATCH": "Shipment updated successfully",
        "DELETE": "Shipment deleted successfully",
    }

    def perform_destroy(self, instance):
        logger.info("Deleting shipment=%s", instance.tracking_number)
        instance.delete()


class ShipmentTrackView(EnvelopeMixin, RetrieveAPIView):
    permission_classes = [permissions.AllowAny]
    serializer_class = ShipmentSerializer
    queryset = Shipment.objects.select_related("courier").prefetch_related("tracking_history")
    lookup_field = "tracking_number"
