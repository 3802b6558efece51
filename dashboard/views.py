from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from core.views import EnvelopeMixin

from .serializers import ProductStockSerializer, RecentShipmentSerializer
from .services import dashboard_stats, product_analytics, shipment_analytics


class DashboardStatsView(EnvelopeMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        stats = dashboard_stats()
        recent = stats["recent"]
        stats["recent"] = {
            "shipments": RecentShipmentSerializer(recent["shipments"], many=True).data,
            "products": ProductStockSerializer(recent["products"], many=True).data,
        }
        return Response(stats)


class ShipmentAnalyticsView(EnvelopeMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(shipment_analytics(request.query_params.get("period")))


class ProductAnalyticsView(EnvelopeMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        analytics = product_analytics()
        analytics["low_stock_alerts"] = ProductStockSerializer(analytics["low_stock_alerts"], many=True).data
        return Response(analytics)
