from rest_framework import serializers

from catalog.models import Product
from courier.models import Shipment


class RecentShipmentSerializer(serializers.ModelSerializer):
    courier = serializers.CharField(source="courier.name", read_only=True)

    class Meta:
        model = Shipment
        fields = ["id", "tracking_number", "status", "courier", "shipping_cost", "created_at"]


class ProductStockSerializer(serializers.ModelSerializer):
    stock_status = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = ["id", "name", "sku", "category", "quantity", "reorder_level", "price", "stock_status", "created_at"]
