from rest_framework import serializers

from account.serializers import UserSummarySerializer
from core.serializers import DocumentModelSerializer
from inventory.services import QuantityOperation
from .models import Product


class DimensionsSerializer(serializers.Serializer):
    length = serializers.FloatField(min_value=0, required=False)
    width = serializers.FloatField(min_value=0, required=False)
    height = serializers.FloatField(min_value=0, required=False)


class ProductImageSerializer(serializers.Serializer):
    url = serializers.URLField(max_length=500)
    alt = serializers.CharField(max_length=200, required=False, allow_blank=True)


class SupplierContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, required=False, allow_blank=True)
    contact = serializers.CharField(max_length=120, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)


class ProductSerializer(DocumentModelSerializer):
    dimensions = DimensionsSerializer(required=False, allow_null=True)
    images = ProductImageSerializer(many=True, required=False)
    supplier = SupplierContactSerializer(required=False, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    profit_margin = serializers.DecimalField(max_digits=None, decimal_places=2, read_only=True)
    stock_status = serializers.CharField(read_only=True)
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'sku', 'description', 'category', 'price', 'cost', 'quantity', 'reorder_level',
            'weight', 'dimensions', 'images', 'supplier', 'barcode', 'tags', 'status', 'notes',
            'profit_margin', 'stock_status', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        # Uniqueness is enforced by the index and reported as a duplicate key.
        extra_kwargs = {'sku': {'required': False, 'validators': []}}

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Product name is required")
        return value

    def validate_category(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Category is required")
        return value

    def validate(self, attrs):
        # A blank SKU on update keeps the assigned one.
        if self.instance is not None and not (attrs.get("sku") or "").strip():
            attrs.pop("sku", None)
        return attrs


class ProductQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0)
    operation = serializers.ChoiceField(choices=QuantityOperation.CHOICES, default=QuantityOperation.SET)
