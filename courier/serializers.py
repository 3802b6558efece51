from decimal import Decimal

from rest_framework import serializers

from account.serializers import UserSummarySerializer
from core.serializers import DocumentModelSerializer
from catalog.serializers import DimensionsSerializer
from .models import Courier, Shipment, TrackingEvent
from .services import create_shipment, update_shipment


class PricingSerializer(serializers.Serializer):
    base_rate = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=0)
    weight_rate = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=0, required=False)
    distance_rate = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=0, required=False)


class DeliveryDaysSerializer(serializers.Serializer):
    min = serializers.IntegerField(source="min_delivery_days", min_value=1, required=False)
    max = serializers.IntegerField(source="max_delivery_days", min_value=1, required=False)


class CourierContactSerializer(serializers.Serializer):
    phone = serializers.CharField(source="contact_phone", max_length=30, required=False, allow_blank=True)
    email = serializers.EmailField(source="contact_email", required=False, allow_blank=True)
    website = serializers.URLField(source="contact_website", required=False, allow_blank=True)


class DeliveryAreaSerializer(serializers.Serializer):
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    zip_codes = serializers.ListField(child=serializers.CharField(max_length=20), required=False)


class CourierSerializer(DocumentModelSerializer):
    pricing = PricingSerializer(source="*")
    estimated_delivery_days = DeliveryDaysSerializer(source="*", required=False)
    contact = CourierContactSerializer(source="*", required=False)
    service_types = serializers.ListField(
        child=serializers.ChoiceField(choices=Courier.ServiceType.choices), required=False
    )
    delivery_areas = DeliveryAreaSerializer(many=True, required=False)
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Courier
        fields = [
            "id",
            "name",
            "code",
            "description",
            "contact",
            "service_types",
            "pricing",
            "delivery_areas",
            "estimated_delivery_days",
            "tracking_url",
            "status",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        # Uniqueness is enforced by the indexes and reported as a duplicate key.
        extra_kwargs = {
            "name": {"validators": []},
            "code": {"required": False, "validators": []},
        }

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Courier name is required")
        return value

    def validate_code(self, value):
        value = (value or "").strip().upper()
        if self.instance is not None and value and value != self.instance.code:
            raise serializers.ValidationError("Courier code cannot be changed once assigned")
        return value

    def validate(self, attrs):
        instance = self.instance
        min_days = attrs.get("min_delivery_days", instance.min_delivery_days if instance else 1)
        max_days = attrs.get("max_delivery_days", instance.max_delivery_days if instance else 7)
        if min_days > max_days:
            raise serializers.ValidationError(
                {"estimated_delivery_days": ["Minimum delivery days cannot exceed maximum delivery days"]}
            )
        if instance is not None and not attrs.get("code"):
            attrs.pop("code", None)
        return attrs


class CourierSummarySerializer(serializers.ModelSerializer):
    pricing = PricingSerializer(source="*", read_only=True)
    estimated_delivery_days = DeliveryDaysSerializer(source="*", read_only=True)

    class Meta:
        model = Courier
        fields = ["id", "name", "code", "service_types", "pricing", "estimated_delivery_days"]


class ShippingQuoteSerializer(serializers.Serializer):
    courier_id = serializers.UUIDField()
    weight = serializers.DecimalField(max_digits=10, decimal_places=3, min_value=0, required=False, allow_null=True)
    distance = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)


class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    zip_code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)


class PartySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30)
    address = AddressSerializer(required=False)

    def validate_email(self, value):
        return value.strip().lower()


class PackageSerializer(serializers.Serializer):
    description = serializers.CharField(source="package_description", max_length=255)
    weight = serializers.DecimalField(source="package_weight", max_digits=10, decimal_places=3, min_value=Decimal("0.1"))
    dimensions = DimensionsSerializer(source="package_dimensions", required=False, allow_null=True)
    value = serializers.DecimalField(
        source="package_value", max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class TrackingEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = TrackingEvent
        fields = ["status", "location", "description", "timestamp"]
        read_only_fields = fields


class ShipmentCourierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Courier
        fields = ["id", "name", "code", "tracking_url"]
        read_only_fields = fields


class ShipmentSerializer(serializers.ModelSerializer):
    sender = PartySerializer()
    receiver = PartySerializer()
    package = PackageSerializer(source="*")
    courier = ShipmentCourierSerializer(read_only=True)
    courier_id = serializers.UUIDField(write_only=True)
    distance = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, write_only=True, required=False
    )
    shipping_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )
    tracking_history = TrackingEventSerializer(many=True, read_only=True)
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Shipment
        fields = [
            "id",
            "tracking_number",
            "sender",
            "receiver",
            "package",
            "courier",
            "courier_id",
            "distance",
            "status",
            "estimated_delivery",
            "actual_delivery",
            "shipping_cost",
            "tracking_history",
            "notes",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "actual_delivery", "created_at", "updated_at"]
        extra_kwargs = {
            "tracking_number": {"required": False, "validators": []},
            "status": {"required": False},
        }

    def validate_tracking_number(self, value):
        value = (value or "").strip()
        if self.instance is not None and value and value != self.instance.tracking_number:
            raise serializers.ValidationError("Tracking number cannot be changed")
        return value

    def validate(self, attrs):
        if self.instance is None and attrs.get("status", Shipment.Status.PENDING) != Shipment.Status.PENDING:
            raise serializers.ValidationError({"status": ["New shipments start as pending"]})
        if self.instance is not None:
            attrs.pop("tracking_number", None)
        return attrs

    def create(self, validated_data):
        validated_data.pop("status", None)
        created_by = validated_data.pop("created_by", None)
        return create_shipment(validated_data, created_by=created_by)

    def update(self, instance, validated_data):
        return update_shipment(instance, validated_data)
