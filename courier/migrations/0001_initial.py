from decimal import Decimal
from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Courier",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120, unique=True)),
                ("code", models.CharField(blank=True, max_length=20, unique=True)),
                ("description", models.CharField(blank=True, max_length=200)),
                ("contact_phone", models.CharField(blank=True, max_length=30)),
                ("contact_email", models.EmailField(blank=True, max_length=254)),
                ("contact_website", models.URLField(blank=True)),
                ("service_types", models.JSONField(blank=True, default=list)),
                ("base_rate", models.DecimalField(decimal_places=4, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ("weight_rate", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ("distance_rate", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ("delivery_areas", models.JSONField(blank=True, default=list)),
                ("min_delivery_days", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ("max_delivery_days", models.PositiveIntegerField(default=7, validators=[django.core.validators.MinValueValidator(1)])),
                ("tracking_url", models.URLField(blank=True)),
                ("status", models.CharField(choices=[("active", "Active"), ("inactive", "Inactive")], default="active", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="couriers", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Shipment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("tracking_number", models.CharField(blank=True, max_length=40, unique=True)),
                ("sender", models.JSONField(default=dict)),
                ("receiver", models.JSONField(default=dict)),
                ("package_description", models.CharField(max_length=255)),
                ("package_weight", models.DecimalField(decimal_places=3, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.1"))])),
                ("package_dimensions", models.JSONField(blank=True, null=True)),
                ("package_value", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ("status", models.CharField(choices=[("pending", "Pending"), ("picked_up", "Picked Up"), ("in_transit", "In Transit"), ("out_for_delivery", "Out for Delivery"), ("delivered", "Delivered"), ("cancelled", "Cancelled")], default="pending", max_length=30)),
                ("estimated_delivery", models.DateTimeField(blank=True, null=True)),
                ("actual_delivery", models.DateTimeField(blank=True, null=True)),
                ("shipping_cost", models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("courier", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="shipments", to="courier.courier")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="shipments", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="TrackingEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(max_length=30)),
                ("location", models.CharField(blank=True, max_length=120)),
                ("description", models.CharField(blank=True, max_length=255)),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                ("shipment", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="tracking_history", to="courier.shipment")),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.AddIndex(
            model_name="shipment",
            index=models.Index(fields=["status"], name="shipment_status_idx"),
        ),
        migrations.AddIndex(
            model_name="shipment",
            index=models.Index(fields=["created_at"], name="shipment_created_at_idx"),
        ),
    ]
