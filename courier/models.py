import uuid
from decimal import Decimal
from functools import partial

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from core.identifiers import courier_code, epoch_millis, next_identifier, tracking_number


class Courier(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"

    class ServiceType(models.TextChoices):
        STANDARD = "standard", "Standard"
        EXPRESS = "express", "Express"
        OVERNIGHT = "overnight", "Overnight"
        INTERNATIONAL = "international", "International"
        SAME_DAY = "same_day", "Same Day"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=120, unique=True)
    code = models.CharField(max_length=20, unique=True, blank=True)  # e.g. CR001
    description = models.CharField(max_length=200, blank=True)
    contact_phone = models.CharField(max_length=30, blank=True)
    contact_email = models.EmailField(blank=True)
    contact_website = models.URLField(blank=True)
    service_types = models.JSONField(default=list, blank=True)
    base_rate = models.DecimalField(max_digits=12, decimal_places=4, validators=[MinValueValidator(0)])
    weight_rate = models.DecimalField(
        max_digits=12, decimal_places=4, default=Decimal("0"), validators=[MinValueValidator(0)]
    )  # per kg
    distance_rate = models.DecimalField(
        max_digits=12, decimal_places=4, default=Decimal("0"), validators=[MinValueValidator(0)]
    )  # per km
    delivery_areas = models.JSONField(default=list, blank=True)  # [{country, state, city, zip_codes}]
    min_delivery_days = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    max_delivery_days = models.PositiveIntegerField(default=7, validators=[MinValueValidator(1)])
    tracking_url = models.URLField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="couriers",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        else:
            self.code = next_identifier(Courier, "code", courier_code)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.code})"


class Shipment(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PICKED_UP = "picked_up", "Picked Up"
        IN_TRANSIT = "in_transit", "In Transit"
        OUT_FOR_DELIVERY = "out_for_delivery", "Out for Delivery"
        DELIVERED = "delivered", "Delivered"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tracking_number = models.CharField(max_length=40, unique=True, blank=True)
    sender = models.JSONField(default=dict)  # {name, email, phone, address}
    receiver = models.JSONField(default=dict)
    package_description = models.CharField(max_length=255)
    package_weight = models.DecimalField(
        max_digits=10, decimal_places=3, validators=[MinValueValidator(Decimal("0.1"))]
    )  # kg
    package_dimensions = models.JSONField(blank=True, null=True)  # {length, width, height} in cm
    package_value = models.DecimalField(
        max_digits=12, decimal_places=2, blank=True, null=True, validators=[MinValueValidator(0)]
    )
    courier = models.ForeignKey(Courier, related_name="shipments", on_delete=models.PROTECT)

    status = models.CharField(max_length=30, choices=Status.choices, default=Status.PENDING)
    estimated_delivery = models.DateTimeField(blank=True, null=True)
    actual_delivery = models.DateTimeField(blank=True, null=True)
    shipping_cost = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="shipments",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="shipment_status_idx"),
            models.Index(fields=["created_at"], name="shipment_created_at_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.tracking_number:
            self.tracking_number = next_identifier(
                Shipment, "tracking_number", partial(tracking_number, millis=epoch_millis())
            )
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.tracking_number} - {self.status}"


class TrackingEvent(models.Model):
    shipment = models.ForeignKey(Shipment, related_name="tracking_history", on_delete=models.CASCADE)
    status = models.CharField(max_length=30)
    location = models.CharField(max_length=120, blank=True)
    description = models.CharField(max_length=255, blank=True)
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        # Insertion order is history order.
        ordering = ["id"]

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ValueError("Tracking history entries are append-only")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.shipment_id} {self.status} @ {self.location}"
