from django.contrib import admin

from .models import Courier, Shipment, TrackingEvent
from .tracking import seed_event


@admin.register(Courier)
class CourierAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "status", "base_rate", "weight_rate", "distance_rate", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "code")
    readonly_fields = ("code",)


class TrackingEventInline(admin.TabularInline):
    model = TrackingEvent
    extra = 0
    can_delete = False
    readonly_fields = ("status", "location", "description", "timestamp")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    list_display = ("tracking_number", "courier", "status", "shipping_cost", "estimated_delivery", "updated_at")
    list_filter = ("status", "courier")
    search_fields = ("tracking_number",)
    # Status changes go through the API so they land in the tracking history.
    readonly_fields = ("tracking_number", "status", "actual_delivery")
    inlines = [TrackingEventInline]

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        if not change:
            seed_event(obj).save()
