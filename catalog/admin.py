from django.contrib import admin

from inventory.models import StockMovement
from .models import Product


class StockMovementInline(admin.TabularInline):
    model = StockMovement
    extra = 0
    can_delete = False
    readonly_fields = ("quantity", "reason", "created_by", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "category", "price", "cost", "quantity", "reorder_level", "status")
    list_filter = ("status", "category")
    search_fields = ("name", "sku", "description")
    # Quantity moves through the stock endpoints so every change is recorded.
    readonly_fields = ("quantity",)
    inlines = [StockMovementInline]
