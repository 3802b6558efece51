import uuid
from decimal import Decimal, ROUND_HALF_UP
from functools import partial

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.identifiers import epoch_millis, next_identifier, product_sku


CENTS = Decimal("0.01")


def profit_margin(price, cost) -> Decimal:
    if price is None or cost is None:
        return Decimal("0")
    price = Decimal(str(price))
    if price <= 0:
        return Decimal("0")
    margin = (price - Decimal(str(cost))) / price * 100
    return margin.quantize(CENTS, rounding=ROUND_HALF_UP)


def stock_status(quantity: int, reorder_level: int) -> str:
    if quantity == 0:
        return Product.StockStatus.OUT_OF_STOCK
    if quantity <= reorder_level:
        return Product.StockStatus.LOW_STOCK
    return Product.StockStatus.IN_STOCK


class ProductQuerySet(models.QuerySet):
    def out_of_stock(self):
        return self.filter(quantity=0)

    def low_stock(self):
        return self.filter(quantity__gt=0, quantity__lte=models.F("reorder_level"))

    def in_stock(self):
        return self.filter(quantity__gt=models.F("reorder_level"))

    def needs_reorder(self):
        return self.filter(quantity__lte=models.F("reorder_level"))

    def with_stock_status(self, status):
        lookup = {
            Product.StockStatus.OUT_OF_STOCK: self.out_of_stock,
            Product.StockStatus.LOW_STOCK: self.low_stock,
            Product.StockStatus.IN_STOCK: self.in_stock,
        }.get(status)
        return lookup() if lookup else self


class Product(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        DISCONTINUED = "discontinued", "Discontinued"

    class StockStatus(models.TextChoices):
        IN_STOCK = "in_stock", "In stock"
        LOW_STOCK = "low_stock", "Low stock"
        OUT_OF_STOCK = "out_of_stock", "Out of stock"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    sku = models.CharField(max_length=40, unique=True, blank=True)
    description = models.CharField(max_length=500, blank=True)
    category = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    cost = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    quantity = models.PositiveIntegerField(default=0)
    reorder_level = models.PositiveIntegerField(default=10)
    weight = models.DecimalField(
        max_digits=10, decimal_places=3, blank=True, null=True, validators=[MinValueValidator(0)]
    )  # kg
    dimensions = models.JSONField(blank=True, null=True)  # {length, width, height} in cm
    images = models.JSONField(blank=True, default=list)  # [{url, alt}]
    supplier = models.JSONField(blank=True, null=True)  # {name, contact, email}
    barcode = models.CharField(max_length=64, blank=True)
    tags = models.JSONField(blank=True, default=list)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="products",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category"], name="product_category_idx"),
            models.Index(fields=["status"], name="product_status_idx"),
        ]

    @property
    def profit_margin(self) -> Decimal:
        return profit_margin(self.price, self.cost)

    @property
    def stock_status(self) -> str:
        return stock_status(self.quantity, self.reorder_level)

    def save(self, *args, **kwargs):
        if self.sku:
            self.sku = self.sku.strip().upper()
        else:
            self.sku = next_identifier(
                Product, "sku", partial(product_sku, millis=epoch_millis())
            )
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.sku})"