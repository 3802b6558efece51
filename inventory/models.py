from django.conf import settings
from django.db import models

from catalog.models import Product


class StockMovement(models.Model):
    product = models.ForeignKey(Product, related_name="stock_movements", on_delete=models.CASCADE)
    quantity = models.IntegerField()  # positive for stock_in, negative for stock_out
    reason = models.CharField(max_length=255)  # "Initial Stock", "Quantity Added"
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="stock_movements",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ValueError("Stock movements are append-only")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_id} {self.quantity:+d} ({self.reason})"
