import logging

from django.db import transaction
from rest_framework.exceptions import ValidationError

from catalog.models import Product

from .models import StockMovement

logger = logging.getLogger(__name__)


class QuantityOperation:
    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"

    CHOICES = (ADD, SUBTRACT, SET)


class InventoryService:

    @staticmethod
    def record_movement(product: Product, delta: int, reason: str, user=None):
        if not delta:
            return None
        return StockMovement.objects.create(
            product=product,
            quantity=delta,
            reason=reason,
            created_by=user,
        )

    @staticmethod
    @transaction.atomic
    def update_quantity(product: Product, quantity: int, operation=QuantityOperation.SET, user=None) -> Product:
        # Re-read under lock so concurrent adjustments apply in sequence.
        product = Product.objects.select_for_update().get(pk=product.pk)
        current = product.quantity

        if operation == QuantityOperation.ADD:
            new_quantity = current + quantity
            reason = "Quantity Added"
        elif operation == QuantityOperation.SUBTRACT:
            new_quantity = current - quantity
            if new_quantity < 0:
                raise ValidationError({"quantity": ["Insufficient stock"]})
            reason = "Quantity Subtracted"
        else:
            new_quantity = quantity
            reason = "Quantity Set"

        product.quantity = new_quantity
        product.save(update_fields=["quantity", "updated_at"])
        InventoryService.record_movement(product, new_quantity - current, reason, user=user)
        logger.info(
            "Stock %s for product=%s: %s -> %s", operation, product.sku, current, new_quantity
        )
        return product
