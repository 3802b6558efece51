from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.exceptions import ValidationError

from catalog.models import Product
from inventory.models import StockMovement
from inventory.services import InventoryService, QuantityOperation

User = get_user_model()


class InventoryServiceTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="clerk@example.com", password="Pass123!")
        self.product = Product.objects.create(
            name="Cable", category="Electronics", price=Decimal("12.00"), cost=Decimal("4.00"), quantity=8
        )

    def test_add_records_positive_movement(self):
        product = InventoryService.update_quantity(self.product, 4, QuantityOperation.ADD, user=self.user)

        self.assertEqual(product.quantity, 12)
        movement = StockMovement.objects.get()
        self.assertEqual(movement.quantity, 4)
        self.assertEqual(movement.reason, "Quantity Added")
        self.assertEqual(movement.created_by, self.user)

    def test_subtract_to_zero(self):
        product = InventoryService.update_quantity(self.product, 8, QuantityOperation.SUBTRACT)

        self.assertEqual(product.quantity, 0)
        self.assertEqual(product.stock_status, Product.StockStatus.OUT_OF_STOCK)
        self.assertEqual(StockMovement.objects.get().quantity, -8)

    def test_subtract_more_than_available(self):
        with self.assertRaises(ValidationError):
            InventoryService.update_quantity(self.product, 9, QuantityOperation.SUBTRACT)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 8)
        self.assertFalse(StockMovement.objects.exists())

    def test_set_to_same_value_records_nothing(self):
        product = InventoryService.update_quantity(self.product, 8, QuantityOperation.SET)

        self.assertEqual(product.quantity, 8)
        self.assertFalse(StockMovement.objects.exists())

    def test_works_from_stale_instance(self):
        Product.objects.filter(pk=self.product.pk).update(quantity=20)

        product = InventoryService.update_quantity(self.product, 5, QuantityOperation.SUBTRACT)

        self.assertEqual(product.quantity, 15)

    def test_movements_are_append_only(self):
        movement = InventoryService.record_movement(self.product, 3, "Recount")
        movement.quantity = 30

        with self.assertRaises(ValueError):
            movement.save()
