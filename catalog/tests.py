from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from catalog.models import Product, profit_margin, stock_status
from inventory.models import StockMovement

User = get_user_model()


def make_product(**overrides):
    fields = {
        "name": "Widget",
        "category": "Hardware",
        "price": Decimal("100.00"),
        "cost": Decimal("60.00"),
        "quantity": 20,
    }
    fields.update(overrides)
    return Product.objects.create(**fields)


class DerivedFieldTests(SimpleTestCase):
    def test_profit_margin(self):
        self.assertEqual(profit_margin(Decimal("100"), Decimal("60")), Decimal("40.00"))
        self.assertEqual(profit_margin(Decimal("3"), Decimal("1")), Decimal("66.67"))

    def test_profit_margin_without_positive_price_is_zero(self):
        self.assertEqual(profit_margin(Decimal("0"), Decimal("10")), Decimal("0"))
        self.assertEqual(profit_margin(None, Decimal("10")), Decimal("0"))

    def test_profit_margin_can_be_negative(self):
        self.assertEqual(profit_margin(Decimal("50"), Decimal("75")), Decimal("-50.00"))

    def test_stock_status(self):
        self.assertEqual(stock_status(0, 10), "out_of_stock")
        self.assertEqual(stock_status(5, 10), "low_stock")
        self.assertEqual(stock_status(10, 10), "low_stock")
        self.assertEqual(stock_status(11, 10), "in_stock")


class ProductModelTests(TestCase):
    @patch("catalog.models.epoch_millis", return_value=1700000123456)
    def test_sku_is_auto_generated(self, _millis):
        first = make_product()
        second = make_product(name="Gadget")

        self.assertEqual(first.sku, "PROD123456001")
        self.assertEqual(second.sku, "PROD123456002")

    def test_supplied_sku_is_upper_cased(self):
        product = make_product(sku=" abc-1 ")

        self.assertEqual(product.sku, "ABC-1")

    def test_stock_status_querysets(self):
        empty = make_product(name="Empty", quantity=0)
        low = make_product(name="Low", quantity=3)
        plenty = make_product(name="Plenty", quantity=50)

        self.assertEqual(list(Product.objects.out_of_stock()), [empty])
        self.assertEqual(list(Product.objects.low_stock()), [low])
        self.assertEqual(list(Product.objects.in_stock()), [plenty])
        self.assertCountEqual(Product.objects.needs_reorder(), [empty, low])


class ProductApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username="stock@example.com", email="stock@example.com", password="Pass123!", first_name="Stock"
        )
        self.client.force_authenticate(user=self.user)

    def test_create_product_reports_derived_fields(self):
        response = self.client.post(
            "/api/products/",
            {
                "name": "Widget",
                "category": "Hardware",
                "price": "100.00",
                "cost": "60.00",
                "quantity": 20,
                "dimensions": {"length": 10, "width": 5, "height": 2},
                "images": [{"url": "https://cdn.example.com/widget.png", "alt": "Widget"}],
                "tags": ["tools"],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["message"], "Product created successfully")
        data = response.data["data"]
        self.assertTrue(data["sku"].startswith("PROD"))
        self.assertEqual(data["profit_margin"], Decimal("40.00"))
        self.assertEqual(data["stock_status"], "in_stock")
        self.assertEqual(data["dimensions"]["length"], 10)
        self.assertEqual(data["created_by"]["name"], "Stock")

        movement = StockMovement.objects.get()
        self.assertEqual(movement.quantity, 20)
        self.assertEqual(movement.reason, "Initial Stock")

    def test_missing_required_fields(self):
        response = self.client.post("/api/products/", {"name": "  "}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "Validation failed")
        fields = {error["field"] for error in response.data["errors"]}
        self.assertTrue({"name", "category", "price", "cost"} <= fields)

    def test_duplicate_sku(self):
        make_product(sku="WID-1")

        response = self.client.post(
            "/api/products/",
            {"name": "Other", "sku": "wid-1", "category": "Hardware", "price": "5", "cost": "1"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["errors"][0]["field"], "sku")
        self.assertEqual(Product.objects.count(), 1)

    def test_update_recomputes_derived_fields(self):
        product = make_product()

        response = self.client.put(
            f"/api/products/{product.id}/", {"cost": "90.00", "quantity": 4}, format="json"
        )

        self.assertEqual(response.status_code, 200, response.data)
        data = response.data["data"]
        self.assertEqual(data["profit_margin"], Decimal("10.00"))
        self.assertEqual(data["stock_status"], "low_stock")
        self.assertEqual(data["name"], "Widget")
        self.assertEqual(StockMovement.objects.get().quantity, -16)

    def test_blank_sku_on_update_keeps_assigned_sku(self):
        product = make_product()
        assigned = product.sku

        response = self.client.patch(f"/api/products/{product.id}/", {"sku": ""}, format="json")

        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["data"]["sku"], assigned)
        product.refresh_from_db()
        self.assertEqual(product.sku, assigned)

    def test_list_filters_by_stock_status(self):
        make_product(name="Empty", quantity=0)
        make_product(name="Plenty", quantity=50)

        response = self.client.get("/api/products/", {"stock_status": "out_of_stock"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([p["name"] for p in response.data["data"]], ["Empty"])
        self.assertEqual(response.data["pagination"]["total"], 1)

    def test_list_search_and_sort(self):
        make_product(name="Blue Pen", price=Decimal("3.00"))
        make_product(name="Red Pen", price=Decimal("2.00"))
        make_product(name="Stapler", price=Decimal("9.00"))

        response = self.client.get("/api/products/", {"search": "pen", "sort_by": "price", "sort_order": "asc"})

        self.assertEqual([p["name"] for p in response.data["data"]], ["Red Pen", "Blue Pen"])

    def test_quantity_operations(self):
        product = make_product(quantity=10)
        url = f"/api/products/{product.id}/quantity/"

        added = self.client.patch(url, {"quantity": 5, "operation": "add"}, format="json")
        subtracted = self.client.patch(url, {"quantity": 12, "operation": "subtract"}, format="json")
        replaced = self.client.patch(url, {"quantity": 40}, format="json")

        self.assertEqual(added.data["data"]["quantity"], 15)
        self.assertEqual(subtracted.data["data"]["quantity"], 3)
        self.assertEqual(subtracted.data["data"]["stock_status"], "low_stock")
        self.assertEqual(replaced.data["data"]["quantity"], 40)
        self.assertEqual(replaced.data["message"], "Product quantity updated successfully")
        reasons = list(product.stock_movements.values_list("reason", flat=True))
        self.assertEqual(reasons, ["Quantity Added", "Quantity Subtracted", "Quantity Set"])

    def test_subtract_below_zero_is_rejected(self):
        product = make_product(quantity=2)

        response = self.client.patch(
            f"/api/products/{product.id}/quantity/", {"quantity": 5, "operation": "subtract"}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["errors"], [{"field": "quantity", "message": "Insufficient stock"}])
        product.refresh_from_db()
        self.assertEqual(product.quantity, 2)

    def test_quantity_for_unknown_product(self):
        response = self.client.patch(
            "/api/products/00000000-0000-0000-0000-000000000000/quantity/", {"quantity": 1}, format="json"
        )

        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.data["success"])

    def test_categories(self):
        make_product(category="Tools")
        make_product(category="Hardware")
        make_product(category="Tools")

        response = self.client.get("/api/products/categories/")

        self.assertEqual(response.data, {"success": True, "data": ["Hardware", "Tools"]})

    def test_delete_product(self):
        product = make_product()

        response = self.client.delete(f"/api/products/{product.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["message"], "Product deleted successfully")
        self.assertFalse(Product.objects.exists())
