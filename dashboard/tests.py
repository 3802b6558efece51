from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from catalog.models import Product
from courier.models import Courier, Shipment
from courier.services import create_shipment, update_shipment
from dashboard.services import dashboard_stats, product_analytics, resolve_period, shipment_analytics

User = get_user_model()


def party(name):
    return {"name": name, "email": f"{name.lower()}@example.com", "phone": "+251900000000"}


class DashboardTestCase(TestCase):
    def setUp(self):
        self.fast = Courier.objects.create(name="FastShip", base_rate=Decimal("5.00"))
        self.slow = Courier.objects.create(name="SlowShip", base_rate=Decimal("2.00"))

        self.first = self.ship(self.fast, "10.00")
        self.second = self.ship(self.fast, "20.00")
        self.third = self.ship(self.slow, "30.00")
        update_shipment(self.second, {"status": Shipment.Status.DELIVERED})
        update_shipment(self.third, {"status": Shipment.Status.CANCELLED})

        Product.objects.create(name="Drill", category="Tools", price=Decimal("50"), cost=Decimal("30"), quantity=0)
        Product.objects.create(name="Saw", category="Tools", price=Decimal("20"), cost=Decimal("10"), quantity=4)
        Product.objects.create(name="Lamp", category="Home", price=Decimal("15"), cost=Decimal("5"), quantity=100)

    def ship(self, courier, cost):
        return create_shipment(
            {
                "sender": party("Sender"),
                "receiver": party("Receiver"),
                "package_description": "Parcel",
                "package_weight": Decimal("1.000"),
                "courier_id": courier.id,
                "shipping_cost": Decimal(cost),
            }
        )


class DashboardStatsTests(DashboardTestCase):
    def test_counts_and_revenue(self):
        stats = dashboard_stats()

        self.assertEqual(stats["shipments"]["total"], 3)
        self.assertEqual(stats["shipments"]["pending"], 1)
        self.assertEqual(stats["shipments"]["delivered"], 1)
        self.assertEqual(stats["shipments"]["in_transit"], 0)
        self.assertEqual(stats["products"], {"total": 3, "low_stock": 2, "out_of_stock": 1})
        self.assertEqual(stats["revenue"]["total_revenue"], Decimal("30.00"))
        self.assertEqual(stats["revenue"]["average_revenue"], Decimal("15.00"))
        self.assertEqual(stats["revenue"]["shipment_count"], 2)

    def test_revenue_window_is_thirty_days(self):
        stats = dashboard_stats(now=timezone.now() + timedelta(days=31))

        self.assertEqual(stats["revenue"]["total_revenue"], Decimal("0.00"))
        self.assertEqual(stats["revenue"]["shipment_count"], 0)

    def test_stats_endpoint(self):
        client = APIClient()
        client.force_authenticate(user=User.objects.create_user(username="boss@example.com", password="Pass123!"))

        response = client.get("/api/dashboard/stats/")

        self.assertEqual(response.status_code, 200)
        data = response.data["data"]
        self.assertEqual(len(data["recent"]["shipments"]), 3)
        couriers = {row["courier"] for row in data["recent"]["shipments"]}
        self.assertEqual(couriers, {"FastShip", "SlowShip"})
        self.assertEqual(len(data["recent"]["products"]), 3)


class AnalyticsTests(DashboardTestCase):
    def test_unknown_period_falls_back_to_thirty_days(self):
        self.assertEqual(resolve_period("1y"), ("30d", 30))
        self.assertEqual(resolve_period("7d"), ("7d", 7))

    def test_shipment_analytics(self):
        analytics = shipment_analytics("7d")

        self.assertEqual(analytics["period"], "7d")
        by_courier = {row["courier"]: row for row in analytics["shipments_by_courier"]}
        self.assertEqual(by_courier["FastShip"]["count"], 2)
        self.assertEqual(by_courier["FastShip"]["total_revenue"], Decimal("30.00"))
        self.assertEqual(by_courier["SlowShip"]["count"], 1)
        self.assertEqual(sum(row["count"] for row in analytics["daily_trends"]), 3)
        statuses = {row["status"] for row in analytics["shipments_by_status"]}
        self.assertEqual(statuses, {"pending", "delivered", "cancelled"})

    def test_product_analytics(self):
        analytics = product_analytics()

        by_category = {row["category"]: row for row in analytics["products_by_category"]}
        self.assertEqual(by_category["Tools"]["count"], 2)
        self.assertEqual(by_category["Tools"]["total_value"], Decimal("80.00"))
        self.assertEqual([p.name for p in analytics["low_stock_alerts"]], ["Drill", "Saw"])
        self.assertEqual(analytics["top_products_by_value"][0]["name"], "Lamp")
        self.assertEqual(analytics["top_products_by_value"][0]["total_value"], Decimal("1500.00"))

    def test_analytics_endpoints(self):
        client = APIClient()
        client.force_authenticate(user=User.objects.create_user(username="boss@example.com", password="Pass123!"))

        shipments = client.get("/api/dashboard/analytics/shipments/", {"period": "90d"})
        products = client.get("/api/dashboard/analytics/products/")

        self.assertEqual(shipments.status_code, 200)
        self.assertEqual(shipments.data["data"]["period"], "90d")
        self.assertEqual(products.status_code, 200)
        self.assertEqual(products.data["data"]["low_stock_alerts"][0]["stock_status"], "out_of_stock")
