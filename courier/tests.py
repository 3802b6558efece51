import uuid
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.test import APITestCase

from core.exceptions import ConflictError
from courier.models import Courier, Shipment, TrackingEvent
from courier.services import (
    calculate_shipping_cost,
    create_shipment,
    delete_courier,
    get_courier,
    update_shipment,
)
from courier.tracking import apply_status_change, describe_status

User = get_user_model()


def make_courier(**overrides):
    fields = {
        "name": "FastShip",
        "base_rate": Decimal("5.00"),
        "weight_rate": Decimal("2.00"),
        "distance_rate": Decimal("0.50"),
    }
    fields.update(overrides)
    return Courier.objects.create(**fields)


def shipment_data(courier, **overrides):
    data = {
        "sender": {
            "name": "Alem Store",
            "email": "store@example.com",
            "phone": "+251911000000",
            "address": {"city": "Addis Ababa", "country": "ET"},
        },
        "receiver": {
            "name": "Sara Bekele",
            "email": "sara@example.com",
            "phone": "+251922000000",
            "address": {"city": "Adama", "country": "ET"},
        },
        "package_description": "Books",
        "package_weight": Decimal("3.000"),
        "courier_id": courier.id,
        "shipping_cost": Decimal("16.00"),
    }
    data.update(overrides)
    return data


def shipment_payload(courier, **overrides):
    payload = {
        "sender": {
            "name": "Alem Store",
            "email": "store@example.com",
            "phone": "+251911000000",
            "address": {"street": "Bole Rd", "city": "Addis Ababa", "country": "ET"},
        },
        "receiver": {
            "name": "Sara Bekele",
            "email": "sara@example.com",
            "phone": "+251922000000",
        },
        "package": {
            "description": "Books",
            "weight": "3",
            "dimensions": {"length": 30, "width": 20, "height": 10},
            "value": "120.00",
        },
        "courier_id": str(courier.id),
        "shipping_cost": "16.00",
    }
    payload.update(overrides)
    return payload


class StatusTransitionTests(SimpleTestCase):
    def setUp(self):
        self.shipment = Shipment(status=Shipment.Status.PENDING, tracking_number="SH1")
        self.moment = datetime(2024, 5, 1, 12, 30, tzinfo=dt_timezone.utc)

    def test_same_status_is_a_no_op(self):
        event = apply_status_change(self.shipment, Shipment.Status.PENDING, self.moment)

        self.assertIsNone(event)
        self.assertEqual(self.shipment.status, Shipment.Status.PENDING)
        self.assertIsNone(self.shipment.actual_delivery)

    def test_picked_up_is_recorded_at_origin(self):
        event = apply_status_change(self.shipment, Shipment.Status.PICKED_UP, self.moment)

        self.assertEqual(self.shipment.status, Shipment.Status.PICKED_UP)
        self.assertEqual(event.status, Shipment.Status.PICKED_UP)
        self.assertEqual(event.location, "Origin")
        self.assertEqual(event.description, "Package picked up by courier")
        self.assertEqual(event.timestamp, self.moment)
        self.assertIsNone(self.shipment.actual_delivery)

    def test_delivered_sets_actual_delivery(self):
        event = apply_status_change(self.shipment, Shipment.Status.DELIVERED, self.moment)

        self.assertEqual(event.location, "Destination")
        self.assertEqual(event.description, "Package delivered successfully")
        self.assertEqual(self.shipment.actual_delivery, self.moment)

    def test_later_changes_keep_actual_delivery(self):
        apply_status_change(self.shipment, Shipment.Status.DELIVERED, self.moment)
        later = datetime(2024, 5, 2, 9, 0, tzinfo=dt_timezone.utc)

        event = apply_status_change(self.shipment, Shipment.Status.PENDING, later)

        self.assertEqual(event.location, "In transit")
        self.assertEqual(self.shipment.status, Shipment.Status.PENDING)
        self.assertEqual(self.shipment.actual_delivery, self.moment)

    def test_location_and_description_per_status(self):
        self.assertEqual(describe_status("out_for_delivery"), ("Local Facility", "Package out for delivery"))
        self.assertEqual(describe_status("in_transit"), ("In transit", "Status updated to in_transit"))
        self.assertEqual(describe_status("cancelled"), ("In transit", "Status updated to cancelled"))


class ShippingCostTests(SimpleTestCase):
    def test_combines_base_weight_and_distance(self):
        courier = Courier(base_rate=Decimal("5"), weight_rate=Decimal("2"), distance_rate=Decimal("0.5"))

        self.assertEqual(calculate_shipping_cost(courier, weight=3, distance=10), Decimal("16.00"))

    def test_zero_rates_and_missing_inputs_fall_back_to_base_rate(self):
        courier = Courier(base_rate=Decimal("7.25"), weight_rate=Decimal("0"), distance_rate=Decimal("1.5"))

        self.assertEqual(calculate_shipping_cost(courier, weight=10, distance=None), Decimal("7.25"))

    def test_rounds_half_up_to_cents(self):
        courier = Courier(base_rate=Decimal("1.00"), weight_rate=Decimal("0.25"), distance_rate=Decimal("0"))

        self.assertEqual(calculate_shipping_cost(courier, weight=Decimal("0.1"), distance=0), Decimal("1.03"))


class CourierServiceTests(TestCase):
    def test_generated_codes_are_sequential(self):
        first = make_courier(name="Alpha")
        second = make_courier(name="Beta")

        self.assertEqual(first.code, "CR001")
        self.assertEqual(second.code, "CR002")

    def test_generated_code_skips_taken_values(self):
        make_courier(name="Manual", code="cr002")

        generated = make_courier(name="Auto")

        self.assertEqual(Courier.objects.get(name="Manual").code, "CR002")
        self.assertEqual(generated.code, "CR003")

    def test_get_courier_raises_not_found(self):
        with self.assertRaises(NotFound):
            get_courier(uuid.uuid4())

    def test_delete_courier_in_use_is_blocked(self):
        courier = make_courier()
        create_shipment(shipment_data(courier))

        with self.assertRaises(ConflictError):
            delete_courier(courier)
        self.assertTrue(Courier.objects.filter(pk=courier.pk).exists())

    def test_delete_unused_courier(self):
        courier = make_courier()

        delete_courier(courier)

        self.assertFalse(Courier.objects.filter(pk=courier.pk).exists())


class ShipmentServiceTests(TestCase):
    def setUp(self):
        self.courier = make_courier()

    @patch("courier.models.epoch_millis", return_value=1700000000123)
    def test_create_assigns_tracking_number_and_seeds_history(self, _millis):
        shipment = create_shipment(shipment_data(self.courier))

        self.assertEqual(shipment.tracking_number, "SH17000000001231")
        self.assertEqual(shipment.status, Shipment.Status.PENDING)
        history = list(shipment.tracking_history.all())
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].status, Shipment.Status.PENDING)
        self.assertEqual(history[0].location, "Origin")
        self.assertEqual(history[0].description, "Shipment created and ready for pickup")

    def test_explicit_tracking_number_is_kept(self):
        shipment = create_shipment(shipment_data(self.courier, tracking_number="CUSTOM-42"))

        self.assertEqual(shipment.tracking_number, "CUSTOM-42")

    def test_missing_cost_is_priced_from_courier(self):
        data = shipment_data(self.courier, distance=Decimal("10"))
        data.pop("shipping_cost")

        shipment = create_shipment(data)

        self.assertEqual(shipment.shipping_cost, Decimal("16.00"))

    def test_unknown_courier_persists_nothing(self):
        data = shipment_data(self.courier, courier_id=uuid.uuid4())

        with self.assertRaises(NotFound):
            create_shipment(data)
        self.assertEqual(Shipment.objects.count(), 0)
        self.assertEqual(TrackingEvent.objects.count(), 0)

    def test_status_updates_append_history_in_order(self):
        shipment = create_shipment(shipment_data(self.courier))
        delivered_at = datetime(2024, 6, 1, 8, 0, tzinfo=dt_timezone.utc)

        update_shipment(shipment, {"status": Shipment.Status.PICKED_UP})
        update_shipment(shipment, {"status": Shipment.Status.PICKED_UP})
        update_shipment(shipment, {"status": Shipment.Status.OUT_FOR_DELIVERY})
        update_shipment(shipment, {"status": Shipment.Status.DELIVERED}, timestamp=delivered_at)

        shipment.refresh_from_db()
        locations = list(shipment.tracking_history.values_list("location", flat=True))
        self.assertEqual(locations, ["Origin", "Origin", "Local Facility", "Destination"])
        self.assertEqual(shipment.status, Shipment.Status.DELIVERED)
        self.assertEqual(shipment.actual_delivery, delivered_at)

    def test_delivered_shipment_can_move_back(self):
        shipment = create_shipment(shipment_data(self.courier))
        update_shipment(shipment, {"status": Shipment.Status.DELIVERED})

        update_shipment(shipment, {"status": Shipment.Status.PENDING})

        shipment.refresh_from_db()
        self.assertEqual(shipment.status, Shipment.Status.PENDING)
        self.assertIsNotNone(shipment.actual_delivery)
        self.assertEqual(shipment.tracking_history.count(), 3)

    def test_tracking_events_cannot_be_rewritten(self):
        shipment = create_shipment(shipment_data(self.courier))
        event = shipment.tracking_history.get()
        event.location = "Elsewhere"

        with self.assertRaises(ValueError):
            event.save()

    def test_sender_updates_merge_with_stored_fields(self):
        shipment = create_shipment(shipment_data(self.courier))

        update_shipment(shipment, {"sender": {"phone": "+251933000000"}})

        shipment.refresh_from_db()
        self.assertEqual(shipment.sender["phone"], "+251933000000")
        self.assertEqual(shipment.sender["name"], "Alem Store")


class CourierApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username="ops@example.com", email="ops@example.com", password="Pass123!", first_name="Ops"
        )
        self.client.force_authenticate(user=self.user)

    def courier_payload(self, **overrides):
        payload = {
            "name": "FastShip",
            "pricing": {"base_rate": "5.00", "weight_rate": "2.00", "distance_rate": "0.50"},
            "estimated_delivery_days": {"min": 1, "max": 3},
            "contact": {"phone": "+251911111111", "email": "hello@fastship.example"},
            "service_types": ["standard", "express"],
        }
        payload.update(overrides)
        return payload

    def test_create_courier_generates_code(self):
        response = self.client.post("/api/couriers/", self.courier_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["message"], "Courier created successfully")
        data = response.data["data"]
        self.assertEqual(data["code"], "CR001")
        self.assertEqual(data["pricing"]["base_rate"], Decimal("5.00"))
        self.assertEqual(data["estimated_delivery_days"], {"min": 1, "max": 3})
        self.assertEqual(data["created_by"]["email"], "ops@example.com")

    def test_negative_rate_is_rejected(self):
        payload = self.courier_payload(pricing={"base_rate": "-1"})

        response = self.client.post("/api/couriers/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertIn("pricing.base_rate", [error["field"] for error in response.data["errors"]])

    def test_min_days_cannot_exceed_max_days(self):
        payload = self.courier_payload(estimated_delivery_days={"min": 5, "max": 2})

        response = self.client.post("/api/couriers/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_name_is_a_duplicate_key(self):
        make_courier(name="FastShip")

        response = self.client.post("/api/couriers/", self.courier_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["errors"][0]["field"], "name")

    def test_code_cannot_be_changed(self):
        courier = make_courier()

        response = self.client.put(f"/api/couriers/{courier.id}/", {"code": "XYZ"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        courier.refresh_from_db()
        self.assertEqual(courier.code, "CR001")

    def test_put_updates_only_given_fields(self):
        courier = make_courier()

        response = self.client.put(
            f"/api/couriers/{courier.id}/", {"pricing": {"base_rate": "8.00"}}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        courier.refresh_from_db()
        self.assertEqual(courier.base_rate, Decimal("8.00"))
        self.assertEqual(courier.weight_rate, Decimal("2.00"))
        self.assertEqual(courier.name, "FastShip")

    def test_delete_referenced_courier_fails(self):
        courier = make_courier()
        create_shipment(shipment_data(courier))

        response = self.client.delete(f"/api/couriers/{courier.id}/")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Cannot delete courier that is being used in shipments")
        self.assertTrue(Courier.objects.filter(pk=courier.pk).exists())

    def test_delete_unreferenced_courier(self):
        courier = make_courier()

        response = self.client.delete(f"/api/couriers/{courier.id}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Courier deleted successfully")
        self.assertFalse(Courier.objects.exists())

    def test_list_filters_and_paginates(self):
        make_courier(name="Alpha")
        make_courier(name="Beta", status=Courier.Status.INACTIVE)
        make_courier(name="Gamma")

        response = self.client.get("/api/couriers/", {"status": "active", "limit": 1})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c["name"] for c in response.data["data"]], ["Alpha"])
        self.assertEqual(response.data["pagination"], {"current": 1, "pages": 2, "total": 2})

    def test_search_matches_code(self):
        make_courier(name="Alpha")
        make_courier(name="Beta")

        response = self.client.get("/api/couriers/", {"search": "cr002"})

        self.assertEqual([c["name"] for c in response.data["data"]], ["Beta"])

    def test_active_couriers(self):
        make_courier(name="Zeta")
        make_courier(name="Alpha")
        make_courier(name="Dormant", status=Courier.Status.INACTIVE)

        response = self.client.get("/api/couriers/active/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c["name"] for c in response.data["data"]], ["Alpha", "Zeta"])

    def test_calculate_shipping(self):
        courier = make_courier()

        response = self.client.post(
            "/api/couriers/calculate-shipping/",
            {"courier_id": str(courier.id), "weight": 3, "distance": 10},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["data"]["calculated_cost"], Decimal("16.00"))
        self.assertEqual(response.data["data"]["courier"], "FastShip")

    def test_fractional_rates_are_kept_and_priced(self):
        payload = self.courier_payload(
            pricing={"base_rate": "5", "weight_rate": "0.015", "distance_rate": "0.125"}
        )

        created = self.client.post("/api/couriers/", payload, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        courier = Courier.objects.get()
        self.assertEqual(courier.distance_rate, Decimal("0.125"))
        self.assertEqual(courier.weight_rate, Decimal("0.015"))

        response = self.client.post(
            "/api/couriers/calculate-shipping/",
            {"courier_id": str(courier.id), "weight": 10, "distance": 7},
            format="json",
        )

        # 5 + 10 * 0.015 + 7 * 0.125 = 6.025
        self.assertEqual(response.data["data"]["calculated_cost"], Decimal("6.03"))

    def test_calculate_shipping_unknown_courier(self):
        response = self.client.post(
            "/api/couriers/calculate-shipping/", {"courier_id": str(uuid.uuid4()), "weight": 3}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"success": False, "message": "Courier not found"})

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)

        response = self.client.get("/api/couriers/")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])


class ShipmentApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username="ops@example.com", email="ops@example.com", password="Pass123!", first_name="Ops"
        )
        self.client.force_authenticate(user=self.user)
        self.courier = make_courier()

    def test_create_shipment(self):
        response = self.client.post("/api/shipments/", shipment_payload(self.courier), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        data = response.data["data"]
        self.assertTrue(data["tracking_number"].startswith("SH"))
        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["courier"]["code"], "CR001")
        self.assertEqual(data["package"]["weight"], Decimal("3.000"))
        self.assertEqual(len(data["tracking_history"]), 1)
        self.assertEqual(data["tracking_history"][0]["location"], "Origin")
        self.assertEqual(Shipment.objects.get().created_by, self.user)

    def test_create_without_cost_uses_calculator(self):
        payload = shipment_payload(self.courier, distance="10")
        payload.pop("shipping_cost")

        response = self.client.post("/api/shipments/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["data"]["shipping_cost"], Decimal("16.00"))

    def test_unknown_courier_is_not_found(self):
        payload = shipment_payload(self.courier, courier_id=str(uuid.uuid4()))

        response = self.client.post("/api/shipments/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Shipment.objects.count(), 0)

    def test_calculated_cost_too_large_to_store(self):
        courier = make_courier(
            name="Pricey", base_rate=Decimal("99999999.99"), weight_rate=Decimal("99999999.99")
        )
        payload = shipment_payload(courier)
        payload.pop("shipping_cost")
        payload["package"]["weight"] = "9999999.999"

        response = self.client.post("/api/shipments/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["errors"][0]["field"], "shipping_cost")
        self.assertEqual(Shipment.objects.count(), 0)

    def test_light_package_is_rejected(self):
        payload = shipment_payload(self.courier)
        payload["package"]["weight"] = "0"

        response = self.client.post("/api/shipments/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("package.weight", [error["field"] for error in response.data["errors"]])

    def test_duplicate_tracking_number(self):
        create_shipment(shipment_data(self.courier, tracking_number="SH-DUP"))

        response = self.client.post(
            "/api/shipments/", shipment_payload(self.courier, tracking_number="SH-DUP"), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["errors"][0]["field"], "tracking_number")
        self.assertEqual(Shipment.objects.count(), 1)

    def test_status_update_appends_history(self):
        shipment = create_shipment(shipment_data(self.courier))

        response = self.client.put(f"/api/shipments/{shipment.id}/", {"status": "picked_up"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        history = response.data["data"]["tracking_history"]
        self.assertEqual([entry["status"] for entry in history], ["pending", "picked_up"])
        self.assertEqual(history[-1]["location"], "Origin")

    def test_same_status_update_adds_nothing(self):
        shipment = create_shipment(shipment_data(self.courier))

        response = self.client.patch(f"/api/shipments/{shipment.id}/", {"status": "pending"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]["tracking_history"]), 1)

    def test_delivered_sets_actual_delivery(self):
        shipment = create_shipment(shipment_data(self.courier))

        response = self.client.patch(f"/api/shipments/{shipment.id}/", {"status": "delivered"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertIsNotNone(data["actual_delivery"])
        self.assertEqual(data["tracking_history"][-1]["location"], "Destination")

    def test_invalid_status_is_rejected(self):
        shipment = create_shipment(shipment_data(self.courier))

        response = self.client.patch(f"/api/shipments/{shipment.id}/", {"status": "lost"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(shipment.tracking_history.count(), 1)

    def test_tracking_number_is_immutable(self):
        shipment = create_shipment(shipment_data(self.courier))

        response = self.client.patch(
            f"/api/shipments/{shipment.id}/", {"tracking_number": "SH-OTHER"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_track_is_public(self):
        shipment = create_shipment(shipment_data(self.courier))
        self.client.force_authenticate(user=None)

        response = self.client.get(f"/api/shipments/track/{shipment.tracking_number}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["id"], str(shipment.id))

    def test_track_unknown_number(self):
        response = self.client.get("/api/shipments/track/SH0000/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["success"])

    def test_list_filters_by_status_and_searches_receiver(self):
        first = create_shipment(shipment_data(self.courier))
        second = create_shipment(
            shipment_data(
                self.courier,
                receiver={"name": "Hana Girma", "email": "hana@example.com", "phone": "+251944000000"},
            )
        )
        update_shipment(first, {"status": Shipment.Status.IN_TRANSIT})

        by_status = self.client.get("/api/shipments/", {"status": "in_transit"})
        by_search = self.client.get("/api/shipments/", {"search": "hana"})

        self.assertEqual([s["id"] for s in by_status.data["data"]], [str(first.id)])
        self.assertEqual([s["id"] for s in by_search.data["data"]], [str(second.id)])

    def test_delete_shipment(self):
        shipment = create_shipment(shipment_data(self.courier))

        response = self.client.delete(f"/api/shipments/{shipment.id}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Shipment.objects.exists())
        self.assertFalse(TrackingEvent.objects.exists())
