from django.test import SimpleTestCase, TestCase
from rest_framework import permissions
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIRequestFactory
from rest_framework.views import APIView

from core.exceptions import DuplicateKey, flatten_errors
from core.identifiers import courier_code, next_identifier, product_sku, tracking_number
from courier.models import Courier


class ExplodingView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        raise RuntimeError("database on fire")


class RejectingView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        raise ValidationError({"sender": {"email": ["Enter a valid email address."]}})


class IdentifierFormatTests(SimpleTestCase):
    def test_courier_code(self):
        self.assertEqual(courier_code(1), "CR001")
        self.assertEqual(courier_code(42), "CR042")
        self.assertEqual(courier_code(1234), "CR1234")

    def test_product_sku_uses_last_six_millis_digits(self):
        self.assertEqual(product_sku(7, 1700000987654), "PROD987654007")

    def test_tracking_number(self):
        self.assertEqual(tracking_number(12, 1700000000000), "SH170000000000012")


class NextIdentifierTests(TestCase):
    def test_starts_after_existing_rows(self):
        Courier.objects.create(name="One", base_rate=1, code="X1")
        Courier.objects.create(name="Two", base_rate=1, code="X2")

        self.assertEqual(next_identifier(Courier, "code", courier_code), "CR003")

    def test_skips_values_in_use(self):
        Courier.objects.create(name="One", base_rate=1, code="CR002")
        Courier.objects.create(name="Two", base_rate=1, code="CR003")

        self.assertEqual(next_identifier(Courier, "code", courier_code), "CR004")


class ErrorEnvelopeTests(SimpleTestCase):
    def setUp(self):
        self.factory = APIRequestFactory()

    def test_unexpected_error_is_hidden(self):
        with self.assertLogs("core.exceptions", level="ERROR"):
            response = ExplodingView.as_view()(self.factory.get("/boom/"))

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"success": False, "message": "Internal server error"})

    def test_validation_error_lists_fields(self):
        response = RejectingView.as_view()(self.factory.get("/reject/"))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "Validation failed")
        self.assertEqual(
            response.data["errors"], [{"field": "sender.email", "message": "Enter a valid email address."}]
        )

    def test_flatten_nested_lists(self):
        errors = flatten_errors({"images": [{}, {"url": ["Enter a valid URL."]}], "name": ["Required"]})

        self.assertEqual(
            errors,
            [
                {"field": "images[1].url", "message": "Enter a valid URL."},
                {"field": "name", "message": "Required"},
            ],
        )

    def test_duplicate_key_names_the_column(self):
        error = DuplicateKey.from_integrity_error(
            Exception("UNIQUE constraint failed: courier_courier.name"), ("code", "name")
        )

        self.assertEqual(error.field, "name")
        self.assertEqual(str(error.detail), "name already exists")


class HealthTests(TestCase):
    def test_health_is_public(self):
        response = self.client.get("/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Shipment Backend API is running")
