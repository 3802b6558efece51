from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from account.serializers import UserSerializer

User = get_user_model()


class UserSerializerTests(TestCase):
    def test_create_user_hashes_password(self):
        serializer = UserSerializer(
            data={"name": "Abebe", "email": "Abebe@Example.com", "password": "Pass123!"}
        )

        self.assertTrue(serializer.is_valid(), serializer.errors)
        user = serializer.save()

        self.assertEqual(user.email, "abebe@example.com")
        self.assertEqual(user.username, "abebe@example.com")
        self.assertNotEqual(user.password, "Pass123!")
        self.assertTrue(user.check_password("Pass123!"))

    def test_duplicate_email_is_rejected(self):
        User.objects.create_user(username="abebe@example.com", email="abebe@example.com", password="Pass123!")

        serializer = UserSerializer(data={"name": "Other", "email": "ABEBE@example.com", "password": "Pass123!"})

        self.assertFalse(serializer.is_valid())
        self.assertIn("email", serializer.errors)

    def test_short_password_is_rejected(self):
        serializer = UserSerializer(data={"name": "Abebe", "email": "a@example.com", "password": "123"})

        self.assertFalse(serializer.is_valid())
        self.assertIn("password", serializer.errors)


class AuthFlowTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_login_and_me(self):
        registered = self.client.post(
            "/api/auth/register/",
            {"name": "Abebe", "email": "abebe@example.com", "password": "Pass123!"},
            format="json",
        )
        self.assertEqual(registered.status_code, 201, registered.data)
        self.assertEqual(registered.data["message"], "User registered successfully")
        self.assertNotIn("password", registered.data["data"])

        login = self.client.post(
            "/api/auth/login/", {"email": "abebe@example.com", "password": "Pass123!"}, format="json"
        )
        self.assertEqual(login.status_code, 200)
        self.assertIn("access", login.data)
        self.assertIn("refresh", login.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")
        me = self.client.get("/api/auth/me/")

        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.data["data"]["email"], "abebe@example.com")
        self.assertEqual(me.data["data"]["name"], "Abebe")

    def test_wrong_password(self):
        User.objects.create_user(username="abebe@example.com", email="abebe@example.com", password="Pass123!")

        response = self.client.post(
            "/api/auth/login/", {"email": "abebe@example.com", "password": "nope"}, format="json"
        )

        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.data["success"])

    def test_login_with_mixed_case_email(self):
        User.objects.create_user(username="abebe@example.com", email="abebe@example.com", password="Pass123!")

        response = self.client.post(
            "/api/auth/login/", {"email": " Abebe@Example.com", "password": "Pass123!"}, format="json"
        )

        self.assertEqual(response.status_code, 200, response.data)
        self.assertIn("access", response.data)

    def test_login_requires_email(self):
        User.objects.create_user(username="abebe@example.com", email="abebe@example.com", password="Pass123!")

        response = self.client.post(
            "/api/auth/login/", {"username": "abebe@example.com", "password": "Pass123!"}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("email", [error["field"] for error in response.data["errors"]])

    def test_me_requires_token(self):
        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, 401)
