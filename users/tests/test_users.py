from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from users.models import User
from users.permissions import user_is_core


class UserApiTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="member", password="pass", email="m@example.com")

    def test_me(self):
        self.client.force_authenticate(user=self.user)

        resp = self.client.get("/api/users/me/")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["username"], "member")
        self.assertEqual(resp.json()["role"], User.ROLE_MEMBER)

    def test_update_profile_cannot_change_role(self):
        self.client.force_authenticate(user=self.user)

        resp = self.client.patch("/api/users/me/", {"full_name": "Mem Ber", "role": "core"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.full_name, "Mem Ber")
        self.assertEqual(self.user.role, User.ROLE_MEMBER)

    def test_core_detection(self):
        core = User.objects.create_user(username="organizer", password="pass", role=User.ROLE_CORE)
        admin = User.objects.create_superuser(username="root", password="pass", email="r@example.com")

        self.assertTrue(user_is_core(core))
        self.assertTrue(user_is_core(admin))
        self.assertFalse(user_is_core(self.user))
        self.assertEqual(self.user.display_name, "member")
