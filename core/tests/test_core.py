import time
from unittest import mock

import jwt
from django.db import DatabaseError
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from core.api import result_response
from core.models import DomainActivity
from core.results import ErrorCode, ServiceResult
from core.services import ActivityService
from events.models import Event
from users.models import User

SECRET = "test-supabase-secret"


class ServiceResultTestCase(TestCase):
    def test_error_codes_map_to_http_status(self):
        expected = {
            ErrorCode.UNAUTHORIZED: 401,
            ErrorCode.FORBIDDEN: 403,
            ErrorCode.NOT_FOUND: 404,
            ErrorCode.VALIDATION: 400,
            ErrorCode.CONFLICT: 409,
            ErrorCode.DUPLICATE_NAME: 409,
        }
        for code, http_status in expected.items():
            self.assertEqual(ServiceResult.fail(code, "nope").http_status, http_status)

    def test_truthiness_follows_success(self):
        self.assertTrue(ServiceResult.ok("done"))
        self.assertFalse(ServiceResult.fail(ErrorCode.CONFLICT, "taken"))

    def test_result_response_envelopes(self):
        ok = result_response(ServiceResult.ok("done", data={"id": 1}), success_status=status.HTTP_201_CREATED)
        failed = result_response(ServiceResult.fail(ErrorCode.DUPLICATE_NAME, "Name taken"))

        self.assertEqual(ok.status_code, 201)
        self.assertEqual(ok.data, {"success": True, "message": "done", "data": {"id": 1}})
        self.assertEqual(failed.status_code, 409)
        self.assertEqual(failed.data, {"success": False, "error": "Name taken", "code": "duplicate_name"})


class ActivityServiceTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="actor", password="pass")
        self.event = Event.objects.create(title="Hack Night", team_size=2)

    def test_log_activity(self):
        activity = ActivityService.log_activity(self.user, "event.registered", self.event, metadata={"k": "v"})

        self.assertEqual(activity.content_object, self.event)
        self.assertEqual(activity.metadata, {"k": "v"})

    def test_safe_logging_swallows_database_errors(self):
        with mock.patch.object(DomainActivity.objects, "create", side_effect=DatabaseError("boom")):
            with self.assertLogs("cos", level="WARNING") as logs:
                result = ActivityService.log_activity_safely(self.user, "event.registered", self.event)

        self.assertIsNone(result)
        self.assertIn("Failed to log activity", logs.output[0])
        # The surrounding transaction is still usable
        self.assertEqual(Event.objects.count(), 1)


class HealthCheckTestCase(TestCase):
    def test_health(self):
        resp = APIClient().get("/api/health/")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["status"], "ok")


@override_settings(SUPABASE_JWT_SECRET=SECRET)
class SupabaseAuthenticationTestCase(TestCase):
    def token(self, **claims):
        payload = {
            "sub": "3f1c2b7e-0000-4000-8000-000000000001",
            "email": "ada@example.com",
            "aud": "authenticated",
            "exp": int(time.time()) + 3600,
            "user_metadata": {"full_name": "Ada Lovelace"},
        }
        payload.update(claims)
        return jwt.encode(payload, SECRET, algorithm="HS256")

    def get_me(self, token):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client.get("/api/users/me/")

    def test_first_request_provisions_user(self):
        resp = self.get_me(self.token())

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        user = User.objects.get(supabase_id="3f1c2b7e-0000-4000-8000-000000000001")
        self.assertEqual(user.full_name, "Ada Lovelace")
        self.assertFalse(user.has_usable_password())

    def test_existing_email_is_linked(self):
        existing = User.objects.create_user(username="ada", email="ada@example.com", password="pass")

        self.get_me(self.token())

        existing.refresh_from_db()
        self.assertEqual(existing.supabase_id, "3f1c2b7e-0000-4000-8000-000000000001")
        self.assertEqual(User.objects.count(), 1)

    def test_expired_token_is_rejected(self):
        resp = self.get_me(self.token(exp=int(time.time()) - 60))

        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(resp.json()["success"])
