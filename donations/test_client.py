from unittest.mock import patch

import requests
from django.test import SimpleTestCase, override_settings

from .client import (
    COMMON_HEADERS,
    SaveFoodClient,
    SubmissionFailed,
    SubmissionRejected,
)

PAYLOAD = {"description": "Bread", "quantity": "10 loaves", "location": "Bakery on 5th"}


class FakeResponse:
    def __init__(self, status_code, body=None):
        self.status_code = status_code
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


@override_settings(SAVE_FOOD_URL="https://save.example.com/api/save-food", SAVE_FOOD_TIMEOUT=7)
class SaveFoodClientTests(SimpleTestCase):
    def test_posts_json_payload_to_configured_url(self):
        with patch("donations.client.requests.post", return_value=FakeResponse(201, {"id": 1})) as post:
            SaveFoodClient().save(PAYLOAD)

        post.assert_called_once_with(
            "https://save.example.com/api/save-food",
            json=PAYLOAD,
            headers=COMMON_HEADERS,
            timeout=7,
        )
        self.assertEqual(post.call_args.kwargs["headers"]["Content-Type"], "application/json")

    def test_any_2xx_is_success_and_body_ignored(self):
        with patch("donations.client.requests.post", return_value=FakeResponse(204)):
            self.assertIsNone(SaveFoodClient().save(PAYLOAD))

    def test_rejection_uses_message_from_body(self):
        with patch("donations.client.requests.post", return_value=FakeResponse(409, {"message": "Duplicate entry"})):
            with self.assertLogs("donations.client", level="WARNING") as cm:
                with self.assertRaises(SubmissionRejected) as ctx:
                    SaveFoodClient().save(PAYLOAD)

        self.assertEqual(ctx.exception.message, "Duplicate entry")
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertIn("Duplicate entry", cm.output[0])

    def test_error_body_that_is_not_json_is_a_failure(self):
        with patch("donations.client.requests.post", return_value=FakeResponse(502)):
            with self.assertLogs("donations.client", level="WARNING"):
                with self.assertRaises(SubmissionFailed) as ctx:
                    SaveFoodClient().save(PAYLOAD)
        self.assertNotIsInstance(ctx.exception, SubmissionRejected)
        self.assertIn("502", str(ctx.exception))

    def test_empty_json_error_body_uses_fallback(self):
        with patch("donations.client.requests.post", return_value=FakeResponse(500, {})):
            with self.assertRaises(SubmissionRejected) as ctx:
                SaveFoodClient().save(PAYLOAD)
        self.assertEqual(ctx.exception.message, "Failed to save food data")

    def test_rejection_without_message_uses_fallback(self):
        for body in ({}, {"message": ""}, {"message": 42}, ["not", "an", "object"]):
            with self.subTest(body=body):
                with patch("donations.client.requests.post", return_value=FakeResponse(400, body)):
                    with self.assertRaises(SubmissionRejected) as ctx:
                        SaveFoodClient().save(PAYLOAD)
                self.assertEqual(ctx.exception.message, "Failed to save food data")

    def test_redirect_status_is_not_success(self):
        with patch("donations.client.requests.post", return_value=FakeResponse(302, {})):
            with self.assertRaises(SubmissionRejected):
                SaveFoodClient().save(PAYLOAD)

    def test_network_error_raises_submission_failed(self):
        with patch("donations.client.requests.post", side_effect=requests.ConnectionError("refused")):
            with self.assertLogs("donations.client", level="ERROR"):
                with self.assertRaises(SubmissionFailed):
                    SaveFoodClient().save(PAYLOAD)

    def test_explicit_url_and_timeout_override_settings(self):
        client = SaveFoodClient(url="http://other/api/save-food", timeout=2)
        with patch("donations.client.requests.post", return_value=FakeResponse(200)) as post:
            client.save(PAYLOAD)
        self.assertEqual(post.call_args.args[0], "http://other/api/save-food")
        self.assertEqual(post.call_args.kwargs["timeout"], 2)
