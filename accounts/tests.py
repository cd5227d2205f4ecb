from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory, TestCase
from django.urls import reverse

from .session import (
    AUTHENTICATED,
    LOADING,
    UNAUTHENTICATED,
    display_name,
    get_session_state,
)

User = get_user_model()


class SessionStateTests(TestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_request_without_user_is_loading(self):
        state = get_session_state(self.factory.get("/"))
        self.assertEqual(state.status, LOADING)
        self.assertTrue(state.is_loading)
        self.assertIsNone(state.session)

    def test_anonymous_user_is_unauthenticated(self):
        request = self.factory.get("/")
        request.user = AnonymousUser()
        state = get_session_state(request)
        self.assertEqual(state.status, UNAUTHENTICATED)
        self.assertFalse(state.is_authenticated)
        self.assertIsNone(state.session)

    def test_signed_in_user_has_display_name(self):
        request = self.factory.get("/")
        request.user = User.objects.create_user(username="asha", first_name="Asha", last_name="Rao")
        state = get_session_state(request)
        self.assertEqual(state.status, AUTHENTICATED)
        self.assertEqual(state.session.user_display_name, "Asha Rao")

    def test_display_name_falls_back_to_username(self):
        user = User.objects.create_user(username="donor42")
        self.assertEqual(display_name(user), "donor42")


class SignInViewTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username="asha", email="asha@example.com", password="s3cret-pass", first_name="Asha"
        )
        self.url = reverse("accounts:login")
        self.donate_url = reverse("donations:donate_food")

    def test_login_page_renders(self):
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, 200)
        self.assertTemplateUsed(resp, "accounts/signin.html")
        self.assertContains(resp, "Login")

    def test_sign_in_with_username_goes_to_donation_page(self):
        resp = self.client.post(self.url, {"identifier": "asha", "password": "s3cret-pass"})
        self.assertRedirects(resp, self.donate_url)
        self.assertEqual(int(self.client.session["_auth_user_id"]), self.user.pk)

    def test_sign_in_with_email(self):
        resp = self.client.post(self.url, {"identifier": "ASHA@example.com", "password": "s3cret-pass"})
        self.assertRedirects(resp, self.donate_url)

    def test_wrong_password_is_rejected(self):
        resp = self.client.post(self.url, {"identifier": "asha", "password": "nope"})
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Invalid credentials")
        self.assertNotIn("_auth_user_id", self.client.session)

    def test_safe_next_is_honored(self):
        resp = self.client.post(
            self.url, {"identifier": "asha", "password": "s3cret-pass", "next": "/admin/"}
        )
        self.assertEqual(resp.status_code, 302)
        self.assertEqual(resp["Location"], "/admin/")

    def test_external_next_is_ignored(self):
        resp = self.client.post(
            self.url, {"identifier": "asha", "password": "s3cret-pass", "next": "https://evil.example.com/"}
        )
        self.assertRedirects(resp, self.donate_url)

    def test_signed_in_user_is_sent_on(self):
        self.client.force_login(self.user)
        resp = self.client.get(self.url)
        self.assertRedirects(resp, self.donate_url)


class LogoutViewTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="asha", password="s3cret-pass")
        self.client.force_login(self.user)

    def test_logout_ends_session_and_goes_to_login(self):
        resp = self.client.post(reverse("accounts:logout"))
        self.assertRedirects(resp, reverse("accounts:login"))
        self.assertNotIn("_auth_user_id", self.client.session)

    def test_logout_honors_callback_url(self):
        resp = self.client.post(reverse("accounts:logout"), {"next": "/accounts/login/?bye=1"})
        self.assertEqual(resp["Location"], "/accounts/login/?bye=1")

    def test_logout_requires_post(self):
        resp = self.client.get(reverse("accounts:logout"))
        self.assertEqual(resp.status_code, 405)
        self.assertIn("_auth_user_id", self.client.session)
