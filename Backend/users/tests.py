from io import StringIO
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from django.contrib.auth.models import AnonymousUser
from django.core.management import CommandError, call_command
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.test import APIRequestFactory, APITestCase

from .authentication import ProviderUser, SupabaseAuthentication, verify_access_token
from .management.commands.grant_admin import PAGE_SIZE
from .permissions import IsAdmin, IsAuthenticatedUser
from .provider import AuthProviderError


def provider_user(role=None, user_role=None):
    return SimpleNamespace(
        id="6a1c4e2b-1111-4a8e-9d42-0d4a9a0e9a11",
        email="pastor@example.org",
        app_metadata={"role": role} if role else {},
        user_metadata={"role": user_role} if user_role else {},
    )


def stub_client(user=None, error=None):
    client = MagicMock()
    if error is not None:
        client.auth.get_user.side_effect = error
    else:
        client.auth.get_user.return_value = SimpleNamespace(user=user)
    return client


class ProviderUserTests(SimpleTestCase):
    def test_admin_claim_comes_from_app_metadata(self):
        self.assertTrue(ProviderUser.from_provider(provider_user(role="admin")).is_admin)

    def test_user_metadata_never_grants_admin(self):
        self.assertFalse(ProviderUser.from_provider(provider_user(user_role="admin")).is_admin)


class VerifyAccessTokenTests(SimpleTestCase):
    @patch("users.authentication.get_client")
    def test_valid_token(self, mock_get_client):
        mock_get_client.return_value = stub_client(user=provider_user(role="admin"))

        user = verify_access_token("good-token")

        self.assertEqual(user.email, "pastor@example.org")
        self.assertTrue(user.is_admin)
        mock_get_client.return_value.auth.get_user.assert_called_once_with("good-token")

    @patch("users.authentication.get_client")
    def test_rejected_token(self, mock_get_client):
        mock_get_client.return_value = stub_client(error=RuntimeError("invalid JWT"))

        with self.assertRaises(AuthenticationFailed):
            verify_access_token("bad-token")

    @patch("users.authentication.get_client")
    def test_no_user_in_response(self, mock_get_client):
        mock_get_client.return_value = stub_client(user=None)

        with self.assertRaises(AuthenticationFailed):
            verify_access_token("orphan-token")


class SupabaseAuthenticationTests(SimpleTestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.auth = SupabaseAuthentication()

    def test_no_header_is_anonymous(self):
        request = self.factory.get("/api/sermons")
        self.assertIsNone(self.auth.authenticate(request))

    def test_malformed_header(self):
        request = self.factory.get("/api/sermons", HTTP_AUTHORIZATION="Token abc")
        with self.assertRaises(AuthenticationFailed):
            self.auth.authenticate(request)

    @patch("users.authentication.get_client")
    def test_bearer_token(self, mock_get_client):
        mock_get_client.return_value = stub_client(user=provider_user())
        request = self.factory.get("/api/sermons", HTTP_AUTHORIZATION="Bearer abc")

        user, token = self.auth.authenticate(request)

        self.assertEqual(token, "abc")
        self.assertFalse(user.is_admin)

    @patch("users.authentication.get_client")
    def test_rejected_token_is_anonymous(self, mock_get_client):
        mock_get_client.return_value = stub_client(error=RuntimeError("JWT expired"))
        request = self.factory.get("/api/sermons", HTTP_AUTHORIZATION="Bearer stale")

        self.assertIsNone(self.auth.authenticate(request))

    @patch("users.authentication.get_client")
    def test_provider_not_configured_is_anonymous(self, mock_get_client):
        mock_get_client.side_effect = AuthProviderError("not configured")
        request = self.factory.get("/api/sermons", HTTP_AUTHORIZATION="Bearer abc")

        self.assertIsNone(self.auth.authenticate(request))


class PermissionTests(SimpleTestCase):
    def setUp(self):
        self.factory = APIRequestFactory()

    def request(self, method, user):
        request = getattr(self.factory, method)("/api/team")
        request.user = user
        return request

    def test_is_admin(self):
        admin = ProviderUser(id="a", app_metadata={"role": "admin"})
        member = ProviderUser(id="m")

        self.assertTrue(IsAdmin().has_permission(self.request("post", admin), None))
        self.assertFalse(IsAdmin().has_permission(self.request("post", member), None))

    def test_is_authenticated_user(self):
        member = ProviderUser(id="m")

        self.assertTrue(IsAuthenticatedUser().has_permission(self.request("get", member), None))
        self.assertFalse(IsAuthenticatedUser().has_permission(self.request("get", AnonymousUser()), None))


class BearerTokenRequestTests(APITestCase):
    @patch("users.authentication.get_client")
    def test_admin_token_reaches_admin_route(self, mock_get_client):
        mock_get_client.return_value = stub_client(user=provider_user(role="admin"))
        self.client.credentials(HTTP_AUTHORIZATION="Bearer admin-token")

        response = self.client.post(reverse("team-list"), {"name": "Deacon Femi"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    @patch("users.authentication.get_client")
    def test_stale_token_still_reads_public_routes(self, mock_get_client):
        mock_get_client.return_value = stub_client(error=RuntimeError("JWT expired"))
        self.client.credentials(HTTP_AUTHORIZATION="Bearer stale")

        for name in ("sermon-list", "event-list", "blog-list", "team-list"):
            response = self.client.get(reverse(name))
            self.assertEqual(response.status_code, status.HTTP_200_OK, name)

    @patch("donations.flutterwave.FlutterwaveClient.create_payment_link")
    @patch("users.authentication.get_client")
    def test_stale_token_can_start_a_donation(self, mock_get_client, mock_create):
        mock_get_client.return_value = stub_client(error=RuntimeError("JWT expired"))
        mock_create.return_value = {"link": "https://checkout.flutterwave.com/pay/abc"}
        self.client.credentials(HTTP_AUTHORIZATION="Bearer stale")

        response = self.client.post(
            reverse("donation-initialize"),
            {"amount": 50, "email": "ada@example.com", "fullName": "Ada Obi"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["paymentLink"], "https://checkout.flutterwave.com/pay/abc")

    @patch("users.authentication.get_client")
    def test_stale_token_is_401_on_protected_routes(self, mock_get_client):
        mock_get_client.return_value = stub_client(error=RuntimeError("JWT expired"))
        self.client.credentials(HTTP_AUTHORIZATION="Bearer stale")

        self.assertEqual(self.client.get(reverse("prayer-list")).status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(self.client.get(reverse("donation-list")).status_code, status.HTTP_401_UNAUTHORIZED)
        response = self.client.post(reverse("team-list"), {"name": "Deacon Femi"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    @patch("users.authentication.get_client")
    def test_provider_outage_keeps_public_routes_open(self, mock_get_client):
        mock_get_client.side_effect = AuthProviderError("unreachable")
        self.client.credentials(HTTP_AUTHORIZATION="Bearer any")

        self.assertEqual(self.client.get(reverse("sermon-list")).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(reverse("prayer-list")).status_code, status.HTTP_401_UNAUTHORIZED)

    @patch("users.authentication.get_client")
    def test_member_token_on_admin_route_is_403(self, mock_get_client):
        mock_get_client.return_value = stub_client(user=provider_user())
        self.client.credentials(HTTP_AUTHORIZATION="Bearer member-token")

        response = self.client.get(reverse("prayer-list"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"], "Admin access required")



class GrantAdminCommandTests(TestCase):
    def setUp(self):
        self.user = provider_user()
        self.client_stub = MagicMock()
        self.client_stub.auth.admin.list_users.return_value = [self.user]

    @patch("users.management.commands.grant_admin.get_client")
    def test_grant(self, mock_get_client):
        mock_get_client.return_value = self.client_stub

        call_command("grant_admin", "Pastor@Example.org", stdout=StringIO())

        self.client_stub.auth.admin.update_user_by_id.assert_called_once_with(
            self.user.id, {"app_metadata": {"role": "admin"}},
        )

    @patch("users.management.commands.grant_admin.get_client")
    def test_revoke(self, mock_get_client):
        self.user.app_metadata = {"role": "admin", "provider": "email"}
        mock_get_client.return_value = self.client_stub

        call_command("grant_admin", "pastor@example.org", "--revoke", stdout=StringIO())

        self.client_stub.auth.admin.update_user_by_id.assert_called_once_with(
            self.user.id, {"app_metadata": {"provider": "email"}},
        )

    @patch("users.management.commands.grant_admin.get_client")
    def test_unknown_email(self, mock_get_client):
        mock_get_client.return_value = self.client_stub

        with self.assertRaises(CommandError):
            call_command("grant_admin", "nobody@example.org", stdout=StringIO())

    @patch("users.management.commands.grant_admin.get_client")
    def test_user_on_a_later_page(self, mock_get_client):
        others = [
            SimpleNamespace(id=f"user-{n}", email=f"member{n}@example.org", app_metadata={})
            for n in range(PAGE_SIZE)
        ]
        pages = {1: others, 2: [self.user]}
        self.client_stub.auth.admin.list_users.side_effect = lambda page, per_page: pages.get(page, [])
        mock_get_client.return_value = self.client_stub

        call_command("grant_admin", "pastor@example.org", stdout=StringIO())

        self.assertEqual(self.client_stub.auth.admin.list_users.call_count, 2)
        self.client_stub.auth.admin.update_user_by_id.assert_called_once_with(
            self.user.id, {"app_metadata": {"role": "admin"}},
        )
