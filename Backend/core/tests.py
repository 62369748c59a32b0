from unittest.mock import patch

from django.core.cache import cache
from django.db import IntegrityError, OperationalError
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.test import APITestCase

from .db import wait_for_database
from .exceptions import DB_UNAVAILABLE, custom_exception_handler
from .pagination import pagination_meta, parse_pagination
from .sanitize import escape_html, sanitize_html, sanitize_text, to_plain_text
from .throttling import ClientAddressThrottle


class PaginationTests(SimpleTestCase):
    def test_defaults(self):
        self.assertEqual(parse_pagination({}), (1, 20, 0))

    def test_limit_is_clamped(self):
        self.assertEqual(parse_pagination({"limit": "1000"}), (1, 100, 0))

    def test_bad_values_fall_back(self):
        self.assertEqual(parse_pagination({"page": "0", "limit": "-5"}), (1, 20, 0))
        self.assertEqual(parse_pagination({"page": "-3"})[0], 1)
        self.assertEqual(parse_pagination({"page": "abc", "limit": "xyz"}), (1, 20, 0))

    def test_skip(self):
        self.assertEqual(parse_pagination({"page": "3", "limit": "10"}), (3, 10, 20))

    def test_meta(self):
        meta = pagination_meta(page=2, limit=10, total=25)

        self.assertEqual(meta["totalPages"], 3)
        self.assertTrue(meta["hasNextPage"])
        self.assertTrue(meta["hasPrevPage"])
        self.assertEqual(meta["nextPage"], 3)
        self.assertEqual(meta["prevPage"], 1)

    def test_meta_last_page(self):
        meta = pagination_meta(page=3, limit=10, total=25)

        self.assertFalse(meta["hasNextPage"])
        self.assertIsNone(meta["nextPage"])

    def test_meta_empty(self):
        meta = pagination_meta(page=1, limit=20, total=0)

        self.assertEqual(meta["totalPages"], 0)
        self.assertFalse(meta["hasNextPage"])
        self.assertFalse(meta["hasPrevPage"])


class SanitizeTests(SimpleTestCase):
    def test_html_allow_list(self):
        dirty = '<h2>Title</h2><p>Read <a href="https://x.org" onclick="x()">this</a></p><iframe src="x"></iframe>'
        self.assertEqual(
            sanitize_html(dirty),
            '<h2>Title</h2><p>Read <a href="https://x.org">this</a></p>',
        )

    def test_html_drops_script_urls(self):
        self.assertEqual(sanitize_html('<a href="javascript:alert(1)">x</a>'), "<a>x</a>")

    def test_text_strips_everything(self):
        self.assertEqual(sanitize_text("<b>Bold</b> <script>evil()</script>move"), "Bold move")

    def test_non_strings(self):
        self.assertEqual(sanitize_html(None), "")
        self.assertEqual(sanitize_text(42), "")
        self.assertEqual(escape_html(""), "")

    def test_escape(self):
        self.assertEqual(escape_html('<a href="x">&\'</a>'), "&lt;a href=&quot;x&quot;&gt;&amp;&#x27;&lt;/a&gt;")

    def test_plain_text(self):
        self.assertEqual(to_plain_text("Faith &amp; <i>works</i>"), "Faith & works")


class ThrottleRateTests(SimpleTestCase):
    def test_window_multiplier(self):
        throttle = ClientAddressThrottle()
        self.assertEqual(throttle.parse_rate("100/15m"), (100, 900))
        self.assertEqual(throttle.parse_rate("10/h"), (10, 3600))
        self.assertEqual(throttle.parse_rate(None), (None, None))

    def test_invalid_rate(self):
        throttle = ClientAddressThrottle()
        with self.assertRaises(ValueError):
            throttle.parse_rate("lots")


class ThrottleTests(APITestCase):
    def setUp(self):
        cache.clear()

    def tearDown(self):
        cache.clear()

    @override_settings(RATE_LIMITS={"public": "2/15m", "admin": "2/15m", "donation": "2/15m"})
    def test_public_budget_is_enforced(self):
        url = reverse("sermon-list")

        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response.data["error"], "Too many requests from this IP, please try again later.")
        self.assertIn("retryAfter", response.data)


class ExceptionHandlerTests(SimpleTestCase):
    def test_integrity_error(self):
        response = custom_exception_handler(IntegrityError("duplicate key"), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"], "Duplicate entry")

    def test_database_unavailable(self):
        response = custom_exception_handler(OperationalError("connection refused"), {})
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data, DB_UNAVAILABLE)

    def test_api_exception(self):
        response = custom_exception_handler(NotFound("Sermon not found"), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"error": "Sermon not found"})

    @override_settings(DEBUG=False)
    def test_unexpected_error_hides_details(self):
        response = custom_exception_handler(KeyError("secret"), {})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"error": "Internal server error"})

    @override_settings(DEBUG=True)
    def test_unexpected_error_in_debug(self):
        response = custom_exception_handler(ValueError("boom"), {})
        self.assertEqual(response.data["message"], "boom")
        self.assertIn("stack", response.data)


class DatabaseReadinessTests(TestCase):
    @patch("core.middleware.database_ready", return_value=False)
    def test_api_answers_503_while_database_is_down(self, mock_ready):
        response = self.client.get("/api/sermons")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json(), DB_UNAVAILABLE)

    @patch("core.middleware.database_ready", return_value=False)
    def test_config_and_webhook_skip_the_check(self, mock_ready):
        self.assertEqual(self.client.get("/api/config").status_code, 200)

        response = self.client.post("/api/donations/webhook", data="{", content_type="application/json")
        self.assertEqual(response.status_code, 400)

    def test_config(self):
        response = self.client.get("/api/config")
        self.assertEqual(
            response.json(),
            {"supabaseUrl": "https://project.supabase.co", "supabaseKey": "anon-key"},
        )

    def test_health(self):
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["database"], "connected")
        self.assertIn("uptime", body)

    @patch("core.views.ping", side_effect=OperationalError("down"))
    def test_health_when_database_is_down(self, mock_ping):
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["status"], "unhealthy")
        self.assertEqual(response.json()["database"], "disconnected")

    @patch("core.db.time.sleep")
    @patch("core.db.ping", side_effect=OperationalError("down"))
    def test_wait_for_database_gives_up(self, mock_ping, mock_sleep):
        self.assertFalse(wait_for_database(timeout=0, interval=1))

    @patch("core.db.ping")
    def test_wait_for_database_succeeds(self, mock_ping):
        self.assertTrue(wait_for_database(timeout=1))
