import uuid
from datetime import timedelta
from io import StringIO
from unittest.mock import patch

from django.core import mail
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from users.authentication import ProviderUser
from .models import BlogPost, Event, PrayerRequest, Sermon, SiteSettings, TeamMember, Testimonial

ADMIN = ProviderUser(id="admin-1", email="admin@example.com", app_metadata={"role": "admin"})
MEMBER = ProviderUser(id="user-1", email="member@example.com", user_metadata={"role": "admin"})

SMTP_SETTINGS = {
    "EMAIL_BACKEND": "django.core.mail.backends.locmem.EmailBackend",
    "EMAIL_HOST": "smtp.example.org",
    "EMAIL_PORT": 587,
    "EMAIL_HOST_USER": "mailer@example.org",
    "EMAIL_HOST_PASSWORD": "secret",
    "CONTACT_TO_EMAIL": "office@example.org",
    "CONTACT_FROM_EMAIL": "",
}


def make_sermon(**kwargs):
    fields = {"title": "Walking in Faith", "date": timezone.now()}
    fields.update(kwargs)
    return Sermon.objects.create(**fields)


class SermonViewTests(APITestCase):
    def test_list_is_public_and_sorted_newest_first(self):
        make_sermon(title="Old", date=timezone.now() - timedelta(days=30))
        make_sermon(title="New", date=timezone.now())

        response = self.client.get(reverse("sermon-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s["title"] for s in response.data["data"]], ["New", "Old"])
        self.assertEqual(response.data["pagination"]["total"], 2)
        self.assertFalse(response.data["pagination"]["hasNextPage"])

    def test_limit_is_clamped_and_page_defaults(self):
        make_sermon()

        response = self.client.get(reverse("sermon-list"), {"limit": 1000, "page": 0})

        self.assertEqual(response.data["pagination"]["limit"], 100)
        self.assertEqual(response.data["pagination"]["page"], 1)

    def test_create_requires_admin(self):
        data = {"title": "Grace", "date": "2025-01-05T10:00:00Z"}

        response = self.client.post(reverse("sermon-list"), data, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        # a role in user_metadata does not make an admin
        self.client.force_authenticate(user=MEMBER)
        response = self.client.post(reverse("sermon-list"), data, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Sermon.objects.exists())

    def test_admin_create_strips_markup(self):
        self.client.force_authenticate(user=ADMIN)
        data = {
            "title": "<script>alert(1)</script>Grace",
            "date": "2025-01-05T10:00:00Z",
            "audioUrl": "https://cdn.example.org/grace.mp3",
        }

        response = self.client.post(reverse("sermon-list"), data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["title"], "Grace")
        self.assertEqual(response.data["downloads"], 0)
        self.assertEqual(response.data["audioUrl"], "https://cdn.example.org/grace.mp3")

    def test_create_validation_errors(self):
        self.client.force_authenticate(user=ADMIN)

        response = self.client.post(reverse("sermon-list"), {"title": ""}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Validation failed")
        self.assertIn("title", response.data["errors"])
        self.assertIn("date", response.data["errors"])

    def test_malformed_id_is_rejected_before_auth(self):
        response = self.client.delete(reverse("sermon-detail", args=["not-an-id"]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Invalid ID format")

    def test_get_missing_sermon_returns_404(self):
        response = self.client.get(reverse("sermon-detail", args=[uuid.uuid4()]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"], "Sermon not found")

    def test_update_merges_fields(self):
        sermon = make_sermon(preacher="Pastor Ade")
        self.client.force_authenticate(user=ADMIN)

        response = self.client.put(
            reverse("sermon-detail", args=[sermon.pk]), {"title": "Renamed"}, format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        sermon.refresh_from_db()
        self.assertEqual(sermon.title, "Renamed")
        self.assertEqual(sermon.preacher, "Pastor Ade")

    def test_delete(self):
        sermon = make_sermon()
        self.client.force_authenticate(user=ADMIN)

        response = self.client.delete(reverse("sermon-detail", args=[sermon.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Sermon.objects.exists())

        response = self.client.delete(reverse("sermon-detail", args=[sermon.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class SermonDownloadTests(APITestCase):
    def setUp(self):
        self.sermon = make_sermon(audio_url="https://cdn.example.org/faith.mp3")

    def test_download_requires_sign_in(self):
        response = self.client.get(reverse("sermon-download", args=[self.sermon.pk, "audio"]))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_download_redirects_and_counts(self):
        self.client.force_authenticate(user=MEMBER)

        response = self.client.get(reverse("sermon-download", args=[self.sermon.pk, "audio"]))

        self.assertEqual(response.status_code, status.HTTP_302_FOUND)
        self.assertEqual(response["Location"], "https://cdn.example.org/faith.mp3")
        self.sermon.refresh_from_db()
        self.assertEqual(self.sermon.downloads, 1)

    def test_missing_file_returns_404(self):
        self.client.force_authenticate(user=MEMBER)

        response = self.client.get(reverse("sermon-download", args=[self.sermon.pk, "video"]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.sermon.refresh_from_db()
        self.assertEqual(self.sermon.downloads, 0)

    def test_public_download_count(self):
        url = reverse("sermon-download-count", args=[self.sermon.pk])

        self.client.post(url)
        response = self.client.post(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.sermon.refresh_from_db()
        self.assertEqual(self.sermon.downloads, 2)

    def test_public_download_count_on_typed_path(self):
        response = self.client.post(reverse("sermon-download", args=[self.sermon.pk, "audio"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Download count updated")
        self.sermon.refresh_from_db()
        self.assertEqual(self.sermon.downloads, 1)


class EventViewTests(APITestCase):
    def test_upcoming_filter_and_order(self):
        now = timezone.now()
        Event.objects.create(title="Past", description="d", date=now - timedelta(days=3))
        Event.objects.create(title="Later", description="d", date=now + timedelta(days=10))
        Event.objects.create(title="Soon", description="d", date=now + timedelta(days=1))

        response = self.client.get(reverse("event-list"), {"upcoming": "true"})
        self.assertEqual([e["title"] for e in response.data["data"]], ["Soon", "Later"])

        response = self.client.get(reverse("event-list"))
        self.assertEqual([e["title"] for e in response.data["data"]], ["Past", "Soon", "Later"])

    def test_time_must_be_hh_mm(self):
        self.client.force_authenticate(user=ADMIN)
        data = {"title": "Vigil", "description": "All night", "date": "2025-03-01T22:00:00Z"}

        response = self.client.post(reverse("event-list"), {**data, "time": "10pm"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("time", response.data["errors"])

        response = self.client.post(reverse("event-list"), {**data, "time": "22:00"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)


class BlogPostViewTests(APITestCase):
    def test_content_keeps_allowed_formatting_only(self):
        self.client.force_authenticate(user=ADMIN)
        data = {
            "title": "Hope",
            "content": '<p onclick="x()">Hello <strong>church</strong></p><script>bad()</script><img src=x>',
        }

        response = self.client.post(reverse("blog-list"), data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        post = BlogPost.objects.get()
        self.assertEqual(post.content, "<p>Hello <strong>church</strong></p>")
        self.assertIsNotNone(post.publish_date)

    def test_sorted_by_publish_date(self):
        BlogPost.objects.create(title="Older", content="x", publish_date=timezone.now() - timedelta(days=2))
        BlogPost.objects.create(title="Newer", content="x", publish_date=timezone.now())

        response = self.client.get(reverse("blog-list"))

        self.assertEqual([p["title"] for p in response.data["data"]], ["Newer", "Older"])
        self.assertIn("publishDate", response.data["data"][0])


class TestimonialViewTests(APITestCase):
    def setUp(self):
        self.approved = Testimonial.objects.create(name="Ada", testimonial="Blessed", approved=True)
        self.hidden = Testimonial.objects.create(name="Ben", testimonial="Pending", approved=False)

    def test_public_sees_only_approved(self):
        response = self.client.get(reverse("testimonial-list"))
        self.assertEqual([t["name"] for t in response.data["data"]], ["Ada"])

        response = self.client.get(reverse("testimonial-detail", args=[self.hidden.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_sees_everything(self):
        self.client.force_authenticate(user=ADMIN)
        response = self.client.get(reverse("testimonial-list"))
        self.assertEqual(response.data["pagination"]["total"], 2)

    def test_public_submission_is_never_auto_approved(self):
        data = {"name": "Chi", "text": "<b>Thankful</b>", "approved": True}

        response = self.client.post(reverse("testimonial-list"), data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        testimonial = Testimonial.objects.get(name="Chi")
        self.assertFalse(testimonial.approved)
        self.assertEqual(testimonial.testimonial, "Thankful")

    def test_admin_submission_defaults_to_approved(self):
        self.client.force_authenticate(user=ADMIN)

        self.client.post(reverse("testimonial-list"), {"name": "Dayo", "testimonial": "Joy"}, format="json")

        self.assertTrue(Testimonial.objects.get(name="Dayo").approved)

    def test_admin_can_approve(self):
        self.client.force_authenticate(user=ADMIN)

        response = self.client.put(
            reverse("testimonial-detail", args=[self.hidden.pk]), {"approved": True}, format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.hidden.refresh_from_db()
        self.assertTrue(self.hidden.approved)


class TeamMemberViewTests(APITestCase):
    def test_sorted_by_order(self):
        TeamMember.objects.create(name="Second", order=2)
        TeamMember.objects.create(name="First", order=1, social_links={"x": "https://x.com/first"})

        response = self.client.get(reverse("team-list"))

        self.assertEqual([m["name"] for m in response.data["data"]], ["First", "Second"])
        self.assertEqual(response.data["data"][0]["socialLinks"], {"x": "https://x.com/first"})


class PrayerRequestViewTests(APITestCase):
    def test_public_can_submit_but_not_read(self):
        data = {"name": "Ngozi", "request": "Pray for my <i>family</i>", "status": "answered"}

        response = self.client.post(reverse("prayer-list"), data, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        prayer = PrayerRequest.objects.get()
        self.assertEqual(prayer.request, "Pray for my family")
        self.assertEqual(prayer.status, PrayerRequest.Status.PENDING)

        response = self.client.get(reverse("prayer-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        response = self.client.get(reverse("prayer-detail", args=[prayer.pk]))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_admin_updates_status(self):
        prayer = PrayerRequest.objects.create(name="Tobi", request="Healing")
        self.client.force_authenticate(user=ADMIN)

        response = self.client.put(
            reverse("prayer-detail", args=[prayer.pk]), {"status": "prayed"}, format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        prayer.refresh_from_db()
        self.assertEqual(prayer.status, "prayed")

        response = self.client.get(reverse("prayer-list"), {"status": "prayed"})
        self.assertEqual(response.data["pagination"]["total"], 1)


class SiteSettingsViewTests(APITestCase):
    def test_first_read_creates_defaults(self):
        response = self.client.get(reverse("site-settings"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["banners"], [])
        self.assertEqual(response.data["socialLinks"], {})
        self.assertEqual(SiteSettings.objects.count(), 1)

    def test_admin_update_merges(self):
        SiteSettings.objects.create(pk=1, live_stream_url="https://youtube.com/live/1")
        self.client.force_authenticate(user=ADMIN)

        response = self.client.put(
            reverse("site-settings"), {"announcements": ["Vigil on Friday"]}, format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["announcements"], ["Vigil on Friday"])
        self.assertEqual(response.data["liveStreamUrl"], "https://youtube.com/live/1")
        self.assertEqual(SiteSettings.objects.count(), 1)

    def test_update_requires_admin(self):
        response = self.client.put(reverse("site-settings"), {"banners": []}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class ContactViewTests(APITestCase):
    def setUp(self):
        self.url = reverse("contact")
        self.data = {
            "fullName": "Ada <b>Obi</b>",
            "email": "ADA@example.com",
            "message": "Hello & <script>x</script>welcome",
        }

    @override_settings(EMAIL_HOST="", CONTACT_TO_EMAIL="")
    def test_not_configured(self):
        response = self.client.post(self.url, self.data, format="json")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], "Email service is not configured")

    @override_settings(**SMTP_SETTINGS)
    def test_sends_escaped_message(self):
        response = self.client.post(self.url, self.data, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"ok": True})
        self.assertEqual(len(mail.outbox), 1)

        message = mail.outbox[0]
        self.assertEqual(message.to, ["office@example.org"])
        self.assertEqual(message.reply_to, ["ada@example.com"])
        self.assertIn("Ada Obi", message.subject)
        self.assertIn("Hello & welcome", message.body)
        self.assertIn("Hello &amp; welcome", message.alternatives[0][0])
        self.assertNotIn("<script>", message.alternatives[0][0])

    @override_settings(**SMTP_SETTINGS)
    @patch("content.views.EmailMultiAlternatives.send")
    def test_send_failure(self, mock_send):
        mock_send.side_effect = OSError("connection refused")

        response = self.client.post(self.url, self.data, format="json")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], "Failed to send message")

    def test_validation(self):
        response = self.client.post(self.url, {"fullName": "", "email": "nope"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(set(response.data["errors"]), {"fullName", "email", "message"})


class SeedCommandTests(TestCase):
    def test_seed_events_is_idempotent(self):
        call_command("seed_events", stdout=StringIO())
        count = Event.objects.count()
        call_command("seed_events", stdout=StringIO())

        self.assertEqual(count, 6)
        self.assertEqual(Event.objects.count(), 6)

    def test_seed_testimonials_is_idempotent(self):
        call_command("seed_testimonials", stdout=StringIO())
        call_command("seed_testimonials", stdout=StringIO())

        self.assertEqual(Testimonial.objects.count(), 5)
        self.assertFalse(Testimonial.objects.filter(approved=False).exists())
