from __future__ import annotations

import logging
import uuid
from datetime import datetime, time

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db.models import F
from django.http import HttpResponseRedirect
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import SAFE_METHODS, AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import InvalidIdentifier
from core.pagination import paginate_queryset
from core.sanitize import escape_html
from core.throttling import AdminApiThrottle, PublicApiThrottle
from users.permissions import IsAdmin, IsAuthenticatedUser, is_admin_request
from .models import (
    BlogPost,
    Event,
    PrayerRequest,
    Sermon,
    SiteSettings,
    TeamMember,
    Testimonial,
)
from .serializers import (
    BlogPostSerializer,
    ContactSerializer,
    EventSerializer,
    PrayerRequestSerializer,
    PrayerRequestSubmitSerializer,
    SermonSerializer,
    SiteSettingsSerializer,
    TeamMemberSerializer,
    TestimonialSerializer,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Shared resource views
# ---------------------------------------------------------------------

class ResourceView(APIView):
    """
    Reads are public and writes are admin-only unless a subclass says otherwise.
    Admin writes draw from the stricter admin budget.
    """
    model = None
    serializer_class = None
    read_permission_classes = [AllowAny]
    write_permission_classes = [IsAdmin]
    label = "Resource"

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [permission() for permission in self.read_permission_classes]
        return [permission() for permission in self.write_permission_classes]

    def get_throttles(self):
        if self.request.method not in SAFE_METHODS and IsAdmin in self.write_permission_classes:
            return [AdminApiThrottle()]
        return [PublicApiThrottle()]

    def get_queryset(self):
        return self.model.objects.all()

    def not_found(self):
        return Response({"error": f"{self.label} not found"}, status=status.HTTP_404_NOT_FOUND)


class CollectionView(ResourceView):
    """GET: paginated list. POST: create."""
    ordering: tuple = ()

    def get(self, request):
        queryset = self.filter_queryset(self.get_queryset()).order_by(*self.ordering)
        return Response(paginate_queryset(queryset, request.query_params, self.serializer_class))

    def filter_queryset(self, queryset):
        return queryset

    def get_create_serializer(self, data):
        return self.serializer_class(data=data)

    def post(self, request):
        serializer = self.get_create_serializer(request.data)
        serializer.is_valid(raise_exception=True)
        instance = serializer.save(**self.create_defaults(request, serializer.validated_data))
        logger.info(f"{self.label} {instance.pk} created")
        return Response(self.serializer_class(instance).data, status=status.HTTP_201_CREATED)

    def create_defaults(self, request, validated_data) -> dict:
        return {}


class ItemView(ResourceView):
    """GET / PUT (partial merge) / DELETE a single record by UUID."""

    def initial(self, request, *args, **kwargs):
        # malformed ids are rejected before authentication or storage
        try:
            uuid.UUID(str(kwargs.get("pk")))
        except ValueError:
            raise InvalidIdentifier()
        super().initial(request, *args, **kwargs)

    def get_object(self, pk):
        return self.get_queryset().filter(pk=pk).first()

    def get(self, request, pk):
        instance = self.get_object(pk)
        if instance is None:
            return self.not_found()
        return Response(self.serializer_class(instance).data)

    def put(self, request, pk):
        instance = self.model.objects.filter(pk=pk).first()
        if instance is None:
            return self.not_found()

        serializer = self.serializer_class(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        instance = serializer.save()
        logger.info(f"{self.label} {pk} updated")
        return Response(self.serializer_class(instance).data)

    def patch(self, request, pk):
        return self.put(request, pk)

    def delete(self, request, pk):
        deleted, _ = self.model.objects.filter(pk=pk).delete()
        if not deleted:
            return self.not_found()
        logger.info(f"{self.label} {pk} deleted")
        return Response({"message": f"{self.label} deleted successfully"})


# ---------------------------------------------------------------------
# Sermons
# ---------------------------------------------------------------------

class SermonListView(CollectionView):
    model = Sermon
    serializer_class = SermonSerializer
    label = "Sermon"
    ordering = ("-date", "-created_at")


class SermonDetailView(ItemView):
    model = Sermon
    serializer_class = SermonSerializer
    label = "Sermon"


class SermonDownloadView(ItemView):
    """
    GET <type>: count the download and redirect to the file (signed-in users).
    POST: count a download made through a direct link (public).
    """
    model = Sermon
    serializer_class = SermonSerializer
    label = "Sermon"
    read_permission_classes = [IsAuthenticatedUser]
    write_permission_classes = [AllowAny]

    FILE_FIELDS = {"audio": "audio_url", "video": "video_url"}

    def get(self, request, pk, file_type=None):
        sermon = self.get_object(pk)
        if sermon is None:
            return self.not_found()

        field = self.FILE_FIELDS.get(file_type)
        file_url = getattr(sermon, field) if field else ""
        if not file_url:
            return Response(
                {"error": "File not available for this sermon"},
                status=status.HTTP_404_NOT_FOUND,
            )

        Sermon.objects.filter(pk=pk).update(downloads=F("downloads") + 1)
        return HttpResponseRedirect(file_url)

    def post(self, request, pk, file_type=None):
        updated = Sermon.objects.filter(pk=pk).update(downloads=F("downloads") + 1)
        if not updated:
            return self.not_found()
        return Response({"message": "Download count updated"})

    http_method_names = ["get", "post", "options"]


# ---------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------

def start_of_today():
    today = timezone.localdate()
    return timezone.make_aware(datetime.combine(today, time.min))


class EventListView(CollectionView):
    model = Event
    serializer_class = EventSerializer
    label = "Event"
    ordering = ("date", "created_at")

    def filter_queryset(self, queryset):
        if self.request.query_params.get("upcoming") == "true":
            queryset = queryset.filter(date__gte=start_of_today())
        return queryset


class EventDetailView(ItemView):
    model = Event
    serializer_class = EventSerializer
    label = "Event"


# ---------------------------------------------------------------------
# Blog
# ---------------------------------------------------------------------

class BlogPostListView(CollectionView):
    model = BlogPost
    serializer_class = BlogPostSerializer
    label = "Post"
    ordering = ("-publish_date", "-created_at")


class BlogPostDetailView(ItemView):
    model = BlogPost
    serializer_class = BlogPostSerializer
    label = "Post"


# ---------------------------------------------------------------------
# Testimonials
# ---------------------------------------------------------------------

class TestimonialQuerysetMixin:
    def get_queryset(self):
        queryset = Testimonial.objects.all()
        if not is_admin_request(self.request):
            queryset = queryset.filter(approved=True)
        return queryset


class TestimonialListView(TestimonialQuerysetMixin, CollectionView):
    """Anyone may submit; submissions wait for an admin to approve them."""
    model = Testimonial
    serializer_class = TestimonialSerializer
    label = "Testimonial"
    ordering = ("-date", "-created_at")
    write_permission_classes = [AllowAny]

    def create_defaults(self, request, validated_data):
        if is_admin_request(request):
            return {"approved": validated_data.get("approved", True)}
        return {"approved": False}


class TestimonialDetailView(TestimonialQuerysetMixin, ItemView):
    model = Testimonial
    serializer_class = TestimonialSerializer
    label = "Testimonial"


# ---------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------

class TeamMemberListView(CollectionView):
    model = TeamMember
    serializer_class = TeamMemberSerializer
    label = "Team member"
    ordering = ("order", "created_at")


class TeamMemberDetailView(ItemView):
    model = TeamMember
    serializer_class = TeamMemberSerializer
    label = "Team member"


# ---------------------------------------------------------------------
# Prayer requests
# ---------------------------------------------------------------------

class PrayerRequestListView(CollectionView):
    """Public submission; only admins can read the requests."""
    model = PrayerRequest
    serializer_class = PrayerRequestSerializer
    label = "Prayer request"
    ordering = ("-date", "-created_at")
    read_permission_classes = [IsAdmin]
    write_permission_classes = [AllowAny]

    def get_create_serializer(self, data):
        return PrayerRequestSubmitSerializer(data=data)

    def filter_queryset(self, queryset):
        status_filter = self.request.query_params.get("status")
        if status_filter in PrayerRequest.Status.values:
            queryset = queryset.filter(status=status_filter)
        return queryset


class PrayerRequestDetailView(ItemView):
    model = PrayerRequest
    serializer_class = PrayerRequestSerializer
    label = "Prayer request"
    read_permission_classes = [IsAdmin]


# ---------------------------------------------------------------------
# Site settings
# ---------------------------------------------------------------------

class SiteSettingsView(APIView):

    def get_permissions(self):
        if self.request.method in SAFE_METHODS:
            return [AllowAny()]
        return [IsAdmin()]

    def get_throttles(self):
        if self.request.method in SAFE_METHODS:
            return [PublicApiThrottle()]
        return [AdminApiThrottle()]

    def get(self, request):
        return Response(SiteSettingsSerializer(SiteSettings.load()).data)

    def put(self, request):
        serializer = SiteSettingsSerializer(SiteSettings.load(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        instance = serializer.save()
        logger.info("Site settings updated")
        return Response(SiteSettingsSerializer(instance).data)


# ---------------------------------------------------------------------
# Contact form
# ---------------------------------------------------------------------

def email_configured() -> bool:
    return all([
        settings.EMAIL_HOST,
        settings.EMAIL_PORT,
        settings.EMAIL_HOST_USER,
        settings.EMAIL_HOST_PASSWORD,
        settings.CONTACT_TO_EMAIL,
    ])


class ContactView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = ContactSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if not email_configured():
            logger.error("Contact form used but SMTP is not configured")
            return Response(
                {"error": "Email service is not configured"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        full_name = serializer.validated_data["fullName"]
        email = serializer.validated_data["email"]
        message = serializer.validated_data["message"]

        safe_name = escape_html(full_name)
        safe_email = escape_html(email)
        safe_message = escape_html(message)

        from_address = settings.CONTACT_FROM_EMAIL or f'"{full_name}" <{settings.EMAIL_HOST_USER}>'
        text_body = f"From: {full_name} <{email}>\n\nMessage:\n{message}"
        html_body = f"""
            <div style="font-family:Arial,Helvetica,sans-serif;line-height:1.6;font-size:14px;color:#111">
              <p><strong>From:</strong> {safe_name} &lt;{safe_email}&gt;</p>
              <p><strong>Message:</strong></p>
              <pre style="white-space:pre-wrap;background:#f9fafb;padding:12px;border-radius:8px;border:1px solid #eee">{safe_message}</pre>
            </div>
        """

        mail = EmailMultiAlternatives(
            subject=f"New contact form message from {full_name}",
            body=text_body,
            from_email=from_address,
            to=[settings.CONTACT_TO_EMAIL],
            reply_to=[email],
        )
        mail.attach_alternative(html_body, "text/html")

        try:
            mail.send(fail_silently=False)
        except Exception as e:
            logger.exception(f"Contact email error: {e}")
            return Response(
                {"error": "Failed to send message"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        logger.info(f"Contact message sent from {email}")
        return Response({"ok": True})
