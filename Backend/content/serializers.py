from __future__ import annotations

import re

from rest_framework import serializers

from core.sanitize import sanitize_html, sanitize_text, to_plain_text
from .models import (
    BlogPost,
    Event,
    PrayerRequest,
    Sermon,
    SiteSettings,
    TeamMember,
    Testimonial,
)

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ContentSerializer(serializers.ModelSerializer):
    """
    Base for the content resources.

    ``text_fields`` lose all markup, ``html_fields`` keep the formatting
    allow-list. A required field that is empty once cleaned is rejected.
    """
    text_fields: tuple = ()
    html_fields: tuple = ()

    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    def validate(self, attrs):
        errors = {}
        for name in (*self.text_fields, *self.html_fields):
            field = self.fields[name]
            if field.source not in attrs:
                continue
            clean = sanitize_html if name in self.html_fields else sanitize_text
            value = clean(attrs[field.source]).strip()
            if not value and field.required:
                errors[name] = ["This field may not be blank."]
            attrs[field.source] = value
        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class SermonSerializer(ContentSerializer):
    text_fields = ("title", "speaker", "preacher", "description")

    audioUrl = serializers.URLField(source="audio_url", max_length=1000, required=False, allow_blank=True)
    videoUrl = serializers.URLField(source="video_url", max_length=1000, required=False, allow_blank=True)

    class Meta:
        model = Sermon
        fields = [
            "id",
            "title",
            "speaker",
            "preacher",
            "date",
            "description",
            "audioUrl",
            "videoUrl",
            "thumbnail",
            "downloads",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id", "downloads"]


class EventSerializer(ContentSerializer):
    text_fields = ("title", "description", "location")

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "date",
            "time",
            "location",
            "image",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]

    def validate_time(self, value):
        value = value.strip()
        if value and not TIME_RE.match(value):
            raise serializers.ValidationError("Time must be in HH:MM format.")
        return value


class BlogPostSerializer(ContentSerializer):
    text_fields = ("title", "description", "excerpt", "author", "category")
    html_fields = ("content",)

    publishDate = serializers.DateTimeField(source="publish_date", required=False)
    featuredImage = serializers.CharField(
        source="featured_image", max_length=1000, required=False, allow_blank=True,
    )

    class Meta:
        model = BlogPost
        fields = [
            "id",
            "title",
            "content",
            "description",
            "excerpt",
            "author",
            "category",
            "publishDate",
            "image",
            "featuredImage",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]


class TestimonialSerializer(ContentSerializer):
    text_fields = ("name", "testimonial", "location")

    class Meta:
        model = Testimonial
        fields = [
            "id",
            "name",
            "testimonial",
            "location",
            "image",
            "email",
            "approved",
            "date",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]

    def to_internal_value(self, data):
        # older forms post the body as "text"
        if hasattr(data, "get") and "testimonial" not in data and data.get("text"):
            data = {**data, "testimonial": data.get("text")}
        return super().to_internal_value(data)


class TeamMemberSerializer(ContentSerializer):
    text_fields = ("name", "position", "bio")

    socialLinks = serializers.JSONField(source="social_links", required=False)

    class Meta:
        model = TeamMember
        fields = [
            "id",
            "name",
            "position",
            "bio",
            "image",
            "email",
            "order",
            "socialLinks",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]

    def validate_socialLinks(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Must be an object.")
        return value


class PrayerRequestSerializer(ContentSerializer):
    text_fields = ("name", "request", "phone")

    class Meta:
        model = PrayerRequest
        fields = [
            "id",
            "name",
            "request",
            "email",
            "phone",
            "status",
            "date",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]


class PrayerRequestSubmitSerializer(PrayerRequestSerializer):
    """Public submission: status and date are server-assigned."""

    class Meta(PrayerRequestSerializer.Meta):
        read_only_fields = ["id", "status", "date"]


class SiteSettingsSerializer(serializers.ModelSerializer):
    liveStreamUrl = serializers.CharField(
        source="live_stream_url", max_length=1000, required=False, allow_blank=True,
    )
    socialLinks = serializers.JSONField(source="social_links", required=False)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = SiteSettings
        fields = ["banners", "announcements", "liveStreamUrl", "socialLinks", "updatedAt"]

    def validate_banners(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Must be a list.")
        return value

    def validate_announcements(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Must be a list.")
        return value

    def validate_socialLinks(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Must be an object.")
        return value


class ContactSerializer(serializers.Serializer):
    fullName = serializers.CharField(max_length=200)
    email = serializers.EmailField(max_length=255)
    message = serializers.CharField(max_length=5000)

    def validate_fullName(self, value):
        value = to_plain_text(value).strip()
        if not value:
            raise serializers.ValidationError("Full name is required.")
        return value

    def validate_email(self, value):
        return value.strip().lower()

    def validate_message(self, value):
        value = to_plain_text(value).strip()
        if not value:
            raise serializers.ValidationError("Message is required.")
        return value
