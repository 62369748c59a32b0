from __future__ import annotations

import uuid

from django.db import models
from django.utils import timezone


class TimestampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Sermon(TimestampedModel):
    title = models.CharField(max_length=200)
    speaker = models.CharField(max_length=200, blank=True, default="")
    preacher = models.CharField(max_length=200, blank=True, default="")
    date = models.DateTimeField()
    description = models.TextField(max_length=5000, blank=True, default="")
    audio_url = models.URLField(max_length=1000, blank=True, default="")
    video_url = models.URLField(max_length=1000, blank=True, default="")
    thumbnail = models.URLField(max_length=1000, blank=True, default="")
    downloads = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-date"]
        indexes = [models.Index(fields=["-date"], name="sermon_date_idx")]

    def __str__(self):
        return self.title


class Event(TimestampedModel):
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=5000)
    date = models.DateTimeField()
    time = models.CharField(max_length=5, blank=True, default="")
    location = models.CharField(max_length=500, blank=True, default="")
    image = models.CharField(max_length=1000, blank=True, default="")

    class Meta:
        ordering = ["date"]
        indexes = [models.Index(fields=["date"], name="event_date_idx")]

    def __str__(self):
        return f"{self.title} ({self.date:%Y-%m-%d})"


class BlogPost(TimestampedModel):
    title = models.CharField(max_length=200)
    content = models.TextField(max_length=50000)
    description = models.TextField(max_length=1000, blank=True, default="")
    excerpt = models.TextField(max_length=500, blank=True, default="")
    author = models.CharField(max_length=200, blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")
    publish_date = models.DateTimeField(default=timezone.now)
    image = models.CharField(max_length=1000, blank=True, default="")
    featured_image = models.CharField(max_length=1000, blank=True, default="")

    class Meta:
        ordering = ["-publish_date"]
        indexes = [models.Index(fields=["-publish_date"], name="blog_publish_idx")]

    def __str__(self):
        return self.title


class Testimonial(TimestampedModel):
    name = models.CharField(max_length=200)
    testimonial = models.TextField(max_length=2000)
    location = models.CharField(max_length=200, blank=True, default="")
    image = models.CharField(max_length=1000, blank=True, default="")
    email = models.EmailField(max_length=255, blank=True, default="")
    approved = models.BooleanField(default=False)
    date = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [models.Index(fields=["approved", "-date"], name="testimonial_approved_idx")]

    def __str__(self):
        return f"{self.name} | {'approved' if self.approved else 'pending'}"


class TeamMember(TimestampedModel):
    name = models.CharField(max_length=200)
    position = models.CharField(max_length=200, blank=True, default="")
    bio = models.TextField(max_length=5000, blank=True, default="")
    image = models.CharField(max_length=1000, blank=True, default="")
    email = models.EmailField(max_length=255, blank=True, default="")
    order = models.IntegerField(default=0)
    social_links = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["order", "created_at"]

    def __str__(self):
        return f"{self.name} ({self.position})" if self.position else self.name


class PrayerRequest(TimestampedModel):

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PRAYED = "prayed", "Prayed"
        ANSWERED = "answered", "Answered"

    name = models.CharField(max_length=200)
    request = models.TextField(max_length=2000)
    email = models.EmailField(max_length=255, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    date = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-date"]
        indexes = [models.Index(fields=["status"], name="prayer_status_idx")]

    def __str__(self):
        return f"{self.name} | {self.status}"


class SiteSettings(models.Model):
    """Single-row site configuration shown on the public pages."""
    id = models.PositiveSmallIntegerField(primary_key=True, default=1, editable=False)
    banners = models.JSONField(default=list, blank=True)
    announcements = models.JSONField(default=list, blank=True)
    live_stream_url = models.CharField(max_length=1000, blank=True, default="")
    social_links = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "site settings"
        verbose_name_plural = "site settings"

    def __str__(self):
        return "Site settings"

    @classmethod
    def load(cls) -> "SiteSettings":
        settings, _ = cls.objects.get_or_create(pk=1)
        return settings
