import uuid

import django.utils.timezone
from django.db import migrations, models


def timestamps():
    return [
        (
            "id",
            models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
        ),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Sermon",
            fields=[
                *timestamps(),
                ("title", models.CharField(max_length=200)),
                ("speaker", models.CharField(blank=True, default="", max_length=200)),
                ("preacher", models.CharField(blank=True, default="", max_length=200)),
                ("date", models.DateTimeField()),
                ("description", models.TextField(blank=True, default="", max_length=5000)),
                ("audio_url", models.URLField(blank=True, default="", max_length=1000)),
                ("video_url", models.URLField(blank=True, default="", max_length=1000)),
                ("thumbnail", models.URLField(blank=True, default="", max_length=1000)),
                ("downloads", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["-date"],
                "indexes": [models.Index(fields=["-date"], name="sermon_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                *timestamps(),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(max_length=5000)),
                ("date", models.DateTimeField()),
                ("time", models.CharField(blank=True, default="", max_length=5)),
                ("location", models.CharField(blank=True, default="", max_length=500)),
                ("image", models.CharField(blank=True, default="", max_length=1000)),
            ],
            options={
                "ordering": ["date"],
                "indexes": [models.Index(fields=["date"], name="event_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="BlogPost",
            fields=[
                *timestamps(),
                ("title", models.CharField(max_length=200)),
                ("content", models.TextField(max_length=50000)),
                ("description", models.TextField(blank=True, default="", max_length=1000)),
                ("excerpt", models.TextField(blank=True, default="", max_length=500)),
                ("author", models.CharField(blank=True, default="", max_length=200)),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("publish_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("image", models.CharField(blank=True, default="", max_length=1000)),
                ("featured_image", models.CharField(blank=True, default="", max_length=1000)),
            ],
            options={
                "ordering": ["-publish_date"],
                "indexes": [models.Index(fields=["-publish_date"], name="blog_publish_idx")],
            },
        ),
        migrations.CreateModel(
            name="Testimonial",
            fields=[
                *timestamps(),
                ("name", models.CharField(max_length=200)),
                ("testimonial", models.TextField(max_length=2000)),
                ("location", models.CharField(blank=True, default="", max_length=200)),
                ("image", models.CharField(blank=True, default="", max_length=1000)),
                ("email", models.EmailField(blank=True, default="", max_length=255)),
                ("approved", models.BooleanField(default=False)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["approved", "-date"], name="testimonial_approved_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TeamMember",
            fields=[
                *timestamps(),
                ("name", models.CharField(max_length=200)),
                ("position", models.CharField(blank=True, default="", max_length=200)),
                ("bio", models.TextField(blank=True, default="", max_length=5000)),
                ("image", models.CharField(blank=True, default="", max_length=1000)),
                ("email", models.EmailField(blank=True, default="", max_length=255)),
                ("order", models.IntegerField(default=0)),
                ("social_links", models.JSONField(blank=True, default=dict)),
            ],
            options={
                "ordering": ["order", "created_at"],
            },
        ),
        migrations.CreateModel(
            name="PrayerRequest",
            fields=[
                *timestamps(),
                ("name", models.CharField(max_length=200)),
                ("request", models.TextField(max_length=2000)),
                ("email", models.EmailField(blank=True, default="", max_length=255)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("prayed", "Prayed"),
                            ("answered", "Answered"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "ordering": ["-date"],
                "indexes": [models.Index(fields=["status"], name="prayer_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="SiteSettings",
            fields=[
                (
                    "id",
                    models.PositiveSmallIntegerField(
                        default=1, editable=False, primary_key=True, serialize=False,
                    ),
                ),
                ("banners", models.JSONField(blank=True, default=list)),
                ("announcements", models.JSONField(blank=True, default=list)),
                ("live_stream_url", models.CharField(blank=True, default="", max_length=1000)),
                ("social_links", models.JSONField(blank=True, default=dict)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "site settings",
                "verbose_name_plural": "site settings",
            },
        ),
    ]
