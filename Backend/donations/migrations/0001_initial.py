import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Donation",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "transaction_reference",
                    models.CharField(editable=False, max_length=64, unique=True),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(max_length=3)),
                ("donor_email", models.EmailField(max_length=255)),
                ("donor_full_name", models.CharField(max_length=200)),
                (
                    "purpose",
                    models.CharField(blank=True, default="General Offering", max_length=200),
                ),
                ("message", models.TextField(blank=True, default="")),
                ("is_recurring", models.BooleanField(default=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("payment_id", models.CharField(blank=True, default="", max_length=64)),
                ("payment_method", models.CharField(blank=True, default="", max_length=64)),
                ("gateway_reference", models.CharField(blank=True, default="", max_length=128)),
                ("failure_reason", models.CharField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="donation_status_idx"),
                    models.Index(fields=["donor_email"], name="donation_email_idx"),
                    models.Index(fields=["-created_at"], name="donation_created_idx"),
                ],
            },
        ),
    ]
