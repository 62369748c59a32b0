from __future__ import annotations

import uuid

from django.db import models


class Donation(models.Model):
    """
    Local record of a gateway payment.

    ``transaction_reference`` is assigned on creation and is the idempotency key
    for every later lookup. Status moves pending -> completed or pending -> failed
    and never leaves a terminal state.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transaction_reference = models.CharField(max_length=64, unique=True, editable=False)

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3)

    donor_email = models.EmailField(max_length=255)
    donor_full_name = models.CharField(max_length=200)
    purpose = models.CharField(max_length=200, blank=True, default="General Offering")
    message = models.TextField(blank=True, default="")
    is_recurring = models.BooleanField(default=False)

    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )

    payment_id = models.CharField(max_length=64, blank=True, default="")
    payment_method = models.CharField(max_length=64, blank=True, default="")
    gateway_reference = models.CharField(max_length=128, blank=True, default="")
    failure_reason = models.CharField(max_length=500, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    verified_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="donation_status_idx"),
            models.Index(fields=["donor_email"], name="donation_email_idx"),
            models.Index(fields=["-created_at"], name="donation_created_idx"),
        ]

    def __str__(self):
        return f"Donation {self.transaction_reference} | {self.amount} {self.currency} | {self.status}"

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.Status.COMPLETED, self.Status.FAILED)
