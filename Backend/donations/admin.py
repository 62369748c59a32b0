from django.contrib import admin

from donations.models import Donation


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = (
        "transaction_reference",
        "donor_full_name",
        "donor_email",
        "amount",
        "currency",
        "purpose",
        "status",
        "created_at",
        "paid_at",
    )
    list_filter = ("status", "currency", "is_recurring", "created_at")
    search_fields = ("transaction_reference", "donor_email", "donor_full_name", "payment_id")
    readonly_fields = (
        "transaction_reference",
        "payment_id",
        "payment_method",
        "gateway_reference",
        "failure_reason",
        "created_at",
        "updated_at",
        "paid_at",
        "verified_at",
    )
