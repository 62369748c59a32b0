from decimal import Decimal

from rest_framework import serializers

from core.sanitize import sanitize_text
from .models import Donation


class DonationInitializeSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    email = serializers.EmailField(max_length=255)
    fullName = serializers.CharField(max_length=200, trim_whitespace=True)
    purpose = serializers.CharField(max_length=200, required=False, allow_blank=True)
    message = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    isRecurring = serializers.BooleanField(required=False, default=False)

    def validate_email(self, value):
        return value.strip().lower()

    def validate_fullName(self, value):
        value = sanitize_text(value).strip()
        if not value:
            raise serializers.ValidationError("Full name is required.")
        return value

    def validate_purpose(self, value):
        return sanitize_text(value).strip()

    def validate_message(self, value):
        return sanitize_text(value).strip()

    def validate(self, attrs):
        return {
            "amount": attrs["amount"],
            "email": attrs["email"],
            "full_name": attrs["fullName"],
            "purpose": attrs.get("purpose") or "",
            "message": attrs.get("message") or "",
            "is_recurring": attrs.get("isRecurring", False),
        }


class DonationSerializer(serializers.ModelSerializer):
    transactionReference = serializers.CharField(source="transaction_reference", read_only=True)
    amount = serializers.FloatField(read_only=True)
    donorEmail = serializers.EmailField(source="donor_email", read_only=True)
    donorFullName = serializers.CharField(source="donor_full_name", read_only=True)
    isRecurring = serializers.BooleanField(source="is_recurring", read_only=True)
    paymentId = serializers.CharField(source="payment_id", read_only=True)
    paymentMethod = serializers.CharField(source="payment_method", read_only=True)
    gatewayReference = serializers.CharField(source="gateway_reference", read_only=True)
    failureReason = serializers.CharField(source="failure_reason", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    paidAt = serializers.DateTimeField(source="paid_at", read_only=True)
    verifiedAt = serializers.DateTimeField(source="verified_at", read_only=True)

    class Meta:
        model = Donation
        fields = [
            "id",
            "transactionReference",
            "amount",
            "currency",
            "donorEmail",
            "donorFullName",
            "purpose",
            "message",
            "isRecurring",
            "status",
            "paymentId",
            "paymentMethod",
            "gatewayReference",
            "failureReason",
            "createdAt",
            "updatedAt",
            "paidAt",
            "verifiedAt",
        ]
        read_only_fields = fields
