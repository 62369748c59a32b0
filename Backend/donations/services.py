"""
Donation payment lifecycle: initialize -> webhook verify -> polling reconciliation.

Every state change is a single conditional UPDATE matched on
``transaction_reference`` and ``status='pending'``, so the webhook and polling
paths can race on the same donation and still converge. Nothing ever leaves
``completed`` or ``failed``.
"""
from __future__ import annotations

import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.utils import timezone

from .flutterwave import (
    FlutterwaveClient,
    FlutterwaveError,
    GatewayNotConfigured,
    GatewayUnavailable,
)
from .models import Donation

logger = logging.getLogger(__name__)

COMPLETED_EVENTS = ("charge.completed", "charge.completed.redirect")
PAYMENT_OPTIONS = "card,ussd,banktransfer,account"
DEFAULT_PURPOSE = "General Offering"

_REFERENCE_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class Outcome:
    """Result of a lifecycle operation, translated to an HTTP response by the views."""
    ok: bool
    status_code: int = 200
    data: dict = field(default_factory=dict)
    error: str | None = None
    message: str | None = None

    def body(self) -> dict:
        if self.ok:
            return self.data
        body = {"error": self.error}
        if self.message:
            body["message"] = self.message
        return body


def generate_transaction_reference(prefix: str | None = None) -> str:
    """<prefix>_<epoch millis>_<9 random lowercase alphanumerics>"""
    prefix = prefix or settings.DONATION_REFERENCE_PREFIX
    random_part = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{random_part}"


def status_payload(donation: Donation) -> dict:
    public_status = {
        Donation.Status.COMPLETED: "success",
        Donation.Status.FAILED: "failed",
    }.get(donation.status, "pending")

    return {
        "status": public_status,
        "donation": {
            "transactionReference": donation.transaction_reference,
            "amount": float(donation.amount),
            "currency": donation.currency,
            "status": donation.status,
            "date": (donation.paid_at or donation.created_at).isoformat(),
        },
    }


class DonationLifecycle:
    def __init__(
        self,
        gateway: FlutterwaveClient,
        currency: str | None = None,
        reference_prefix: str | None = None,
    ) -> None:
        self.gateway = gateway
        self.currency = currency or settings.FLW_CURRENCY
        self.reference_prefix = reference_prefix or settings.DONATION_REFERENCE_PREFIX

    # -----------------------------------------------------------------
    # Initialize
    # -----------------------------------------------------------------

    def initialize(self, data: dict, site_url: str) -> Outcome:
        """
        Persist a pending donation, then ask the gateway for a payment link.

        ``data`` is the validated output of DonationInitializeSerializer.
        """
        try:
            self.gateway.ensure_configured()
        except GatewayNotConfigured as e:
            logger.error(str(e))
            return Outcome(False, 500, error=str(e))

        reference = generate_transaction_reference(self.reference_prefix)
        purpose = data.get("purpose") or DEFAULT_PURPOSE
        message = data.get("message") or ""

        donation = Donation.objects.create(
            transaction_reference=reference,
            amount=data["amount"],
            currency=self.currency,
            donor_email=data["email"],
            donor_full_name=data["full_name"],
            purpose=purpose,
            message=message,
            is_recurring=data.get("is_recurring", False),
            status=Donation.Status.PENDING,
        )
        logger.info(f"Donation {reference} created (pending) for {donation.amount} {donation.currency}")

        site_url = site_url.rstrip("/")
        payload = {
            "tx_ref": reference,
            "amount": float(donation.amount),
            "currency": donation.currency,
            "redirect_url": f"{site_url}/donate.html?tx_ref={reference}&status=success",
            "payment_options": PAYMENT_OPTIONS,
            "customer": {
                "email": donation.donor_email,
                "name": donation.donor_full_name,
            },
            "customizations": {
                "title": f"{settings.SITE_NAME} Donation",
                "description": purpose,
                "logo": f"{site_url}/images/logo.png",
            },
            "meta": {
                "purpose": purpose,
                "message": message,
            },
        }

        try:
            result = self.gateway.create_payment_link(payload)
        except FlutterwaveError as e:
            logger.error(f"Payment initialization failed for {reference}: {e}")
            self._mark_failed(reference, str(e) or "Payment initialization failed")
            return Outcome(False, 400, error="Failed to initialize payment", message=str(e))

        return Outcome(True, 200, data={
            "paymentLink": result["link"],
            "transactionReference": reference,
        })

    # -----------------------------------------------------------------
    # Webhook
    # -----------------------------------------------------------------

    def handle_webhook(self, event: dict) -> Outcome:
        """
        Process a gateway notification. The payload only tells us which
        transaction to look at; the verify-by-id response decides the outcome.
        """
        ack = Outcome(True, 200, data={"status": "success"})

        event_type = event.get("event")
        if event_type not in COMPLETED_EVENTS:
            logger.info(f"Ignoring webhook event: {event_type}")
            return ack

        data = event.get("data") or {}
        if not isinstance(data, dict):
            logger.warning(f"Webhook {event_type} has no data object")
            return ack

        reference = data.get("tx_ref")
        payment_id = data.get("id")

        if not reference or payment_id in (None, ""):
            logger.warning(f"Webhook {event_type} missing tx_ref or id")
            return ack

        donation = Donation.objects.filter(transaction_reference=reference).first()
        if donation is None:
            logger.warning(f"Webhook for unknown donation: {reference}")
            return ack

        if donation.is_terminal:
            logger.info(f"Donation {reference} already {donation.status}; webhook ignored")
            return ack

        try:
            self.gateway.ensure_configured()
        except GatewayNotConfigured as e:
            logger.error(str(e))
            return Outcome(False, 500, error=str(e))

        self._record_payment_id(reference, payment_id)
        self._reconcile(reference, payment_id)
        return ack

    # -----------------------------------------------------------------
    # Polling verification
    # -----------------------------------------------------------------

    def verify(self, reference: str) -> Outcome:
        donation = Donation.objects.filter(transaction_reference=reference).first()
        if donation is None:
            return Outcome(False, 404, error="Donation not found")

        if donation.status == Donation.Status.PENDING and donation.payment_id:
            try:
                self.gateway.ensure_configured()
            except GatewayNotConfigured as e:
                logger.error(str(e))
                return Outcome(False, 500, error=str(e))

            if self._reconcile(reference, donation.payment_id) is not None:
                donation.refresh_from_db()

        return Outcome(True, 200, data=status_payload(donation))

    # -----------------------------------------------------------------
    # State transitions
    # -----------------------------------------------------------------

    def _reconcile(self, reference: str, payment_id) -> str | None:
        """
        Ask the gateway about ``payment_id`` and apply the terminal state.

        Returns the status written, or None when nothing could be decided:
        the gateway was unreachable or refused the lookup, or its answer is
        not about this reference.
        """
        try:
            verification = self.gateway.verify_transaction(payment_id)
        except GatewayNotConfigured:
            raise
        except GatewayUnavailable as e:
            logger.error(f"Could not verify {reference} (payment {payment_id}): {e}")
            return None
        except FlutterwaveError as e:
            # the id may be bogus or the keys wrong; neither says anything about this donation
            logger.warning(f"Gateway rejected verification of {reference} (payment {payment_id}): {e}")
            return None

        verified_reference = verification.get("tx_ref")
        if verified_reference != reference:
            logger.warning(
                f"Payment {payment_id} belongs to {verified_reference}, not {reference}; ignoring"
            )
            return None

        if verification.get("status") == "successful":
            self._mark_completed(reference, payment_id, verification)
            return Donation.Status.COMPLETED

        reason = verification.get("processor_response") or "Payment verification failed"
        self._mark_failed(reference, reason, payment_id)
        return Donation.Status.FAILED

    def _pending(self, reference: str):
        return Donation.objects.filter(
            transaction_reference=reference,
            status=Donation.Status.PENDING,
        )

    def _record_payment_id(self, reference: str, payment_id) -> None:
        self._pending(reference).update(payment_id=str(payment_id), updated_at=timezone.now())

    def _mark_completed(self, reference: str, payment_id, verification: dict) -> bool:
        now = timezone.now()
        fields = {
            "status": Donation.Status.COMPLETED,
            "payment_id": str(payment_id),
            "paid_at": now,
            "verified_at": now,
            "updated_at": now,
            "currency": verification.get("currency") or self.currency,
            "payment_method": verification.get("payment_type") or "unknown",
            "gateway_reference": verification.get("flw_ref") or "",
            "failure_reason": "",
        }
        try:
            fields["amount"] = Decimal(str(verification["amount"]))
        except (KeyError, InvalidOperation):
            pass

        updated = self._pending(reference).update(**fields)
        if updated:
            logger.info(f"Donation {reference} verified and completed")
        else:
            logger.info(f"Donation {reference} was already settled; completion not re-applied")
        return bool(updated)

    def _mark_failed(self, reference: str, reason: str, payment_id=None) -> bool:
        fields = {
            "status": Donation.Status.FAILED,
            "failure_reason": reason[:500],
            "updated_at": timezone.now(),
        }
        if payment_id not in (None, ""):
            fields["payment_id"] = str(payment_id)

        updated = self._pending(reference).update(**fields)
        if updated:
            logger.warning(f"Donation {reference} marked failed: {reason}")
        return bool(updated)
