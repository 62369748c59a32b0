import hashlib
import hmac
import json
import re
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from users.authentication import ProviderUser
from .flutterwave import FlutterwaveClient, FlutterwaveError, GatewayUnavailable
from .models import Donation
from .services import DonationLifecycle, generate_transaction_reference

CREATE_LINK = "donations.flutterwave.FlutterwaveClient.create_payment_link"
VERIFY_TX = "donations.flutterwave.FlutterwaveClient.verify_transaction"


def make_donation(reference="hcm_1700000000000_abc123xyz", **kwargs):
    fields = {
        "transaction_reference": reference,
        "amount": Decimal("5000.00"),
        "currency": "NGN",
        "donor_email": "ada@example.com",
        "donor_full_name": "Ada Obi",
    }
    fields.update(kwargs)
    return Donation.objects.create(**fields)


class TransactionReferenceTests(TestCase):
    def test_reference_format(self):
        reference = generate_transaction_reference("hcm")
        self.assertRegex(reference, r"^hcm_\d{13}_[a-z0-9]{9}$")

    def test_references_are_unique(self):
        references = {generate_transaction_reference("hcm") for _ in range(50)}
        self.assertEqual(len(references), 50)


class InitializeDonationViewTests(APITestCase):
    def setUp(self):
        self.url = reverse("donation-initialize")
        self.payload = {
            "amount": 5000,
            "email": "  Ada@Example.COM ",
            "fullName": "Ada <b>Obi</b>",
            "message": "Thank you",
        }

    @patch(CREATE_LINK)
    def test_initialize_success(self, mock_create):
        def check_pending_first(payload):
            # the record exists before the gateway answers
            donation = Donation.objects.get(transaction_reference=payload["tx_ref"])
            self.assertEqual(donation.status, Donation.Status.PENDING)
            return {"link": "https://checkout.flutterwave.com/pay/abc"}

        mock_create.side_effect = check_pending_first

        response = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["paymentLink"], "https://checkout.flutterwave.com/pay/abc")
        reference = response.data["transactionReference"]
        self.assertTrue(re.fullmatch(r"hcm_\d+_[a-z0-9]{9}", reference))

        donation = Donation.objects.get(transaction_reference=reference)
        self.assertEqual(donation.status, Donation.Status.PENDING)
        self.assertEqual(donation.donor_email, "ada@example.com")
        self.assertEqual(donation.donor_full_name, "Ada Obi")
        self.assertEqual(donation.purpose, "General Offering")
        self.assertEqual(donation.currency, "NGN")

        payload = mock_create.call_args[0][0]
        self.assertEqual(payload["tx_ref"], reference)
        self.assertEqual(
            payload["redirect_url"],
            f"https://church.example.org/donate.html?tx_ref={reference}&status=success",
        )
        self.assertEqual(payload["payment_options"], "card,ussd,banktransfer,account")
        self.assertEqual(payload["customer"], {"email": "ada@example.com", "name": "Ada Obi"})
        self.assertEqual(payload["meta"]["message"], "Thank you")

    @patch(CREATE_LINK)
    def test_gateway_rejection_marks_donation_failed(self, mock_create):
        mock_create.side_effect = FlutterwaveError("Invalid currency")

        response = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Failed to initialize payment")
        self.assertEqual(response.data["message"], "Invalid currency")

        donation = Donation.objects.get()
        self.assertEqual(donation.status, Donation.Status.FAILED)
        self.assertEqual(donation.failure_reason, "Invalid currency")

    @patch(CREATE_LINK)
    def test_invalid_amount_is_rejected(self, mock_create):
        response = self.client.post(self.url, {**self.payload, "amount": 0}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Validation failed")
        self.assertIn("amount", response.data["errors"])
        mock_create.assert_not_called()
        self.assertFalse(Donation.objects.exists())

    def test_missing_full_name_is_rejected(self):
        data = {"amount": 100, "email": "a@b.co"}
        response = self.client.post(self.url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("fullName", response.data["errors"])

    @override_settings(FLW_SECRET_KEY="", FLW_PUBLIC_KEY="")
    def test_missing_credentials_returns_500(self):
        response = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], "Flutterwave credentials not configured")
        self.assertFalse(Donation.objects.exists())


class DonationWebhookTests(APITestCase):
    def setUp(self):
        self.url = reverse("donation-webhook")
        self.donation = make_donation()
        self.event = {
            "event": "charge.completed",
            "data": {"id": 285959875, "tx_ref": self.donation.transaction_reference},
        }

    def post(self, event, **headers):
        return self.client.post(
            self.url,
            data=json.dumps(event),
            content_type="application/json",
            **headers,
        )

    @patch(VERIFY_TX)
    def test_successful_charge_completes_donation(self, mock_verify):
        mock_verify.return_value = {
            "status": "successful",
            "tx_ref": self.donation.transaction_reference,
            "amount": 5000,
            "currency": "NGN",
            "payment_type": "card",
            "flw_ref": "FLW-MOCK-123",
        }

        response = self.post(self.event)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "success"})
        mock_verify.assert_called_once_with(285959875)

        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.COMPLETED)
        self.assertEqual(self.donation.payment_id, "285959875")
        self.assertEqual(self.donation.payment_method, "card")
        self.assertEqual(self.donation.gateway_reference, "FLW-MOCK-123")
        self.assertIsNotNone(self.donation.paid_at)

    @patch(VERIFY_TX)
    def test_duplicate_event_is_idempotent(self, mock_verify):
        mock_verify.return_value = {
            "status": "successful",
            "tx_ref": self.donation.transaction_reference,
            "amount": 5000,
            "currency": "NGN",
        }

        self.post(self.event)
        self.donation.refresh_from_db()
        paid_at = self.donation.paid_at

        response = self.post(self.event)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(mock_verify.call_count, 1)
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.COMPLETED)
        self.assertEqual(self.donation.paid_at, paid_at)

    @patch(VERIFY_TX)
    def test_unsuccessful_verification_marks_failed(self, mock_verify):
        mock_verify.return_value = {
            "status": "failed",
            "tx_ref": self.donation.transaction_reference,
            "processor_response": "Insufficient funds",
        }

        response = self.post(self.event)

        self.assertEqual(response.status_code, 200)
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.FAILED)
        self.assertEqual(self.donation.failure_reason, "Insufficient funds")

    @patch(VERIFY_TX)
    def test_gateway_outage_leaves_donation_pending(self, mock_verify):
        mock_verify.side_effect = GatewayUnavailable("Network error: timed out")

        response = self.post(self.event)

        self.assertEqual(response.status_code, 200)
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.PENDING)
        self.assertEqual(self.donation.payment_id, "285959875")

    @patch(VERIFY_TX)
    def test_rejected_lookup_does_not_block_the_real_payment(self, mock_verify):
        def verify(payment_id):
            if payment_id == 1:
                raise FlutterwaveError("No transaction was found for this id")
            return {
                "status": "successful",
                "tx_ref": self.donation.transaction_reference,
                "amount": 5000,
                "currency": "NGN",
            }

        mock_verify.side_effect = verify

        forged = {"event": "charge.completed", "data": {"id": 1, "tx_ref": self.donation.transaction_reference}}
        self.assertEqual(self.post(forged).status_code, 200)
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.PENDING)

        real = {"event": "charge.completed", "data": {"id": 999, "tx_ref": self.donation.transaction_reference}}
        self.assertEqual(self.post(real).status_code, 200)

        self.assertEqual(mock_verify.call_count, 2)
        mock_verify.assert_called_with(999)
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.COMPLETED)
        self.assertEqual(self.donation.payment_id, "999")

    @patch(VERIFY_TX)
    def test_verification_without_reference_is_not_applied(self, mock_verify):
        mock_verify.return_value = {"status": "failed", "processor_response": "Declined"}

        self.post(self.event)

        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.PENDING)

    @patch(VERIFY_TX)
    def test_non_object_data_is_acknowledged(self, mock_verify):
        for data in (["tx_ref", self.donation.transaction_reference], "285959875"):
            response = self.post({"event": "charge.completed", "data": data})

            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json(), {"status": "success"})

        mock_verify.assert_not_called()
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.PENDING)

    @patch(VERIFY_TX)
    def test_unknown_reference_is_acknowledged(self, mock_verify):
        event = {"event": "charge.completed", "data": {"id": 1, "tx_ref": "hcm_0_unknown00"}}

        response = self.post(event)

        self.assertEqual(response.status_code, 200)
        mock_verify.assert_not_called()

    @patch(VERIFY_TX)
    def test_other_events_are_ignored(self, mock_verify):
        response = self.post({"event": "transfer.completed", "data": {}})

        self.assertEqual(response.status_code, 200)
        mock_verify.assert_not_called()

    def test_unparseable_body_returns_400(self):
        response = self.client.post(self.url, data="not json", content_type="text/plain")
        self.assertEqual(response.status_code, 400)

    @override_settings(FLW_SECRET_HASH="whsec")
    @patch(VERIFY_TX)
    def test_bad_signature_is_rejected(self, mock_verify):
        response = self.post(self.event, HTTP_VERIF_HASH="deadbeef")

        self.assertEqual(response.status_code, 401)
        mock_verify.assert_not_called()
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.PENDING)

    @override_settings(FLW_SECRET_HASH="whsec")
    @patch(VERIFY_TX)
    def test_valid_signature_is_accepted(self, mock_verify):
        mock_verify.return_value = {
            "status": "successful",
            "tx_ref": self.donation.transaction_reference,
            "amount": 5000,
        }
        body = json.dumps(self.event).encode("utf-8")
        signature = hmac.new(b"whsec", body, hashlib.sha256).hexdigest()

        response = self.client.post(
            self.url, data=body, content_type="application/json", HTTP_VERIF_HASH=signature,
        )

        self.assertEqual(response.status_code, 200)
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.COMPLETED)


class VerifyDonationViewTests(APITestCase):
    def setUp(self):
        self.donation = make_donation(payment_id="777")
        self.url = reverse("donation-verify", args=[self.donation.transaction_reference])

    def test_unknown_reference_returns_404(self):
        response = self.client.get(reverse("donation-verify", args=["hcm_0_missing00"]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"], "Donation not found")

    @patch(VERIFY_TX)
    def test_pending_with_payment_id_is_reconciled(self, mock_verify):
        mock_verify.return_value = {
            "status": "successful",
            "tx_ref": self.donation.transaction_reference,
            "amount": 5000,
            "currency": "NGN",
        }

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "success")
        self.assertEqual(response.data["donation"]["status"], "completed")
        self.assertEqual(response.data["donation"]["amount"], 5000.0)
        mock_verify.assert_called_once_with("777")

    @patch(VERIFY_TX)
    def test_completed_donation_skips_gateway(self, mock_verify):
        Donation.objects.filter(pk=self.donation.pk).update(status=Donation.Status.COMPLETED)

        response = self.client.get(self.url)

        self.assertEqual(response.data["status"], "success")
        mock_verify.assert_not_called()

    @patch(VERIFY_TX)
    def test_pending_without_payment_id_stays_pending(self, mock_verify):
        donation = make_donation(reference="hcm_1700000000001_pending00")

        response = self.client.get(reverse("donation-verify", args=[donation.transaction_reference]))

        self.assertEqual(response.data["status"], "pending")
        mock_verify.assert_not_called()

    @patch(VERIFY_TX)
    def test_rejected_verification_stays_pending(self, mock_verify):
        mock_verify.side_effect = FlutterwaveError("Transaction not found")

        response = self.client.get(self.url)

        self.assertEqual(response.data["status"], "pending")
        self.donation.refresh_from_db()
        self.assertEqual(self.donation.status, Donation.Status.PENDING)
        self.assertEqual(self.donation.failure_reason, "")


class LifecycleRaceTests(TestCase):
    """Webhook and poll arriving with different answers: the first terminal write wins."""

    def test_failed_is_never_overwritten_by_success(self):
        donation = make_donation(payment_id="42")
        lifecycle = DonationLifecycle(FlutterwaveClient())

        with patch(VERIFY_TX, return_value={"status": "failed", "tx_ref": donation.transaction_reference}):
            lifecycle.verify(donation.transaction_reference)

        with patch(VERIFY_TX, return_value={"status": "successful", "amount": 5000}) as mock_verify:
            outcome = lifecycle.handle_webhook({
                "event": "charge.completed",
                "data": {"id": 42, "tx_ref": donation.transaction_reference},
            })
            mock_verify.assert_not_called()

        self.assertTrue(outcome.ok)
        donation.refresh_from_db()
        self.assertEqual(donation.status, Donation.Status.FAILED)

    def test_conditional_write_ignores_settled_rows(self):
        donation = make_donation(status=Donation.Status.COMPLETED)
        lifecycle = DonationLifecycle(FlutterwaveClient())

        self.assertFalse(lifecycle._mark_failed(donation.transaction_reference, "late failure"))
        donation.refresh_from_db()
        self.assertEqual(donation.status, Donation.Status.COMPLETED)

    def test_mismatched_transaction_reference_is_not_applied(self):
        donation = make_donation(payment_id="99")
        lifecycle = DonationLifecycle(FlutterwaveClient())

        with patch(VERIFY_TX, return_value={"status": "successful", "tx_ref": "hcm_other"}):
            outcome = lifecycle.verify(donation.transaction_reference)

        self.assertEqual(outcome.data["status"], "pending")


class DonationAdminViewTests(APITestCase):
    def setUp(self):
        self.admin = ProviderUser(id="admin-1", email="admin@example.com", app_metadata={"role": "admin"})
        self.member = ProviderUser(id="user-1", email="member@example.com")
        make_donation()
        make_donation(reference="hcm_1700000000002_second000", status=Donation.Status.COMPLETED)

    def test_list_requires_admin(self):
        response = self.client.get(reverse("donation-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.force_authenticate(user=self.member)
        response = self.client.get(reverse("donation-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"], "Admin access required")

    def test_admin_list_is_paginated(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(reverse("donation-list"), {"limit": 1})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]), 1)
        self.assertEqual(response.data["pagination"]["total"], 2)
        self.assertEqual(response.data["pagination"]["totalPages"], 2)
        self.assertIn("transactionReference", response.data["data"][0])

    def test_detail_rejects_malformed_id(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("donation-detail", args=["not-a-uuid"]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Invalid ID format")

    def test_detail_returns_donation(self):
        self.client.force_authenticate(user=self.admin)
        donation = Donation.objects.get(status=Donation.Status.COMPLETED)

        response = self.client.get(reverse("donation-detail", args=[donation.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "completed")
