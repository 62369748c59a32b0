from __future__ import annotations

import logging
import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class FlutterwaveError(RuntimeError):
    """Custom exception for Flutterwave API errors."""
    pass


class GatewayNotConfigured(FlutterwaveError):
    """Raised when the gateway keys are missing."""
    pass


class GatewayUnavailable(FlutterwaveError):
    """Transport failure: the gateway could not be reached or answered garbage."""
    pass


class FlutterwaveClient:
    def __init__(
        self,
        secret_key: str | None = None,
        public_key: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self.base_url = (base_url or settings.FLW_BASE_URL).rstrip("/")
        self.secret_key = settings.FLW_SECRET_KEY if secret_key is None else secret_key
        self.public_key = settings.FLW_PUBLIC_KEY if public_key is None else public_key
        self.timeout = timeout or settings.FLW_TIMEOUT

        if not self.secret_key:
            logger.warning("FLW_SECRET_KEY not configured")

    @property
    def configured(self) -> bool:
        return bool(self.secret_key and self.public_key)

    def ensure_configured(self) -> None:
        if not self.configured:
            raise GatewayNotConfigured("Flutterwave credentials not configured")

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, action: str, **kwargs) -> dict:
        self.ensure_configured()
        url = f"{self.base_url}{path}"

        try:
            r = requests.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.exception(f"Flutterwave request error: {e}")
            raise GatewayUnavailable(f"Network error: {str(e)}")

        if r.status_code >= 500:
            raise GatewayUnavailable(f"Flutterwave {action} failed (HTTP {r.status_code})")

        try:
            data = r.json()
        except ValueError:
            raise GatewayUnavailable(f"Flutterwave {action} failed (HTTP {r.status_code})")

        if r.status_code >= 400 or data.get("status") != "success":
            error_msg = data.get("message") or f"Flutterwave {action} failed (HTTP {r.status_code})"
            logger.error(f"Flutterwave {action} error: {error_msg}")
            raise FlutterwaveError(error_msg)

        return data.get("data") or {}

    def create_payment_link(self, payload: dict) -> dict:
        """Create a hosted payment link (Standard checkout)."""
        logger.info(f"Creating Flutterwave payment link: {payload.get('tx_ref')}")
        data = self._request("POST", "/payments", "initialize", json=payload)

        if not data.get("link"):
            raise FlutterwaveError("Flutterwave did not return a payment link")

        logger.info(f"Flutterwave payment link created: {payload.get('tx_ref')}")
        return data

    def verify_transaction(self, transaction_id) -> dict:
        """
        Verify a transaction by its gateway id.

        Returns the transaction data; the caller decides from ``data["status"]``.
        """
        logger.info(f"Verifying Flutterwave transaction: {transaction_id}")
        data = self._request("GET", f"/transactions/{transaction_id}/verify", "verify")
        logger.info(f"Flutterwave transaction {transaction_id} status: {data.get('status')}")
        return data
