from __future__ import annotations

import hashlib
import hmac
import json
import logging

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .flutterwave import FlutterwaveClient
from .services import DonationLifecycle

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "verif-hash"


def _valid_signature(secret: str, body: bytes, signature: str) -> bool:
    computed = hmac.new(
        key=secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256,
    ).hexdigest()
    return hmac.compare_digest(signature, computed)


@csrf_exempt
@require_POST
def flutterwave_webhook(request: HttpRequest):
    """
    Gateway notification endpoint.

    Reads the raw body whatever the content type, so the signature is computed
    over exactly the bytes that were sent. Not rate limited and not behind
    the database readiness gate.
    """
    secret = settings.FLW_SECRET_HASH
    signature = request.headers.get(SIGNATURE_HEADER, "")

    if secret and signature:
        if not _valid_signature(secret, request.body, signature):
            logger.warning("Invalid Flutterwave webhook signature")
            return JsonResponse({"error": "Invalid signature"}, status=401)
    elif secret:
        logger.warning("Flutterwave webhook received without a signature header")

    try:
        event = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return JsonResponse({"error": "Invalid JSON"}, status=400)

    if not isinstance(event, dict):
        return JsonResponse({"error": "Invalid payload"}, status=400)

    logger.info(f"Flutterwave webhook received: {event.get('event')}")

    outcome = DonationLifecycle(FlutterwaveClient()).handle_webhook(event)
    return JsonResponse(outcome.body(), status=outcome.status_code)
