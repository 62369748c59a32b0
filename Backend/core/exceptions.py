# core/exceptions.py
from __future__ import annotations

import logging
import traceback

from django.conf import settings
from django.db import IntegrityError, InterfaceError, OperationalError
from rest_framework import status
from rest_framework.exceptions import APIException, Throttled, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

DB_UNAVAILABLE = {
    "error": "Service temporarily unavailable",
    "message": "Database connection is not ready. Please try again in a moment.",
    "retryAfter": 5,
}


class InvalidIdentifier(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid ID format"
    default_code = "invalid_id"


def custom_exception_handler(exc, context):
    if isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error: {exc}")
        return Response(
            {"error": "Duplicate entry", "message": "This record already exists"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, (OperationalError, InterfaceError)):
        logger.error(f"Database unavailable: {exc}")
        return Response(DB_UNAVAILABLE, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, ValidationError):
            response.data = {"error": "Validation failed", "errors": response.data}
        elif isinstance(exc, Throttled):
            response.data = {
                "error": "Too many requests from this IP, please try again later.",
                "retryAfter": exc.wait,
            }
        else:
            detail = response.data.get("detail") if isinstance(response.data, dict) else response.data
            response.data = {"error": str(detail)}
        return response

    logger.exception(f"Unhandled error: {exc}")
    body = {"error": "Internal server error"}
    if settings.DEBUG:
        body["message"] = str(exc)
        body["stack"] = traceback.format_exception(exc)
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
