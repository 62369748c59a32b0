from __future__ import annotations

from django.http import JsonResponse

from .db import database_ready
from .exceptions import DB_UNAVAILABLE

API_PREFIX = "/api/"
EXEMPT_PATHS = ("/api/config",)


class DatabaseReadyMiddleware:
    """
    Answer 503 for API routes while the database is unreachable.

    The config endpoint and payment webhooks do not need the database up front.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if self._needs_database(request.path) and not database_ready():
            return JsonResponse(DB_UNAVAILABLE, status=503)
        return self.get_response(request)

    @staticmethod
    def _needs_database(path: str) -> bool:
        if not path.startswith(API_PREFIX):
            return False
        if path.rstrip("/") in EXEMPT_PATHS:
            return False
        return "/webhook" not in path
