import time

from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from .db import ping

STARTED_AT = time.monotonic()


@require_GET
def public_config(request):
    """Public client configuration; reachable even when the database is down."""
    return JsonResponse({
        "supabaseUrl": settings.SUPABASE_URL,
        "supabaseKey": settings.SUPABASE_ANON_KEY,
    })


@require_GET
def health(request):
    payload = {
        "timestamp": timezone.now().isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
    }
    try:
        ping()
    except DatabaseError as e:
        payload.update(status="unhealthy", database="disconnected", error=str(e))
        return JsonResponse(payload, status=503)

    payload.update(status="healthy", database="connected")
    return JsonResponse(payload)
