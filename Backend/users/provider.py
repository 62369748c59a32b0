"""
Shared Supabase client for auth lookups, admin role management and storage.
"""
from __future__ import annotations

import logging
import threading

from django.conf import settings
from supabase import Client, ClientOptions, create_client

logger = logging.getLogger(__name__)


class AuthProviderError(RuntimeError):
    """Raised when the auth/storage provider is missing or unreachable."""
    pass


_client: Client | None = None
_lock = threading.Lock()


def get_client() -> Client:
    """Get or create the service-role Supabase client."""
    global _client

    if _client is None:
        with _lock:
            if _client is None:
                url = settings.SUPABASE_URL
                key = settings.SUPABASE_SERVICE_ROLE_KEY

                if not url or not key:
                    raise AuthProviderError(
                        "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be configured."
                    )

                timeout = settings.SUPABASE_TIMEOUT
                options = ClientOptions(
                    postgrest_client_timeout=timeout,
                    storage_client_timeout=timeout,
                    auto_refresh_token=False,
                    persist_session=False,
                )
                _client = create_client(url, key, options=options)
                logger.info("Supabase client initialised")

    return _client
