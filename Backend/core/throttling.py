from __future__ import annotations

import re

from django.conf import settings
from rest_framework.throttling import SimpleRateThrottle

_PERIODS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_RATE_RE = re.compile(r"^(\d+)/(\d*)([smhd])$")


class ClientAddressThrottle(SimpleRateThrottle):
    """
    Per-scope request budget keyed by client address.

    Rates come from ``settings.RATE_LIMITS`` and accept a window multiplier,
    e.g. ``"100/15m"`` is 100 requests per 15 minutes.
    """
    scope: str = "public"

    def get_rate(self):
        return settings.RATE_LIMITS.get(self.scope)

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        match = _RATE_RE.match(rate.strip())
        if not match:
            raise ValueError(f"Invalid rate limit: {rate!r}")
        num, multiplier, unit = match.groups()
        return int(num), int(multiplier or 1) * _PERIODS[unit]

    def get_cache_key(self, request, view):
        return self.cache_format % {
            "scope": self.scope,
            "ident": self.get_ident(request),
        }


class PublicApiThrottle(ClientAddressThrottle):
    scope = "public"


class AdminApiThrottle(ClientAddressThrottle):
    scope = "admin"


class DonationThrottle(ClientAddressThrottle):
    scope = "donation"
