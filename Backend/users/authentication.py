from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from .provider import AuthProviderError, get_client

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


@dataclass
class ProviderUser:
    """
    Identity returned by the auth provider.

    ``app_metadata`` is server-controlled; ``user_metadata`` is editable by the
    user and must never be used for authorization.
    """
    id: str
    email: str = ""
    app_metadata: dict = field(default_factory=dict)
    user_metadata: dict = field(default_factory=dict)

    is_authenticated = True
    is_anonymous = False

    @property
    def is_admin(self) -> bool:
        return (self.app_metadata or {}).get("role") == ADMIN_ROLE

    @property
    def pk(self) -> str:
        return self.id

    def __str__(self) -> str:
        return self.email or self.id

    @classmethod
    def from_provider(cls, user) -> "ProviderUser":
        return cls(
            id=str(user.id),
            email=getattr(user, "email", "") or "",
            app_metadata=dict(getattr(user, "app_metadata", None) or {}),
            user_metadata=dict(getattr(user, "user_metadata", None) or {}),
        )


def verify_access_token(token: str) -> ProviderUser:
    """
    Ask the auth provider who owns ``token``.

    Raises AuthenticationFailed for unknown/expired tokens and AuthProviderError
    when the provider itself cannot be used.
    """
    client = get_client()
    try:
        response = client.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Token verification failed: {e}")
        raise AuthenticationFailed("Invalid or expired token. Please login again.")

    user = getattr(response, "user", None)
    if user is None:
        raise AuthenticationFailed("Invalid or expired token. Please login again.")

    return ProviderUser.from_provider(user)


class SupabaseAuthentication(BaseAuthentication):
    """
    Bearer-token authentication against the external auth provider.
    Returns (ProviderUser, token). Requests without a header, or whose token
    the provider rejects or cannot check, stay anonymous; routes that need a
    user answer 401 through their permission classes.
    """
    keyword = "Bearer"

    def authenticate(self, request) -> Optional[Tuple[ProviderUser, str]]:
        auth = request.headers.get("Authorization", "")
        if not auth:
            return None

        parts = auth.split()
        if len(parts) != 2 or parts[0] != self.keyword:
            raise AuthenticationFailed("Invalid Authorization header format.")

        token = parts[1]

        try:
            user = verify_access_token(token)
        except AuthenticationFailed:
            logger.info("Bearer token rejected; continuing as anonymous")
            return None
        except AuthProviderError as e:
            logger.error(f"Auth provider unavailable: {e}")
            return None

        return (user, token)

    def authenticate_header(self, request):
        return self.keyword
