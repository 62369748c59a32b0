import os

os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret-key")

from .settings import *  # noqa: E402,F401,F403

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

RATE_LIMITS = {
    "public": "1000/15m",
    "admin": "1000/15m",
    "donation": "1000/15m",
}

SUPABASE_URL = "https://project.supabase.co"
SUPABASE_ANON_KEY = "anon-key"
SUPABASE_SERVICE_ROLE_KEY = "service-role-key"

FLW_PUBLIC_KEY = "FLWPUBK_TEST-public"
FLW_SECRET_KEY = "FLWSECK_TEST-secret"
FLW_SECRET_HASH = ""

PUBLIC_SITE_URL = "https://church.example.org"
