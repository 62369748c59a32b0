import logging
import os

from django.conf import settings
from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings")

application = get_wsgi_application()

logging.getLogger(__name__).info("Connecting to database...")

from core.db import wait_for_database  # noqa: E402

wait_for_database(timeout=settings.DB_CONNECT_TIMEOUT)
