"""WSGI entry point for the barangay API."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "barangay.settings")

application = get_wsgi_application()
