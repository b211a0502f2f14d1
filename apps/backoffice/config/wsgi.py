"""WSGI entry point for the restaurant back-office."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "apps.backoffice.config.settings")

application = get_wsgi_application()
