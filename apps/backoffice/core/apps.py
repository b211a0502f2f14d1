"""Django app configuration for core module."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Core app configuration - users and request plumbing."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.backoffice.core"
    label = "core"
    verbose_name = "Core"
