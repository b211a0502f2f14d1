"""Django app configuration for dashboard module."""

from django.apps import AppConfig


class DashboardConfig(AppConfig):
    """Dashboard app configuration - admin summary figures."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.backoffice.dashboard"
    label = "dashboard"
    verbose_name = "Dashboard"
