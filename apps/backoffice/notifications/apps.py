"""Django app configuration for notifications module."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Notifications app configuration - best-effort customer e-mail."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.backoffice.notifications"
    label = "notifications"
    verbose_name = "Notifications"
