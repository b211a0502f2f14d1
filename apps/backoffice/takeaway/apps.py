"""Django app configuration for takeaway module."""

from django.apps import AppConfig


class TakeawayConfig(AppConfig):
    """Takeaway app configuration - per-user cart and checkout."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.backoffice.takeaway"
    label = "takeaway"
    verbose_name = "Takeaway"
