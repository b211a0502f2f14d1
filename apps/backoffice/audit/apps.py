"""Django app configuration for audit module."""

from django.apps import AppConfig


class AuditConfig(AppConfig):
    """Audit app configuration - append-only mutation log."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.backoffice.audit"
    label = "audit"
    verbose_name = "Audit Log"
