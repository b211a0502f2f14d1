"""Django app configuration for catalog module."""

from django.apps import AppConfig


class CatalogConfig(AppConfig):
    """Catalog app configuration - menu items and price lookup."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.backoffice.catalog"
    label = "catalog"
    verbose_name = "Catalog"
