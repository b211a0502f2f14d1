"""Django app configuration for orders module."""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """Orders app configuration - order ledger and loyalty points."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.backoffice.orders"
    label = "orders"
    verbose_name = "Orders"
