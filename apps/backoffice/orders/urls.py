"""
URL routing for order API endpoints.

Mounted under /api/ by the root URLconf.
"""

from django.urls import path

from apps.backoffice.orders import views

app_name = "orders"

urlpatterns = [
    path("orders", views.orders, name="order_list"),
    path("orders/me", views.my_orders, name="my_orders"),
    path("orders/<int:order_id>", views.order_detail, name="order_detail"),
    path("orders/<int:order_id>/status", views.update_status, name="order_status"),
    path("orders/<int:order_id>/cancel", views.cancel_order, name="order_cancel"),
    path("orders/<int:order_id>/redeem", views.redeem_points, name="order_redeem"),
    path(
        "orders/<int:order_id>/payment-status",
        views.update_payment_status,
        name="order_payment_status",
    ),
]
