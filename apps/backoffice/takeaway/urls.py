"""
URL routing for takeaway cart endpoints.

Mounted under /api/ by the root URLconf.
"""

from django.urls import path

from apps.backoffice.takeaway import views

app_name = "takeaway"

urlpatterns = [
    path("takeaway/cart", views.cart, name="cart"),
    path("takeaway/cart/add", views.add_to_cart, name="cart_add"),
    path(
        "takeaway/cart/item/<int:menu_item_id>", views.cart_item, name="cart_item"
    ),
    path("takeaway/cart/checkout", views.checkout, name="checkout"),
]
