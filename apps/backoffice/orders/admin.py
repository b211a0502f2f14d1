"""Admin registration for order models.

Orders are read-only here: every mutation goes through OrderLedger so the
version field and the points balance stay consistent.
"""

from django.contrib import admin
from django.http import HttpRequest

from apps.backoffice.orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    """Inline for items within an order."""

    model = OrderItem
    extra = 0
    fields = ["menu_item", "quantity", "unit_price", "line_total"]
    readonly_fields = ["menu_item", "quantity", "unit_price", "line_total"]

    def has_add_permission(
        self, request: HttpRequest, obj: Order | None = None
    ) -> bool:
        return False

    def has_delete_permission(
        self, request: HttpRequest, obj: Order | None = None
    ) -> bool:
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin for orders."""

    list_display = [
        "id",
        "owner",
        "fulfillment",
        "status",
        "total_amount",
        "payment_status",
        "points_earned",
        "points_redeemed",
        "created_at",
    ]
    list_filter = ["fulfillment", "status", "payment_status", "created_at"]
    search_fields = ["owner__username", "owner__email", "delivery_address"]
    inlines = [OrderItemInline]
    date_hierarchy = "created_at"

    fieldsets = [
        (None, {"fields": ["owner", "fulfillment", "status", "version"]}),
        (
            "Pricing",
            {"fields": ["total_amount", "payment_method", "payment_status"]},
        ),
        (
            "Loyalty",
            {
                "fields": [
                    "points_earned",
                    "points_redeemed",
                    "discount_applied",
                    "redeemed_at",
                ]
            },
        ),
        (
            "Fulfillment",
            {"fields": ["delivery_address", "pickup_time", "notes"]},
        ),
        (
            "Timestamps",
            {"fields": ["created_at", "updated_at"], "classes": ["collapse"]},
        ),
    ]

    def get_readonly_fields(
        self, request: HttpRequest, obj: Order | None = None
    ) -> list[str]:
        return [field.name for field in Order._meta.fields]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False
