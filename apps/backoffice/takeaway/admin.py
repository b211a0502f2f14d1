"""Admin registration for takeaway carts."""

from django.contrib import admin

from apps.backoffice.takeaway.models import Cart, CartItem


class CartItemInline(admin.TabularInline):
    """Inline for lines within a cart."""

    model = CartItem
    extra = 0
    fields = ["menu_item", "quantity"]


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    """Admin for takeaway carts."""

    list_display = ["user", "item_count", "updated_at"]
    search_fields = ["user__username", "user__email"]
    readonly_fields = ["created_at", "updated_at"]
    inlines = [CartItemInline]

    @admin.display(description="Items")
    def item_count(self, obj: Cart) -> int:
        return obj.items.count()
