"""Admin registration for catalog models."""

from django.contrib import admin

from apps.backoffice.catalog.models import MenuItem


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "category", "price", "is_available", "updated_at"]
    list_filter = ["is_available", "category"]
    search_fields = ["name", "description"]
    list_editable = ["is_available"]
    readonly_fields = ["created_at", "updated_at"]
