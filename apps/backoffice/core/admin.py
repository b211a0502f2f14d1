"""Admin registrations for core models."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import RefreshToken, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):  # type: ignore[type-arg]
    list_display = ["username", "email", "role", "points_balance", "is_active"]
    list_filter = ["is_staff", "is_active", "role"]
    search_fields = ["username", "email"]
    # Balance is owned by the loyalty ledger
    readonly_fields = ["points_balance"]
    fieldsets = (
        *BaseUserAdmin.fieldsets,  # type: ignore[misc]
        ("Loyalty", {"fields": ("role", "points_balance")}),
    )
    add_fieldsets = (
        *BaseUserAdmin.add_fieldsets,
        ("Loyalty", {"fields": ("role",)}),
    )


@admin.register(RefreshToken)
class RefreshTokenAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["user", "created_at"]
    search_fields = ["user__username", "user__email"]
    readonly_fields = ["user", "token_hash", "created_at"]
