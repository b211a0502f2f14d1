"""Admin registration for audit records (read-only)."""

from typing import Any

from django.contrib import admin
from django.http import HttpRequest

from apps.backoffice.audit.models import AuditRecord


@admin.register(AuditRecord)
class AuditRecordAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["created_at", "action", "resource_type", "resource_id", "actor_id"]
    list_filter = ["action", "resource_type"]
    search_fields = ["resource_id", "action"]
    readonly_fields = [
        "actor_id",
        "action",
        "resource_type",
        "resource_id",
        "metadata",
        "created_at",
    ]

    # Append-only: no edits or deletes from the admin
    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj: Any = None) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj: Any = None) -> bool:
        return False
