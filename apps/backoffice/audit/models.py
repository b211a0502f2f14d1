"""Audit models - append-only trail of significant mutations."""

from django.db import models


class AuditRecord(models.Model):
    """
    One fact about a committed mutation.

    Never updated or deleted by the ledger. The actor and resource are kept
    as plain ids so records survive hard deletes.
    """

    actor_id = models.BigIntegerField(
        null=True,
        blank=True,
        help_text="User who performed the action (null = system)",
    )
    action = models.CharField(max_length=100)
    resource_type = models.CharField(max_length=50, blank=True)
    resource_id = models.CharField(max_length=64, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-pk"]
        indexes = [
            models.Index(
                fields=["resource_type", "resource_id"],
                name="audit_resource_idx",
            ),
            models.Index(fields=["actor_id"], name="audit_actor_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.resource_type}:{self.resource_id}"
