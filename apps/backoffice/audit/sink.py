"""
Audit sink - best-effort recording of committed mutations.

record() never raises: a failed write is logged and discarded so it can
never roll back or block the mutation it describes.
"""

import logging
from typing import Any, Protocol

from apps.backoffice.audit.models import AuditRecord

logger = logging.getLogger(__name__)


class AuditSink(Protocol):
    """Append-only sink for mutation facts."""

    def record(
        self,
        actor_id: int | None,
        action: str,
        resource_type: str,
        resource_id: Any,
        metadata: dict[str, Any] | None = None,
    ) -> None: ...


class DatabaseAuditSink:
    """AuditSink writing AuditRecord rows."""

    def record(
        self,
        actor_id: int | None,
        action: str,
        resource_type: str,
        resource_id: Any,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        try:
            AuditRecord.objects.create(
                actor_id=actor_id,
                action=action,
                resource_type=resource_type,
                resource_id="" if resource_id is None else str(resource_id),
                metadata=metadata or {},
            )
        except Exception:
            # Best-effort: never propagate
            logger.exception(
                "Audit log failed for %s %s:%s", action, resource_type, resource_id
            )

