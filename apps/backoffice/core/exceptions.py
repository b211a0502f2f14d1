"""Ledger errors - the (kind, message) pairs surfaced to callers."""

from collections.abc import Iterable
from typing import Any


class LedgerError(Exception):
    """
    Base exception for rejected ledger operations.

    Every subclass is a synchronous, caller-recoverable failure. The
    status_code is only used by the HTTP boundary (LedgerErrorMiddleware).
    """

    kind = "error"
    status_code = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def as_dict(self) -> dict[str, Any]:
        """Payload rendered by the HTTP boundary."""
        return {"error": self.kind, "message": self.message}


class InvalidInput(LedgerError):
    """Malformed quantities, missing fields, unknown enum values."""

    kind = "invalid_input"
    status_code = 400


class NotFound(LedgerError):
    """Unknown catalog item, order, or user."""

    kind = "not_found"
    status_code = 404

    def __init__(self, message: str, missing_ids: Iterable[Any] = ()) -> None:
        super().__init__(message)
        self.missing_ids = list(missing_ids)

    def as_dict(self) -> dict[str, Any]:
        data = super().as_dict()
        if self.missing_ids:
            data["missing_ids"] = self.missing_ids
        return data


class Forbidden(LedgerError):
    """Role or ownership violation."""

    kind = "forbidden"
    status_code = 403


class InvalidTransition(LedgerError):
    """Illegal order status change."""

    kind = "invalid_transition"
    status_code = 409


class AlreadyRedeemed(LedgerError):
    """The order already carries a redemption."""

    kind = "already_redeemed"
    status_code = 409


class InsufficientPoints(LedgerError):
    """The user's balance does not cover the requested points."""

    kind = "insufficient_points"
    status_code = 422


class Conflict(LedgerError):
    """Lost a compare-and-swap race. Callers may retry."""

    kind = "conflict"
    status_code = 409


class DependencyUnavailable(LedgerError):
    """Catalog lookup or ledger store unreachable."""

    kind = "dependency_unavailable"
    status_code = 503
