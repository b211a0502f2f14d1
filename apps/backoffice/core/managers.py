"""
Custom managers for user-owned collections.

RefreshTokenManager keeps each user's token collection bounded.
"""

import hashlib
from typing import TYPE_CHECKING, Any, TypeVar

from django.db import models, transaction

if TYPE_CHECKING:
    from .models import RefreshToken

_T = TypeVar("_T", bound="RefreshToken")


def hash_token(raw_token: str) -> str:
    """Digest a raw token; only digests are persisted."""
    return hashlib.sha256(raw_token.encode()).hexdigest()


class RefreshTokenManager(models.Manager[_T]):
    """
    Manager for the per-user refresh token collection.

    Eviction rule: after remembering a token, only the newest `limit`
    tokens of that user are kept (drop oldest beyond N).
    """

    def remember(self, user: Any, raw_token: str, limit: int) -> _T:
        """
        Store a new refresh token for the user and evict the oldest ones.

        Args:
            user: Owner of the token
            raw_token: Token as issued to the client
            limit: Maximum number of tokens kept per user

        Returns:
            The stored RefreshToken

        Raises:
            ValueError: If limit is lower than 1
        """
        if limit < 1:
            msg = "Refresh token limit must be at least 1"
            raise ValueError(msg)

        with transaction.atomic():
            token = self.create(user=user, token_hash=hash_token(raw_token))
            stale_ids = list(
                self.filter(user=user)
                .order_by("-created_at", "-pk")
                .values_list("pk", flat=True)[limit:]
            )
            if stale_ids:
                self.filter(pk__in=stale_ids).delete()
        return token
