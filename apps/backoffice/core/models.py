"""
Core models - users and the timestamp base.

User carries the loyalty points balance and owns a bounded collection of
refresh tokens.
"""

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models

from .managers import RefreshTokenManager, hash_token


class TimestampedModel(models.Model):
    """
    Abstract base for records maintained by the store.

    Provides created/updated timestamps.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class User(AbstractUser):
    """
    Custom user model with role and loyalty balance.

    points_balance is only mutated by the loyalty ledger (earn on order
    creation, debit on redemption) through single-statement updates.
    """

    class Role(models.TextChoices):
        CUSTOMER = "customer", "Customer"
        ADMIN = "admin", "Admin"

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CUSTOMER,
    )
    points_balance = models.PositiveIntegerField(
        default=0,
        help_text="Loyalty points available for redemption",
    )

    class Meta:
        ordering = ["username"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(points_balance__gte=0),
                name="user_points_balance_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.username

    @property
    def is_admin(self) -> bool:
        """Admins manage every order; superusers count as admins."""
        return self.role == self.Role.ADMIN or self.is_superuser

    def remember_refresh_token(self, raw_token: str) -> "RefreshToken":
        """
        Store a refresh token, evicting the oldest beyond MAX_REFRESH_TOKENS.
        """
        return RefreshToken.objects.remember(
            self, raw_token, limit=settings.MAX_REFRESH_TOKENS
        )

    def has_refresh_token(self, raw_token: str) -> bool:
        """Check whether a refresh token is still active for this user."""
        return self.refresh_tokens.filter(token_hash=hash_token(raw_token)).exists()

    def revoke_refresh_token(self, raw_token: str) -> bool:
        """Drop a refresh token. Returns False if it was not active."""
        deleted, _ = self.refresh_tokens.filter(
            token_hash=hash_token(raw_token)
        ).delete()
        return deleted > 0


class RefreshToken(models.Model):
    """
    An active refresh token, stored as a SHA-256 digest.

    Bounded per user; see RefreshTokenManager.remember for eviction.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="refresh_tokens",
    )
    token_hash = models.CharField(max_length=64, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = RefreshTokenManager()

    class Meta:
        ordering = ["-created_at", "-pk"]

    def __str__(self) -> str:
        return f"Refresh token for {self.user} ({self.created_at:%Y-%m-%d %H:%M})"
