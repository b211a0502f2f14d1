"""
Takeaway cart models.

Each user has at most one cart. Cart lines hold quantities only; prices
are read from the catalog when the cart is shown and again at checkout.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models

from apps.backoffice.catalog.models import MenuItem
from apps.backoffice.core.models import TimestampedModel


class Cart(TimestampedModel):
    """A user's takeaway cart. Deleted on checkout."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="takeaway_cart",
    )

    def __str__(self) -> str:
        return f"Cart of {self.user}"

    @property
    def total_amount(self) -> Decimal:
        """Current value of the cart at catalog prices."""
        return sum(
            (line.menu_item.price * line.quantity for line in self.items.all()),
            Decimal("0.00"),
        )


class CartItem(models.Model):
    """A menu item and quantity in a cart."""

    cart = models.ForeignKey(
        Cart,
        on_delete=models.CASCADE,
        related_name="items",
    )
    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.CASCADE,
        related_name="cart_items",
    )
    quantity = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ["pk"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "menu_item"], name="takeaway_cart_item_unique"
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="takeaway_cart_item_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.menu_item}"
