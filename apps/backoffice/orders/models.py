"""
Order models - priced orders, line snapshots, and the redemption record.

Orders are mutated only through OrderLedger: status transitions, the
payment-status label, and the single redemption. Every mutation bumps
`version`, the compare-and-swap field.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.db import models

from apps.backoffice.catalog.models import MenuItem
from apps.backoffice.core.models import TimestampedModel

from .managers import OrderQuerySet


class Fulfillment(models.TextChoices):
    """How the order reaches the customer. Selects the status lifecycle."""

    DELIVERY = "delivery", "Delivery"
    TAKEAWAY = "takeaway", "Takeaway"


class OrderStatus(models.TextChoices):
    """Union of every lifecycle's statuses."""

    PENDING = "pending", "Pending"
    PREPARING = "preparing", "Preparing"
    OUT_FOR_DELIVERY = "out_for_delivery", "Out for Delivery"
    READY_FOR_PICKUP = "ready_for_pickup", "Ready for Pickup"
    DELIVERED = "delivered", "Delivered"
    PICKED_UP = "picked_up", "Picked Up"
    CANCELLED = "cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    """Payment method label. No gateway is involved."""

    ONLINE = "online", "Online"
    CASH_ON_DELIVERY = "cash_on_delivery", "Cash on Delivery"
    CASH_AT_SHOP = "cash_at_shop", "Cash at Shop"


class PaymentStatus(models.TextChoices):
    """Payment status label, set by an admin."""

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"


@dataclass(frozen=True)
class Redemption:
    """Loyalty points converted into a discount on one order."""

    points_redeemed: int
    discount_applied: Decimal
    redeemed_at: datetime | None


class Order(TimestampedModel):
    """
    Customer order.

    total_amount is always computed from catalog prices at creation time
    and only changes afterwards through a redemption.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    fulfillment = models.CharField(
        max_length=20,
        choices=Fulfillment.choices,
        default=Fulfillment.DELIVERY,
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )

    # Pricing
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)

    # Loyalty
    points_earned = models.PositiveIntegerField(
        default=0,
        help_text="Points credited to the owner when the order was placed",
    )
    points_redeemed = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Set once; null = never redeemed",
    )
    discount_applied = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )
    redeemed_at = models.DateTimeField(null=True, blank=True)

    # Payment (labels only)
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH_ON_DELIVERY,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    # Fulfillment details
    delivery_address = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    pickup_time = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Estimated pickup time (takeaway orders)",
    )

    # Compare-and-swap field, bumped on every mutation
    version = models.PositiveIntegerField(default=0)

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-pk"]
        indexes = [
            models.Index(
                fields=["owner", "created_at"], name="order_owner_created_idx"
            ),
            models.Index(fields=["status"], name="order_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="order_total_amount_non_negative",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(
                        points_redeemed__isnull=True, discount_applied__isnull=True
                    )
                    | models.Q(
                        points_redeemed__isnull=False, discount_applied__isnull=False
                    )
                ),
                name="order_redemption_complete",
            ),
        ]

    def __str__(self) -> str:
        return f"Order {self.pk} - {self.get_status_display()}"

    @property
    def redemption(self) -> Redemption | None:
        """The redemption record, or None if points were never redeemed."""
        if self.points_redeemed is None or self.discount_applied is None:
            return None
        return Redemption(
            points_redeemed=self.points_redeemed,
            discount_applied=self.discount_applied,
            redeemed_at=self.redeemed_at,
        )


class OrderItem(models.Model):
    """
    Line item in an order.

    Stores the unit price read from the catalog at order time; later
    catalog price changes do not affect it.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    menu_item = models.ForeignKey(
        MenuItem,
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    line_total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="unit_price * quantity",
    )

    class Meta:
        ordering = ["pk"]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.menu_item_id}"
