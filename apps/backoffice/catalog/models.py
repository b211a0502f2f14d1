"""
Catalog models - purchasable menu entries.

The catalog is the authoritative source of prices. Orders read prices
at creation time and snapshot them.
"""

from django.db import models

from apps.backoffice.core.models import TimestampedModel


class MenuItem(TimestampedModel):
    """
    Individual menu item.

    Tracks availability (86'd status). Unavailable items cannot be priced.
    """

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    image_url = models.URLField(blank=True)

    # Availability (86'd when False)
    is_available = models.BooleanField(
        default=True,
        help_text="False = 86'd (unavailable)",
    )

    class Meta:
        ordering = ["category", "name"]
        indexes = [
            models.Index(fields=["is_available"], name="catalog_item_available_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="menu_item_price_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.name
