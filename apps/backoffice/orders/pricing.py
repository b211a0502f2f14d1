"""
Pricing engine - server-side order totals.

Totals are computed from catalog prices only; nothing monetary submitted
by the client is trusted.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from apps.backoffice.catalog.lookup import CatalogLookup
from apps.backoffice.core.exceptions import InvalidInput, NotFound

from .models import Order

# Largest quantity accepted on a single line
MAX_QUANTITY = 1000


def max_amount(field_name: str = "total_amount") -> Decimal:
    """Largest amount an Order decimal field can store, e.g. 99999999.99."""
    field = Order._meta.get_field(field_name)
    places = field.decimal_places
    return Decimal(10) ** (field.max_digits - places) - Decimal(10) ** -places


MAX_TOTAL_AMOUNT = max_amount()


@dataclass(frozen=True)
class PricedLine:
    menu_item_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class Quote:
    """Priced order: total plus a snapshot of each line."""

    total_amount: Decimal
    lines: tuple[PricedLine, ...]


def is_positive_int(value: Any) -> bool:
    """True for ints >= 1. Booleans and floats are rejected."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


class PricingEngine:
    """
    Prices a list of {menu_item_id, quantity} lines.

    Pure function of its input and one catalog snapshot.
    """

    def __init__(self, catalog: CatalogLookup) -> None:
        self.catalog = catalog

    def price(self, items: Sequence[Mapping[str, Any]]) -> Quote:
        """
        Compute the order total.

        Args:
            items: Lines as {"menu_item_id": int, "quantity": int}. Duplicate
                menu items are allowed and priced independently.

        Returns:
            Quote with total_amount = sum(price * quantity)

        Raises:
            InvalidInput: Empty list, missing id, a quantity that is not a
                positive integer up to MAX_QUANTITY, or a total too large to
                store
            NotFound: One or more menu items are unknown or unavailable; the
                error lists every missing id
        """
        if not items:
            raise InvalidInput("Order must contain at least one item")

        for i, item in enumerate(items):
            if not is_positive_int(item.get("menu_item_id")):
                raise InvalidInput(f"items[{i}].menu_item_id must be a valid id")
            if not is_positive_int(item.get("quantity")):
                raise InvalidInput(f"items[{i}].quantity must be a positive integer")
            if item["quantity"] > MAX_QUANTITY:
                msg = f"items[{i}].quantity must be at most {MAX_QUANTITY}"
                raise InvalidInput(msg)

        requested_ids = {item["menu_item_id"] for item in items}
        prices = self.catalog.batch_get_prices(requested_ids)

        missing = sorted(requested_ids - prices.keys())
        if missing:
            raise NotFound(
                f"Menu items not found: {', '.join(str(pk) for pk in missing)}",
                missing_ids=missing,
            )

        lines = []
        total = Decimal("0.00")
        for item in items:
            unit_price = prices[item["menu_item_id"]]
            line_total = unit_price * item["quantity"]
            lines.append(
                PricedLine(
                    menu_item_id=item["menu_item_id"],
                    quantity=item["quantity"],
                    unit_price=unit_price,
                    line_total=line_total,
                )
            )
            total += line_total

        if total > MAX_TOTAL_AMOUNT:
            raise InvalidInput(f"Order total must not exceed {MAX_TOTAL_AMOUNT}")

        return Quote(total_amount=total, lines=tuple(lines))
