"""
Order querysets - ownership scoping and list filters.
"""

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, TypeVar

from django.db import models

if TYPE_CHECKING:
    from .models import Order

_T = TypeVar("_T", bound="Order")


@dataclass(frozen=True)
class OrderFilter:
    """Optional list filters. Dates are inclusive whole days."""

    status: str | None = None
    owner_id: int | None = None
    fulfillment: str | None = None
    payment_status: str | None = None
    date_from: date | None = None
    date_to: date | None = None


class OrderQuerySet(models.QuerySet[_T]):
    """
    QuerySet for orders.

    SECURITY: list views go through OrderLedger.list_orders, which decides
    whether the caller may see orders other than their own.
    """

    def owned_by(self, user_id: int) -> "OrderQuerySet[_T]":
        return self.filter(owner_id=user_id)

    def with_details(self) -> "OrderQuerySet[_T]":
        """Load owner and line items with their menu entries."""
        return self.select_related("owner").prefetch_related("items__menu_item")

    def matching(self, order_filter: OrderFilter) -> "OrderQuerySet[_T]":
        """Apply every set field of the filter."""
        qs = self
        if order_filter.status:
            qs = qs.filter(status=order_filter.status)
        if order_filter.owner_id is not None:
            qs = qs.owned_by(order_filter.owner_id)
        if order_filter.fulfillment:
            qs = qs.filter(fulfillment=order_filter.fulfillment)
        if order_filter.payment_status:
            qs = qs.filter(payment_status=order_filter.payment_status)
        if order_filter.date_from:
            qs = qs.filter(created_at__date__gte=order_filter.date_from)
        if order_filter.date_to:
            qs = qs.filter(created_at__date__lte=order_filter.date_to)
        return qs
