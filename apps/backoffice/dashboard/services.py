"""
Dashboard services - summary figures for admins.
"""

from dataclasses import dataclass

from django.db.models import Count, Sum

from apps.backoffice.core.models import User
from apps.backoffice.orders.models import Order, OrderItem, OrderStatus
from apps.backoffice.orders.services import ledger_store


@dataclass(frozen=True)
class TopSellingItem:
    menu_item_id: int
    name: str
    quantity: int


@dataclass(frozen=True)
class DashboardSummary:
    total_orders: int
    orders_by_status: dict[str, int]
    top_selling_item: TopSellingItem | None
    total_users: int
    outstanding_points: int


def build_dashboard() -> DashboardSummary:
    """
    Collect the admin dashboard figures.

    orders_by_status lists every status, including those with no orders.
    The top-selling item is ranked by total quantity ordered; ties go to
    the lowest menu item id.
    """
    with ledger_store():
        rows = Order.objects.order_by().values("status").annotate(count=Count("pk"))
        counts = {row["status"]: row["count"] for row in rows}
        orders_by_status = {
            status: counts.get(status, 0) for status in OrderStatus.values
        }

        top = (
            OrderItem.objects.values("menu_item_id", "menu_item__name")
            .annotate(quantity=Sum("quantity"))
            .order_by("-quantity", "menu_item_id")
            .first()
        )

        outstanding = User.objects.aggregate(total=Sum("points_balance"))["total"]

        return DashboardSummary(
            total_orders=sum(orders_by_status.values()),
            orders_by_status=orders_by_status,
            top_selling_item=(
                TopSellingItem(
                    menu_item_id=top["menu_item_id"],
                    name=top["menu_item__name"],
                    quantity=top["quantity"],
                )
                if top
                else None
            ),
            total_users=User.objects.count(),
            outstanding_points=outstanding or 0,
        )
