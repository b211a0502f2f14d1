"""
Pydantic schemas for the admin dashboard API.
"""

from pydantic import BaseModel

from apps.backoffice.dashboard.services import DashboardSummary


class TopSellingItemSchema(BaseModel):
    menu_item_id: int
    name: str
    quantity: int


class DashboardResponse(BaseModel):
    """Response for GET /api/admin/dashboard."""

    total_orders: int
    orders_by_status: dict[str, int]
    top_selling_item: TopSellingItemSchema | None
    total_users: int
    outstanding_points: int


def serialize_dashboard(summary: DashboardSummary) -> DashboardResponse:
    top = summary.top_selling_item
    return DashboardResponse(
        total_orders=summary.total_orders,
        orders_by_status=summary.orders_by_status,
        top_selling_item=(
            TopSellingItemSchema(
                menu_item_id=top.menu_item_id, name=top.name, quantity=top.quantity
            )
            if top
            else None
        ),
        total_users=summary.total_users,
        outstanding_points=summary.outstanding_points,
    )
