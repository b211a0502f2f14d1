"""
Notification templates - subject and body per event.

Each template takes the data dict passed to notify() and returns a
RenderedMessage. Unknown template names raise KeyError.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    text: str


def _status_label(status: str) -> str:
    return status.replace("_", " ").title()


def _order_placed(data: dict[str, Any]) -> RenderedMessage:
    lines = [
        "Your order is confirmed.",
        "",
        f"Order ID: {data['order_id']}",
        f"Total: {data['total_amount']}",
    ]
    if data.get("payment_method"):
        lines.append(f"Payment: {data['payment_method']}")
    if data.get("pickup_time"):
        lines.append(f"Pickup Time: {data['pickup_time']}")
    if data.get("points_earned"):
        lines.append(f"Points earned: {data['points_earned']}")
    lines += ["", "Thank you!"]
    return RenderedMessage(subject="Order Confirmation", text="\n".join(lines))


def _admin_new_order(data: dict[str, Any]) -> RenderedMessage:
    text = (
        f"New {data.get('fulfillment', '')} order received.\n\n"
        f"Order ID: {data['order_id']}\n"
        f"Customer: {data.get('customer', '')}\n"
        f"Total: {data['total_amount']}"
    )
    return RenderedMessage(subject="New Order", text=text)


def _order_status_changed(data: dict[str, Any]) -> RenderedMessage:
    label = _status_label(data["status"])
    return RenderedMessage(
        subject=f"Order Status Update - {label}",
        text=(
            f"Your order status has been updated to {label}.\n\n"
            f"Order ID: {data['order_id']}"
        ),
    )


def _order_cancelled(data: dict[str, Any]) -> RenderedMessage:
    return RenderedMessage(
        subject="Order Cancelled",
        text=f"Your order has been cancelled.\n\nOrder ID: {data['order_id']}",
    )


def _payment_confirmed(data: dict[str, Any]) -> RenderedMessage:
    return RenderedMessage(
        subject="Payment Confirmed",
        text=(
            "Payment for your order has been confirmed.\n\n"
            f"Order ID: {data['order_id']}\n"
            f"Amount: {data['total_amount']}"
        ),
    )


def _points_redeemed(data: dict[str, Any]) -> RenderedMessage:
    return RenderedMessage(
        subject="Loyalty Points Redeemed",
        text=(
            f"You redeemed {data['points_redeemed']} points on order "
            f"{data['order_id']}.\n\n"
            f"Discount: {data['discount_applied']}\n"
            f"New total: {data['total_amount']}"
        ),
    )


TEMPLATES: dict[str, Callable[[dict[str, Any]], RenderedMessage]] = {
    "order_placed": _order_placed,
    "admin_new_order": _admin_new_order,
    "order_status_changed": _order_status_changed,
    "order_cancelled": _order_cancelled,
    "payment_confirmed": _payment_confirmed,
    "points_redeemed": _points_redeemed,
}


def render(template: str, data: dict[str, Any]) -> RenderedMessage:
    """Render a named template with its data."""
    return TEMPLATES[template](data)
