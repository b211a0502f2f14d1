"""
Pydantic schemas for the order API.

Identifiers, quantities and points are StrictInt so that "2", 2.0 and
true are rejected instead of coerced.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from apps.backoffice.orders.loyalty import RedemptionResult
from apps.backoffice.orders.models import Order, OrderItem
from apps.backoffice.orders.pricing import MAX_QUANTITY

# =============================================================================
# Requests
# =============================================================================


class OrderItemCreateSchema(BaseModel):
    """A single line in an order creation request."""

    menu_item_id: StrictInt = Field(..., ge=1)
    quantity: StrictInt = Field(..., ge=1, le=MAX_QUANTITY)


class OrderCreateRequest(BaseModel):
    """Request body for POST /api/orders."""

    items: list[OrderItemCreateSchema] = Field(..., min_length=1)
    fulfillment: Literal["delivery", "takeaway"] = "delivery"
    payment_method: str | None = None
    delivery_address: str = Field(default="", max_length=500)
    notes: str = Field(default="", max_length=1000)


class OrderStatusUpdateRequest(BaseModel):
    """Request body for PUT /api/orders/{order_id}/status."""

    status: str


class PaymentStatusUpdateRequest(BaseModel):
    """Request body for PUT /api/orders/{order_id}/payment-status."""

    payment_status: str


class RedeemRequest(BaseModel):
    """Request body for POST /api/orders/{order_id}/redeem."""

    points: StrictInt = Field(..., ge=1)


# =============================================================================
# Responses
# =============================================================================


class OrderItemResponseSchema(BaseModel):
    """A line item in an order response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    menu_item_id: int
    item_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class RedemptionSchema(BaseModel):
    """Points converted into a discount on the order."""

    points_redeemed: int
    discount_applied: Decimal
    redeemed_at: datetime | None


class OrderResponse(BaseModel):
    """An order with its line items."""

    id: int
    owner_id: int
    fulfillment: str
    status: str
    total_amount: Decimal
    points_earned: int
    redemption: RedemptionSchema | None
    payment_method: str
    payment_status: str
    delivery_address: str
    notes: str
    pickup_time: datetime | None
    version: int
    items: list[OrderItemResponseSchema]
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    """Response for GET /api/orders and GET /api/orders/me."""

    orders: list[OrderResponse]
    count: int


class RedeemResponse(BaseModel):
    """Response for POST /api/orders/{order_id}/redeem."""

    order_id: int
    points_redeemed: int
    discount_applied: Decimal
    new_total: Decimal


# =============================================================================
# Serialization helpers
# =============================================================================


def serialize_order_item(item: OrderItem) -> OrderItemResponseSchema:
    return OrderItemResponseSchema(
        id=item.pk,
        menu_item_id=item.menu_item_id,
        item_name=item.menu_item.name,
        quantity=item.quantity,
        unit_price=item.unit_price,
        line_total=item.line_total,
    )


def serialize_order(order: Order) -> OrderResponse:
    """Serialize an Order with its items (prefetched by with_details)."""
    redemption = order.redemption
    return OrderResponse(
        id=order.pk,
        owner_id=order.owner_id,
        fulfillment=order.fulfillment,
        status=order.status,
        total_amount=order.total_amount,
        points_earned=order.points_earned,
        redemption=(
            RedemptionSchema(
                points_redeemed=redemption.points_redeemed,
                discount_applied=redemption.discount_applied,
                redeemed_at=redemption.redeemed_at,
            )
            if redemption
            else None
        ),
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        delivery_address=order.delivery_address,
        notes=order.notes,
        pickup_time=order.pickup_time,
        version=order.version,
        items=[serialize_order_item(item) for item in order.items.all()],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def serialize_redemption(result: RedemptionResult) -> RedeemResponse:
    return RedeemResponse(
        order_id=result.order_id,
        points_redeemed=result.points_redeemed,
        discount_applied=result.discount_applied,
        new_total=result.new_total,
    )
