"""
Pydantic schemas for the takeaway cart API.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, StrictInt

from apps.backoffice.orders.pricing import MAX_QUANTITY
from apps.backoffice.takeaway.models import Cart, CartItem

# =============================================================================
# Requests
# =============================================================================


class CartAddRequest(BaseModel):
    """Request body for POST /api/takeaway/cart/add."""

    menu_item_id: StrictInt = Field(..., ge=1)
    quantity: StrictInt = Field(default=1, ge=1, le=MAX_QUANTITY)


class CartItemUpdateRequest(BaseModel):
    """Request body for PUT /api/takeaway/cart/item/{menu_item_id}."""

    quantity: StrictInt = Field(..., ge=0, le=MAX_QUANTITY)


class CheckoutRequest(BaseModel):
    """Request body for POST /api/takeaway/cart/checkout."""

    payment_method: str = "cash_at_shop"
    notes: str = Field(default="", max_length=1000)


# =============================================================================
# Responses
# =============================================================================


class CartItemSchema(BaseModel):
    """A cart line priced at the current catalog price."""

    menu_item_id: int
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    is_available: bool


class CartResponse(BaseModel):
    """Response for the cart endpoints."""

    items: list[CartItemSchema]
    item_count: int
    total_amount: Decimal


def _serialize_line(line: CartItem) -> CartItemSchema:
    return CartItemSchema(
        menu_item_id=line.menu_item_id,
        name=line.menu_item.name,
        unit_price=line.menu_item.price,
        quantity=line.quantity,
        line_total=line.menu_item.price * line.quantity,
        is_available=line.menu_item.is_available,
    )


def serialize_cart(cart: Cart | None) -> CartResponse:
    """Serialize a cart; a missing cart is an empty one."""
    if cart is None:
        return CartResponse(items=[], item_count=0, total_amount=Decimal("0.00"))

    lines = [_serialize_line(line) for line in cart.items.all()]
    return CartResponse(
        items=lines,
        item_count=sum(line.quantity for line in lines),
        total_amount=cart.total_amount,
    )
