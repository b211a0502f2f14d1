"""
Takeaway cart API views.

All endpoints act on the authenticated user's own cart.
"""

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.backoffice.core.decorators import api_login_required
from apps.backoffice.core.http import json_response, parse_body
from apps.backoffice.core.identity import Caller
from apps.backoffice.orders.serializers import serialize_order
from apps.backoffice.orders.views import get_ledger
from apps.backoffice.takeaway import services
from apps.backoffice.takeaway.serializers import (
    CartAddRequest,
    CartItemUpdateRequest,
    CheckoutRequest,
    serialize_cart,
)


def _cart_response(request: HttpRequest) -> JsonResponse:
    cart = services.get_cart(request.user)
    return json_response(serialize_cart(cart).model_dump(mode="json"))


@csrf_exempt
@require_http_methods(["GET", "DELETE"])
@api_login_required
def cart(request: HttpRequest) -> JsonResponse:
    """
    GET    /api/takeaway/cart - current cart at catalog prices
    DELETE /api/takeaway/cart - empty the cart
    """
    if request.method == "DELETE":
        services.clear_cart(request.user)
    return _cart_response(request)


@csrf_exempt
@require_http_methods(["POST"])
@api_login_required
def add_to_cart(request: HttpRequest) -> JsonResponse:
    """
    POST /api/takeaway/cart/add

    Request body: {"menu_item_id": <id>, "quantity": <positive integer, default 1>}
    """
    add_request = parse_body(request, CartAddRequest)
    services.add_item(request.user, add_request.menu_item_id, add_request.quantity)
    return _cart_response(request)


@csrf_exempt
@require_http_methods(["PUT", "DELETE"])
@api_login_required
def cart_item(request: HttpRequest, menu_item_id: int) -> JsonResponse:
    """
    PUT    /api/takeaway/cart/item/{menu_item_id} - set quantity (0 removes)
    DELETE /api/takeaway/cart/item/{menu_item_id} - remove the line
    """
    if request.method == "DELETE":
        services.remove_item(request.user, menu_item_id)
    else:
        update_request = parse_body(request, CartItemUpdateRequest)
        services.update_item(request.user, menu_item_id, update_request.quantity)
    return _cart_response(request)


@csrf_exempt
@require_http_methods(["POST"])
@api_login_required
def checkout(request: HttpRequest) -> JsonResponse:
    """
    POST /api/takeaway/cart/checkout

    Request body: {"payment_method": "cash_at_shop" | "online", "notes": "..."}
    Response: OrderResponse schema (201)
    """
    checkout_request = parse_body(request, CheckoutRequest)
    ledger = get_ledger()

    order = services.checkout(
        request.user,
        payment_method=checkout_request.payment_method,
        notes=checkout_request.notes,
        ledger=ledger,
    )

    # Re-read with items and menu entries loaded
    order = ledger.get_order(Caller.from_user(request.user), order.pk)
    return json_response(serialize_order(order).model_dump(mode="json"), status=201)
