"""
Order API views - JSON endpoints over OrderLedger.

All endpoints require an authenticated user. Rejected operations raise
LedgerError and are rendered by LedgerErrorMiddleware.
"""

from datetime import date

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from apps.backoffice.core.decorators import (
    admin_required,
    api_login_required,
    idempotency_key_required,
)
from apps.backoffice.core.exceptions import InvalidInput
from apps.backoffice.core.http import json_response, parse_body
from apps.backoffice.core.identity import Caller
from apps.backoffice.orders.managers import OrderFilter
from apps.backoffice.orders.models import Order
from apps.backoffice.orders.serializers import (
    OrderCreateRequest,
    OrderListResponse,
    OrderStatusUpdateRequest,
    PaymentStatusUpdateRequest,
    RedeemRequest,
    serialize_order,
    serialize_redemption,
)
from apps.backoffice.orders.services import OrderLedger


def get_ledger() -> OrderLedger:
    """OrderLedger wired with the default collaborators."""
    return OrderLedger()


def _caller(request: HttpRequest) -> Caller:
    return Caller.from_user(request.user)


def _order_list_response(orders: list[Order]) -> JsonResponse:
    response = OrderListResponse(
        orders=[serialize_order(order) for order in orders],
        count=len(orders),
    )
    return json_response(response.model_dump(mode="json"))


def _parse_date(request: HttpRequest, name: str) -> date | None:
    value = request.GET.get(name)
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidInput(f"{name} must be a date (YYYY-MM-DD)") from e


def _parse_filter(request: HttpRequest) -> OrderFilter:
    """Build an OrderFilter from query parameters."""
    owner_id = request.GET.get("owner_id")
    if owner_id:
        try:
            owner_id = int(owner_id)
        except ValueError as e:
            raise InvalidInput("owner_id must be an integer") from e

    return OrderFilter(
        status=request.GET.get("status") or None,
        owner_id=owner_id or None,
        fulfillment=request.GET.get("fulfillment") or None,
        payment_status=request.GET.get("payment_status") or None,
        date_from=_parse_date(request, "date_from"),
        date_to=_parse_date(request, "date_to"),
    )


# =============================================================================
# Collection
# =============================================================================


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_login_required
def orders(request: HttpRequest) -> JsonResponse:
    """
    GET  /api/orders - list orders (admins: all, customers: their own)
    POST /api/orders - place an order
    """
    if request.method == "POST":
        return create_order(request)
    return list_orders(request)


@idempotency_key_required
def create_order(request: HttpRequest) -> JsonResponse:
    """
    POST /api/orders

    Request body: OrderCreateRequest schema
    Response: OrderResponse schema (201)
    """
    order_request = parse_body(request, OrderCreateRequest)
    ledger = get_ledger()
    caller = _caller(request)

    order = ledger.create_order(
        caller,
        [item.model_dump() for item in order_request.items],
        order_request.fulfillment,
        payment_method=order_request.payment_method,
        delivery_address=order_request.delivery_address,
        notes=order_request.notes,
    )

    # Re-read with items and menu entries loaded
    order = ledger.get_order(caller, order.pk)
    return json_response(serialize_order(order).model_dump(mode="json"), status=201)


def list_orders(request: HttpRequest) -> JsonResponse:
    """
    GET /api/orders?status=&owner_id=&fulfillment=&payment_status=&date_from=&date_to=

    Dates are inclusive, YYYY-MM-DD.
    """
    orders = get_ledger().list_orders(_caller(request), _parse_filter(request))
    return _order_list_response(orders)


@require_GET
@api_login_required
def my_orders(request: HttpRequest) -> JsonResponse:
    """GET /api/orders/me"""
    return _order_list_response(get_ledger().list_my_orders(_caller(request)))


# =============================================================================
# Single order
# =============================================================================


@csrf_exempt
@require_http_methods(["GET", "DELETE"])
@api_login_required
def order_detail(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    GET    /api/orders/{order_id} - owner or admin
    DELETE /api/orders/{order_id} - admin only
    """
    ledger = get_ledger()
    caller = _caller(request)

    if request.method == "DELETE":
        ledger.delete_order(caller, order_id)
        return json_response({"message": "Order deleted successfully"})

    order = ledger.get_order(caller, order_id)
    return json_response(serialize_order(order).model_dump(mode="json"))


@csrf_exempt
@require_http_methods(["PUT"])
@api_login_required
@admin_required
def update_status(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    PUT /api/orders/{order_id}/status

    Request body: {"status": "<new status>"}
    """
    status_request = parse_body(request, OrderStatusUpdateRequest)
    order = get_ledger().advance_status(
        _caller(request), order_id, status_request.status
    )
    return json_response(serialize_order(order).model_dump(mode="json"))


@csrf_exempt
@require_http_methods(["PUT"])
@api_login_required
def cancel_order(request: HttpRequest, order_id: int) -> JsonResponse:
    """PUT /api/orders/{order_id}/cancel"""
    order = get_ledger().cancel_order(_caller(request), order_id)
    return json_response(serialize_order(order).model_dump(mode="json"))


@csrf_exempt
@require_http_methods(["POST"])
@api_login_required
def redeem_points(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    POST /api/orders/{order_id}/redeem

    Request body: {"points": <positive integer>}
    Response: RedeemResponse schema
    """
    redeem_request = parse_body(request, RedeemRequest)
    result = get_ledger().redeem_points(
        _caller(request), order_id, redeem_request.points
    )
    return json_response(serialize_redemption(result).model_dump(mode="json"))


@csrf_exempt
@require_http_methods(["PUT"])
@api_login_required
@admin_required
def update_payment_status(request: HttpRequest, order_id: int) -> JsonResponse:
    """
    PUT /api/orders/{order_id}/payment-status

    Request body: {"payment_status": "pending" | "paid"}
    """
    payment_request = parse_body(request, PaymentStatusUpdateRequest)
    order = get_ledger().set_payment_status(
        _caller(request), order_id, payment_request.payment_status
    )
    return json_response(serialize_order(order).model_dump(mode="json"))
