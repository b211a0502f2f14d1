"""
Takeaway cart services - cart mutations and checkout.

Checkout turns the cart into a takeaway order through OrderLedger, so
pricing, points, audit and notifications follow the same rules as any
other order. Every cart mutation is audited on a best-effort basis.
"""

import logging
from typing import Any

from django.db import transaction
from django.db.models import F

from apps.backoffice.audit.sink import AuditSink, DatabaseAuditSink
from apps.backoffice.catalog.models import MenuItem
from apps.backoffice.core.exceptions import InvalidInput, NotFound
from apps.backoffice.core.identity import Caller
from apps.backoffice.core.models import User
from apps.backoffice.orders.models import Fulfillment, Order, PaymentMethod
from apps.backoffice.orders.pricing import is_positive_int
from apps.backoffice.orders.services import OrderLedger, after_commit, ledger_store
from apps.backoffice.takeaway.models import Cart, CartItem

logger = logging.getLogger(__name__)


def _audit(
    audit: AuditSink | None,
    user: User,
    action: str,
    cart_id: int | None,
    **metadata: Any,
) -> None:
    sink = audit or DatabaseAuditSink()
    after_commit(
        lambda: sink.record(user.pk, action, "takeaway_cart", cart_id, metadata)
    )


def _get_cart_or_404(user: User) -> Cart:
    cart = Cart.objects.filter(user=user).first()
    if cart is None:
        raise NotFound("Cart not found")
    return cart


def get_cart(user: User) -> Cart | None:
    """The user's cart with lines and menu items loaded, or None."""
    with ledger_store():
        return (
            Cart.objects.filter(user=user)
            .prefetch_related("items__menu_item")
            .first()
        )


def add_item(
    user: User,
    menu_item_id: int,
    quantity: int = 1,
    *,
    audit: AuditSink | None = None,
) -> Cart:
    """
    Add a menu item to the cart, creating the cart if needed.

    Adding an item already in the cart increases its quantity.

    Raises:
        InvalidInput: quantity is not a positive integer
        NotFound: Unknown or unavailable menu item
    """
    if not is_positive_int(quantity):
        raise InvalidInput("quantity must be a positive integer")

    with ledger_store(), transaction.atomic():
        if not MenuItem.objects.filter(pk=menu_item_id, is_available=True).exists():
            raise NotFound(
                f"Menu item {menu_item_id} not found", missing_ids=[menu_item_id]
            )

        cart, _ = Cart.objects.get_or_create(user=user)
        updated = CartItem.objects.filter(cart=cart, menu_item_id=menu_item_id).update(
            quantity=F("quantity") + quantity
        )
        if not updated:
            CartItem.objects.create(
                cart=cart, menu_item_id=menu_item_id, quantity=quantity
            )
        cart.save(update_fields=["updated_at"])

        _audit(
            audit,
            user,
            "takeaway_cart_item_added",
            cart.pk,
            menu_item_id=menu_item_id,
            quantity=quantity,
        )

    logger.info(
        "User %s added %d x item %s to takeaway cart", user.pk, quantity, menu_item_id
    )
    return cart


def update_item(
    user: User,
    menu_item_id: int,
    quantity: int,
    *,
    audit: AuditSink | None = None,
) -> Cart:
    """
    Set the quantity of a cart line. A quantity of 0 removes the line.

    Raises:
        InvalidInput: quantity is negative or not an integer
        NotFound: No cart, or the item is not in it
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise InvalidInput("quantity must be a non-negative integer")

    with ledger_store(), transaction.atomic():
        cart = _get_cart_or_404(user)
        lines = CartItem.objects.filter(cart=cart, menu_item_id=menu_item_id)

        if quantity == 0:
            changed, _ = lines.delete()
        else:
            changed = lines.update(quantity=quantity)
        if not changed:
            raise NotFound(f"Menu item {menu_item_id} is not in the cart")
        cart.save(update_fields=["updated_at"])

        _audit(
            audit,
            user,
            "takeaway_cart_item_updated",
            cart.pk,
            menu_item_id=menu_item_id,
            quantity=quantity,
        )

    logger.info(
        "User %s set item %s to %d in takeaway cart", user.pk, menu_item_id, quantity
    )
    return cart


def remove_item(
    user: User, menu_item_id: int, *, audit: AuditSink | None = None
) -> Cart:
    """
    Raises:
        NotFound: No cart, or the item is not in it
    """
    with ledger_store(), transaction.atomic():
        cart = _get_cart_or_404(user)
        deleted, _ = CartItem.objects.filter(
            cart=cart, menu_item_id=menu_item_id
        ).delete()
        if not deleted:
            raise NotFound(f"Menu item {menu_item_id} is not in the cart")
        cart.save(update_fields=["updated_at"])

        _audit(
            audit,
            user,
            "takeaway_cart_item_removed",
            cart.pk,
            menu_item_id=menu_item_id,
        )

    logger.info("User %s removed item %s from takeaway cart", user.pk, menu_item_id)
    return cart


def clear_cart(user: User, *, audit: AuditSink | None = None) -> None:
    """Empty the user's cart. A missing cart is already empty."""
    with ledger_store(), transaction.atomic():
        cart = Cart.objects.filter(user=user).first()
        if cart is None:
            return
        cart.items.all().delete()
        cart.save(update_fields=["updated_at"])

        _audit(audit, user, "takeaway_cart_cleared", cart.pk)

    logger.info("User %s cleared takeaway cart", user.pk)


def checkout(
    user: User,
    payment_method: str = PaymentMethod.CASH_AT_SHOP,
    notes: str = "",
    ledger: OrderLedger | None = None,
) -> Order:
    """
    Place a takeaway order for everything in the cart and delete the cart.

    The cart row is locked for the duration, so two checkouts of the same
    cart cannot both create an order.

    Raises:
        InvalidInput: Empty cart or a payment method other than online or
            cash at shop
        NotFound: A cart item is no longer on the menu
    """
    ledger = ledger or OrderLedger()

    with ledger_store(), transaction.atomic():
        cart = Cart.objects.select_for_update().filter(user=user).first()
        lines = list(cart.items.all()) if cart else []
        if not lines:
            raise InvalidInput("Cart is empty")

        order = ledger.create_order(
            Caller.from_user(user),
            [
                {"menu_item_id": line.menu_item_id, "quantity": line.quantity}
                for line in lines
            ],
            Fulfillment.TAKEAWAY,
            payment_method=payment_method,
            notes=notes,
        )
        cart_id = cart.pk
        cart.delete()

        _audit(ledger.audit, user, "takeaway_checkout", cart_id, order_id=order.pk)

    logger.info("User %s checked out takeaway cart as order %s", user.pk, order.pk)
    return order
