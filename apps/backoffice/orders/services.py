"""
Order ledger - the single entry point for order mutations.

Every mutation runs inside transaction.atomic() and commits through a
conditional update keyed on the order's version, so concurrent writers on
one order are linearised and a lost race surfaces as Conflict instead of
a silent overwrite. Audit records and notifications are scheduled with
transaction.on_commit and can never roll back the mutation they describe.
"""

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from apps.backoffice.audit.sink import AuditSink, DatabaseAuditSink
from apps.backoffice.catalog.lookup import CatalogLookup, MenuCatalog
from apps.backoffice.core.exceptions import (
    Conflict,
    DependencyUnavailable,
    Forbidden,
    InvalidInput,
    InvalidTransition,
    LedgerError,
    NotFound,
)
from apps.backoffice.core.identity import Caller
from apps.backoffice.core.models import User
from apps.backoffice.notifications.sink import EmailNotifier, NotificationSink

from .lifecycle import lifecycle_for
from .loyalty import LoyaltyLedger, RedemptionResult
from .managers import OrderFilter
from .models import (
    Fulfillment,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from .pricing import PricingEngine

logger = logging.getLogger(__name__)

# Payment method labels accepted per fulfillment type; the first is the default
PAYMENT_METHODS: dict[str, tuple[str, ...]] = {
    Fulfillment.DELIVERY: (PaymentMethod.CASH_ON_DELIVERY, PaymentMethod.ONLINE),
    Fulfillment.TAKEAWAY: (PaymentMethod.CASH_AT_SHOP, PaymentMethod.ONLINE),
}


@contextmanager
def ledger_store() -> Iterator[None]:
    """Re-raise store failures as DependencyUnavailable."""
    try:
        yield
    except DatabaseError as e:
        logger.exception("Order store operation failed")
        raise DependencyUnavailable("Order store is unavailable") from e


def after_commit(func: Callable[[], None]) -> None:
    """Run a best-effort side effect once the current transaction commits."""
    transaction.on_commit(func, robust=True)


class OrderLedger:
    """
    Order operations on behalf of an authenticated Caller.

    Collaborators are injectable; by default prices come from the menu
    table, audit records go to the database and notifications go out as
    e-mail.
    """

    def __init__(
        self,
        catalog: CatalogLookup | None = None,
        loyalty: LoyaltyLedger | None = None,
        audit: AuditSink | None = None,
        notifier: NotificationSink | None = None,
    ) -> None:
        self.pricing = PricingEngine(catalog or MenuCatalog())
        self.loyalty = loyalty or LoyaltyLedger()
        self.audit = audit or DatabaseAuditSink()
        self.notifier = notifier or EmailNotifier()

    # =========================================================================
    # Creation
    # =========================================================================

    def create_order(
        self,
        caller: Caller,
        items: Sequence[Mapping[str, Any]],
        fulfillment: str = Fulfillment.DELIVERY,
        *,
        payment_method: str | None = None,
        delivery_address: str = "",
        notes: str = "",
        pickup_time: datetime | None = None,
    ) -> Order:
        """
        Price and persist a new pending order for the caller.

        Points are credited inside the same transaction; a failure to
        credit them is logged and the order commits with points_earned = 0.

        Raises:
            InvalidInput: Bad items, fulfillment, payment method, or a
                delivery order without an address
            NotFound: Unknown caller or menu items
            DependencyUnavailable: Catalog or store unreachable
        """
        lifecycle = lifecycle_for(fulfillment)

        allowed_methods = PAYMENT_METHODS[fulfillment]
        if payment_method is None:
            payment_method = allowed_methods[0]
        if payment_method not in allowed_methods:
            msg = (
                f"Invalid payment method '{payment_method}' for {fulfillment} "
                f"orders. Choose one of: {', '.join(allowed_methods)}"
            )
            raise InvalidInput(msg)

        delivery_address = delivery_address.strip()
        if fulfillment == Fulfillment.DELIVERY and not delivery_address:
            raise InvalidInput("Delivery address is required for delivery orders")

        if fulfillment == Fulfillment.TAKEAWAY and pickup_time is None:
            pickup_time = timezone.now() + timedelta(
                minutes=settings.TAKEAWAY_PICKUP_MINUTES
            )

        quote = self.pricing.price(items)

        with ledger_store():
            owner = User.objects.filter(pk=caller.user_id).first()
            if owner is None:
                raise NotFound(f"User {caller.user_id} not found")

            with transaction.atomic():
                points_earned = self.loyalty.earn(owner.pk, quote.total_amount)

                order = Order.objects.create(
                    owner=owner,
                    fulfillment=fulfillment,
                    status=lifecycle.initial,
                    total_amount=quote.total_amount,
                    points_earned=points_earned,
                    payment_method=payment_method,
                    delivery_address=delivery_address,
                    notes=notes,
                    pickup_time=pickup_time,
                )
                OrderItem.objects.bulk_create(
                    [
                        OrderItem(
                            order=order,
                            menu_item_id=line.menu_item_id,
                            quantity=line.quantity,
                            unit_price=line.unit_price,
                            line_total=line.line_total,
                        )
                        for line in quote.lines
                    ]
                )
                self._on_created(order, owner)

        logger.info(
            "Created %s order %s for user %s (total %s, %d points)",
            fulfillment,
            order.pk,
            owner.pk,
            order.total_amount,
            points_earned,
        )
        return order

    def _on_created(self, order: Order, owner: User) -> None:
        data = {
            "order_id": order.pk,
            "fulfillment": order.fulfillment,
            "total_amount": str(order.total_amount),
            "payment_method": order.get_payment_method_display(),
            "pickup_time": order.pickup_time.isoformat() if order.pickup_time else "",
            "points_earned": order.points_earned,
            "customer": owner.get_username(),
        }
        after_commit(
            lambda: self.audit.record(
                owner.pk,
                "order_created",
                "order",
                order.pk,
                {
                    "fulfillment": order.fulfillment,
                    "total_amount": str(order.total_amount),
                    "points_earned": order.points_earned,
                },
            )
        )
        after_commit(lambda: self.notifier.notify(owner.email, "order_placed", data))

        admin_email = getattr(settings, "ADMIN_EMAIL", "")
        if admin_email:
            after_commit(
                lambda: self.notifier.notify(admin_email, "admin_new_order", data)
            )

    # =========================================================================
    # Reads
    # =========================================================================

    def get_order(self, caller: Caller, order_id: int) -> Order:
        """
        Raises:
            NotFound: Unknown order
            Forbidden: Caller is neither the owner nor an admin
        """
        order = self._load(order_id)
        if not caller.is_admin and order.owner_id != caller.user_id:
            raise Forbidden("You can only view your own orders")
        return order

    def list_orders(
        self, caller: Caller, order_filter: OrderFilter | None = None
    ) -> list[Order]:
        """
        Orders matching the filter, newest first.

        Non-admins only ever see their own orders; naming another owner
        raises Forbidden.
        """
        order_filter = order_filter or OrderFilter()
        self._validate_filter(order_filter)

        if not caller.is_admin:
            if order_filter.owner_id not in (None, caller.user_id):
                raise Forbidden("You can only list your own orders")
            order_filter = replace(order_filter, owner_id=caller.user_id)

        with ledger_store():
            return list(Order.objects.with_details().matching(order_filter))

    def list_my_orders(self, caller: Caller) -> list[Order]:
        return self.list_orders(caller, OrderFilter(owner_id=caller.user_id))

    @staticmethod
    def _validate_filter(order_filter: OrderFilter) -> None:
        choices = (
            ("status", order_filter.status, OrderStatus.values),
            ("fulfillment", order_filter.fulfillment, Fulfillment.values),
            ("payment_status", order_filter.payment_status, PaymentStatus.values),
        )
        for field, value, allowed in choices:
            if value and value not in allowed:
                raise InvalidInput(
                    f"Invalid {field} '{value}'. Choose one of: {', '.join(allowed)}"
                )
        if (
            order_filter.date_from
            and order_filter.date_to
            and order_filter.date_from > order_filter.date_to
        ):
            raise InvalidInput("date_from must not be after date_to")

    # =========================================================================
    # Transitions
    # =========================================================================

    def advance_status(self, caller: Caller, order_id: int, new_status: str) -> Order:
        """
        Admin status change along the order's lifecycle.

        Raises:
            Forbidden: Caller is not an admin
            NotFound: Unknown order
            InvalidInput: new_status is not part of the order's lifecycle
            InvalidTransition: Order is terminal or the move is not forward
            Conflict: The order changed concurrently
        """
        if not caller.is_admin:
            raise Forbidden("Only admins can update order status")

        order = self._load(order_id)
        previous = order.status
        lifecycle_for(order.fulfillment).check_advance(previous, new_status)

        with ledger_store(), transaction.atomic():
            self._transition(order, status=new_status)

            template = (
                "order_cancelled"
                if new_status == OrderStatus.CANCELLED
                else "order_status_changed"
            )
            self._after_transition(
                caller,
                order,
                "order_status_changed",
                {"from": previous, "to": new_status},
                template,
            )

        logger.info(
            "Order %s status %s -> %s by user %s",
            order.pk,
            previous,
            new_status,
            caller.user_id,
        )
        return order

    def cancel_order(self, caller: Caller, order_id: int) -> Order:
        """
        Cancel an order. Earned and redeemed points are not reversed.

        Raises:
            NotFound: Unknown order
            Forbidden: Caller is neither the owner nor an admin
            InvalidTransition: Order is already terminal
            Conflict: The order changed concurrently
        """
        order = self._load(order_id)
        if not caller.is_admin and order.owner_id != caller.user_id:
            raise Forbidden("You can only cancel your own orders")

        previous = order.status
        lifecycle_for(order.fulfillment).check_cancel(previous)

        with ledger_store(), transaction.atomic():
            self._transition(order, status=OrderStatus.CANCELLED)
            self._after_transition(
                caller,
                order,
                "order_cancelled",
                {"from": previous},
                "order_cancelled",
            )

        logger.info("Order %s cancelled by user %s", order.pk, caller.user_id)
        return order

    def set_payment_status(
        self, caller: Caller, order_id: int, payment_status: str
    ) -> Order:
        """
        Admin update of the payment status label.

        Raises:
            Forbidden: Caller is not an admin
            InvalidInput: Unknown payment status
            NotFound: Unknown order
            Conflict: The order changed concurrently
        """
        if not caller.is_admin:
            raise Forbidden("Only admins can update payment status")
        if payment_status not in PaymentStatus.values:
            raise InvalidInput(
                f"Invalid payment status '{payment_status}'. "
                f"Choose one of: {', '.join(PaymentStatus.values)}"
            )

        order = self._load(order_id)
        previous = order.payment_status

        with ledger_store(), transaction.atomic():
            self._transition(order, payment_status=payment_status)

            after_commit(
                lambda: self.audit.record(
                    caller.user_id,
                    "payment_status_changed",
                    "order",
                    order.pk,
                    {"from": previous, "to": payment_status},
                )
            )
            if payment_status == PaymentStatus.PAID and previous != PaymentStatus.PAID:
                self._notify_owner(order, "payment_confirmed")

        logger.info(
            "Order %s payment status %s -> %s", order.pk, previous, payment_status
        )
        return order

    def redeem_points(
        self, caller: Caller, order_id: int, points: int
    ) -> RedemptionResult:
        """Redeem loyalty points on one of the caller's orders."""
        with ledger_store(), transaction.atomic():
            result = self.loyalty.redeem(caller.user_id, order_id, points)

            after_commit(
                lambda: self.audit.record(
                    caller.user_id,
                    "points_redeemed",
                    "order",
                    result.order_id,
                    {
                        "points_redeemed": result.points_redeemed,
                        "discount_applied": str(result.discount_applied),
                        "new_total": str(result.new_total),
                    },
                )
            )
            owner_email = (
                User.objects.filter(pk=caller.user_id)
                .values_list("email", flat=True)
                .first()
            )
            data = {
                "order_id": result.order_id,
                "points_redeemed": result.points_redeemed,
                "discount_applied": str(result.discount_applied),
                "total_amount": str(result.new_total),
            }
            after_commit(
                lambda: self.notifier.notify(owner_email or "", "points_redeemed", data)
            )

        return result

    def delete_order(self, caller: Caller, order_id: int) -> None:
        """
        Admin hard delete of an order and its line items.

        Raises:
            Forbidden: Caller is not an admin
            NotFound: Unknown order
        """
        if not caller.is_admin:
            raise Forbidden("Only admins can delete orders")

        with ledger_store(), transaction.atomic():
            deleted, _ = Order.objects.filter(pk=order_id).delete()
            if not deleted:
                raise NotFound(f"Order {order_id} not found")

            after_commit(
                lambda: self.audit.record(
                    caller.user_id, "order_deleted", "order", order_id
                )
            )

        logger.info("Order %s deleted by user %s", order_id, caller.user_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _load(order_id: int) -> Order:
        with ledger_store():
            try:
                return Order.objects.with_details().get(pk=order_id)
            except Order.DoesNotExist as e:
                raise NotFound(f"Order {order_id} not found") from e

    @staticmethod
    def _transition(order: Order, **changes: Any) -> None:
        """
        Compare-and-swap update of `order` as it was read.

        Only matches if version and status are unchanged; on success the
        in-memory instance reflects the new row.
        """
        now = timezone.now()
        updated = Order.objects.filter(
            pk=order.pk, version=order.version, status=order.status
        ).update(**changes, version=F("version") + 1, updated_at=now)

        if not updated:
            raise OrderLedger._stale(order)

        for field, value in changes.items():
            setattr(order, field, value)
        order.version += 1
        order.updated_at = now

    @staticmethod
    def _stale(order: Order) -> LedgerError:
        """Explain why a compare-and-swap on `order` matched nothing."""
        status = (
            Order.objects.filter(pk=order.pk).values_list("status", flat=True).first()
        )
        if status is None:
            return NotFound(f"Order {order.pk} not found")
        lifecycle = lifecycle_for(order.fulfillment)
        if status != order.status and lifecycle.is_terminal(status):
            return InvalidTransition(f"Order is already {status}")
        return Conflict(f"Order {order.pk} was modified concurrently, retry")

    def _after_transition(
        self,
        caller: Caller,
        order: Order,
        action: str,
        metadata: dict[str, Any],
        template: str,
    ) -> None:
        after_commit(
            lambda: self.audit.record(
                caller.user_id, action, "order", order.pk, metadata
            )
        )
        self._notify_owner(order, template)

    def _notify_owner(self, order: Order, template: str) -> None:
        # owner is select_related by _load
        email = order.owner.email
        data = {
            "order_id": order.pk,
            "status": order.status,
            "total_amount": str(order.total_amount),
        }
        after_commit(lambda: self.notifier.notify(email, template, data))
