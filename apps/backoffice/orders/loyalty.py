"""
Loyalty ledger - earning and redeeming points.

Both operations change User.points_balance with a single-statement
F() update, so concurrent earn/redeem calls on one user never lose an
update. Redemption additionally claims the order with a compare-and-swap
on its version and redemption fields, inside the same transaction as the
balance debit.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from apps.backoffice.core.exceptions import (
    AlreadyRedeemed,
    Conflict,
    DependencyUnavailable,
    Forbidden,
    InsufficientPoints,
    InvalidInput,
    InvalidTransition,
    LedgerError,
    NotFound,
)
from apps.backoffice.core.models import User

from .models import Order, OrderStatus
from .pricing import is_positive_int, max_amount

logger = logging.getLogger(__name__)

# Upper bound of a PositiveIntegerField on every supported database
MAX_POINTS = 2_147_483_647


@dataclass(frozen=True)
class RedemptionResult:
    order_id: int
    points_redeemed: int
    discount_applied: Decimal
    new_total: Decimal


class LoyaltyLedger:
    """
    Points ledger.

    points_per_unit: currency units spent per point earned (default 100)
    point_value: discount granted per redeemed point (default 1)
    """

    def __init__(
        self,
        points_per_unit: int | Decimal | None = None,
        point_value: int | Decimal | None = None,
    ) -> None:
        if points_per_unit is None:
            points_per_unit = settings.LOYALTY_POINTS_PER_UNIT
        if point_value is None:
            point_value = settings.LOYALTY_POINT_VALUE

        self.points_per_unit = Decimal(points_per_unit)
        self.point_value = Decimal(point_value)

        if self.points_per_unit <= 0 or self.point_value <= 0:
            msg = "Loyalty points_per_unit and point_value must be positive"
            raise ImproperlyConfigured(msg)

        # Largest redemption whose discount still fits Order.discount_applied
        self.max_redeemable_points = min(
            MAX_POINTS, int(max_amount("discount_applied") / self.point_value)
        )

    def points_for(self, total_amount: Decimal) -> int:
        """floor(total_amount / points_per_unit)"""
        return int(Decimal(total_amount) // self.points_per_unit)

    def earn(self, user_id: int, total_amount: Decimal) -> int:
        """
        Credit points for a newly priced order.

        Runs in its own savepoint: a store failure is logged as an anomaly
        and reported as 0 points, so order creation still commits.

        Returns:
            Points actually credited
        """
        points = self.points_for(total_amount)
        if points == 0:
            return 0

        try:
            with transaction.atomic():
                credited = User.objects.filter(pk=user_id).update(
                    points_balance=F("points_balance") + points
                )
        except DatabaseError:
            logger.warning(
                "Loyalty anomaly: failed to credit %d points to user %s",
                points,
                user_id,
                exc_info=True,
            )
            return 0

        if not credited:
            logger.warning(
                "Loyalty anomaly: user %s not found, %d points not credited",
                user_id,
                points,
            )
            return 0

        logger.info("Credited %d points to user %s", points, user_id)
        return points

    def redeem(self, caller_id: int, order_id: int, points: int) -> RedemptionResult:
        """
        Convert points into a discount on one of the caller's orders.

        Raises:
            InvalidInput: points is not a positive integer, or its discount
                would not fit on an order although the balance covers it
            NotFound: Unknown order
            Forbidden: Caller does not own the order
            AlreadyRedeemed: The order already carries a redemption
            InvalidTransition: The order is cancelled
            InsufficientPoints: Balance lower than points
            Conflict: The order changed concurrently; retry
            DependencyUnavailable: Ledger store unreachable
        """
        if not is_positive_int(points):
            raise InvalidInput("points must be a positive integer")

        try:
            order = Order.objects.get(pk=order_id)
        except Order.DoesNotExist as e:
            raise NotFound(f"Order {order_id} not found") from e
        except DatabaseError as e:
            raise DependencyUnavailable("Order store is unavailable") from e

        return self.apply_redemption(caller_id, order, points)

    def apply_redemption(
        self, caller_id: int, order: Order, points: int
    ) -> RedemptionResult:
        """
        Commit a redemption against an order as read by the caller.

        The order row is only claimed if its version is unchanged since
        `order` was read and it has no redemption; the balance is only
        debited if it covers `points`. Both updates commit together or not
        at all.
        """
        if order.owner_id != caller_id:
            raise Forbidden("You can only redeem points on your own orders")
        if order.redemption is not None:
            raise AlreadyRedeemed(f"Points were already redeemed on order {order.pk}")
        if order.status == OrderStatus.CANCELLED:
            raise InvalidTransition("Cannot redeem points on a cancelled order")

        if points > self.max_redeemable_points:
            raise self._oversized(caller_id, points)

        discount = (Decimal(points) * self.point_value).quantize(Decimal("0.01"))
        new_total = max(Decimal("0.00"), order.total_amount - discount)
        now = timezone.now()

        try:
            with transaction.atomic():
                claimed = (
                    Order.objects.filter(
                        pk=order.pk,
                        version=order.version,
                        points_redeemed__isnull=True,
                    )
                    .exclude(status=OrderStatus.CANCELLED)
                    .update(
                        total_amount=new_total,
                        points_redeemed=points,
                        discount_applied=discount,
                        redeemed_at=now,
                        version=F("version") + 1,
                        updated_at=now,
                    )
                )
                if not claimed:
                    raise self._lost_race(order.pk)

                debited = User.objects.filter(
                    pk=caller_id, points_balance__gte=points
                ).update(points_balance=F("points_balance") - points)
                if not debited:
                    # Rolls back the order claim above
                    raise InsufficientPoints(f"Not enough points: {points} requested")
        except DatabaseError as e:
            logger.exception("Redemption failed on order %s", order.pk)
            raise DependencyUnavailable("Order store is unavailable") from e

        logger.info(
            "User %s redeemed %d points on order %s (discount %s, new total %s)",
            caller_id,
            points,
            order.pk,
            discount,
            new_total,
        )
        return RedemptionResult(
            order_id=order.pk,
            points_redeemed=points,
            discount_applied=discount,
            new_total=new_total,
        )

    def _oversized(self, caller_id: int, points: int) -> LedgerError:
        """Reject a request above max_redeemable_points without pricing it."""
        balance = (
            User.objects.filter(pk=caller_id)
            .values_list("points_balance", flat=True)
            .first()
        )
        if balance is None or points > balance:
            return InsufficientPoints(f"Not enough points: {points} requested")
        return InvalidInput(
            f"At most {self.max_redeemable_points} points can be redeemed per order"
        )

    @staticmethod
    def _lost_race(order_id: int) -> LedgerError:
        """Explain why the compare-and-swap on an order matched nothing."""
        current = (
            Order.objects.filter(pk=order_id)
            .values("points_redeemed", "status")
            .first()
        )
        if current is None:
            return NotFound(f"Order {order_id} not found")
        if current["points_redeemed"] is not None:
            return AlreadyRedeemed(f"Points were already redeemed on order {order_id}")
        if current["status"] == OrderStatus.CANCELLED:
            return InvalidTransition("Cannot redeem points on a cancelled order")
        return Conflict(f"Order {order_id} was modified concurrently, retry")
