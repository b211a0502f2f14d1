"""Tests for the loyalty ledger."""

import logging
from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.db.models import F

import pytest

from apps.backoffice.core.exceptions import (
    AlreadyRedeemed,
    Conflict,
    Forbidden,
    InsufficientPoints,
    InvalidInput,
    InvalidTransition,
    NotFound,
)
from apps.backoffice.core.tests.factories import UserFactory
from apps.backoffice.orders.loyalty import LoyaltyLedger
from apps.backoffice.orders.models import Order, OrderStatus
from apps.backoffice.orders.tests.factories import OrderFactory


@pytest.fixture
def loyalty() -> LoyaltyLedger:
    return LoyaltyLedger(points_per_unit=100, point_value=1)


class TestConfiguration:
    def test_defaults_come_from_settings(self, settings):
        settings.LOYALTY_POINTS_PER_UNIT = 50
        settings.LOYALTY_POINT_VALUE = 2

        loyalty = LoyaltyLedger()

        assert loyalty.points_per_unit == Decimal("50")
        assert loyalty.point_value == Decimal("2")

    def test_largest_redemption_fits_the_discount_field(self):
        assert LoyaltyLedger(100, 1).max_redeemable_points == 99_999_999
        assert LoyaltyLedger(100, 4).max_redeemable_points == 24_999_999

    @pytest.mark.parametrize(
        ("points_per_unit", "point_value"), [(0, 1), (100, 0), (-5, 1)]
    )
    def test_non_positive_rates_are_rejected(self, points_per_unit, point_value):
        with pytest.raises(ImproperlyConfigured):
            LoyaltyLedger(points_per_unit=points_per_unit, point_value=point_value)


class TestPointsFor:
    @pytest.mark.parametrize(
        ("total", "points"),
        [
            (Decimal("500.00"), 5),
            (Decimal("599.99"), 5),
            (Decimal("99.99"), 0),
            (Decimal("0.00"), 0),
            (Decimal("100.00"), 1),
        ],
    )
    def test_floor_of_total_over_points_per_unit(self, loyalty, total, points):
        assert loyalty.points_for(total) == points


@pytest.mark.django_db
class TestEarn:
    """Tests for LoyaltyLedger.earn."""

    def test_credits_points(self, loyalty, user):
        assert loyalty.earn(user.pk, Decimal("500.00")) == 5

        user.refresh_from_db()
        assert user.points_balance == 5

    def test_earning_adds_to_existing_balance(self, loyalty):
        user = UserFactory(points_balance=7)

        loyalty.earn(user.pk, Decimal("250.00"))

        user.refresh_from_db()
        assert user.points_balance == 9

    def test_zero_points_touch_nothing(self, loyalty, user, django_assert_num_queries):
        with django_assert_num_queries(0):
            assert loyalty.earn(user.pk, Decimal("99.00")) == 0

    def test_unknown_user_is_an_anomaly(self, loyalty, caplog):
        with caplog.at_level(logging.WARNING, logger="apps.backoffice.orders"):
            assert loyalty.earn(999_999, Decimal("500.00")) == 0

        assert "Loyalty anomaly" in caplog.text

    def test_store_failure_is_an_anomaly(self, loyalty, user, caplog):
        broken_user_model = MagicMock()
        broken_user_model.objects.filter.return_value.update.side_effect = (
            DatabaseError("connection reset")
        )

        with (
            patch("apps.backoffice.orders.loyalty.User", broken_user_model),
            caplog.at_level(logging.WARNING, logger="apps.backoffice.orders"),
        ):
            assert loyalty.earn(user.pk, Decimal("500.00")) == 0

        assert "Loyalty anomaly" in caplog.text
        user.refresh_from_db()
        assert user.points_balance == 0


@pytest.mark.django_db
class TestRedeem:
    """Tests for LoyaltyLedger.redeem."""

    def test_earn_then_redeem_on_another_order(self, loyalty, user):
        """500 earns 5 points; redeeming them on a 300 order leaves 295."""
        loyalty.earn(user.pk, Decimal("500.00"))
        order = OrderFactory(owner=user, total_amount=Decimal("300.00"))

        result = loyalty.redeem(user.pk, order.pk, 5)

        assert result.new_total == Decimal("295.00")
        assert result.discount_applied == Decimal("5.00")
        assert result.points_redeemed == 5

        order.refresh_from_db()
        user.refresh_from_db()
        assert order.total_amount == Decimal("295.00")
        assert order.redemption.points_redeemed == 5
        assert order.redemption.discount_applied == Decimal("5.00")
        assert order.redemption.redeemed_at is not None
        assert order.version == 1
        assert user.points_balance == 0

        with pytest.raises(AlreadyRedeemed):
            loyalty.redeem(user.pk, order.pk, 5)

    def test_second_redemption_is_rejected_not_added(self, loyalty):
        user = UserFactory(points_balance=20)
        order = OrderFactory(owner=user)

        loyalty.redeem(user.pk, order.pk, 5)
        with pytest.raises(AlreadyRedeemed):
            loyalty.redeem(user.pk, order.pk, 5)

        order.refresh_from_db()
        user.refresh_from_db()
        assert order.points_redeemed == 5
        assert order.total_amount == Decimal("295.00")
        assert user.points_balance == 15

    def test_insufficient_points_mutates_nothing(self, loyalty):
        user = UserFactory(points_balance=3)
        order = OrderFactory(owner=user)

        with pytest.raises(InsufficientPoints):
            loyalty.redeem(user.pk, order.pk, 5)

        order.refresh_from_db()
        user.refresh_from_db()
        assert order.total_amount == Decimal("300.00")
        assert order.redemption is None
        assert order.version == 0
        assert user.points_balance == 3

    @pytest.mark.parametrize("points", [100_000_000, 2**31, 10**30])
    def test_points_beyond_any_balance_are_insufficient(self, loyalty, points):
        user = UserFactory(points_balance=10)
        order = OrderFactory(owner=user)

        with pytest.raises(InsufficientPoints):
            loyalty.redeem(user.pk, order.pk, points)

        order.refresh_from_db()
        user.refresh_from_db()
        assert order.redemption is None
        assert user.points_balance == 10

    def test_discount_too_large_for_an_order_is_invalid(self, loyalty):
        user = UserFactory(points_balance=150_000_000)
        order = OrderFactory(owner=user)

        with pytest.raises(InvalidInput):
            loyalty.redeem(user.pk, order.pk, 100_000_000)

        user.refresh_from_db()
        assert user.points_balance == 150_000_000

    def test_total_is_clamped_at_zero(self, loyalty):
        user = UserFactory(points_balance=50)
        order = OrderFactory(owner=user, total_amount=Decimal("10.00"))

        result = loyalty.redeem(user.pk, order.pk, 50)

        assert result.new_total == Decimal("0.00")
        assert result.discount_applied == Decimal("50.00")
        user.refresh_from_db()
        assert user.points_balance == 0

    def test_point_value_scales_discount(self):
        loyalty = LoyaltyLedger(points_per_unit=100, point_value=2)
        user = UserFactory(points_balance=10)
        order = OrderFactory(owner=user, total_amount=Decimal("300.00"))

        result = loyalty.redeem(user.pk, order.pk, 10)

        assert result.discount_applied == Decimal("20.00")
        assert result.new_total == Decimal("280.00")

    @pytest.mark.parametrize("points", [0, -1, 1.5, "5", True])
    def test_points_must_be_positive_integer(self, loyalty, points):
        user = UserFactory(points_balance=10)
        order = OrderFactory(owner=user)

        with pytest.raises(InvalidInput):
            loyalty.redeem(user.pk, order.pk, points)

    def test_only_owner_can_redeem(self, loyalty):
        owner = UserFactory(points_balance=10)
        other = UserFactory(points_balance=10)
        order = OrderFactory(owner=owner)

        with pytest.raises(Forbidden):
            loyalty.redeem(other.pk, order.pk, 5)

        other.refresh_from_db()
        assert other.points_balance == 10

    def test_unknown_order(self, loyalty, user):
        with pytest.raises(NotFound):
            loyalty.redeem(user.pk, 999_999, 1)

    def test_cancelled_order_cannot_be_redeemed(self, loyalty):
        user = UserFactory(points_balance=10)
        order = OrderFactory(owner=user, status=OrderStatus.CANCELLED)

        with pytest.raises(InvalidTransition):
            loyalty.redeem(user.pk, order.pk, 5)

        user.refresh_from_db()
        assert user.points_balance == 10


@pytest.mark.django_db
class TestRedemptionRaces:
    """
    Redemptions committed against a stale read of the order.

    Each test reads the order, lets another writer commit first, then
    commits with the stale copy, which is what a concurrent request does.
    """

    def test_racing_redemptions_on_one_order_deduct_once(self, loyalty):
        user = UserFactory(points_balance=10)
        order = OrderFactory(owner=user)
        stale = Order.objects.get(pk=order.pk)

        loyalty.redeem(user.pk, order.pk, 5)
        with pytest.raises(AlreadyRedeemed):
            loyalty.apply_redemption(user.pk, stale, 5)

        user.refresh_from_db()
        order.refresh_from_db()
        assert user.points_balance == 5
        assert order.total_amount == Decimal("295.00")

    def test_concurrent_status_change_is_a_conflict(self, loyalty):
        user = UserFactory(points_balance=10)
        order = OrderFactory(owner=user)
        stale = Order.objects.get(pk=order.pk)

        Order.objects.filter(pk=order.pk).update(
            status=OrderStatus.PREPARING, version=F("version") + 1
        )
        with pytest.raises(Conflict):
            loyalty.apply_redemption(user.pk, stale, 5)

        user.refresh_from_db()
        assert user.points_balance == 10

    def test_order_cancelled_meanwhile(self, loyalty):
        user = UserFactory(points_balance=10)
        order = OrderFactory(owner=user)
        stale = Order.objects.get(pk=order.pk)

        Order.objects.filter(pk=order.pk).update(
            status=OrderStatus.CANCELLED, version=F("version") + 1
        )
        with pytest.raises(InvalidTransition):
            loyalty.apply_redemption(user.pk, stale, 5)

    def test_two_orders_cannot_spend_the_same_points(self, loyalty):
        user = UserFactory(points_balance=5)
        first = OrderFactory(owner=user)
        second = OrderFactory(owner=user)

        loyalty.redeem(user.pk, first.pk, 5)
        with pytest.raises(InsufficientPoints):
            loyalty.redeem(user.pk, second.pk, 5)

        user.refresh_from_db()
        second.refresh_from_db()
        assert user.points_balance == 0
        assert second.redemption is None
        assert second.total_amount == Decimal("300.00")
