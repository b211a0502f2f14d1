"""Tests for takeaway cart services."""

from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

import pytest

from apps.backoffice.audit.models import AuditRecord
from apps.backoffice.catalog.tests.factories import MenuItemFactory
from apps.backoffice.core.exceptions import InvalidInput, NotFound
from apps.backoffice.orders.models import (
    Fulfillment,
    Order,
    OrderStatus,
    PaymentMethod,
)
from apps.backoffice.orders.services import OrderLedger
from apps.backoffice.takeaway import services
from apps.backoffice.takeaway.models import Cart, CartItem
from apps.backoffice.takeaway.tests.factories import CartFactory, CartItemFactory


@pytest.fixture
def samosa():
    return MenuItemFactory(name="Samosa", price=Decimal("30.00"))


@pytest.fixture
def chai():
    return MenuItemFactory(name="Chai", price=Decimal("20.00"))


@pytest.mark.django_db
class TestCartMutations:
    """Tests for add, update, remove and clear."""

    def test_add_creates_cart(self, user, samosa):
        cart = services.add_item(user, samosa.pk, 2)

        assert cart.user == user
        assert cart.items.get().quantity == 2

    def test_adding_again_increases_quantity(self, user, samosa):
        services.add_item(user, samosa.pk)
        services.add_item(user, samosa.pk, 3)

        assert CartItem.objects.get(cart__user=user, menu_item=samosa).quantity == 4

    def test_add_unknown_or_unavailable_item(self, user):
        sold_out = MenuItemFactory(is_available=False)

        with pytest.raises(NotFound):
            services.add_item(user, 987_654)
        with pytest.raises(NotFound):
            services.add_item(user, sold_out.pk)
        assert not Cart.objects.filter(user=user).exists()

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    def test_add_bad_quantity(self, user, samosa, quantity):
        with pytest.raises(InvalidInput):
            services.add_item(user, samosa.pk, quantity)

    def test_update_sets_quantity(self, user, samosa):
        services.add_item(user, samosa.pk)

        services.update_item(user, samosa.pk, 5)

        assert CartItem.objects.get(cart__user=user).quantity == 5

    def test_update_to_zero_removes_line(self, user, samosa, chai):
        services.add_item(user, samosa.pk)
        services.add_item(user, chai.pk)

        services.update_item(user, samosa.pk, 0)

        assert list(
            CartItem.objects.filter(cart__user=user).values_list(
                "menu_item_id", flat=True
            )
        ) == [chai.pk]

    def test_update_without_cart_or_line(self, user, samosa, chai):
        with pytest.raises(NotFound):
            services.update_item(user, samosa.pk, 1)

        services.add_item(user, samosa.pk)
        with pytest.raises(NotFound):
            services.update_item(user, chai.pk, 1)

    @pytest.mark.parametrize("quantity", [-1, 2.5, False])
    def test_update_bad_quantity(self, user, samosa, quantity):
        services.add_item(user, samosa.pk)

        with pytest.raises(InvalidInput):
            services.update_item(user, samosa.pk, quantity)

    def test_remove_item(self, user, samosa):
        services.add_item(user, samosa.pk)

        services.remove_item(user, samosa.pk)

        assert not CartItem.objects.filter(cart__user=user).exists()
        with pytest.raises(NotFound):
            services.remove_item(user, samosa.pk)

    def test_clear_cart(self, user, samosa, chai):
        services.add_item(user, samosa.pk)
        services.add_item(user, chai.pk)

        services.clear_cart(user)

        assert not CartItem.objects.filter(cart__user=user).exists()

    def test_clear_missing_cart_is_a_no_op(self, user):
        services.clear_cart(user)

        assert not Cart.objects.filter(user=user).exists()

    def test_get_cart_totals_at_current_prices(self, user, samosa, chai):
        services.add_item(user, samosa.pk, 2)
        services.add_item(user, chai.pk, 1)

        cart = services.get_cart(user)

        assert cart.total_amount == Decimal("80.00")
        assert services.get_cart(CartFactory().user).total_amount == Decimal("0.00")

    def test_mutations_are_audited(
        self, user, samosa, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            services.add_item(user, samosa.pk, 2)
            services.update_item(user, samosa.pk, 3)
            services.remove_item(user, samosa.pk)
            services.clear_cart(user)

        assert list(
            AuditRecord.objects.order_by("pk").values_list("action", flat=True)
        ) == [
            "takeaway_cart_item_added",
            "takeaway_cart_item_updated",
            "takeaway_cart_item_removed",
            "takeaway_cart_cleared",
        ]
        assert AuditRecord.objects.filter(actor_id=user.pk).count() == 4

    def test_mutations_use_the_given_audit_sink(
        self, user, samosa, audit_sink, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            services.add_item(user, samosa.pk, 2, audit=audit_sink)
            services.update_item(user, samosa.pk, 3, audit=audit_sink)
            services.remove_item(user, samosa.pk, audit=audit_sink)
            services.clear_cart(user, audit=audit_sink)

        assert audit_sink.actions == [
            "takeaway_cart_item_added",
            "takeaway_cart_item_updated",
            "takeaway_cart_item_removed",
            "takeaway_cart_cleared",
        ]
        assert audit_sink.records[0]["metadata"] == {
            "menu_item_id": samosa.pk,
            "quantity": 2,
        }
        assert not AuditRecord.objects.exists()


@pytest.mark.django_db
class TestCheckout:
    """Tests for services.checkout."""

    def test_checkout_places_pending_takeaway_order(
        self, user, samosa, chai, audit_sink, notifier, settings
    ):
        settings.TAKEAWAY_PICKUP_MINUTES = 30
        services.add_item(user, samosa.pk, 4)
        services.add_item(user, chai.pk, 1)
        before = timezone.now()

        order = services.checkout(
            user,
            payment_method=PaymentMethod.ONLINE,
            notes="No onions",
            ledger=OrderLedger(audit=audit_sink, notifier=notifier),
        )

        assert order.fulfillment == Fulfillment.TAKEAWAY
        assert order.status == OrderStatus.PENDING
        assert order.total_amount == Decimal("140.00")
        assert order.payment_method == PaymentMethod.ONLINE
        assert order.notes == "No onions"
        assert order.pickup_time >= before + timedelta(minutes=30)
        assert order.points_earned == 1
        assert sorted(order.items.values_list("menu_item_id", "quantity")) == sorted(
            [(samosa.pk, 4), (chai.pk, 1)]
        )
        assert not Cart.objects.filter(user=user).exists()
        user.refresh_from_db()
        assert user.points_balance == 1

    def test_checkout_prices_from_catalog_not_cart(self, user, samosa):
        services.add_item(user, samosa.pk, 1)
        samosa.price = Decimal("35.00")
        samosa.save()

        order = services.checkout(user)

        assert order.total_amount == Decimal("35.00")

    def test_empty_cart(self, user):
        with pytest.raises(InvalidInput):
            services.checkout(user)

        CartFactory(user=user)
        with pytest.raises(InvalidInput):
            services.checkout(user)
        assert Order.objects.count() == 0

    def test_cash_on_delivery_is_not_a_takeaway_method(self, user, samosa):
        services.add_item(user, samosa.pk)

        with pytest.raises(InvalidInput):
            services.checkout(user, payment_method=PaymentMethod.CASH_ON_DELIVERY)

        assert CartItem.objects.filter(cart__user=user).count() == 1

    def test_item_taken_off_menu_keeps_cart(self, user, samosa):
        line = CartItemFactory(cart=CartFactory(user=user), menu_item=samosa)
        samosa.is_available = False
        samosa.save()

        with pytest.raises(NotFound):
            services.checkout(user)

        assert CartItem.objects.filter(pk=line.pk).exists()
        assert Order.objects.count() == 0

    def test_checkout_audits_through_the_ledger_sink(
        self, user, samosa, audit_sink, notifier, django_capture_on_commit_callbacks
    ):
        services.add_item(user, samosa.pk)

        with django_capture_on_commit_callbacks(execute=True):
            order = services.checkout(
                user, ledger=OrderLedger(audit=audit_sink, notifier=notifier)
            )

        assert "takeaway_checkout" in audit_sink.actions
        assert "order_created" in audit_sink.actions
        assert audit_sink.records[-1]["metadata"] == {"order_id": order.pk}
        assert not AuditRecord.objects.exists()

    def test_checkout_is_audited(
        self, user, samosa, django_capture_on_commit_callbacks
    ):
        services.add_item(user, samosa.pk)

        with django_capture_on_commit_callbacks(execute=True):
            order = services.checkout(user)

        checkout_record = AuditRecord.objects.get(action="takeaway_checkout")
        assert checkout_record.metadata == {"order_id": order.pk}
        assert AuditRecord.objects.filter(
            action="order_created", resource_id=str(order.pk)
        ).exists()
