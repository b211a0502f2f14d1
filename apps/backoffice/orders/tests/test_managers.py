"""Tests for the order queryset."""

import pytest

from apps.backoffice.orders.managers import OrderFilter
from apps.backoffice.orders.models import Fulfillment, Order, OrderStatus
from apps.backoffice.orders.tests.factories import OrderFactory, TakeawayOrderFactory


@pytest.mark.django_db
class TestOrderQuerySet:
    def test_owned_by(self, user):
        mine = OrderFactory(owner=user)
        OrderFactory()

        assert list(Order.objects.owned_by(user.pk)) == [mine]

    def test_matching_combines_fields(self, user):
        wanted = TakeawayOrderFactory(owner=user, status=OrderStatus.PREPARING)
        TakeawayOrderFactory(owner=user)
        OrderFactory(owner=user, status=OrderStatus.PREPARING)
        TakeawayOrderFactory(status=OrderStatus.PREPARING)

        order_filter = OrderFilter(
            owner_id=user.pk,
            status=OrderStatus.PREPARING,
            fulfillment=Fulfillment.TAKEAWAY,
        )

        assert list(Order.objects.matching(order_filter)) == [wanted]

    def test_empty_filter_matches_everything(self):
        OrderFactory.create_batch(3)

        assert Order.objects.matching(OrderFilter()).count() == 3
