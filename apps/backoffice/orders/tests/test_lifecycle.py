"""Tests for the order status lifecycles."""

import pytest

from apps.backoffice.core.exceptions import InvalidInput, InvalidTransition
from apps.backoffice.orders.lifecycle import LIFECYCLES, lifecycle_for
from apps.backoffice.orders.models import Fulfillment, OrderStatus

DELIVERY = lifecycle_for(Fulfillment.DELIVERY)
TAKEAWAY = lifecycle_for(Fulfillment.TAKEAWAY)


class TestLifecycleFor:
    def test_every_fulfillment_has_a_lifecycle(self):
        assert set(LIFECYCLES) == set(Fulfillment.values)

    def test_unknown_fulfillment_is_invalid(self):
        with pytest.raises(InvalidInput):
            lifecycle_for("drone")

    def test_both_lifecycles_start_pending(self):
        assert DELIVERY.initial == OrderStatus.PENDING
        assert TAKEAWAY.initial == OrderStatus.PENDING

    def test_terminal_states(self):
        assert DELIVERY.terminal == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
        assert TAKEAWAY.terminal == {OrderStatus.PICKED_UP, OrderStatus.CANCELLED}


class TestCheckAdvance:
    @pytest.mark.parametrize(
        ("current", "new"),
        [
            (OrderStatus.PENDING, OrderStatus.PREPARING),
            (OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY),
            (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED),
            (OrderStatus.PENDING, OrderStatus.DELIVERED),
            (OrderStatus.PREPARING, OrderStatus.CANCELLED),
        ],
    )
    def test_forward_and_cancel_moves_are_allowed(self, current, new):
        DELIVERY.check_advance(current, new)

    @pytest.mark.parametrize(
        ("current", "new"),
        [
            (OrderStatus.PREPARING, OrderStatus.PENDING),
            (OrderStatus.PREPARING, OrderStatus.PREPARING),
            (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.PREPARING),
        ],
    )
    def test_backward_and_same_moves_are_rejected(self, current, new):
        with pytest.raises(InvalidTransition):
            DELIVERY.check_advance(current, new)

    @pytest.mark.parametrize("lifecycle", [DELIVERY, TAKEAWAY])
    def test_no_terminal_state_has_an_outgoing_transition(self, lifecycle):
        for terminal in lifecycle.terminal:
            for new in lifecycle.statuses:
                with pytest.raises(InvalidTransition):
                    lifecycle.check_advance(terminal, new)

    def test_status_from_the_other_lifecycle_is_invalid(self):
        with pytest.raises(InvalidInput):
            DELIVERY.check_advance(OrderStatus.PENDING, OrderStatus.READY_FOR_PICKUP)
        with pytest.raises(InvalidInput):
            TAKEAWAY.check_advance(OrderStatus.PENDING, OrderStatus.DELIVERED)

    @pytest.mark.parametrize(
        ("lifecycle", "terminal", "new"),
        [
            (DELIVERY, OrderStatus.DELIVERED, OrderStatus.PICKED_UP),
            (DELIVERY, OrderStatus.CANCELLED, "teleported"),
            (TAKEAWAY, OrderStatus.PICKED_UP, OrderStatus.OUT_FOR_DELIVERY),
        ],
    )
    def test_terminal_state_rejects_statuses_outside_the_lifecycle(
        self, lifecycle, terminal, new
    ):
        with pytest.raises(InvalidTransition):
            lifecycle.check_advance(terminal, new)

    def test_unknown_status_is_invalid(self):
        with pytest.raises(InvalidInput):
            TAKEAWAY.check_advance(OrderStatus.PENDING, "teleported")

    def test_takeaway_stages(self):
        TAKEAWAY.check_advance(OrderStatus.PREPARING, OrderStatus.READY_FOR_PICKUP)
        TAKEAWAY.check_advance(OrderStatus.READY_FOR_PICKUP, OrderStatus.PICKED_UP)


class TestCheckCancel:
    def test_non_terminal_orders_can_be_cancelled(self):
        for status in DELIVERY.stages[:-1]:
            DELIVERY.check_cancel(status)

    @pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_terminal_orders_cannot_be_cancelled(self, status):
        with pytest.raises(InvalidTransition):
            DELIVERY.check_cancel(status)
