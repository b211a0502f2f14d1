"""
Order status lifecycles.

Delivery and takeaway orders follow the same state machine with their own
stage names:

    delivery: pending -> preparing -> out_for_delivery -> delivered
    takeaway: pending -> preparing -> ready_for_pickup -> picked_up

`cancelled` is reachable from every non-terminal stage. The last stage and
`cancelled` are terminal: no transition leaves them.
"""

from dataclasses import dataclass

from apps.backoffice.core.exceptions import InvalidInput, InvalidTransition

from .models import Fulfillment, OrderStatus


@dataclass(frozen=True)
class Lifecycle:
    """Forward-only stages plus the cancelled state."""

    fulfillment: str
    stages: tuple[str, ...]
    cancelled: str = OrderStatus.CANCELLED

    @property
    def initial(self) -> str:
        return self.stages[0]

    @property
    def statuses(self) -> tuple[str, ...]:
        return (*self.stages, self.cancelled)

    @property
    def terminal(self) -> frozenset[str]:
        return frozenset({self.stages[-1], self.cancelled})

    def is_terminal(self, status: str) -> bool:
        return status in self.terminal

    def check_advance(self, current: str, new: str) -> None:
        """
        Validate an admin status change.

        Moves must go strictly forward (skipping stages is allowed) or to
        cancelled.

        Raises:
            InvalidTransition: If current is terminal, whatever new is, or the
                move is not forward
            InvalidInput: If new is not a status of this lifecycle
        """
        if self.is_terminal(current):
            raise InvalidTransition(f"Order is already {current}")

        if new not in self.statuses:
            msg = (
                f"Invalid status '{new}' for {self.fulfillment} orders. "
                f"Choose one of: {', '.join(self.statuses)}"
            )
            raise InvalidInput(msg)

        if new == self.cancelled:
            return

        if self.stages.index(new) <= self.stages.index(current):
            raise InvalidTransition(f"Cannot move order from {current} to {new}")

    def check_cancel(self, current: str) -> None:
        """Raises InvalidTransition if the order is already terminal."""
        if self.is_terminal(current):
            raise InvalidTransition(f"Cannot cancel order with status: {current}")


LIFECYCLES: dict[str, Lifecycle] = {
    Fulfillment.DELIVERY: Lifecycle(
        fulfillment=Fulfillment.DELIVERY,
        stages=(
            OrderStatus.PENDING,
            OrderStatus.PREPARING,
            OrderStatus.OUT_FOR_DELIVERY,
            OrderStatus.DELIVERED,
        ),
    ),
    Fulfillment.TAKEAWAY: Lifecycle(
        fulfillment=Fulfillment.TAKEAWAY,
        stages=(
            OrderStatus.PENDING,
            OrderStatus.PREPARING,
            OrderStatus.READY_FOR_PICKUP,
            OrderStatus.PICKED_UP,
        ),
    ),
}


def lifecycle_for(fulfillment: str) -> Lifecycle:
    """Raises InvalidInput for an unknown fulfillment type."""
    try:
        return LIFECYCLES[fulfillment]
    except KeyError:
        msg = (
            f"Invalid fulfillment '{fulfillment}'. "
            f"Choose one of: {', '.join(LIFECYCLES)}"
        )
        raise InvalidInput(msg) from None
