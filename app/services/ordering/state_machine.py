"""Order status transitions."""
from typing import Dict, FrozenSet

from app.core.errors import InvalidTransitionError
from app.services.ordering.models import OrderStatus

# Pending -> Ready and Preparing -> Delivered skip a step on purpose.
TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

INITIAL_STATUS = OrderStatus.PENDING


def allowed_transitions(current: OrderStatus) -> FrozenSet[OrderStatus]:
    return TRANSITIONS[OrderStatus(current)]


def is_terminal(status: OrderStatus) -> bool:
    return not allowed_transitions(status)


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return OrderStatus(requested) in allowed_transitions(current)


def ensure_transition(current: OrderStatus, requested: OrderStatus) -> None:
    """Raise InvalidTransitionError unless ``current -> requested`` is allowed."""
    current, requested = OrderStatus(current), OrderStatus(requested)
    if not can_transition(current, requested):
        raise InvalidTransitionError(current.value, requested.value)
