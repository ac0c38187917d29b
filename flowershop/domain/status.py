# flowershop/domain/status.py
"""
Order status state machine.

Pure functions only: no I/O, no clock. The service layer decides what to
persist based on the TransitionRecord returned here.

    pending -> confirmed -> processing -> shipped -> delivered
       |           |            |
       +-----------+------------+--> cancelled
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List

from flowershop.domain.errors import InvalidTransition


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


INITIAL_STATUS = OrderStatus.PENDING

ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset(
    s for s, nxt in ALLOWED_TRANSITIONS.items() if not nxt
)

# stable order for error payloads
_ORDER = list(OrderStatus)


@dataclass(frozen=True)
class TransitionRecord:
    previous_status: OrderStatus
    new_status: OrderStatus


def valid_next(current: OrderStatus | str) -> List[str]:
    current = OrderStatus(current)
    return [s.value for s in _ORDER if s in ALLOWED_TRANSITIONS[current]]


def is_terminal(status: OrderStatus | str) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def transition(current: OrderStatus | str, requested: OrderStatus | str) -> TransitionRecord:
    """
    Decide whether ``current -> requested`` is an edge of the graph.

    Same-state requests and skipped steps are rejected like any other
    missing edge. Raises InvalidTransition with the reachable statuses.
    """
    current = OrderStatus(current)
    requested = OrderStatus(requested)

    if requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current.value, requested.value, valid_next(current))

    return TransitionRecord(previous_status=current, new_status=requested)
