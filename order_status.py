"""Order status lifecycle."""
from enum import Enum
from typing import Dict, FrozenSet


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING_PAYMENT: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.FULFILLED, OrderStatus.CANCELLED}),
    OrderStatus.FULFILLED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class InvalidStatusTransition(Exception):
    def __init__(self, current: OrderStatus, requested: OrderStatus) -> None:
        super().__init__(f"Cannot move order from {current.value} to {requested.value}.")
        self.current = current
        self.requested = requested


def check_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    """Return True if the status changes, False for a no-op. Raise if not allowed."""
    if current == requested:
        return False
    if requested not in TRANSITIONS[current]:
        raise InvalidStatusTransition(current, requested)
    return True
