from typing import Dict, FrozenSet
from storefront.orders.models import OrderStatus

# CREATED -> CONFIRMED is driven by the server, CREATED -> CANCELLED by the customer.
# Payment-backed deployments open orders as PENDING instead of CREATED and allow
# cancelling again once payment has failed.
ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.CREATED: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.PENDING: frozenset({OrderStatus.PAYMENT_PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PAYMENT_PROCESSING: frozenset({OrderStatus.COMPLETED, OrderStatus.PAYMENT_FAILED}),
    OrderStatus.PAYMENT_FAILED: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset(),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in ORDER_TRANSITIONS.items() if not targets)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ORDER_TRANSITIONS.get(current, frozenset())


def is_cancellable(status: OrderStatus) -> bool:
    return can_transition(status, OrderStatus.CANCELLED)


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES
