from checkout_api.errors import InvalidTransitionError
from checkout_api.models.order import OrderStatus

# pending -> paid is owned by payment completion; the rest belong to fulfillment.
ORDER_STATE_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.FAILED},
    OrderStatus.PAID: {OrderStatus.PROCESSING},
    OrderStatus.PROCESSING: {OrderStatus.FAILED},
    OrderStatus.FAILED: set(),
}


def can_transition(current: OrderStatus, next_status: OrderStatus) -> bool:
    return next_status in ORDER_STATE_TRANSITIONS.get(current, set())


def ensure_valid_transition(current: OrderStatus, next_status: OrderStatus) -> None:
    if not can_transition(current, next_status):
        raise InvalidTransitionError(current.value, next_status.value)
