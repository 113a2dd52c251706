import pytest

from checkout_api.errors import InvalidTransitionError
from checkout_api.models.order import OrderStatus
from checkout_api.services.state_machine import can_transition, ensure_valid_transition


@pytest.mark.parametrize(
    ("current", "next_status"),
    [
        (OrderStatus.PENDING, OrderStatus.PAID),
        (OrderStatus.PENDING, OrderStatus.FAILED),
        (OrderStatus.PAID, OrderStatus.PROCESSING),
        (OrderStatus.PROCESSING, OrderStatus.FAILED),
    ],
)
def test_forward_transitions_are_allowed(current, next_status):
    assert can_transition(current, next_status)
    ensure_valid_transition(current, next_status)


@pytest.mark.parametrize(
    ("current", "next_status"),
    [
        (OrderStatus.PENDING, OrderStatus.PENDING),
        (OrderStatus.PAID, OrderStatus.PENDING),
        (OrderStatus.PAID, OrderStatus.PAID),
        (OrderStatus.FAILED, OrderStatus.PENDING),
        (OrderStatus.FAILED, OrderStatus.PAID),
        (OrderStatus.PROCESSING, OrderStatus.PAID),
        (OrderStatus.PENDING, OrderStatus.PROCESSING),
    ],
)
def test_regressions_and_skips_are_rejected(current, next_status):
    assert not can_transition(current, next_status)
    with pytest.raises(InvalidTransitionError, match="Invalid state transition"):
        ensure_valid_transition(current, next_status)
