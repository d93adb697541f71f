import pytest

from order_status import InvalidStatusTransition, OrderStatus, check_transition


@pytest.mark.parametrize("current,requested", [
    (OrderStatus.PENDING_PAYMENT, OrderStatus.PAID),
    (OrderStatus.PENDING_PAYMENT, OrderStatus.CANCELLED),
    (OrderStatus.PAID, OrderStatus.FULFILLED),
    (OrderStatus.PAID, OrderStatus.CANCELLED),
])
def test_allowed_transitions(current, requested):
    assert check_transition(current, requested) is True


@pytest.mark.parametrize("current,requested", [
    (OrderStatus.PENDING_PAYMENT, OrderStatus.FULFILLED),
    (OrderStatus.PAID, OrderStatus.PENDING_PAYMENT),
    (OrderStatus.FULFILLED, OrderStatus.CANCELLED),
    (OrderStatus.CANCELLED, OrderStatus.PAID),
])
def test_rejected_transitions(current, requested):
    with pytest.raises(InvalidStatusTransition, match="Cannot move order"):
        check_transition(current, requested)


def test_same_status_is_noop():
    assert check_transition(OrderStatus.PAID, OrderStatus.PAID) is False
