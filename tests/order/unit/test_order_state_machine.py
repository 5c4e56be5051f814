"""
Unit Tests for the order transition table.
"""

import pytest

from enums.order_status import OrderStatus
from enums.transition_actor import TransitionActor
from utils.order_state_machine import (
    OrderStateMachine,
    get_next_valid_statuses,
    get_status_color,
    get_status_label,
)

FORWARD_FLOW = [
    OrderStatus.PENDING_PAYMENT,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.COMPLETED,
]


class TestTransitionTable:

    @pytest.mark.parametrize("from_status, to_status", list(zip(FORWARD_FLOW, FORWARD_FLOW[1:])))
    def test_forward_flow_allowed_for_staff(self, from_status, to_status):
        assert OrderStateMachine.is_valid_transition(from_status, to_status, TransitionActor.STAFF)

    @pytest.mark.parametrize("from_status, to_status", [
        (OrderStatus.CONFIRMED, OrderStatus.COMPLETED),
        (OrderStatus.PREPARING, OrderStatus.COMPLETED),
        (OrderStatus.CONFIRMED, OrderStatus.READY),
        (OrderStatus.PENDING_PAYMENT, OrderStatus.PREPARING),
        (OrderStatus.READY, OrderStatus.PREPARING),
    ])
    def test_skips_and_backward_moves_rejected(self, from_status, to_status):
        assert not OrderStateMachine.is_valid_transition(from_status, to_status, TransitionActor.STAFF)

    @pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_terminal_statuses_have_no_exit(self, status):
        assert OrderStateMachine.is_final_status(status)
        assert OrderStateMachine.get_valid_transitions(status) == []

    @pytest.mark.parametrize("status", FORWARD_FLOW[:-1])
    def test_staff_can_cancel_any_open_order(self, status):
        assert OrderStateMachine.is_valid_transition(status, OrderStatus.CANCELLED, TransitionActor.STAFF)

    def test_customer_may_only_cancel_before_payment(self):
        assert OrderStateMachine.is_valid_transition(OrderStatus.PENDING_PAYMENT, OrderStatus.CANCELLED,
                                                     TransitionActor.CUSTOMER)
        for status in FORWARD_FLOW[1:-1]:
            assert not OrderStateMachine.is_valid_transition(status, OrderStatus.CANCELLED,
                                                             TransitionActor.CUSTOMER)

    def test_customer_cannot_confirm(self):
        assert not OrderStateMachine.is_valid_transition(OrderStatus.PENDING_PAYMENT, OrderStatus.CONFIRMED,
                                                         TransitionActor.CUSTOMER)

    def test_gateway_limited_to_payment_outcomes(self):
        allowed = OrderStateMachine.get_valid_transitions(OrderStatus.PENDING_PAYMENT,
                                                          TransitionActor.PAYMENT_GATEWAY)
        assert allowed == [OrderStatus.CONFIRMED, OrderStatus.CANCELLED]
        assert OrderStateMachine.get_valid_transitions(OrderStatus.CONFIRMED,
                                                       TransitionActor.PAYMENT_GATEWAY) == []

    def test_graph_is_acyclic(self):
        # depth-first walk; revisiting a status on the current path would be a cycle
        def walk(status, path):
            for next_status in OrderStateMachine.get_valid_transitions(status):
                assert next_status not in path
                walk(next_status, path | {next_status})

        walk(OrderStatus.PENDING_PAYMENT, {OrderStatus.PENDING_PAYMENT})


class TestPresentation:

    def test_every_status_has_label_and_color(self):
        for status in OrderStatus:
            assert get_status_label(status)
            assert get_status_color(status).startswith("#")

    def test_next_statuses_forward_first(self):
        assert get_next_valid_statuses(OrderStatus.CONFIRMED, TransitionActor.STAFF) == [
            OrderStatus.PREPARING, OrderStatus.CANCELLED]
        assert get_next_valid_statuses(OrderStatus.CONFIRMED, TransitionActor.CUSTOMER) == []
