"""
Unit tests for the order status state machine
"""
import itertools

import pytest

from flowershop.domain.errors import InvalidTransition
from flowershop.domain.status import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    OrderStatus,
    TransitionRecord,
    is_terminal,
    transition,
    valid_next,
)

EDGES = {
    ("pending", "confirmed"),
    ("pending", "cancelled"),
    ("confirmed", "processing"),
    ("confirmed", "cancelled"),
    ("processing", "shipped"),
    ("processing", "cancelled"),
    ("shipped", "delivered"),
}

ALL_PAIRS = list(itertools.product([s.value for s in OrderStatus], repeat=2))


class TestTransition:
    """Every (current, requested) pair either yields a record or InvalidTransition"""

    def test_all_36_pairs_covered(self):
        assert len(ALL_PAIRS) == 36

    @pytest.mark.parametrize("current,requested", ALL_PAIRS)
    def test_pair_is_total(self, current, requested):
        if (current, requested) in EDGES:
            record = transition(current, requested)
            assert record == TransitionRecord(OrderStatus(current), OrderStatus(requested))
        else:
            with pytest.raises(InvalidTransition) as exc:
                transition(current, requested)
            assert exc.value.current == current
            assert exc.value.requested == requested
            assert exc.value.valid_next == valid_next(current)

    @pytest.mark.parametrize("status", [s.value for s in OrderStatus])
    def test_same_state_is_rejected(self, status):
        with pytest.raises(InvalidTransition):
            transition(status, status)

    def test_skipping_steps_is_rejected(self):
        with pytest.raises(InvalidTransition) as exc:
            transition("pending", "shipped")

        assert exc.value.to_dict() == {
            "code": "invalid_transition",
            "message": exc.value.message,
            "current": "pending",
            "requested": "shipped",
            "valid_next": ["confirmed", "cancelled"],
        }

    def test_accepts_enum_members(self):
        record = transition(OrderStatus.SHIPPED, OrderStatus.DELIVERED)
        assert record.previous_status is OrderStatus.SHIPPED
        assert record.new_status is OrderStatus.DELIVERED


class TestGraph:
    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
        assert is_terminal("delivered")
        assert not is_terminal("shipped")

    @pytest.mark.parametrize("status", ["delivered", "cancelled"])
    def test_terminal_has_no_exits(self, status):
        assert valid_next(status) == []
        with pytest.raises(InvalidTransition) as exc:
            transition(status, "pending")
        assert "terminal" in exc.value.message

    def test_graph_matches_edges(self):
        edges = {(a.value, b.value) for a, nxt in ALLOWED_TRANSITIONS.items() for b in nxt}
        assert edges == EDGES

    def test_valid_next_is_stable_order(self):
        assert valid_next("processing") == ["shipped", "cancelled"]
