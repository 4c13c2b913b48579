"""
Tests for the match aggregate.
"""

import pytest

from thegame_engine.models import GameState, Player


def test_state_is_immutable(make_state):
    state = make_state({"a": [10], "b": [20]}, deck=[30])
    with pytest.raises(TypeError):
        state.players["c"] = Player(id="c")
    with pytest.raises(AttributeError):
        state.is_over = True


def test_state_is_not_hashable():
    """Test hashing fails cleanly instead of deep in the mappings."""
    assert GameState.__hash__ is None
    with pytest.raises(TypeError):
        hash(GameState())


def test_equal_states_compare_equal(make_state):
    assert make_state({"a": [10], "b": [20]}) == make_state({"a": [10], "b": [20]})
    assert make_state({"a": [10], "b": [20]}) != make_state({"a": [11], "b": [20]})


def test_check_invariants_reports_problems(make_state):
    state = make_state({"a": [10, 10], "b": [20]}, turn_order=["a"], piles={"3": 20})
    problems = state.check_invariants()
    assert any("permutation" in problem for problem in problems)
    assert any("duplicated" in problem for problem in problems)
    assert any("both on a pile and held" in problem for problem in problems)
