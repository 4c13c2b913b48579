"""
Tests for pile legality and rule configuration.
"""

import pytest
from pydantic import ValidationError

from thegame_engine.constants import seed_piles
from thegame_engine.rules import RuleConfig, create_rules, default_rules, initial_hand_size, min_cards_per_turn
from thegame_engine.validate import has_any_legal_move, is_valid_move


def test_initial_hand_size():
    """Test hand size by player count."""
    assert initial_hand_size(1) == 7
    assert initial_hand_size(2) == 7
    assert initial_hand_size(3) == 6
    assert initial_hand_size(5) == 6


def test_min_cards_per_turn():
    """Test the minimum drops to one once the deck is empty."""
    assert min_cards_per_turn(60) == 2
    assert min_cards_per_turn(1) == 2
    assert min_cards_per_turn(0) == 1


def test_ascending_pile():
    assert is_valid_move(15, "1", {"1": 10})
    assert not is_valid_move(5, "1", {"1": 10})
    assert not is_valid_move(10, "1", {"1": 10})


def test_ascending_pile_reverse_step():
    """Test a card exactly ten below an ascending top is accepted."""
    assert is_valid_move(10, "1", {"1": 20})
    assert is_valid_move(40, "2", {"2": 50})
    assert not is_valid_move(11, "1", {"1": 20})
    assert not is_valid_move(9, "1", {"1": 20})


def test_descending_pile():
    assert is_valid_move(40, "3", {"3": 50})
    assert not is_valid_move(55, "3", {"3": 50})
    assert not is_valid_move(50, "4", {"4": 50})


def test_descending_pile_reverse_step():
    """Test a card exactly ten above a descending top is accepted."""
    assert is_valid_move(60, "3", {"3": 50})
    assert is_valid_move(90, "4", {"4": 80})
    assert not is_valid_move(61, "3", {"3": 50})


def test_unknown_pile_is_never_legal():
    assert not is_valid_move(50, "5", {"5": 1})
    assert not is_valid_move(50, "1", {})


def test_every_card_fits_seed_piles():
    """Test any card can open on fresh piles."""
    piles = seed_piles()
    for card in range(2, 100):
        assert all(is_valid_move(card, pile_id, piles) for pile_id in piles)


def test_has_any_legal_move():
    piles = {"1": 50, "2": 50, "3": 4, "4": 4}
    assert not has_any_legal_move([5], piles)
    assert has_any_legal_move([5, 51], piles)
    assert has_any_legal_move([40], piles)  # ten below 50
    assert not has_any_legal_move([], piles)


def test_rule_config_defaults():
    assert default_rules.min_players == 2
    assert default_rules.max_players == 5
    assert default_rules.initial_hand_size(2) == 7
    assert default_rules.min_cards_to_end_turn(0) == 1


def test_rule_config_rejects_max_below_min():
    """Test max_players cannot be set below min_players."""
    with pytest.raises(ValidationError):
        RuleConfig(min_players=4, max_players=3)


def test_create_rules_overrides():
    rules = create_rules(max_players=3, hand_size_large_game=5)
    assert rules.max_players == 3
    assert rules.initial_hand_size(3) == 5
    assert initial_hand_size(3, rules) == 5
    # The defaults are left alone
    assert default_rules.max_players == 5
    assert initial_hand_size(3) == 6


def test_validate_player_count():
    assert not default_rules.validate_player_count(1)
    assert default_rules.validate_player_count(2)
    assert default_rules.validate_player_count(5)
    assert not default_rules.validate_player_count(6)
