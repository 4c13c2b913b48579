"""
Tests for the turn controller.
"""

from dataclasses import replace

from thegame_engine.constants import PILE_IDS, WINNER_ALL, seed_piles
from thegame_engine.engine import end_turn, play_card, return_to_lobby, start_match
from thegame_engine.errors import (
    ALREADY_STARTED,
    GAME_OVER,
    INVALID_MOVE,
    MINIMUM_NOT_MET,
    NOT_ENOUGH_PLAYERS,
    NOT_HOST,
    NOT_OVER,
    NOT_STARTED,
    NOT_YOUR_TURN,
    OWNERSHIP_MISMATCH,
)
from thegame_engine.membership import create_lobby, join_match
from thegame_engine.validate import can_end_turn, is_valid_move


def _lobby(*guests):
    state = create_lobby("100000", "carol", "Carol")
    for guest in guests:
        state = join_match(state, guest).state
    return state


def test_start_match():
    """Test starting deals hands and orders turns by player id."""
    result = start_match(_lobby("alice", "bob"), "carol", seed=11)

    assert result.success
    state = result.state
    assert state.is_started
    assert state.turn_order == ("alice", "bob", "carol")
    assert state.current_player_id == "alice"
    assert all(len(player.hand) == 6 for player in state.players.values())
    assert state.players["carol"].is_host
    assert state.check_invariants() == []


def test_start_match_refusals():
    lobby = _lobby("alice")
    assert start_match(lobby, "alice").error_code == NOT_HOST
    assert start_match(_lobby(), "carol").error_code == NOT_ENOUGH_PLAYERS

    started = start_match(lobby, "carol").state
    result = start_match(started, "carol")
    assert result.error_code == ALREADY_STARTED
    assert result.state is started


def test_play_card(make_state):
    state = make_state({"a": [10, 20], "b": [30]}, deck=[40, 50])

    result = play_card(state, "a", 20, "3", 0)

    assert result.success
    new_state = result.state
    assert new_state.players["a"].hand == (10,)
    assert new_state.piles["3"] == 20
    assert new_state.last_played_pile_id == "3"
    assert new_state.last_played_cards_count == 1
    assert new_state.current_player_id == "a"
    # The input is never modified
    assert state.players["a"].hand == (10, 20)
    assert state.piles["3"] == 100


def test_play_card_refusals(make_state):
    state = make_state({"a": [10, 20], "b": [30]}, piles={"1": 15}, deck=[40])

    wrong_turn = play_card(state, "b", 30, "1", 0)
    assert wrong_turn.error_code == NOT_YOUR_TURN
    assert wrong_turn.state is state

    assert play_card(state, "a", 30, "1", 0).error_code == OWNERSHIP_MISMATCH
    assert play_card(state, "a", 10, "1", 0).error_code == INVALID_MOVE
    assert play_card(state, "a", 10, "9", 0).error_code == INVALID_MOVE


def test_play_card_before_start_and_after_end(make_state):
    assert play_card(_lobby("alice"), "carol", 10, "1", 0).error_code == NOT_STARTED

    over = make_state({"a": [10], "b": [20]}, deck=[30])
    over = replace(over, is_over=True)
    assert play_card(over, "a", 10, "1", 0).error_code == GAME_OVER


def test_end_turn_requires_minimum(make_state):
    state = make_state({"a": [10, 20], "b": [30]}, deck=[40])
    result = end_turn(state, "a", 1)
    assert result.error_code == MINIMUM_NOT_MET
    assert result.state is state


def test_end_turn_refills_and_advances(make_state):
    """Test the hand is refilled to size and the next player is up."""
    state = make_state({"a": [10, 20, 30], "b": [40]}, deck=[50, 60, 70, 80, 90, 91, 92, 93])
    state = play_card(state, "a", 10, "1", 0).state
    state = play_card(state, "a", 20, "1", 1).state

    result = end_turn(state, "a", 2)

    assert result.success
    new_state = result.state
    assert new_state.players["a"].hand == (30, 50, 60, 70, 80, 90, 91)
    assert new_state.deck == (92, 93)
    assert new_state.current_player_id == "b"
    assert new_state.last_played_pile_id is None
    assert new_state.last_played_cards_count == 0


def test_end_turn_draw_limited_by_deck(make_state):
    state = make_state({"a": [30], "b": [40]}, deck=[50])
    result = end_turn(state, "a", 2)
    assert result.state.players["a"].hand == (30, 50)
    assert result.state.deck == ()


def test_end_turn_with_empty_deck_needs_one_play(make_state):
    state = make_state({"a": [30], "b": [40]})
    assert end_turn(state, "a", 0).error_code == MINIMUM_NOT_MET
    assert end_turn(state, "a", 1).success


def test_turn_wraps_around(make_state):
    state = make_state({"a": [10], "b": [20], "c": [30]}, deck=[40, 50], current="c")
    assert end_turn(state, "c", 2).state.current_player_id == "a"


def test_empty_hand_player_keeps_their_turn(make_state):
    """Test a player with no cards is not skipped."""
    state = make_state({"a": [10], "b": [], "c": [30]})
    result = end_turn(state, "a", 1)
    assert result.state.current_player_id == "b"
    assert not result.state.is_over


def test_end_turn_checks_next_player(make_state):
    """Test the player receiving the turn loses if they cannot move."""
    state = make_state({"a": [60], "b": [5]}, piles={"1": 50, "2": 50, "3": 4, "4": 4}, deck=[70])
    result = end_turn(state, "a", 2)
    assert result.success
    assert result.state.is_over
    assert result.state.winner_id is None


def test_return_to_lobby(make_state):
    state = make_state({"a": [10], "b": [20]}, deck=[30], piles={"1": 44})
    over = play_card(state, "a", 10, "3", 0).state
    over = replace(over, is_over=True, winner_id=WINNER_ALL)

    assert return_to_lobby(state, "a").error_code == NOT_OVER
    assert return_to_lobby(over, "b").error_code == NOT_HOST

    result = return_to_lobby(over, "a")
    assert result.success
    lobby = result.state
    assert lobby.phase == "lobby"
    assert lobby.game_id == over.game_id
    assert set(lobby.players) == {"a", "b"}
    assert all(player.hand == () for player in lobby.players.values())
    assert lobby.players["a"].is_host
    assert dict(lobby.piles) == seed_piles()
    assert lobby.deck == ()
    assert lobby.turn_order == ()
    assert lobby.current_player_id == "a"
    assert lobby.winner_id is None


def _first_legal_play(state):
    for card in state.current_player.hand:
        for pile_id in PILE_IDS:
            if is_valid_move(card, pile_id, state.piles):
                return card, pile_id
    return None


def test_cards_are_conserved_through_a_game():
    """Test every play consumes exactly one card and nothing is duplicated."""
    state = start_match(_lobby("alice", "bob"), "carol", seed=2024).state
    turn_order = state.turn_order
    played = 0

    for _ in range(300):
        if state.is_over:
            break
        acting = state.current_player_id
        if can_end_turn(state, played):
            state = end_turn(state, acting, played).state
            played = 0
        else:
            move = _first_legal_play(state)
            if move is None:
                break
            remaining = len(state.cards_in_play())
            state = play_card(state, acting, move[0], move[1], played).state
            played += 1
            assert len(state.cards_in_play()) == remaining - 1

        assert state.check_invariants() == []
        assert state.turn_order == turn_order

    assert len(state.cards_in_play()) < 98
