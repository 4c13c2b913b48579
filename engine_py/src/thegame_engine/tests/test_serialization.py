"""
Tests for the match document codec and client-facing views.
"""

import orjson

from thegame_engine.constants import seed_piles
from thegame_engine.membership import create_lobby, join_match
from thegame_engine.serialization import (
    decode_state,
    encode_state,
    get_public_match_info,
    sanitize_state,
)


def test_document_round_trip(make_state):
    state = make_state({"a": [10, 20], "b": [30]}, piles={"1": 5, "3": 90}, deck=[40, 50])
    assert decode_state(encode_state(state)) == state


def test_document_uses_shared_field_names(make_state):
    """Test the stored document keeps the camelCase schema."""
    state = make_state({"a": [10], "b": [20]}, deck=[30])
    document = orjson.loads(encode_state(state))

    assert document["gameId"] == "100000"
    assert document["playerTurnOrder"] == ["a", "b"]
    assert document["currentPlayerId"] == "a"
    assert document["isGameStarted"] is True
    assert document["isGameOver"] is False
    assert document["winnerPlayerId"] is None
    assert document["lastPlayedPileIndex"] is None
    assert document["lastPlayedCardsCount"] == 0
    assert document["piles"] == {"1": 1, "2": 1, "3": 100, "4": 100}
    assert document["players"]["a"] == {"id": "a", "name": "A", "hand": [10], "isHost": True}


def test_decode_missing_document():
    assert decode_state(None) is None


def test_decode_minimal_document():
    """Test absent fields fall back to lobby defaults."""
    state = decode_state(b'{"gameId": "123456"}')
    assert state.game_id == "123456"
    assert dict(state.piles) == seed_piles()
    assert state.phase == "lobby"
    assert state.players == {}


def test_decode_malformed_documents():
    """Test documents that cannot be parsed read as no match."""
    assert decode_state(b"not json") is None
    assert decode_state(b"[1, 2, 3]") is None
    assert decode_state(b'{"players": {}}') is None
    assert decode_state(b'{"gameId": "1", "piles": {"1": 1}}') is None
    assert decode_state(b'{"gameId": "1", "deck": [100]}') is None
    assert decode_state(b'{"gameId": "1", "players": {"a": {"id": "a", "hand": [1]}}}') is None


def test_player_key_wins_over_stored_id():
    state = decode_state(b'{"gameId": "1", "players": {"a": {"id": "zzz", "isHost": true}}}')
    assert state.players["a"].id == "a"
    assert state.check_invariants() == []


def test_sanitize_shows_only_own_hand(make_state):
    state = make_state({"a": [10, 20], "b": [30]}, deck=[40, 50, 60])

    view = sanitize_state(state, "b")

    assert view["phase"] == "play"
    assert view["deckCount"] == 3
    assert "deck" not in view
    assert view["players"]["b"]["hand"] == [30]
    assert "hand" not in view["players"]["a"]
    assert view["players"]["a"]["handCount"] == 2
    assert view["players"]["a"]["isHost"] is True


def test_public_match_info():
    state = join_match(create_lobby("123456", "alice", "Alice"), "bob", "Bob").state
    info = get_public_match_info(state)
    assert info["gameId"] == "123456"
    assert info["phase"] == "lobby"
    assert info["playerCount"] == 2
    assert info["hostId"] == "alice"
