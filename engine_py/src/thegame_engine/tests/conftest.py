"""
Shared fixtures for engine tests.
"""

import pytest

from thegame_engine.constants import seed_piles
from thegame_engine.models import GameState, Player
from thegame_engine.sync import InMemoryDocumentStore, Synchronizer


def _make_state(hands, piles=None, deck=(), current=None, turn_order=None, host=None, game_id="100000"):
    """Build a started match from {player_id: hand}; the first player hosts."""
    player_ids = list(hands)
    host = host or player_ids[0]
    players = {
        player_id: Player(id=player_id, name=player_id.title(), hand=tuple(hand), is_host=player_id == host)
        for player_id, hand in hands.items()
    }
    all_piles = seed_piles()
    all_piles.update(piles or {})
    return GameState(
        game_id=game_id,
        players=players,
        piles=all_piles,
        deck=tuple(deck),
        turn_order=tuple(turn_order or player_ids),
        current_player_id=current or player_ids[0],
        is_started=True,
    )


@pytest.fixture
def make_state():
    return _make_state


@pytest.fixture
def synchronizer():
    return Synchronizer(InMemoryDocumentStore())
