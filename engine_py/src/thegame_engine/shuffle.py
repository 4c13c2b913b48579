"""
Card shuffling and dealing utilities.
"""

import random
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence

from .constants import full_card_range, seed_piles
from .models import GameState, Player
from .rules import RuleConfig, initial_hand_size


def create_deck() -> List[int]:
    """Create the full deck: one card of each number from 2 to 99."""
    return full_card_range()


def shuffle_deck(deck: List[int], seed: Optional[int] = None) -> List[int]:
    """
    Shuffle a deck deterministically if seed is provided.

    Args:
        deck: List of card numbers to shuffle
        seed: Optional seed for deterministic shuffling

    Returns:
        Shuffled copy of the deck
    """
    deck_copy = deck.copy()

    if seed is not None:
        # Use deterministic shuffling with seed
        rng = random.Random(seed)
        rng.shuffle(deck_copy)
    else:
        # Use system random
        random.shuffle(deck_copy)

    return deck_copy


def deal_cards(deck: List[int], turn_order: Sequence[str], hand_size: int) -> Dict[str, List[int]]:
    """
    Deal hand_size cards from the front of the deck to each player.

    Players are served in turn order, one full hand at a time, and the dealt
    cards are removed from the deck list in place.

    Returns:
        Dictionary mapping player_id to their dealt cards
    """
    hands = {}
    for player_id in turn_order:
        hands[player_id] = deck[:hand_size]
        del deck[:hand_size]
    return hands


def deal_initial_state(
    game_id: str,
    players: Mapping[str, Player],
    turn_order: Sequence[str],
    seed: Optional[int] = None,
    rules: Optional[RuleConfig] = None
) -> GameState:
    """
    Build the opening state of a match.

    Args:
        game_id: Match identity
        players: Players keyed by id; names and host flags are kept
        turn_order: Round-robin order, its first entry acts first
        seed: Optional seed for a reproducible deal
        rules: Rule configuration, defaults to the standard rules

    Returns:
        A started GameState with sorted hands and a shuffled draw deck
    """
    deck = shuffle_deck(create_deck(), seed)
    hand_size = initial_hand_size(len(players), rules)
    hands = deal_cards(deck, turn_order, hand_size)

    dealt_players = {
        player_id: player.with_hand(hands.get(player_id, []))
        for player_id, player in players.items()
    }

    return GameState(
        game_id=game_id,
        players=dealt_players,
        piles=seed_piles(),
        deck=deck,
        turn_order=turn_order,
        current_player_id=turn_order[0],
        is_started=True,
    )


def draw_cards(state: GameState, player_id: str, count: int) -> GameState:
    """Move up to count cards from the front of the deck into a player's hand."""
    count = max(0, min(count, len(state.deck)))
    player = state.players[player_id]
    drawn = state.deck[:count]
    state = state.with_player(player.with_hand(player.hand + drawn))
    return replace(state, deck=state.deck[count:])
