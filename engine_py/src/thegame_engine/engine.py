"""Turn controller: pure state transitions for a running match.

Every function takes a GameState and returns an EngineResult. Refused
actions are reported through the result and leave the state untouched, since
they are routinely caused by a client acting on a stale view.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from .constants import seed_piles
from .errors import (
    ALREADY_STARTED,
    NOT_ENOUGH_PLAYERS,
    NOT_HOST,
    NOT_OVER,
)
from .models import GameState, empty_hands
from .outcome import detect_game_over
from .rules import RuleConfig, default_rules, initial_hand_size
from .shuffle import deal_initial_state, draw_cards
from .validate import validate_end_turn, validate_play

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineResult:
    success: bool
    state: GameState
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def ok(cls, state: GameState) -> 'EngineResult':
        return cls(success=True, state=state)

    @classmethod
    def refused(cls, state: GameState, error_code: str, error_message: str) -> 'EngineResult':
        return cls(success=False, state=state, error_code=error_code, error_message=error_message)


def start_match(
    state: GameState,
    acting_id: str,
    seed: Optional[int] = None,
    rules: Optional[RuleConfig] = None
) -> EngineResult:
    """Deal the opening hands. Host only; needs enough players."""
    rules = rules or default_rules
    if state.is_started:
        return EngineResult.refused(state, ALREADY_STARTED, "Match already started")
    if state.host_id != acting_id:
        return EngineResult.refused(state, NOT_HOST, "Only the host can start the match")
    if not rules.validate_player_count(len(state.players)):
        return EngineResult.refused(
            state,
            NOT_ENOUGH_PLAYERS,
            f"Need between {rules.min_players} and {rules.max_players} players"
        )

    turn_order = sorted(state.players.keys())
    new_state = deal_initial_state(state.game_id, state.players, turn_order, seed, rules)
    logger.info(f"Match {state.game_id} started with {len(turn_order)} players, {turn_order[0]} goes first")
    return EngineResult.ok(new_state)


def play_card(
    state: GameState,
    acting_id: str,
    card: int,
    pile_id: str,
    cards_played_this_turn: int,
    rules: Optional[RuleConfig] = None
) -> EngineResult:
    """
    Place one card from the acting player's hand onto a pile.

    Args:
        state: Current match state
        acting_id: Player making the play
        card: Card number to play
        pile_id: Target pile
        cards_played_this_turn: Plays already made this turn, before this one

    Returns:
        EngineResult holding the state after the play and the mid-turn
        game-over check
    """
    validation = validate_play(state, acting_id, card, pile_id)
    if not validation:
        return EngineResult.refused(state, validation.error_code, validation.error_message)

    player = state.players[acting_id]
    hand = list(player.hand)
    hand.remove(card)
    piles = dict(state.piles)
    piles[pile_id] = card
    played = cards_played_this_turn + 1

    new_state = replace(
        state.with_player(player.with_hand(hand)),
        piles=piles,
        last_played_pile_id=pile_id,
        last_played_cards_count=played,
    )
    new_state = detect_game_over(new_state, played, is_end_of_turn=False, rules=rules)
    return EngineResult.ok(new_state)


def end_turn(
    state: GameState,
    acting_id: str,
    cards_played_this_turn: int,
    rules: Optional[RuleConfig] = None
) -> EngineResult:
    """Refill the acting player's hand and pass the turn on."""
    validation = validate_end_turn(state, acting_id, cards_played_this_turn, rules)
    if not validation:
        return EngineResult.refused(state, validation.error_code, validation.error_message)

    player = state.players[acting_id]
    to_draw = max(0, initial_hand_size(len(state.players), rules) - len(player.hand))
    new_state = draw_cards(state, acting_id, to_draw)

    turn_order = new_state.turn_order
    next_player_id = turn_order[(turn_order.index(acting_id) + 1) % len(turn_order)]

    new_state = replace(
        new_state,
        current_player_id=next_player_id,
        last_played_pile_id=None,
        last_played_cards_count=0,
    )
    new_state = detect_game_over(new_state, 0, is_end_of_turn=True, rules=rules)
    return EngineResult.ok(new_state)


def return_to_lobby(state: GameState, acting_id: str) -> EngineResult:
    """Turn a finished match back into a lobby with the same players."""
    if not state.is_over:
        return EngineResult.refused(state, NOT_OVER, "Match is still running")
    host_id = state.host_id
    if host_id != acting_id:
        return EngineResult.refused(state, NOT_HOST, "Only the host can return to the lobby")

    lobby = GameState(
        game_id=state.game_id,
        players=empty_hands(state.players),
        piles=seed_piles(),
        current_player_id=host_id,
    )
    logger.info(f"Match {state.game_id} returned to lobby")
    return EngineResult.ok(lobby)
