# engine_py/src/thegame_engine/outcome.py

import logging
from dataclasses import replace
from typing import Optional

from .constants import WINNER_ALL
from .models import GameState
from .rules import RuleConfig
from .validate import can_end_turn, has_any_legal_move

logger = logging.getLogger(__name__)


def detect_game_over(
    state: GameState,
    cards_played_this_turn: int,
    is_end_of_turn: bool,
    rules: Optional[RuleConfig] = None
) -> GameState:
    """
    Decide whether the match has been won or lost.

    The win (deck and every hand empty) is checked first. Otherwise the
    current player is stuck when their hand is non-empty and no card fits
    on any pile.

    At the end of a turn the current player field already names the next
    player, and being stuck is a loss outright. In the middle of a turn it is
    only a loss while the player still owes plays for this turn; a player who
    has met the minimum may simply end the turn instead.

    Args:
        state: State after the action being checked
        cards_played_this_turn: Plays made by the current player so far
        is_end_of_turn: True when called right after the turn passed on
        rules: Rule configuration, defaults to the standard rules

    Returns:
        The state marked over, or the same state if the match continues
    """
    if state.is_over:
        return state

    if not state.deck and all(not player.hand for player in state.players.values()):
        logger.info(f"Match {state.game_id} won: every card has been played")
        return replace(state, is_over=True, winner_id=WINNER_ALL)

    player = state.current_player
    if player is None:
        return state

    stuck = bool(player.hand) and not has_any_legal_move(player.hand, state.piles)
    if not stuck:
        return state

    if is_end_of_turn or not can_end_turn(state, cards_played_this_turn, rules):
        logger.info(f"Match {state.game_id} lost: {player.id} has no legal move")
        return replace(state, is_over=True, winner_id=None)

    return state
