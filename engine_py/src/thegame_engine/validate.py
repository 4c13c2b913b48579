"""
Move validation for card plays and turn endings.
"""

from typing import Iterable, Mapping, Optional

from .constants import REVERSE_STEP, is_ascending, is_descending
from .errors import (
    GAME_OVER,
    INVALID_MOVE,
    MINIMUM_NOT_MET,
    NOT_STARTED,
    NOT_YOUR_TURN,
    OWNERSHIP_MISMATCH,
    PLAYER_NOT_FOUND,
)
from .models import GameState
from .rules import RuleConfig, min_cards_per_turn


class ValidationResult:
    """Result of an action validation."""

    def __init__(
        self,
        valid: bool,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None
    ):
        self.valid = valid
        self.error_code = error_code
        self.error_message = error_message

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def success(cls) -> 'ValidationResult':
        """Create a successful validation result."""
        return cls(valid=True)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ValidationResult':
        """Create an error validation result."""
        return cls(valid=False, error_code=error_code, error_message=error_message)


def is_valid_move(card: int, pile_id: str, piles: Mapping[str, int]) -> bool:
    """
    Check whether a card may be placed on a pile.

    Ascending piles take any higher card, or exactly ten below the top.
    Descending piles take any lower card, or exactly ten above the top.

    Args:
        card: Card number being played
        pile_id: Target pile ("1".."4")
        piles: Current pile tops

    Returns:
        True if the move is legal; unknown piles are never legal
    """
    top = piles.get(pile_id)
    if top is None:
        return False
    if is_ascending(pile_id):
        return card > top or card == top - REVERSE_STEP
    if is_descending(pile_id):
        return card < top or card == top + REVERSE_STEP
    return False


def has_any_legal_move(hand: Iterable[int], piles: Mapping[str, int]) -> bool:
    """True if at least one card of the hand fits on at least one pile."""
    return any(
        is_valid_move(card, pile_id, piles)
        for card in hand
        for pile_id in piles
    )


def can_end_turn(
    state: GameState,
    cards_played_this_turn: int,
    rules: Optional[RuleConfig] = None
) -> bool:
    """Whether the minimum number of plays for this turn has been reached."""
    return cards_played_this_turn >= min_cards_per_turn(len(state.deck), rules)


def _validate_acting_player(state: GameState, player_id: str) -> ValidationResult:
    if not state.is_started:
        return ValidationResult.error(NOT_STARTED, "Match has not started")
    if state.is_over:
        return ValidationResult.error(GAME_OVER, "Match is over")
    if player_id not in state.players:
        return ValidationResult.error(PLAYER_NOT_FOUND, "Player not found")
    if state.current_player_id != player_id:
        return ValidationResult.error(NOT_YOUR_TURN, "Not your turn")
    return ValidationResult.success()


def validate_play(state: GameState, player_id: str, card: int, pile_id: str) -> ValidationResult:
    """Validate placing one card from the acting player's hand onto a pile."""
    result = _validate_acting_player(state, player_id)
    if not result:
        return result
    if card not in state.players[player_id].hand:
        return ValidationResult.error(OWNERSHIP_MISMATCH, f"You don't hold {card}")
    if not is_valid_move(card, pile_id, state.piles):
        return ValidationResult.error(INVALID_MOVE, f"{card} cannot be placed on pile {pile_id}")
    return ValidationResult.success()


def validate_end_turn(
    state: GameState,
    player_id: str,
    cards_played_this_turn: int,
    rules: Optional[RuleConfig] = None
) -> ValidationResult:
    """Validate ending the turn after cards_played_this_turn plays."""
    result = _validate_acting_player(state, player_id)
    if not result:
        return result
    if not can_end_turn(state, cards_played_this_turn, rules):
        required = min_cards_per_turn(len(state.deck), rules)
        return ValidationResult.error(
            MINIMUM_NOT_MET,
            f"Must play at least {required} cards before ending the turn"
        )
    return ValidationResult.success()
