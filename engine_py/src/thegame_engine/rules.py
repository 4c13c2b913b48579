"""
Game rule configuration and validation.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import (
    INITIAL_HAND_SIZE_2_PLAYERS,
    INITIAL_HAND_SIZE_3_5_PLAYERS,
    MAX_PLAYERS,
    MIN_CARDS_TO_PLAY_PER_TURN,
    MIN_CARDS_TO_PLAY_PER_TURN_EMPTY_DECK,
    MIN_PLAYERS,
)


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    hand_size_small_game: int = Field(
        default=INITIAL_HAND_SIZE_2_PLAYERS,
        ge=1,
        description="Initial hand size when at most small_game_max_players play"
    )
    hand_size_large_game: int = Field(
        default=INITIAL_HAND_SIZE_3_5_PLAYERS,
        ge=1,
        description="Initial hand size for larger games"
    )
    small_game_max_players: int = Field(
        default=2,
        ge=1,
        description="Largest player count that still uses the small-game hand size"
    )
    min_cards_per_turn: int = Field(
        default=MIN_CARDS_TO_PLAY_PER_TURN,
        ge=1,
        description="Cards a player must play before ending a turn"
    )
    min_cards_per_turn_empty_deck: int = Field(
        default=MIN_CARDS_TO_PLAY_PER_TURN_EMPTY_DECK,
        ge=1,
        description="Minimum once the draw deck is exhausted"
    )
    min_players: int = Field(
        default=MIN_PLAYERS,
        ge=2,
        description="Minimum number of players required to start"
    )
    max_players: int = Field(
        default=MAX_PLAYERS,
        ge=2,
        description="Maximum number of players allowed in a lobby"
    )

    @field_validator('max_players')
    @classmethod
    def validate_max_players(cls, v, info):
        """Validate maximum players doesn't go below minimum."""
        min_players = info.data.get('min_players', MIN_PLAYERS)
        if v < min_players:
            raise ValueError(f'max_players ({v}) must be >= min_players ({min_players})')
        return v

    def validate_player_count(self, player_count: int) -> bool:
        """Check if a player count is valid for starting a match."""
        return self.min_players <= player_count <= self.max_players

    def initial_hand_size(self, num_players: int) -> int:
        if num_players <= self.small_game_max_players:
            return self.hand_size_small_game
        return self.hand_size_large_game

    def min_cards_to_end_turn(self, deck_size: int) -> int:
        if deck_size == 0:
            return self.min_cards_per_turn_empty_deck
        return self.min_cards_per_turn


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)


def initial_hand_size(num_players: int, rules: Optional[RuleConfig] = None) -> int:
    """7 cards for two players or fewer, 6 otherwise."""
    return (rules or default_rules).initial_hand_size(num_players)


def min_cards_per_turn(deck_size: int, rules: Optional[RuleConfig] = None) -> int:
    """2 cards per turn, dropping to 1 once the deck is empty."""
    return (rules or default_rules).min_cards_to_end_turn(deck_size)
