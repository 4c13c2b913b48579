"""Game constants and utilities"""

from typing import Dict, List

LOWEST_CARD = 2
HIGHEST_CARD = 99
DECK_SIZE = HIGHEST_CARD - LOWEST_CARD + 1

# Pile ids are strings because they are map keys in the shared document
ASCENDING_PILES = ("1", "2")
DESCENDING_PILES = ("3", "4")
PILE_IDS = ASCENDING_PILES + DESCENDING_PILES

ASCENDING_SEED = 1
DESCENDING_SEED = 100
REVERSE_STEP = 10

INITIAL_HAND_SIZE_2_PLAYERS = 7
INITIAL_HAND_SIZE_3_5_PLAYERS = 6
MIN_CARDS_TO_PLAY_PER_TURN = 2
MIN_CARDS_TO_PLAY_PER_TURN_EMPTY_DECK = 1

MIN_PLAYERS = 2
MAX_PLAYERS = 5

# winner_id value for a shared win
WINNER_ALL = "all"


def seed_piles() -> Dict[str, int]:
    """Fresh pile tops: ascending piles at 1, descending piles at 100."""
    piles = {pile_id: ASCENDING_SEED for pile_id in ASCENDING_PILES}
    piles.update({pile_id: DESCENDING_SEED for pile_id in DESCENDING_PILES})
    return piles


def full_card_range() -> List[int]:
    return list(range(LOWEST_CARD, HIGHEST_CARD + 1))


def is_ascending(pile_id: str) -> bool:
    return pile_id in ASCENDING_PILES


def is_descending(pile_id: str) -> bool:
    return pile_id in DESCENDING_PILES
