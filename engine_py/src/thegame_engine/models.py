"""Game models and data structures"""

from collections import Counter
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .constants import (
    ASCENDING_SEED,
    DESCENDING_SEED,
    HIGHEST_CARD,
    LOWEST_CARD,
    PILE_IDS,
    seed_piles,
)


@dataclass(frozen=True)
class Player:
    id: str
    name: str = ""
    hand: Tuple[int, ...] = ()  # card numbers, sorted ascending for display
    is_host: bool = False

    def __post_init__(self):
        object.__setattr__(self, "hand", tuple(self.hand))

    def with_hand(self, hand: Iterable[int]) -> "Player":
        return replace(self, hand=tuple(sorted(hand)))


@dataclass(frozen=True)
class GameState:
    """Canonical snapshot of one match.

    Instances are immutable: the mappings are read-only views and the
    sequences are tuples. Transforms build a new value with
    ``dataclasses.replace`` instead of editing one in place.
    """

    game_id: str = ""
    players: Mapping[str, Player] = field(default_factory=dict)
    piles: Mapping[str, int] = field(default_factory=seed_piles)
    deck: Tuple[int, ...] = ()
    turn_order: Tuple[str, ...] = ()
    current_player_id: str = ""
    last_played_cards_count: int = 0
    last_played_pile_id: Optional[str] = None  # highlights the last played pile
    is_started: bool = False
    is_over: bool = False
    winner_id: Optional[str] = None

    # The read-only mappings cannot be hashed
    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, "players", MappingProxyType(dict(self.players)))
        object.__setattr__(self, "piles", MappingProxyType(dict(self.piles)))
        object.__setattr__(self, "deck", tuple(self.deck))
        object.__setattr__(self, "turn_order", tuple(self.turn_order))

    @property
    def phase(self) -> str:
        if self.is_over:
            return "over"
        if self.is_started:
            return "play"
        return "lobby"

    @property
    def is_in_progress(self) -> bool:
        return self.is_started and not self.is_over

    @property
    def host_id(self) -> Optional[str]:
        for player_id, player in self.players.items():
            if player.is_host:
                return player_id
        return None

    @property
    def current_player(self) -> Optional[Player]:
        return self.players.get(self.current_player_id)

    def with_player(self, player: Player) -> "GameState":
        players = dict(self.players)
        players[player.id] = player
        return replace(self, players=players)

    def cards_in_play(self) -> List[int]:
        """All cards still held in the deck or in a hand."""
        cards = list(self.deck)
        for player in self.players.values():
            cards.extend(player.hand)
        return cards

    def check_invariants(self) -> List[str]:
        """Return a description of every violated invariant (empty if healthy)."""
        problems = []

        if sorted(self.piles.keys()) != sorted(PILE_IDS):
            problems.append(f"piles must have exactly keys {list(PILE_IDS)}, got {sorted(self.piles.keys())}")

        hosts = [player_id for player_id, player in self.players.items() if player.is_host]
        if len(hosts) > 1:
            problems.append(f"more than one host: {hosts}")
        if self.players and not hosts:
            problems.append("no host among players")

        for player_id, player in self.players.items():
            if player.id != player_id:
                problems.append(f"player keyed {player_id} carries id {player.id}")

        unknown = [player_id for player_id in self.turn_order if player_id not in self.players]
        if unknown:
            problems.append(f"turn order references unknown players: {unknown}")

        if self.is_started:
            if sorted(self.turn_order) != sorted(self.players.keys()):
                problems.append("turn order is not a permutation of the players")
            if not self.is_over and self.current_player_id not in self.turn_order:
                problems.append(f"current player {self.current_player_id!r} not in turn order")

            cards = self.cards_in_play()
            duplicates = sorted(card for card, count in Counter(cards).items() if count > 1)
            if duplicates:
                problems.append(f"duplicated cards: {duplicates}")
            out_of_range = sorted(card for card in cards if not LOWEST_CARD <= card <= HIGHEST_CARD)
            if out_of_range:
                problems.append(f"cards out of range: {out_of_range}")
            played = {top for top in self.piles.values() if top not in (ASCENDING_SEED, DESCENDING_SEED)}
            still_held = sorted(played.intersection(cards))
            if still_held:
                problems.append(f"cards both on a pile and held: {still_held}")

        return problems


def empty_hands(players: Mapping[str, Player]) -> Dict[str, Player]:
    return {player_id: replace(player, hand=()) for player_id, player in players.items()}
