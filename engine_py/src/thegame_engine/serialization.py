"""
Shared-document mapping, codec and sanitization utilities.
"""

import logging
from typing import Annotated, Any, Dict, List, Optional

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .constants import HIGHEST_CARD, LOWEST_CARD, PILE_IDS, seed_piles
from .models import GameState, Player

logger = logging.getLogger(__name__)

CardNumber = Annotated[int, Field(ge=LOWEST_CARD, le=HIGHEST_CARD)]


class _DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlayerDocument(_DocumentModel):
    """One entry of the document's players map."""
    id: str
    name: str = ""
    hand: List[CardNumber] = Field(default_factory=list)
    is_host: bool = False


class MatchDocument(_DocumentModel):
    """Logical schema of the per-match document in the shared store."""
    game_id: str
    players: Dict[str, PlayerDocument] = Field(default_factory=dict)
    piles: Dict[str, int] = Field(default_factory=seed_piles)
    deck: List[CardNumber] = Field(default_factory=list)
    player_turn_order: List[str] = Field(default_factory=list)
    current_player_id: str = ""
    last_played_cards_count: int = Field(default=0, ge=0)
    last_played_pile_index: Optional[str] = None
    is_game_started: bool = False
    is_game_over: bool = False
    winner_player_id: Optional[str] = None

    @field_validator('piles')
    @classmethod
    def validate_piles(cls, v):
        """Exactly the four pile slots must be present."""
        if sorted(v.keys()) != sorted(PILE_IDS):
            raise ValueError(f'piles must have keys {list(PILE_IDS)}')
        return v


def to_document(state: GameState) -> MatchDocument:
    return MatchDocument(
        game_id=state.game_id,
        players={
            player_id: PlayerDocument(
                id=player.id,
                name=player.name,
                hand=list(player.hand),
                is_host=player.is_host,
            )
            for player_id, player in state.players.items()
        },
        piles=dict(state.piles),
        deck=list(state.deck),
        player_turn_order=list(state.turn_order),
        current_player_id=state.current_player_id,
        last_played_cards_count=state.last_played_cards_count,
        last_played_pile_index=state.last_played_pile_id,
        is_game_started=state.is_started,
        is_game_over=state.is_over,
        winner_player_id=state.winner_id,
    )


def from_document(document: MatchDocument) -> GameState:
    # The map key is the authoritative player id
    players = {
        player_id: Player(
            id=player_id,
            name=entry.name,
            hand=entry.hand,
            is_host=entry.is_host,
        )
        for player_id, entry in document.players.items()
    }
    return GameState(
        game_id=document.game_id,
        players=players,
        piles=document.piles,
        deck=document.deck,
        turn_order=document.player_turn_order,
        current_player_id=document.current_player_id,
        last_played_cards_count=document.last_played_cards_count,
        last_played_pile_id=document.last_played_pile_index,
        is_started=document.is_game_started,
        is_over=document.is_game_over,
        winner_id=document.winner_player_id,
    )


def encode_state(state: GameState) -> bytes:
    """Serialize a state into the JSON document stored for its match."""
    return orjson.dumps(to_document(state).model_dump(by_alias=True))


def decode_state(raw: Optional[bytes]) -> Optional[GameState]:
    """
    Parse a stored document.

    Args:
        raw: Document bytes, or None if the match has no document

    Returns:
        The parsed state, or None when the document is missing or malformed
    """
    if raw is None:
        return None
    try:
        document = MatchDocument.model_validate(orjson.loads(raw))
    except (orjson.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Ignoring malformed match document: {e}")
        return None
    return from_document(document)


def sanitize_state(state: GameState, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Sanitize match state for transmission to clients.

    Args:
        state: Match state to sanitize
        viewer_id: ID of the player viewing the state (to show their cards)

    Returns:
        Sanitized state dictionary safe for JSON transmission
    """
    sanitized = {
        "gameId": state.game_id,
        "phase": state.phase,
        "piles": dict(state.piles),
        "deckCount": len(state.deck),
        "playerTurnOrder": list(state.turn_order),
        "currentPlayerId": state.current_player_id,
        "lastPlayedCardsCount": state.last_played_cards_count,
        "lastPlayedPileIndex": state.last_played_pile_id,
        "isGameStarted": state.is_started,
        "isGameOver": state.is_over,
        "winnerPlayerId": state.winner_id,
        "players": {},
    }

    for player_id, player in state.players.items():
        sanitized_player = {
            "id": player.id,
            "name": player.name,
            "isHost": player.is_host,
            "handCount": len(player.hand),
        }

        # Show full hand only to the viewer
        if player_id == viewer_id:
            sanitized_player["hand"] = list(player.hand)

        sanitized["players"][player_id] = sanitized_player

    return sanitized


def get_public_match_info(state: GameState) -> Dict[str, Any]:
    """Get public information about a match for listings."""
    return {
        "gameId": state.game_id,
        "phase": state.phase,
        "playerCount": len(state.players),
        "hostId": state.host_id,
        "players": [
            {"id": player.id, "name": player.name, "isHost": player.is_host}
            for player in state.players.values()
        ],
    }
