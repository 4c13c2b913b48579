"""
WebSocket event models and validation.
"""

import time
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

from .. import errors
from ..constants import HIGHEST_CARD, LOWEST_CARD


class EventType(str, Enum):
    """Inbound event types."""
    CREATE = "create"
    JOIN = "join"
    RENAME = "rename"
    START = "start"
    PLAY = "play"
    END_TURN = "end_turn"
    LEAVE = "leave"
    RETURN_TO_LOBBY = "return_to_lobby"
    RESET = "reset"
    REQUEST_STATE = "request_state"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    WELCOME = "welcome"
    STATE_FULL = "state_full"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Error codes for client events."""
    INVALID_EVENT = "INVALID_EVENT"
    MATCH_NOT_FOUND = errors.MATCH_NOT_FOUND
    MATCH_FULL = errors.MATCH_FULL
    MATCH_EXISTS = errors.MATCH_EXISTS
    ALREADY_STARTED = errors.ALREADY_STARTED
    NOT_STARTED = errors.NOT_STARTED
    GAME_OVER = errors.GAME_OVER
    NOT_OVER = errors.NOT_OVER
    NOT_HOST = errors.NOT_HOST
    NOT_YOUR_TURN = errors.NOT_YOUR_TURN
    NOT_ENOUGH_PLAYERS = errors.NOT_ENOUGH_PLAYERS
    PLAYER_NOT_FOUND = errors.PLAYER_NOT_FOUND
    OWNERSHIP_MISMATCH = errors.OWNERSHIP_MISMATCH
    INVALID_MOVE = errors.INVALID_MOVE
    MINIMUM_NOT_MET = errors.MINIMUM_NOT_MET
    INVALID_NAME = errors.INVALID_NAME
    NO_CARD_SELECTED = errors.NO_CARD_SELECTED
    COMMIT_FAILED = errors.COMMIT_FAILED
    INTERNAL = errors.INTERNAL_ERROR


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    type: EventType


class CreateEvent(BaseEvent):
    """Open a new lobby."""
    type: EventType = EventType.CREATE
    name: Optional[str] = Field(default=None, min_length=1, max_length=30)


class JoinEvent(BaseEvent):
    """Join an existing lobby."""
    type: EventType = EventType.JOIN
    match_id: str = Field(..., min_length=1, max_length=50)
    name: Optional[str] = Field(default=None, min_length=1, max_length=30)


class RenameEvent(BaseEvent):
    """Change display name."""
    type: EventType = EventType.RENAME
    name: str = Field(..., min_length=1, max_length=30)


class StartEvent(BaseEvent):
    """Start match event (host only)."""
    type: EventType = EventType.START
    seed: Optional[int] = None


class PlayEvent(BaseEvent):
    """Play one card onto a pile."""
    type: EventType = EventType.PLAY
    card: int = Field(..., ge=LOWEST_CARD, le=HIGHEST_CARD)
    pile: str = Field(..., pattern="^[1-4]$")


class EndTurnEvent(BaseEvent):
    type: EventType = EventType.END_TURN


class LeaveEvent(BaseEvent):
    type: EventType = EventType.LEAVE


class ReturnToLobbyEvent(BaseEvent):
    type: EventType = EventType.RETURN_TO_LOBBY


class ResetEvent(BaseEvent):
    type: EventType = EventType.RESET


class RequestStateEvent(BaseEvent):
    """Request full state event."""
    type: EventType = EventType.REQUEST_STATE


# Union type for all inbound events
InboundEvent = Union[
    CreateEvent,
    JoinEvent,
    RenameEvent,
    StartEvent,
    PlayEvent,
    EndTurnEvent,
    LeaveEvent,
    ReturnToLobbyEvent,
    ResetEvent,
    RequestStateEvent
]


# Outbound event models
class WelcomeEvent(BaseModel):
    """Sent once a connection is accepted, carrying the player's identity."""
    type: OutboundEventType = OutboundEventType.WELCOME
    player_id: str
    timestamp: float


class StateFullEvent(BaseModel):
    """Full state event."""
    type: OutboundEventType = OutboundEventType.STATE_FULL
    state: Dict[str, Any]
    timestamp: float


class ErrorEvent(BaseModel):
    """Error event."""
    type: OutboundEventType = OutboundEventType.ERROR
    code: ErrorCode
    message: str
    timestamp: float


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")

    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    event_map = {
        EventType.CREATE: CreateEvent,
        EventType.JOIN: JoinEvent,
        EventType.RENAME: RenameEvent,
        EventType.START: StartEvent,
        EventType.PLAY: PlayEvent,
        EventType.END_TURN: EndTurnEvent,
        EventType.LEAVE: LeaveEvent,
        EventType.RETURN_TO_LOBBY: ReturnToLobbyEvent,
        EventType.RESET: ResetEvent,
        EventType.REQUEST_STATE: RequestStateEvent,
    }

    event_class = event_map[event_type]

    try:
        return event_class(**data)
    except Exception as e:
        raise ValueError(f"Invalid event data: {str(e)}")


def create_welcome_event(player_id: str) -> WelcomeEvent:
    return WelcomeEvent(player_id=player_id, timestamp=time.time())


def create_state_full_event(state: Dict[str, Any]) -> StateFullEvent:
    """Create a full state event."""
    return StateFullEvent(state=state, timestamp=time.time())


def create_error_event(code: ErrorCode, message: str) -> ErrorEvent:
    """Create an error event."""
    return ErrorEvent(code=code, message=message, timestamp=time.time())
