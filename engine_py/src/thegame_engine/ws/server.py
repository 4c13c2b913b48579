"""
WebSocket connection handling for The Game.

Each connection drives one GameClient. State pushed by the client's
subscription is forwarded to the socket as ``state_full`` events, sanitized
so that a player only ever sees their own hand.
"""

import asyncio
import logging
from typing import Optional

import orjson
from fastapi import WebSocket, WebSocketDisconnect

from ..client import GameClient
from ..engine import EngineResult
from ..models import GameState
from ..serialization import sanitize_state
from ..sync import Synchronizer
from .events import (
    CreateEvent,
    EndTurnEvent,
    ErrorCode,
    JoinEvent,
    LeaveEvent,
    PlayEvent,
    RenameEvent,
    RequestStateEvent,
    ResetEvent,
    ReturnToLobbyEvent,
    StartEvent,
    create_error_event,
    create_state_full_event,
    create_welcome_event,
    parse_inbound_event,
)

logger = logging.getLogger(__name__)


class MatchConnection:
    """Bridges one WebSocket to one player's GameClient."""

    def __init__(self, websocket: WebSocket, player_id: str, synchronizer: Synchronizer):
        self.websocket = websocket
        self.player_id = player_id
        self._loop = asyncio.get_running_loop()
        self._outbox: "asyncio.Queue[GameState]" = asyncio.Queue()
        self.client = GameClient(player_id, synchronizer, on_state=self._on_state)

    def _on_state(self, state: GameState):
        # Subscription callbacks may fire on any thread that commits
        self._loop.call_soon_threadsafe(self._outbox.put_nowait, state)

    async def send_state(self, state: Optional[GameState] = None):
        if state is None:
            state = self.client.state
        event = create_state_full_event(sanitize_state(state, self.player_id))
        await self.websocket.send_text(event.model_dump_json())

    async def send_error(self, code: ErrorCode, message: str):
        await self.websocket.send_text(create_error_event(code, message).model_dump_json())

    async def pump_states(self):
        while True:
            state = await self._outbox.get()
            await self.send_state(state)

    async def handle_event(self, event) -> EngineResult:
        """Run an inbound event against the client."""
        client = self.client
        if isinstance(event, CreateEvent):
            return client.create_match(event.name)
        elif isinstance(event, JoinEvent):
            return client.join_match(event.match_id, event.name)
        elif isinstance(event, RenameEvent):
            return client.rename(event.name)
        elif isinstance(event, StartEvent):
            return client.start_match(event.seed)
        elif isinstance(event, PlayEvent):
            return client.play_card(event.pile, event.card)
        elif isinstance(event, EndTurnEvent):
            return client.end_turn()
        elif isinstance(event, LeaveEvent):
            return client.leave_match()
        elif isinstance(event, ReturnToLobbyEvent):
            return client.return_to_lobby()
        elif isinstance(event, ResetEvent):
            return client.reset_match()
        elif isinstance(event, RequestStateEvent):
            await self.send_state()
            return EngineResult.ok(client.state)
        else:
            raise ValueError(f"Unhandled event type: {type(event)}")

    async def handle_message(self, raw_data: str):
        try:
            event = parse_inbound_event(orjson.loads(raw_data))
        except (orjson.JSONDecodeError, ValueError) as e:
            await self.send_error(ErrorCode.INVALID_EVENT, str(e))
            return

        try:
            result = await self.handle_event(event)
        except Exception:
            logger.exception(f"Error handling {event.type.value} from {self.player_id}")
            await self.send_error(ErrorCode.INTERNAL, "Internal server error")
            return

        if not result.success:
            logger.info(f"Player {self.player_id} {event.type.value} refused: {result.error_message}")
            await self.send_error(ErrorCode(result.error_code), result.error_message)


async def handle_websocket(websocket: WebSocket, player_id: str, synchronizer: Synchronizer):
    """Serve one WebSocket connection until it closes."""
    await websocket.accept()
    connection = MatchConnection(websocket, player_id, synchronizer)
    logger.info(f"Player {player_id} connected")
    await websocket.send_text(create_welcome_event(player_id).model_dump_json())

    pump = asyncio.create_task(connection.pump_states())
    try:
        while True:
            raw_data = await websocket.receive_text()
            await connection.handle_message(raw_data)
    except WebSocketDisconnect:
        logger.info(f"Player {player_id} disconnected")
    finally:
        pump.cancel()
        # A closed connection gives up its seat, as closing the app would
        connection.client.leave_match()
