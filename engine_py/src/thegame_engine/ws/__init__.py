"""
WebSocket server and event handling for The Game.
"""

from .events import parse_inbound_event
from .server import MatchConnection, handle_websocket

__all__ = ["MatchConnection", "handle_websocket", "parse_inbound_event"]
