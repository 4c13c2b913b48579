"""The Game: synchronized turn engine for a cooperative card game."""

from .client import GameClient
from .models import GameState, Player
from .sync import InMemoryDocumentStore, Synchronizer

__all__ = ["GameClient", "GameState", "Player", "InMemoryDocumentStore", "Synchronizer"]
