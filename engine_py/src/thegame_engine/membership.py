"""
Lobby membership: joining, renaming, leaving and host reassignment.
"""

import logging
from dataclasses import replace
from typing import Dict, Optional

from .engine import EngineResult
from .errors import ALREADY_STARTED, INVALID_NAME, MATCH_FULL, PLAYER_NOT_FOUND
from .models import GameState, Player
from .rules import RuleConfig, default_rules

logger = logging.getLogger(__name__)


def default_player_name(player_id: str) -> str:
    return f"Player {player_id[:4]}"


def create_lobby(game_id: str, host_id: str, name: Optional[str] = None) -> GameState:
    """Create a fresh lobby holding only its host."""
    host = Player(id=host_id, name=name or default_player_name(host_id), is_host=True)
    return GameState(
        game_id=game_id,
        players={host_id: host},
        current_player_id=host_id,
    )


def join_match(
    state: GameState,
    player_id: str,
    name: Optional[str] = None,
    rules: Optional[RuleConfig] = None
) -> EngineResult:
    """Add a player to a lobby. Joining twice is a successful no-op."""
    rules = rules or default_rules
    if player_id in state.players:
        return EngineResult.ok(state)
    if state.is_started:
        return EngineResult.refused(state, ALREADY_STARTED, "Match already started")
    if len(state.players) >= rules.max_players:
        return EngineResult.refused(state, MATCH_FULL, "Match is full")

    player = Player(id=player_id, name=name or default_player_name(player_id))
    logger.info(f"Player {player_id} joined match {state.game_id}")
    return EngineResult.ok(state.with_player(player))


def rename_player(state: GameState, player_id: str, name: str) -> EngineResult:
    """Change a player's display name in any phase."""
    player = state.players.get(player_id)
    if player is None:
        return EngineResult.refused(state, PLAYER_NOT_FOUND, "Player not found")
    name = name.strip()
    if not name:
        return EngineResult.refused(state, INVALID_NAME, "Name cannot be empty")
    if name == player.name:
        return EngineResult.ok(state)
    return EngineResult.ok(state.with_player(replace(player, name=name)))


def _pick_new_host(state: GameState) -> str:
    if state.turn_order:
        return state.turn_order[0]
    return sorted(state.players.keys())[0]


def _assign_host(players: Dict[str, Player], host_id: str) -> Dict[str, Player]:
    return {
        player_id: replace(player, is_host=player_id == host_id)
        for player_id, player in players.items()
    }


def leave_match(state: GameState, player_id: str) -> Optional[GameState]:
    """
    Remove a player from the match.

    Args:
        state: Current match state
        player_id: The leaving player

    Returns:
        The repaired state, the same state if the player was not a member,
        or None when the last player left and the match should be deleted
    """
    leaver = state.players.get(player_id)
    if leaver is None:
        return state

    was_current = state.current_player_id == player_id
    leaver_index = state.turn_order.index(player_id) if player_id in state.turn_order else -1

    players = {pid: p for pid, p in state.players.items() if pid != player_id}
    turn_order = tuple(pid for pid in state.turn_order if pid != player_id)
    logger.info(f"Player {player_id} left match {state.game_id}")

    if not players:
        logger.info(f"Match {state.game_id} is empty and will be deleted")
        return None

    new_state = replace(state, players=players, turn_order=turn_order)

    if leaver.is_host:
        new_host_id = _pick_new_host(new_state)
        new_state = replace(new_state, players=_assign_host(players, new_host_id))
        if not new_state.is_started:
            new_state = replace(new_state, current_player_id=new_host_id)
        logger.info(f"Player {new_host_id} is now host of match {state.game_id}")

    if new_state.is_started and was_current and turn_order:
        next_index = leaver_index % len(turn_order) if leaver_index != -1 else 0
        new_state = replace(new_state, current_player_id=turn_order[next_index])

    if new_state.is_started and not new_state.is_over and len(players) < 2:
        survivor = next(iter(players)) if len(players) == 1 else None
        new_state = replace(new_state, is_over=True, winner_id=survivor)
        logger.info(f"Match {state.game_id} ended: not enough players left")

    return new_state