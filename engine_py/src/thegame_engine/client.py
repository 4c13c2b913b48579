"""Client session: one player's view of a match and the actions they can take.

A GameClient keeps the latest observed state of its match, pushed by a
Synchronizer subscription, and turns each player intent into a pure transform
committed through the Synchronizer. The number of cards played in the
current turn lives here and not in the shared document.
"""

import logging
import random
import threading
from typing import Callable, List, Optional

from . import engine
from .engine import EngineResult
from .errors import (
    COMMIT_FAILED,
    INTERNAL_ERROR,
    INVALID_MOVE,
    MATCH_EXISTS,
    MATCH_NOT_FOUND,
    MINIMUM_NOT_MET,
    NO_CARD_SELECTED,
    NOT_YOUR_TURN,
    CommitFailedError,
)
from .membership import create_lobby, join_match, leave_match, rename_player
from .models import GameState
from .rules import RuleConfig, default_rules
from .sync import Subscription, Synchronizer
from .validate import can_end_turn, is_valid_move

logger = logging.getLogger(__name__)

MATCH_ID_ATTEMPTS = 10


def generate_match_id() -> str:
    return str(random.randint(100000, 999999))


class GameClient:
    def __init__(
        self,
        player_id: str,
        synchronizer: Synchronizer,
        rules: Optional[RuleConfig] = None,
        on_state: Optional[Callable[[GameState], None]] = None
    ):
        self.player_id = player_id
        self.synchronizer = synchronizer
        self.rules = rules or default_rules
        self.state = GameState()
        self.cards_played_this_turn = 0
        self.selected_card: Optional[int] = None
        self._on_state = on_state
        self._subscription: Optional[Subscription] = None
        self._lock = threading.RLock()
        self._deliveries = 0

    @property
    def match_id(self) -> str:
        return self.state.game_id

    @property
    def is_my_turn(self) -> bool:
        return self.state.is_in_progress and self.state.current_player_id == self.player_id

    # Local state -------------------------------------------------------

    def _observe(self, new_state: Optional[GameState]):
        with self._lock:
            if new_state is None:
                new_state = GameState()
            previous = self.state
            if previous.phase != new_state.phase:
                # A new deal or a return to the lobby starts counting afresh
                self.cards_played_this_turn = 0
                self.selected_card = None
            elif (
                previous.current_player_id != new_state.current_player_id
                and new_state.current_player_id == self.player_id
            ):
                self.cards_played_this_turn = 0
            self.state = new_state
            if self._on_state and new_state != previous:
                self._on_state(new_state)

    def _on_remote_change(self, new_state: Optional[GameState]):
        with self._lock:
            self._deliveries += 1
            self._observe(new_state)

    def _echo(self, committed: Optional[GameState], deliveries_before: int):
        with self._lock:
            # The subscription already reported this commit or a newer one
            if self._subscription is not None and self._deliveries != deliveries_before:
                return
            self._observe(committed)

    def _attach(self, match_id: str):
        self._detach()
        self._subscription = self.synchronizer.subscribe(match_id, self._on_remote_change)

    def _detach(self):
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.unsubscribe()

    def _reset_local(self):
        with self._lock:
            self._observe(None)
            self.cards_played_this_turn = 0
            self.selected_card = None

    # Committing --------------------------------------------------------

    def _apply(self, match_id: str, action: Callable[[GameState], EngineResult]) -> EngineResult:
        """Commit the state produced by action and report how it went."""
        results: List[Optional[EngineResult]] = []

        def transform(current: Optional[GameState]) -> Optional[GameState]:
            if current is None:
                results.append(None)
                return None
            result = action(current)
            results.append(result)
            return result.state

        deliveries_before = self._deliveries
        try:
            committed = self.synchronizer.commit(match_id, transform)
        except CommitFailedError as e:
            logger.warning(f"Player {self.player_id}: {e.message}")
            return EngineResult.refused(self.state, COMMIT_FAILED, e.message)

        self._echo(committed, deliveries_before)
        result = results[-1]
        if result is None:
            return EngineResult.refused(self.state, MATCH_NOT_FOUND, f"Match {match_id} not found")
        if not result.success:
            logger.info(f"Player {self.player_id} refused: {result.error_message}")
            return EngineResult.refused(committed, result.error_code, result.error_message)
        return EngineResult.ok(committed)

    # Lobby -------------------------------------------------------------

    def create_match(self, name: Optional[str] = None, match_id: Optional[str] = None) -> EngineResult:
        """Open a new lobby hosted by this player."""
        self._detach()
        candidates = [match_id] if match_id else [generate_match_id() for _ in range(MATCH_ID_ATTEMPTS)]

        for candidate in candidates:
            lobby = create_lobby(candidate, self.player_id, name)
            try:
                committed = self.synchronizer.commit(
                    candidate, lambda current: lobby if current is None else current
                )
            except CommitFailedError as e:
                logger.warning(f"Player {self.player_id}: {e.message}")
                return EngineResult.refused(self.state, COMMIT_FAILED, e.message)
            if committed is lobby:
                logger.info(f"Player {self.player_id} created match {candidate}")
                self._attach(candidate)
                return EngineResult.ok(self.state)

        if match_id:
            return EngineResult.refused(self.state, MATCH_EXISTS, f"Match {match_id} already exists")
        return EngineResult.refused(self.state, INTERNAL_ERROR, "Could not find a free match id")

    def join_match(self, match_id: str, name: Optional[str] = None) -> EngineResult:
        self._attach(match_id)
        result = self._apply(match_id, lambda state: join_match(state, self.player_id, name, self.rules))
        if not result.success:
            self._detach()
            self._reset_local()
        return result

    def rename(self, name: str) -> EngineResult:
        return self._apply(self.match_id, lambda state: rename_player(state, self.player_id, name))

    def start_match(self, seed: Optional[int] = None) -> EngineResult:
        return self._apply(
            self.match_id, lambda state: engine.start_match(state, self.player_id, seed, self.rules)
        )

    def return_to_lobby(self) -> EngineResult:
        return self._apply(self.match_id, lambda state: engine.return_to_lobby(state, self.player_id))

    # Turn actions ------------------------------------------------------

    def select_card(self, card: int):
        """Select a card, or clear the selection if it was already selected."""
        self.selected_card = None if self.selected_card == card else card

    def can_end_turn(self) -> bool:
        return self.is_my_turn and can_end_turn(self.state, self.cards_played_this_turn, self.rules)

    def play_card(self, pile_id: str, card: Optional[int] = None) -> EngineResult:
        card = self.selected_card if card is None else card
        if card is None:
            return EngineResult.refused(self.state, NO_CARD_SELECTED, "Select a card first")
        if not self.is_my_turn:
            return EngineResult.refused(self.state, NOT_YOUR_TURN, "Not your turn")
        if not is_valid_move(card, pile_id, self.state.piles):
            self.selected_card = None
            return EngineResult.refused(self.state, INVALID_MOVE, f"{card} cannot be placed on pile {pile_id}")

        played_before = self.cards_played_this_turn
        result = self._apply(
            self.match_id,
            lambda state: engine.play_card(state, self.player_id, card, pile_id, played_before, self.rules)
        )
        if result.success:
            self.cards_played_this_turn += 1
        self.selected_card = None
        return result

    def end_turn(self) -> EngineResult:
        if not self.is_my_turn:
            return EngineResult.refused(self.state, NOT_YOUR_TURN, "Not your turn")
        if not self.can_end_turn():
            return EngineResult.refused(self.state, MINIMUM_NOT_MET, "Play more cards before ending the turn")

        played = self.cards_played_this_turn
        return self._apply(
            self.match_id, lambda state: engine.end_turn(state, self.player_id, played, self.rules)
        )

    # Leaving -----------------------------------------------------------

    def leave_match(self) -> EngineResult:
        """Leave the match, repairing host and turn for whoever stays."""
        match_id = self.match_id
        if not match_id:
            return EngineResult.ok(self.state)

        self._detach()
        try:
            self.synchronizer.commit(match_id, lambda state: None if state is None else leave_match(state, self.player_id))
        except CommitFailedError as e:
            logger.warning(f"Player {self.player_id} could not leave: {e.message}")
            self._attach(match_id)
            return EngineResult.refused(self.state, COMMIT_FAILED, e.message)

        self._reset_local()
        return EngineResult.ok(self.state)

    def reset_match(self) -> EngineResult:
        """Drop out of the match immediately, then remove this player remotely."""
        match_id = self.match_id
        self._detach()
        self._reset_local()
        if not match_id:
            return EngineResult.ok(self.state)

        try:
            self.synchronizer.commit(match_id, lambda state: None if state is None else leave_match(state, self.player_id))
        except CommitFailedError as e:
            logger.warning(f"Player {self.player_id} could not be removed from {match_id}: {e.message}")
            return EngineResult.refused(self.state, COMMIT_FAILED, e.message)
        return EngineResult.ok(self.state)
