# engine_py/src/thegame_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class CommitFailedError(GameError):
    """Raised when a commit keeps losing compare-and-swap races."""
    def __init__(self, match_id: str, attempts: int):
        self.match_id = match_id
        self.attempts = attempts
        super().__init__(COMMIT_FAILED, f"Commit to match {match_id} failed after {attempts} attempts")


# Specific error codes
MATCH_NOT_FOUND = "MATCH_NOT_FOUND"
MATCH_FULL = "MATCH_FULL"
MATCH_EXISTS = "MATCH_EXISTS"
ALREADY_STARTED = "ALREADY_STARTED"
NOT_STARTED = "NOT_STARTED"
GAME_OVER = "GAME_OVER"
NOT_OVER = "NOT_OVER"
NOT_HOST = "NOT_HOST"
NOT_YOUR_TURN = "NOT_YOUR_TURN"
NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
OWNERSHIP_MISMATCH = "OWNERSHIP_MISMATCH"
INVALID_MOVE = "INVALID_MOVE"
MINIMUM_NOT_MET = "MINIMUM_NOT_MET"
INVALID_NAME = "INVALID_NAME"
NO_CARD_SELECTED = "NO_CARD_SELECTED"
COMMIT_FAILED = "COMMIT_FAILED"
INTERNAL_ERROR = "INTERNAL_ERROR"
