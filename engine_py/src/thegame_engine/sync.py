"""
Optimistic-concurrency synchronization of match documents.

All mutation of a match goes through ``Synchronizer.commit``: read the
document, run a pure transform on it, and write the result back only if the
document version is still the one that was read. A writer that loses the race
re-reads and re-runs its transform against the newer state; nobody waits on a
lock held across a transform.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable, Dict, Optional, Tuple

from pydantic import BaseModel, Field

from .errors import CommitFailedError
from .models import GameState
from .serialization import decode_state, encode_state

logger = logging.getLogger(__name__)

Transform = Callable[[Optional[GameState]], Optional[GameState]]
StateListener = Callable[[Optional[GameState]], None]
DocumentListener = Callable[[int, Optional[bytes]], None]


class SyncConfig(BaseModel):
    """Configuration for the commit protocol."""

    max_retries: int = Field(
        default=25,
        ge=1,
        description="Commit attempts before a conflict is reported to the caller"
    )


class DocumentStore(ABC):
    """Versioned key-value store holding one JSON document per match.

    Versions start at 0 for a match that never existed and increase by one on
    every successful write, deletions included.
    """

    @abstractmethod
    def read(self, match_id: str) -> Tuple[int, Optional[bytes]]:
        """Return (version, document) where document is None if absent."""

    @abstractmethod
    def compare_and_swap(self, match_id: str, expected_version: int, raw: Optional[bytes]) -> bool:
        """Write raw (None deletes) only if the version is still expected_version."""

    @abstractmethod
    def watch(self, match_id: str, listener: DocumentListener) -> int:
        """Register a listener for committed writes; returns a token."""

    @abstractmethod
    def unwatch(self, token: int) -> None:
        """Remove a listener. Unknown tokens are ignored."""


class InMemoryDocumentStore(DocumentStore):
    """Process-local document store with per-match locking.

    Deleting a match keeps a (version, None) record and its lock, so a match id
    that is created again keeps counting versions upward and subscribers never
    see a version repeat. Records live as long as the store.
    """

    def __init__(self):
        self._documents: Dict[str, Tuple[int, Optional[bytes]]] = {}
        self._match_locks = defaultdict(threading.Lock)
        self._registry_lock = threading.Lock()
        self._watchers: Dict[int, Tuple[str, DocumentListener]] = {}
        self._tokens = itertools.count(1)

    def _lock_for(self, match_id: str) -> threading.Lock:
        with self._registry_lock:
            return self._match_locks[match_id]

    def read(self, match_id: str) -> Tuple[int, Optional[bytes]]:
        with self._lock_for(match_id):
            return self._documents.get(match_id, (0, None))

    def compare_and_swap(self, match_id: str, expected_version: int, raw: Optional[bytes]) -> bool:
        with self._lock_for(match_id):
            version, _ = self._documents.get(match_id, (0, None))
            if version != expected_version:
                return False
            new_version = version + 1
            self._documents[match_id] = (new_version, raw)

        self._notify(match_id, new_version, raw)
        return True

    def put_raw(self, match_id: str, raw: Optional[bytes]) -> int:
        """Unconditionally overwrite a document; returns the new version."""
        with self._lock_for(match_id):
            version, _ = self._documents.get(match_id, (0, None))
            new_version = version + 1
            self._documents[match_id] = (new_version, raw)

        self._notify(match_id, new_version, raw)
        return new_version

    def match_ids(self):
        with self._registry_lock:
            return [match_id for match_id, (_, raw) in self._documents.items() if raw is not None]

    def watch(self, match_id: str, listener: DocumentListener) -> int:
        with self._registry_lock:
            token = next(self._tokens)
            self._watchers[token] = (match_id, listener)
            return token

    def unwatch(self, token: int) -> None:
        with self._registry_lock:
            self._watchers.pop(token, None)

    def _notify(self, match_id: str, version: int, raw: Optional[bytes]):
        with self._registry_lock:
            listeners = [listener for watched_id, listener in self._watchers.values() if watched_id == match_id]

        for listener in listeners:
            try:
                listener(version, raw)
            except Exception:
                logger.exception(f"Listener for match {match_id} failed on version {version}")


class Subscription:
    """Handle for one observer of one match.

    Deliveries are serialized per subscription and strictly increase in
    version. The listener runs while the subscription's lock is held, so it
    must not wait on another thread that is delivering to this subscription.
    """

    def __init__(self, store: DocumentStore, match_id: str, on_change: StateListener):
        self.match_id = match_id
        self._store = store
        self._on_change = on_change
        self._lock = threading.RLock()
        self._last_version = -1
        self._token: Optional[int] = None
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def _attach(self):
        self._token = self._store.watch(self.match_id, self._deliver)
        version, raw = self._store.read(self.match_id)
        self._deliver(version, raw)

    def _deliver(self, version: int, raw: Optional[bytes]):
        with self._lock:
            if not self._active or version <= self._last_version:
                return
            self._last_version = version
            self._on_change(decode_state(raw))

    def unsubscribe(self):
        with self._lock:
            self._active = False
            token, self._token = self._token, None
        if token is not None:
            self._store.unwatch(token)


class Synchronizer:
    def __init__(self, store: Optional[DocumentStore] = None, config: Optional[SyncConfig] = None):
        self.store = store or InMemoryDocumentStore()
        self.config = config or SyncConfig()

    def read(self, match_id: str) -> Optional[GameState]:
        _, raw = self.store.read(match_id)
        return decode_state(raw)

    def commit(self, match_id: str, transform: Transform) -> Optional[GameState]:
        """
        Atomically apply a transform to the shared state of one match.

        Args:
            match_id: Match to update
            transform: Pure function from the current state (None if the
                match does not exist) to the new state. Returning None
                deletes the match; returning its argument unchanged writes
                nothing.

        Returns:
            The committed state, or None if the match no longer exists

        Raises:
            CommitFailedError: If every attempt lost a concurrent write
        """
        for attempt in range(1, self.config.max_retries + 1):
            version, raw = self.store.read(match_id)
            current = decode_state(raw)
            updated = transform(current)

            if updated is current:
                return current

            new_raw = None if updated is None else encode_state(updated)
            if self.store.compare_and_swap(match_id, version, new_raw):
                if updated is None:
                    logger.info(f"Match {match_id} deleted")
                else:
                    logger.debug(f"Committed match {match_id} at version {version + 1}")
                return updated

            logger.info(f"Commit conflict on match {match_id} (attempt {attempt}), retrying")

        logger.warning(f"Giving up on match {match_id} after {self.config.max_retries} attempts")
        raise CommitFailedError(match_id, self.config.max_retries)

    def subscribe(self, match_id: str, on_change: StateListener) -> Subscription:
        """Deliver the current state now and every committed change after it."""
        subscription = Subscription(self.store, match_id, on_change)
        subscription._attach()
        return subscription
