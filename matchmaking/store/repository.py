"""
Repository interface for match persistence.

The engine never mutates shared collections directly. It reads a user's
match set, computes the new set, and writes it back with compare-and-swap,
retrying on conflict. Two overlapping runs for the same user therefore
cannot silently overwrite each other's results.

A generation run is authoritative for its owner: peers it no longer
produces are superseded rather than left behind as stale records.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..errors import ConcurrentUpdateError, NotFoundError
from ..models import Match

logger = logging.getLogger(__name__)


class Repository(ABC):
    """
    Minimal key-value interface expected from the storage collaborator.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        pass

    @abstractmethod
    def compare_and_swap(self, key: str, expected: Optional[Any], new: Any) -> bool:
        """
        Store ``new`` only if the current value equals ``expected``; report success.

        ``expected`` is the value last read with ``get`` (``None`` for a missing
        key). Backends that cannot compare values may compare a version token
        stored next to the value instead; the contract is the same.
        """
        pass


class InMemoryRepository(Repository):
    """Thread-safe in-process implementation of the Repository interface."""

    def __init__(self):
        self._data: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def compare_and_swap(self, key: str, expected: Optional[Any], new: Any) -> bool:
        with self._lock:
            if self._data.get(key) != expected:
                return False
            self._data[key] = new
            return True


MatchSet = Tuple[Match, ...]


class MatchRepository:
    """
    Per-user match storage on top of a Repository.

    Each user's matches are stored as one immutable tuple under
    ``matches:<user_id>``, ordered by score descending.

    Attributes:
        repository: Underlying key-value repository
        max_retries: Compare-and-swap attempts before giving up
    """

    def __init__(self, repository: Optional[Repository] = None, max_retries: int = 10):
        self.repository = repository or InMemoryRepository()
        self.max_retries = max_retries

    @staticmethod
    def key(user_id: str) -> str:
        return f"matches:{user_id}"

    def list(self, user_id: str) -> List[Match]:
        """All stored matches owned by a user."""
        return list(self.repository.get(self.key(user_id)) or ())

    def get(self, user_id: str, match_id: str) -> Optional[Match]:
        """A match by id, only if owned by ``user_id``."""
        for match in self.list(user_id):
            if match.id == match_id:
                return match
        return None

    def replace_pairs(
        self,
        user_id: str,
        matches: Iterable[Match],
        keep_peers: Iterable[str] = ()
    ) -> List[Match]:
        """
        Store a fresh run of matches as the owner's match set.

        A prior record for a regenerated pair is replaced and the owner's
        ``viewed``/``passed`` flags carry over to it. Records for peers absent
        from ``matches`` are dropped unless listed in ``keep_peers``.

        Args:
            user_id: Owner of the matches
            matches: Newly generated matches for this owner
            keep_peers: Peers whose existing records survive without being regenerated

        Returns:
            The stored versions of ``matches`` (with carried-over flags)
        """
        fresh = list(matches)
        for match in fresh:
            if match.user_id != user_id:
                raise ValueError(f"Match {match.id} is owned by {match.user_id}, not {user_id}")
        keep = set(keep_peers)

        stored: List[Match] = []
        dropped: List[str] = []

        def merge(current: MatchSet) -> MatchSet:
            previous = {m.matched_user_id: m for m in current}
            by_peer = {peer: m for peer, m in previous.items() if peer in keep}
            stored.clear()
            for match in fresh:
                prior = previous.get(match.matched_user_id)
                if prior is not None:
                    match = match.with_flags(viewed=prior.viewed, passed=prior.passed)
                by_peer[match.matched_user_id] = match
                stored.append(match)
            dropped[:] = sorted(set(previous) - set(by_peer))
            return _ordered(by_peer.values())

        self._update(user_id, merge)
        logger.debug(f"Stored {len(stored)} matches for {user_id}"
                     + (f", superseded {len(dropped)}" if dropped else ""))
        return list(stored)

    def update_match(self, user_id: str, match_id: str, change: Callable[[Match], Match]) -> Match:
        """
        Apply ``change`` to one of the owner's matches.

        Raises:
            NotFoundError: If the owner has no match with this id
        """
        updated: List[Match] = []

        def apply(current: MatchSet) -> MatchSet:
            updated.clear()
            result = []
            for match in current:
                if match.id == match_id:
                    match = change(match)
                    updated.append(match)
                result.append(match)
            if not updated:
                raise NotFoundError(f"Match {match_id} not found for user {user_id}")
            return tuple(result)

        self._update(user_id, apply)
        return updated[0]

    def _update(self, user_id: str, fn: Callable[[MatchSet], MatchSet]) -> None:
        key = self.key(user_id)
        for attempt in range(self.max_retries):
            current = self.repository.get(key)
            new = fn(current or ())
            if self.repository.compare_and_swap(key, current, new):
                return
            logger.debug(f"Concurrent write on {key}, retrying (attempt {attempt + 1})")
        raise ConcurrentUpdateError(
            f"Could not update {key} after {self.max_retries} attempts"
        )


def _ordered(matches: Iterable[Match]) -> MatchSet:
    return tuple(sorted(matches, key=lambda m: (-m.score, m.matched_user_id)))
