"""Track store: identities, rolling position history and freshness.

History layout is a single array of shape ``(n_tracks, depth, 2)``; along
axis 1 samples run oldest to newest, axis 2 holds ``(x, y)``.
"""

import logging
from typing import Iterable, List

import numpy as np

from .errors import InternalInconsistency

logger = logging.getLogger(__name__)


def lowest_unused_ids(current: Iterable[int], n: int) -> List[int]:
    """Return the ``n`` smallest non-negative integers not in ``current``."""
    taken = set(int(i) for i in current)
    ids = []
    candidate = 0
    while len(ids) < n:
        if candidate not in taken:
            ids.append(candidate)
            taken.add(candidate)
        candidate += 1
    return ids


def seed_history(positions: np.ndarray, depth: int) -> np.ndarray:
    """History for fresh tracks: every slot holds the single observation."""
    positions = np.asarray(positions)
    return np.repeat(positions[:, np.newaxis, :], depth, axis=1)


def shift_history(history: np.ndarray, positions: np.ndarray) -> np.ndarray:
    """Drop the oldest sample of every track and append ``positions``.

    Returns a new buffer; ``history`` is not modified.
    """
    out = np.empty_like(history)
    out[:, :-1, :] = history[:, 1:, :]
    out[:, -1, :] = positions
    return out


class TrackStore:
    """Live track state, mutated only through the methods below."""

    def __init__(self, depth: int = 3, dtype=np.float64):
        self.depth = depth
        self.dtype = np.dtype(dtype)
        self.clear()

    def clear(self) -> None:
        self.ids = np.zeros(0, dtype=np.int64)
        self.history = np.zeros((0, self.depth, 2), dtype=self.dtype)
        self.freshness = np.zeros(0, dtype=np.int64)

    def __len__(self) -> int:
        return len(self.ids)

    @property
    def newest(self) -> np.ndarray:
        """Most recent position of every track, shape ``(n, 2)``."""
        return self.history[:, -1, :]

    def initialize_first_frame(self, observations: np.ndarray) -> None:
        """One track per observation, identities ``0..N-1``, freshness 1."""
        if len(self):
            raise InternalInconsistency(
                f"First-frame initialisation on a store holding {len(self)} tracks")
        observations = np.asarray(observations, dtype=self.dtype)
        n = len(observations)
        self.commit(np.arange(n, dtype=np.int64),
                    seed_history(observations, self.depth),
                    np.ones(n, dtype=np.int64))

    def shift_in(self, index: int, position) -> None:
        """Push one new sample into track ``index``, in place.

        Single-track form of ``shift_history``.
        """
        self.history[index, :-1, :] = self.history[index, 1:, :]
        self.history[index, -1, :] = position

    def commit(self, ids: np.ndarray, history: np.ndarray,
               freshness: np.ndarray) -> None:
        """Swap in a fully computed next state."""
        n = len(ids)
        if history.shape != (n, self.depth, 2) or freshness.shape != (n,):
            raise InternalInconsistency(
                f"Inconsistent track state: {n} ids, history {history.shape}, "
                f"freshness {freshness.shape}")
        if len(np.unique(ids)) != n:
            raise InternalInconsistency(f"Duplicate track identities: {ids.tolist()}")
        self.ids = np.asarray(ids, dtype=np.int64)
        self.history = np.asarray(history, dtype=self.dtype)
        self.freshness = np.asarray(freshness, dtype=np.int64)
        logger.debug("Committed %d tracks", n)

    def index_of(self, track_id: int) -> int:
        hits = np.flatnonzero(self.ids == track_id)
        return int(hits[0]) if len(hits) else -1

    def index_at(self, x, y) -> int:
        """Index of the first track whose newest sample is exactly ``(x, y)``."""
        newest = self.newest
        hits = np.flatnonzero((newest[:, 0] == x) & (newest[:, 1] == y))
        return int(hits[0]) if len(hits) else -1
