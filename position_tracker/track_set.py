"""Track-set reconciliation: match a frame of observations against the tracks.

Let ``DIFF = n_tracks - n_observations``:

  DIFF == 0   balanced: match, shift each assigned observation into its track
  DIFF  > 0   shrink:   pad observations with blind rows, drop the tracks
                        that end up matched to them
  DIFF  < 0   grow:     pad tracks with blind slots, observations matched to
                        those slots start new tracks

Each branch computes the complete next state into fresh arrays and hands it
to ``TrackStore.commit``; nothing is written to the store before the
assignment has been validated.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from .association import build_cost_matrix, solve_assignment
from .config import TrackerConfig
from .errors import InternalInconsistency
from .history import TrackStore, lowest_unused_ids, seed_history, shift_history
from .predictor import predict

logger = logging.getLogger(__name__)


class Branch(Enum):
    FIRST_FRAME = "first_frame"
    BALANCED = "balanced"
    SHRINK = "shrink"
    GROW = "grow"
    IDLE = "idle"          # no tracks and no observations


@dataclass
class FrameReport:
    """What one reconciliation did to the track set."""
    branch: Branch
    n_observations: int
    assignment: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))
    created_ids: List[int] = field(default_factory=list)
    removed_ids: List[int] = field(default_factory=list)

    def __repr__(self):
        return (f"FrameReport({self.branch.value}, obs={self.n_observations}, "
                f"created={self.created_ids}, removed={self.removed_ids})")


class TrackSetManager:
    """Owns the track store and applies one frame of observations at a time."""

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig()
        self.store = TrackStore(depth=self.config.history_depth,
                                dtype=self.config.np_dtype)

    def _blind(self, n: int) -> np.ndarray:
        return np.full((n, 2), self.config.blind_value, dtype=self.store.dtype)

    def _match(self, history: np.ndarray, freshness: np.ndarray,
               observations: np.ndarray) -> np.ndarray:
        predicted = predict(history, freshness)
        cost = build_cost_matrix(predicted, observations)
        return solve_assignment(cost, self.config.solver)

    def reconcile(self, observations: np.ndarray) -> FrameReport:
        """Apply one frame; ``observations`` is an Mx2 array (M may be 0)."""
        observations = np.asarray(observations, dtype=self.store.dtype).reshape(-1, 2)
        n_tracks = len(self.store)
        n_obs = len(observations)

        if n_tracks == 0:
            if n_obs == 0:
                return FrameReport(Branch.IDLE, 0)
            self.store.initialize_first_frame(observations)
            created = self.store.ids.tolist()
            logger.info("First frame: created tracks %s", created)
            return FrameReport(Branch.FIRST_FRAME, n_obs,
                               assignment=np.arange(n_obs, dtype=np.int64),
                               created_ids=created)

        diff = n_tracks - n_obs
        logger.debug("Reconciling %d tracks against %d observations (DIFF=%d)",
                     n_tracks, n_obs, diff)
        if diff == 0:
            return self._balanced(observations)
        if diff > 0:
            return self._shrink(observations, diff)
        return self._grow(observations, -diff)

    def _balanced(self, observations: np.ndarray) -> FrameReport:
        store = self.store
        assignment = self._match(store.history, store.freshness, observations)

        positions = np.empty_like(observations)
        positions[assignment] = observations

        store.commit(store.ids.copy(),
                     shift_history(store.history, positions),
                     store.freshness + 1)
        return FrameReport(Branch.BALANCED, len(observations), assignment=assignment)

    def _shrink(self, observations: np.ndarray, diff: int) -> FrameReport:
        store = self.store
        n_obs = len(observations)
        padded = np.vstack([observations, self._blind(diff)])
        assignment = self._match(store.history, store.freshness, padded)

        # Tracks matched to blind rows are dropped
        removed = np.sort(assignment[n_obs:])
        keep = np.ones(len(store), dtype=bool)
        keep[removed] = False

        positions = np.empty_like(padded)
        positions[assignment] = padded
        history = shift_history(store.history, positions)

        removed_ids = store.ids[removed].tolist()
        store.commit(store.ids[keep], history[keep], store.freshness[keep] + 1)
        logger.info("Removed tracks %s", removed_ids)
        return FrameReport(Branch.SHRINK, n_obs, assignment=assignment,
                           removed_ids=removed_ids)

    def _grow(self, observations: np.ndarray, n_new: int) -> FrameReport:
        store = self.store
        n_tracks = len(store)
        depth = store.depth

        # Temporary slots: blind history, predicted as freshness 1
        blind_history = seed_history(self._blind(n_new), depth)
        padded_history = np.concatenate([store.history, blind_history])
        padded_freshness = np.concatenate(
            [store.freshness, np.ones(n_new, dtype=np.int64)])
        assignment = self._match(padded_history, padded_freshness, observations)

        claimed = np.flatnonzero(assignment >= n_tracks)
        if len(claimed) != n_new:
            logger.error("Grow branch: %d observations claimed by new slots, "
                         "expected %d (assignment %s)",
                         len(claimed), n_new, assignment.tolist())
            raise InternalInconsistency(
                f"{len(claimed)} observations claimed by new tracks, expected {n_new}")

        positions = np.empty_like(observations)
        positions[assignment] = observations

        new_ids = lowest_unused_ids(store.ids, n_new)
        ids = np.concatenate([store.ids, np.asarray(new_ids, dtype=np.int64)])

        # New tracks start with their own observation in every slot
        history = np.concatenate(
            [store.history, seed_history(positions[n_tracks:], depth)])
        history = shift_history(history, positions)
        freshness = np.concatenate(
            [store.freshness, np.zeros(n_new, dtype=np.int64)]) + 1

        store.commit(ids, history, freshness)
        logger.info("Created tracks %s", new_ids)
        return FrameReport(Branch.GROW, len(observations), assignment=assignment,
                           created_ids=new_ids)
