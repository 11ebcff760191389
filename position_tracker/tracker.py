"""Frame-by-frame position tracker facade."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from .config import TrackerConfig
from .errors import ContractViolation
from .track_set import FrameReport, TrackSetManager

logger = logging.getLogger(__name__)

NOT_FOUND = -1


@dataclass
class Track:
    """Read-only snapshot of one live track."""
    track_id: int
    position: Tuple
    freshness: int

    def __repr__(self):
        return (f"Track({self.track_id}, pos=({self.position[0]}, "
                f"{self.position[1]}), freshness={self.freshness})")


class PositionTracker:
    """Stable identities for a varying set of 2D points.

    Usage:
        tracker = PositionTracker(preset="pixel")

        # Each frame:
        tracker.ingest_frame(xs, ys)
        blob_id = tracker.find_identity_at(xs[0], ys[0])

    Not thread-safe: serialize calls externally if several producers
    share one tracker.
    """

    def __init__(self, config: Optional[TrackerConfig] = None,
                 preset: Optional[str] = None, **overrides):
        """
        Args:
            config: Full configuration (takes precedence over preset)
            preset: Named preset, "pixel" or "subpixel"
            **overrides: Field overrides applied on top of the preset/defaults
        """
        if config is None:
            if preset is not None:
                config = TrackerConfig.preset(preset, **overrides)
            else:
                config = TrackerConfig(**overrides)
        elif overrides:
            raise ContractViolation("Pass either config or field overrides, not both")
        self.config = config
        self._manager = TrackSetManager(config)
        self.last_report: Optional[FrameReport] = None
        self._reset_stats()

    def _reset_stats(self) -> None:
        self.stats = {
            "frames_processed": 0,
            "total_tracks_created": 0,
            "total_tracks_removed": 0,
            "current_tracks": 0,
        }

    def _validate(self, xs, ys) -> np.ndarray:
        xs = np.asarray(xs)
        ys = np.asarray(ys)
        if xs.ndim != 1 or ys.ndim != 1:
            raise ContractViolation(
                f"Coordinates must be 1-D sequences, got shapes {xs.shape} and {ys.shape}")
        if len(xs) != len(ys):
            raise ContractViolation(
                f"Coordinate length mismatch: {len(xs)} xs vs {len(ys)} ys")
        if len(xs) == 0 and self.config.reject_empty_frames:
            raise ContractViolation("Empty frame")

        observations = np.column_stack([xs, ys]) if len(xs) else np.zeros((0, 2))
        if (not np.issubdtype(observations.dtype, np.number)
                or np.iscomplexobj(observations)):
            raise ContractViolation(f"Coordinates must be real numbers, got {observations.dtype}")
        if not np.all(np.isfinite(observations)):
            raise ContractViolation("Coordinates contain NaN or infinity")
        if len(observations) and np.abs(observations).max() >= self.config.blind_value:
            raise ContractViolation(
                f"Coordinates must stay below the blind value {self.config.blind_value}")
        if (np.issubdtype(self.config.np_dtype, np.integer)
                and np.any(observations != np.round(observations))):
            raise ContractViolation(
                f"Fractional coordinates for integer dtype {self.config.np_dtype}")
        return observations.astype(self.config.np_dtype)

    def ingest_frame(self, xs, ys) -> List[Track]:
        """Process one frame of detections.

        Args:
            xs: x coordinates of this frame's points
            ys: y coordinates, same length as ``xs``

        Returns:
            Live tracks after the update
        """
        observations = self._validate(xs, ys)
        report = self._manager.reconcile(observations)
        logger.debug("Frame %d: %r", self.stats["frames_processed"], report)

        self.last_report = report
        self.stats["frames_processed"] += 1
        self.stats["total_tracks_created"] += len(report.created_ids)
        self.stats["total_tracks_removed"] += len(report.removed_ids)
        self.stats["current_tracks"] = len(self)
        return self.tracks

    def ingest_interleaved(self, xys) -> List[Track]:
        """Process one frame given as ``[x0, y0, x1, y1, ...]``."""
        xys = np.asarray(xys).ravel()
        if len(xys) % 2:
            raise ContractViolation(f"Interleaved input needs an even length, got {len(xys)}")
        return self.ingest_frame(xys[0::2], xys[1::2])

    def find_identity_at(self, x, y) -> int:
        """Identity whose newest position is exactly ``(x, y)``, else ``NOT_FOUND``.

        With coincident observations the first matching track wins.
        """
        store = self._manager.store
        idx = store.index_at(x, y)
        return int(store.ids[idx]) if idx >= 0 else NOT_FOUND

    def _track(self, idx: int) -> Track:
        store = self._manager.store
        return Track(int(store.ids[idx]),
                     tuple(store.newest[idx].tolist()),
                     int(store.freshness[idx]))

    @property
    def tracks(self) -> List[Track]:
        """All live tracks; order is not stable across frames."""
        return [self._track(i) for i in range(len(self))]

    @property
    def ids(self) -> List[int]:
        return self._manager.store.ids.tolist()

    @property
    def last_assignment(self) -> np.ndarray:
        """Observation-to-track permutation of the last frame."""
        if self.last_report is None:
            return np.zeros(0, dtype=np.int64)
        return self.last_report.assignment

    def get_track(self, track_id: int) -> Optional[Track]:
        idx = self._manager.store.index_of(track_id)
        return self._track(idx) if idx >= 0 else None

    def get_positions(self) -> Dict[int, Tuple]:
        """Newest positions as ``{track_id: (x, y)}``."""
        return {t.track_id: t.position for t in self.tracks}

    def reset(self) -> None:
        """Drop all tracks; the next frame starts numbering at 0 again."""
        self._manager.store.clear()
        self.last_report = None
        self._reset_stats()

    def summary(self) -> str:
        lines = [f"PositionTracker: frame {self.stats['frames_processed']}, "
                 f"{len(self)} tracks"]
        for t in sorted(self.tracks, key=lambda t: t.track_id):
            lines.append(f"  T{t.track_id:03d} pos=({t.position[0]}, {t.position[1]}) "
                         f"freshness={t.freshness}")
        lines.append(f"  Stats: {self.stats}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._manager.store)

    def __repr__(self):
        return (f"PositionTracker(tracks={len(self)}, "
                f"frames={self.stats['frames_processed']})")
