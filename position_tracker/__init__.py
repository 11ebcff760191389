"""Position Tracker: stable identities for 2D points observed frame by frame.

Per frame, each track's next position is extrapolated from its short
history, predictions are matched to observations with the Hungarian
algorithm, and tracks are created or retired when the point count changes.

Quick Start::

    from position_tracker import PositionTracker
    tracker = PositionTracker(preset="pixel")
    for xs, ys in blob_centroids:
        tracks = tracker.ingest_frame(xs, ys)
"""

__version__ = "1.0.0"

from .config import TrackerConfig
from .errors import TrackerError, ContractViolation, InternalInconsistency
from .history import TrackStore, lowest_unused_ids, seed_history, shift_history
from .predictor import extrapolate, predict
from .association import (
    build_cost_matrix,
    hungarian_algorithm,
    solve_assignment,
    validate_assignment,
)
from .track_set import Branch, FrameReport, TrackSetManager
from .tracker import NOT_FOUND, PositionTracker, Track

__all__ = [
    "__version__",
    # Facade
    "PositionTracker", "Track", "NOT_FOUND",
    # Configuration / errors
    "TrackerConfig", "TrackerError", "ContractViolation", "InternalInconsistency",
    # Track store
    "TrackStore", "lowest_unused_ids", "seed_history", "shift_history",
    # Prediction
    "extrapolate", "predict",
    # Association
    "build_cost_matrix", "hungarian_algorithm", "solve_assignment",
    "validate_assignment",
    # Reconciliation
    "Branch", "FrameReport", "TrackSetManager",
]
