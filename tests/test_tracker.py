"""Tests for the PositionTracker facade: scenarios and frame-level properties."""
import numpy as np
import pytest
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from position_tracker import (
    NOT_FOUND, ContractViolation, PositionTracker, TrackerConfig,
)
from position_tracker.track_set import Branch


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def tracker():
    return PositionTracker(reject_empty_frames=False)


def random_frames(n_frames=40, max_points=12, seed=0):
    """Points drifting with constant velocity; count changes between frames."""
    rng = np.random.default_rng(seed)
    frames = []
    for _ in range(n_frames):
        n = int(rng.integers(0, max_points + 1))
        pts = rng.uniform(0, 500, size=(n, 2)).round(1)
        frames.append((pts[:, 0], pts[:, 1]))
    return frames


def snapshot(tr):
    return sorted((t.track_id, t.position, t.freshness) for t in tr.tracks)


# =============================================================================
# SCENARIOS
# =============================================================================

class TestScenarios:

    def test_scenario_a_first_frame(self, tracker):
        tracks = tracker.ingest_frame([0, 10], [0, 10])
        assert len(tracks) == 2
        assert tracker.find_identity_at(0, 0) == 0
        assert tracker.find_identity_at(10, 10) == 1
        assert all(t.freshness == 1 for t in tracks)
        assert tracker.last_report.branch == Branch.FIRST_FRAME

    def test_scenario_b_second_frame(self, tracker):
        tracker.ingest_frame([0, 10], [0, 10])
        tracker.ingest_frame([1, 9], [1, 9])
        assert tracker.find_identity_at(1, 1) == 0
        assert tracker.find_identity_at(9, 9) == 1
        assert all(t.freshness == 2 for t in tracker.tracks)

    def test_scenario_c_shrink(self, tracker):
        tracker.ingest_frame([0, 10], [0, 10])
        tracker.ingest_frame([1, 9], [1, 9])
        tracker.ingest_frame([2], [2])
        assert len(tracker) == 1
        assert tracker.find_identity_at(2, 2) == 0
        assert tracker.get_track(0).freshness == 3
        assert tracker.get_track(1) is None
        assert tracker.last_report.removed_ids == [1]

    def test_scenario_d_empty_frame_then_restart(self, tracker):
        tracker.ingest_frame([0, 10], [0, 10])
        tracker.ingest_frame([1, 9], [1, 9])
        assert tracker.ingest_frame([], []) == []
        assert len(tracker) == 0
        tracker.ingest_frame([5, 6, 7], [5, 6, 7])
        assert sorted(tracker.ids) == [0, 1, 2]
        assert tracker.last_report.branch == Branch.FIRST_FRAME


# =============================================================================
# PROPERTIES
# =============================================================================

class TestProperties:

    def test_count_and_distinct_ids(self, tracker):
        for xs, ys in random_frames():
            tracker.ingest_frame(xs, ys)
            assert len(tracker) == len(xs)
            assert len(set(tracker.ids)) == len(tracker.ids)

    def test_conservation(self, tracker):
        prev = 0
        for xs, ys in random_frames(seed=1):
            tracker.ingest_frame(xs, ys)
            report = tracker.last_report
            n = len(xs)
            if prev == 0 or n == 0:
                assert len(report.created_ids) == n
                assert len(report.removed_ids) == prev
            else:
                assert len(report.created_ids) == max(0, n - prev)
                assert len(report.removed_ids) == max(0, prev - n)
            prev = n

    def test_static_input_no_churn(self, tracker):
        xs, ys = [5.0, 40.0, 80.0, 120.0], [7.0, 3.0, 60.0, 11.0]
        tracker.ingest_frame(xs, ys)
        ids = {(x, y): tracker.find_identity_at(x, y) for x, y in zip(xs, ys)}
        for _ in range(6):
            tracker.ingest_frame(xs[::-1], ys[::-1])
            for (x, y), track_id in ids.items():
                assert tracker.find_identity_at(x, y) == track_id
        assert all(t.freshness == 7 for t in tracker.tracks)

    def test_deterministic(self):
        frames = random_frames(seed=2)
        runs = []
        for _ in range(2):
            tr = PositionTracker(reject_empty_frames=False)
            states = []
            for xs, ys in frames:
                tr.ingest_frame(xs, ys)
                states.append(snapshot(tr))
            runs.append(states)
        assert runs[0] == runs[1]

    def test_moving_points_keep_identity(self):
        """Accelerating points, shuffled every frame, are followed."""
        tr = PositionTracker()
        rng = np.random.default_rng(4)
        start = np.array([[60.0 * i, 60.0 * j] for i in range(4) for j in range(2)])
        vel = rng.uniform(-2, 2, size=(8, 2))
        acc = rng.uniform(-0.2, 0.2, size=(8, 2))
        owner = {}
        for k in range(20):
            pts = start + vel * k + 0.5 * acc * k * k
            order = rng.permutation(8)
            tr.ingest_frame(pts[order, 0], pts[order, 1])
            for p in range(8):
                track_id = tr.find_identity_at(pts[p, 0], pts[p, 1])
                assert owner.setdefault(p, track_id) == track_id


# =============================================================================
# FACADE API
# =============================================================================

class TestFacade:

    def test_empty_frame_rejected_by_default(self):
        tr = PositionTracker()
        tr.ingest_frame([1, 2], [1, 2])
        with pytest.raises(ContractViolation):
            tr.ingest_frame([], [])
        assert len(tr) == 2

    def test_length_mismatch_rejected_without_mutation(self, tracker):
        tracker.ingest_frame([0, 10], [0, 10])
        before = snapshot(tracker)
        with pytest.raises(ContractViolation):
            tracker.ingest_frame([1, 2, 3], [1, 2])
        assert snapshot(tracker) == before
        assert tracker.stats["frames_processed"] == 1

    def test_non_finite_rejected(self, tracker):
        with pytest.raises(ContractViolation):
            tracker.ingest_frame([0, np.nan], [0, 1])
        assert len(tracker) == 0

    def test_blind_range_rejected(self):
        tr = PositionTracker(preset="pixel")
        with pytest.raises(ContractViolation):
            tr.ingest_frame([9999], [0])

    def test_two_dimensional_input_rejected(self, tracker):
        with pytest.raises(ContractViolation):
            tracker.ingest_frame([[0, 1]], [[0, 1]])

    def test_not_found(self, tracker):
        assert tracker.find_identity_at(1, 1) == NOT_FOUND
        tracker.ingest_frame([0], [0])
        assert tracker.find_identity_at(0.5, 0) == NOT_FOUND

    def test_interleaved_input(self, tracker):
        tracker.ingest_interleaved([0, 0, 10, 10])
        assert tracker.get_positions() == {0: (0.0, 0.0), 1: (10.0, 10.0)}
        with pytest.raises(ContractViolation):
            tracker.ingest_interleaved([1, 2, 3])

    def test_pixel_preset_integer_coordinates(self):
        tr = PositionTracker(preset="pixel")
        tr.ingest_frame([0, 100], [0, 100])
        tr.ingest_frame([2, 98], [1, 99])
        tr.ingest_frame([4, 96], [2, 98])
        track = tr.get_track(0)
        assert track.position == (4, 2)
        assert all(isinstance(v, int) for v in track.position)

    def test_duplicate_points_are_tracked(self, tracker):
        tracker.ingest_frame([3, 3], [3, 3])
        tracker.ingest_frame([3, 3], [3, 3])
        assert sorted(tracker.ids) == [0, 1]
        assert tracker.find_identity_at(3, 3) in (0, 1)

    def test_stats_and_reset(self, tracker):
        tracker.ingest_frame([0, 10], [0, 10])
        tracker.ingest_frame([0, 10, 50], [0, 10, 50])
        tracker.ingest_frame([0], [0])
        assert tracker.stats["frames_processed"] == 3
        assert tracker.stats["total_tracks_created"] == 3
        assert tracker.stats["total_tracks_removed"] == 2
        assert tracker.stats["current_tracks"] == 1
        assert "T000" in tracker.summary()
        tracker.reset()
        assert len(tracker) == 0
        assert tracker.stats["frames_processed"] == 0
        assert tracker.last_assignment.shape == (0,)

    def test_last_assignment(self, tracker):
        tracker.ingest_frame([0, 10], [0, 10])
        tracker.ingest_frame([10, 0], [10, 0])
        assert tracker.last_assignment.tolist() == [1, 0]

    def test_config_and_overrides_exclusive(self):
        with pytest.raises(ContractViolation):
            PositionTracker(config=TrackerConfig(), solver="scipy")

    def test_scipy_solver(self):
        tr = PositionTracker(solver="scipy")
        tr.ingest_frame([0, 10], [0, 10])
        tr.ingest_frame([9, 1], [9, 1])
        assert tr.find_identity_at(1, 1) == 0


class TestConfig:

    def test_defaults(self):
        cfg = TrackerConfig()
        assert cfg.history_depth == 3
        assert cfg.solver == "hungarian"

    def test_presets(self):
        assert TrackerConfig.preset("pixel").np_dtype == np.int64
        assert TrackerConfig.preset("pixel").blind_value == 9999
        assert TrackerConfig.preset("subpixel", history_depth=5).history_depth == 5

    @pytest.mark.parametrize("kwargs", [
        {"history_depth": 2},
        {"solver": "greedy"},
        {"dtype": "bool"},
        {"blind_value": -1},
        {"dtype": "int8", "blind_value": 9999},
        {"dtype": "uint16", "blind_value": 1000},
        {"dtype": "uint64"},
        {"dtype": "float16"},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ContractViolation):
            TrackerConfig(**kwargs)

    def test_unknown_preset(self):
        with pytest.raises(ContractViolation):
            TrackerConfig.preset("lidar")

    def test_deeper_history(self):
        tr = PositionTracker(history_depth=5)
        tr.ingest_frame([0], [0])
        tr.ingest_frame([1], [0])
        assert tr.get_track(0).position == (1.0, 0.0)


# =============================================================================
# COORDINATE TYPES
# =============================================================================

class TestCoordinateTypes:

    @pytest.mark.parametrize("dtype", ["int16", "int32", "int64", "float32", "float64"])
    def test_track_crossing_zero(self, dtype):
        """A track moving through the origin keeps its identity in every dtype."""
        tr = PositionTracker(dtype=dtype, blind_value=1000)
        tr.ingest_frame([10, 200], [0, 0])
        tr.ingest_frame([3, 200], [0, 0])
        tr.ingest_frame([-4, 200], [0, 0])
        tr.ingest_frame([-11, 200], [0, 0])
        assert tr.find_identity_at(-11, 0) == 0
        assert tr.find_identity_at(200, 0) == 1
        assert tr.get_track(0).position == (-11, 0)

    def test_narrow_float_shrink_and_grow(self):
        tr = PositionTracker(dtype="float16", blind_value=9000)
        tr.ingest_frame([0, 10], [0, 10])
        tr.ingest_frame([1], [1])
        assert tr.ids == [0]
        assert tr.last_report.removed_ids == [1]
        tr.ingest_frame([1, 50], [1, 50])
        assert sorted(tr.ids) == [0, 1]
        assert tr.find_identity_at(50, 50) == 1

    def test_fractional_input_rejected_for_integer_dtype(self):
        tr = PositionTracker(preset="pixel")
        with pytest.raises(ContractViolation):
            tr.ingest_frame([1.7], [2.2])
        assert len(tr) == 0
        tr.ingest_frame([2.0], [3.0])
        assert tr.find_identity_at(2, 3) == 0

    def test_complex_input_rejected(self, tracker):
        with pytest.raises(ContractViolation):
            tracker.ingest_frame(np.array([1 + 2j]), np.array([0 + 0j]))
        assert len(tracker) == 0
