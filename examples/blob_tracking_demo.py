#!/usr/bin/env python3
"""Position Tracker Quick Start: follow blobs that appear, move and vanish.

Run:
    python examples/blob_tracking_demo.py

Output:
    Frame-by-frame identity changes and a final track summary.
"""
import logging

import numpy as np

from position_tracker import PositionTracker


def generate_blob_frames(n_blobs=6, n_frames=30, seed=42):
    """Integer blob centroids on bouncing paths; one blob leaves, two join."""
    rng = np.random.default_rng(seed)
    start = rng.integers(20, 620, size=(n_blobs + 2, 2))
    vel = rng.integers(-6, 7, size=(n_blobs + 2, 2))

    frames = []
    for k in range(n_frames):
        pos = np.abs(start + vel * k) % 640
        active = list(range(n_blobs))
        if k >= 10:
            active.remove(0)                 # blob 0 leaves the scene
        if k >= 20:
            active += [n_blobs, n_blobs + 1]  # two new blobs enter
        pts = pos[rng.permutation(active)]   # detector order is arbitrary
        frames.append((pts[:, 0], pts[:, 1]))
    return frames


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("Position Tracker: Quick Start Demo")
    print("=" * 50)

    tracker = PositionTracker(preset="pixel")
    for k, (xs, ys) in enumerate(generate_blob_frames()):
        tracker.ingest_frame(xs, ys)
        report = tracker.last_report
        if report.created_ids or report.removed_ids or k % 10 == 0:
            print(f"  Frame {k:3d}: {len(tracker):2d} tracks "
                  f"[{report.branch.value}] created={report.created_ids} "
                  f"removed={report.removed_ids}")

    print("-" * 50)
    print(tracker.summary())


if __name__ == "__main__":
    main()
