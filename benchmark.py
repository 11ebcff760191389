#!/usr/bin/env python3
"""
Position Tracker assignment benchmark: built-in Hungarian solver vs SciPy.

USAGE:
    python benchmark.py                   # Default sizes
    python benchmark.py --sizes 50 400    # Custom matrix sizes
    python benchmark.py --frames 50       # Full tracker frames per size
"""

import argparse
import time

import numpy as np
from scipy.optimize import linear_sum_assignment

from position_tracker import PositionTracker, build_cost_matrix, hungarian_algorithm


def time_solvers(n: int, rng: np.random.Generator, repeats: int = 3):
    pts = rng.uniform(0, 1000, size=(n, 2))
    cost = build_cost_matrix(pts, pts + rng.normal(0, 5, size=(n, 2)))

    t0 = time.perf_counter()
    for _ in range(repeats):
        assignment = hungarian_algorithm(cost)
    t_hung = (time.perf_counter() - t0) / repeats

    t0 = time.perf_counter()
    for _ in range(repeats):
        rows, cols = linear_sum_assignment(cost)
    t_scipy = (time.perf_counter() - t0) / repeats

    ours = cost[np.arange(n), assignment].sum()
    ref = cost[rows, cols].sum()
    return t_hung, t_scipy, abs(ours - ref) < 1e-6 * max(ref, 1.0)


def time_tracker(n: int, frames: int, rng: np.random.Generator) -> float:
    tracker = PositionTracker()
    pos = rng.uniform(0, 1000, size=(n, 2))
    vel = rng.uniform(-3, 3, size=(n, 2))
    t0 = time.perf_counter()
    for k in range(frames):
        pts = pos + vel * k
        order = rng.permutation(n)
        tracker.ingest_frame(pts[order, 0], pts[order, 1])
    return (time.perf_counter() - t0) / frames


def main():
    parser = argparse.ArgumentParser(description='Position Tracker assignment benchmark')
    parser.add_argument('--sizes', type=int, nargs='+', default=[10, 50, 100, 200, 400],
                        help='Matrix sizes (default: 10 50 100 200 400)')
    parser.add_argument('--frames', type=int, default=20, help='Tracker frames per size (default: 20)')
    parser.add_argument('--seed', type=int, default=42, help='Random seed (default: 42)')
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    print(f"{'N':>6} {'hungarian':>12} {'scipy':>12} {'same cost':>10} {'frame':>12}")
    print("-" * 56)
    for n in args.sizes:
        t_hung, t_scipy, same = time_solvers(n, rng)
        t_frame = time_tracker(n, args.frames, rng)
        print(f"{n:>6} {t_hung * 1e3:>10.2f}ms {t_scipy * 1e3:>10.2f}ms "
              f"{'yes' if same else 'NO':>10} {t_frame * 1e3:>10.2f}ms")


if __name__ == "__main__":
    main()
