"""Tracker configuration and named presets."""

from dataclasses import dataclass, replace
from typing import Dict

import numpy as np

from .errors import ContractViolation

SOLVERS = ("hungarian", "scipy")


@dataclass
class TrackerConfig:
    """Per-instance tracking constants."""
    # Samples kept per track and axis (prediction uses the newest three)
    history_depth: int = 3

    # Padding coordinate for unequal track/observation counts
    blind_value: float = 1_000_000

    # Coordinate type: any numpy integer or floating dtype
    dtype: str = "float64"

    # Assignment backend: "hungarian" (built-in) or "scipy"
    solver: str = "hungarian"

    # Empty frames raise ContractViolation; if False they drop every track
    reject_empty_frames: bool = True

    def __post_init__(self):
        if self.history_depth < 3:
            raise ContractViolation(
                f"history_depth must be >= 3, got {self.history_depth}")
        if self.solver not in SOLVERS:
            raise ContractViolation(
                f"Unknown solver '{self.solver}', expected one of {SOLVERS}")

        dt = self.np_dtype
        if not (np.issubdtype(dt, np.integer) or np.issubdtype(dt, np.floating)):
            raise ContractViolation(f"Coordinate dtype must be numeric, got {dt}")

        if self.blind_value <= 0 or not np.isfinite(self.blind_value):
            raise ContractViolation(
                f"blind_value must be positive and finite, got {self.blind_value}")
        # Extrapolation needs signed values of up to 7x the blind value
        if np.issubdtype(dt, np.unsignedinteger):
            raise ContractViolation(
                f"Coordinate dtype must be signed, got {dt}")
        if np.issubdtype(dt, np.integer):
            info = np.iinfo(dt)
            if self.blind_value * 7 > info.max or -self.blind_value * 7 < info.min:
                raise ContractViolation(
                    f"blind_value {self.blind_value} too large for dtype {dt}")
        elif self.blind_value * 7 > np.finfo(dt).max:
            raise ContractViolation(
                f"blind_value {self.blind_value} too large for dtype {dt}")

    @property
    def np_dtype(self) -> np.dtype:
        return np.dtype(self.dtype)

    @classmethod
    def preset(cls, name: str, **overrides) -> "TrackerConfig":
        """Build a config from a named preset, optionally overriding fields."""
        presets = _presets()
        if name not in presets:
            raise ContractViolation(
                f"Unknown preset '{name}', expected one of {sorted(presets)}")
        return replace(presets[name], **overrides)


def _presets() -> Dict[str, TrackerConfig]:
    return {
        # Integer blob centroids, blind value of the classic blob tracker
        "pixel": TrackerConfig(dtype="int64", blind_value=9999),
        "subpixel": TrackerConfig(dtype="float64", blind_value=1e6),
    }
