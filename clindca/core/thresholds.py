"""Threshold probability grid."""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np

from .errors import EmptyThresholdGrid, InvalidThresholdGrid

DEFAULT_START = 0.01
DEFAULT_STOP = 0.99
DEFAULT_STEP = 0.01


@dataclass(frozen=True)
class ThresholdGrid:
    """Strictly increasing threshold probabilities inside (0, 1).

    The grid is an immutable value built once per analysis and passed to every
    component that needs it.
    """

    values: Tuple[float, ...]

    def __post_init__(self):
        values = tuple(float(v) for v in self.values)
        if len(values) == 0:
            raise EmptyThresholdGrid("Threshold grid must contain at least one threshold")
        arr = np.asarray(values)
        if not np.all(np.isfinite(arr)):
            raise InvalidThresholdGrid("Thresholds must be finite")
        if np.any(arr <= 0.0) or np.any(arr >= 1.0):
            bad = [v for v in values if not 0.0 < v < 1.0]
            raise InvalidThresholdGrid(
                f"Thresholds must lie strictly between 0 and 1, got {bad}"
            )
        if np.any(np.diff(arr) <= 0.0):
            raise InvalidThresholdGrid("Thresholds must be distinct and strictly increasing")
        object.__setattr__(self, "values", values)

    @classmethod
    def from_range(
        cls,
        start: float = DEFAULT_START,
        stop: float = DEFAULT_STOP,
        step: float = DEFAULT_STEP,
    ) -> "ThresholdGrid":
        """Build an evenly spaced grid from ``start`` to ``stop`` inclusive."""
        if step <= 0:
            raise InvalidThresholdGrid(f"Threshold step must be positive, got {step}")
        n_steps = int(np.floor((stop - start) / step + 1e-9))
        values = np.round(start + step * np.arange(n_steps + 1), 10)
        return cls(tuple(values))

    @classmethod
    def default(cls) -> "ThresholdGrid":
        return cls.from_range(DEFAULT_START, DEFAULT_STOP, DEFAULT_STEP)

    @classmethod
    def coerce(cls, thresholds: Optional[Iterable[float]]) -> "ThresholdGrid":
        """Return ``thresholds`` as a grid, or the default grid for ``None``."""
        if thresholds is None:
            return cls.default()
        if isinstance(thresholds, ThresholdGrid):
            return thresholds
        return cls(tuple(np.asarray(list(thresholds), dtype=float)))

    def as_array(self) -> np.ndarray:
        return np.asarray(self.values, dtype=float)

    def odds(self) -> np.ndarray:
        """Odds ``pt / (1 - pt)`` at every threshold."""
        pt = self.as_array()
        return pt / (1.0 - pt)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self):
        return iter(self.values)


def threshold_odds(threshold: float) -> float:
    return threshold / (1.0 - threshold)
