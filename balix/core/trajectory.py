"""
Trajectory: an ordered record of (time, MotionState) samples.

Times are non-decreasing. Samples hold copies of the states they were given,
so later integration of the source state does not alter the record.
"""

import logging
from dataclasses import dataclass
from typing import Iterator

import numpy as np
from numpy.typing import NDArray

from .math_utils import vector_lerp
from .state import MotionState

logger = logging.getLogger(__name__)


@dataclass
class TrajectorySample:
    t: float
    state: MotionState

    @property
    def position(self) -> NDArray[np.float64]:
        return self.state.linear.position


class Trajectory:
    """
    Time-ordered motion samples.

    Args:
        capacity: Maximum number of samples (None = unbounded)
    """

    def __init__(self, capacity: int | None = None):
        self.capacity = capacity
        self.samples: list[TrajectorySample] = []

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[TrajectorySample]:
        return iter(self.samples)

    def __getitem__(self, index: int) -> TrajectorySample:
        return self.samples[index]

    def add_sample(self, t: float, state: MotionState) -> bool:
        """
        Append a copy of ``state`` at time t.

        Returns:
            False if the trajectory is full or t precedes the last sample
        """
        if self.capacity is not None and len(self.samples) >= self.capacity:
            logger.debug("Trajectory full (%d samples)", self.capacity)
            return False
        if self.samples and t < self.samples[-1].t:
            logger.debug("Trajectory sample at t=%.4f precedes t=%.4f",
                         t, self.samples[-1].t)
            return False
        self.samples.append(TrajectorySample(float(t), state.copy()))
        return True

    def clear(self) -> None:
        self.samples.clear()

    def copy(self) -> "Trajectory":
        out = Trajectory(self.capacity)
        out.samples = [TrajectorySample(s.t, s.state.copy()) for s in self.samples]
        return out

    @property
    def duration(self) -> float:
        if not self.samples:
            return 0.0
        return self.samples[-1].t - self.samples[0].t

    def times(self) -> NDArray[np.float64]:
        return np.array([s.t for s in self.samples])

    def positions(self) -> NDArray[np.float64]:
        """(N, 3) array of sample positions."""
        if not self.samples:
            return np.zeros((0, 3))
        return np.array([s.state.linear.position for s in self.samples])

    def speeds(self) -> NDArray[np.float64]:
        """Speed |v| of every sample."""
        return np.array([np.linalg.norm(s.state.linear.velocity) for s in self.samples])

    def sample_position(self, t: float) -> NDArray[np.float64] | None:
        """
        Position at time t by linear interpolation.

        Times before the first or after the last sample clamp to the end
        samples. Returns None for an empty trajectory.
        """
        if not self.samples:
            return None
        first, last = self.samples[0], self.samples[-1]
        if t <= first.t:
            return first.position.copy()
        if t >= last.t:
            return last.position.copy()

        times = self.times()
        i = int(np.searchsorted(times, t, side="right"))
        s0 = self.samples[i - 1]
        s1 = self.samples[i]
        span = s1.t - s0.t
        if span <= 0.0:
            return s1.position.copy()
        return vector_lerp(s0.position, s1.position, (t - s0.t) / span)

    def to_string(self, max_samples: int | None = None) -> str:
        """Human-readable dump, one line per sample."""
        lines = [f"Trajectory ({len(self.samples)} samples)"]
        shown = self.samples if max_samples is None else self.samples[:max_samples]
        for i, s in enumerate(shown):
            p = s.state.linear.position
            v = s.state.linear.velocity
            lines.append(
                f"[{i:03d}] t={s.t:.3f} "
                f"pos=({p[0]:.3f}, {p[1]:.3f}, {p[2]:.3f}) "
                f"vel=({v[0]:.3f}, {v[1]:.3f}, {v[2]:.3f}) "
                f"speed={np.linalg.norm(v):.3f}"
            )
        if max_samples is not None and len(self.samples) > max_samples:
            lines.append(f"... {len(self.samples) - max_samples} more")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_string(max_samples=10)
