"""
Kalman Filters (constant models).

Scalar filter for a constant quantity observed with noise:

    time update:         p ← p + q
    measurement update:  k ← p / (p + r)
                         x ← x + k·(z - x)
                         p ← (1 - k)·p

Vector filter for a constant-velocity point, per axis with shared noise:

    time update:         x ← x + v·dt,  P ← P + q
    measurement update:  K = P / (P + r)            (componentwise)
                         x_new = x + K·(z - x)
                         v ← (x_new - x) / dt
                         P ← (1 - K)·P

With r > 0 the gain stays in [0, 1), so p shrinks on every measurement and
grows by q on every time update. A vanishing innovation denominator
(p + r ≈ 0) leaves the state unchanged instead of dividing by zero.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from .constants import (
    EPS_FLOAT_ZERO,
    KALMAN_DEFAULT_DT,
    KALMAN_DEFAULT_Q,
    KALMAN_DEFAULT_R,
)
from .math_utils import as_vec3

logger = logging.getLogger(__name__)


@dataclass
class KalmanScalar:
    """
    One-dimensional Kalman filter.

    Attributes:
        x: State estimate
        p: Estimate error variance
        q: Process noise variance
        r: Measurement noise variance
        k: Last Kalman gain
    """
    x: float = 0.0
    p: float = 1.0
    q: float = KALMAN_DEFAULT_Q
    r: float = KALMAN_DEFAULT_R
    k: float = 0.0

    def reset(self, x: float = 0.0, p: float = 1.0) -> None:
        """Restart the estimate; noise parameters are kept."""
        self.x = x
        self.p = p
        self.k = 0.0

    def time_update(self) -> None:
        """Propagate uncertainty: p ← p + q."""
        self.p += self.q

    def measurement_update(self, measured: float) -> float:
        """
        Fuse a measurement.

        Args:
            measured: Observation z

        Returns:
            Updated estimate x
        """
        denom = self.p + self.r
        if abs(denom) <= EPS_FLOAT_ZERO:
            logger.debug("KalmanScalar: degenerate gain denominator, update skipped")
            self.k = 0.0
            return self.x

        self.k = self.p / denom
        self.x = self.x + self.k * (measured - self.x)
        self.p = (1.0 - self.k) * self.p
        return self.x


def _ones3() -> NDArray[np.float64]:
    return np.ones(3, dtype=np.float64)


@dataclass
class KalmanVec3:
    """
    Constant-velocity Kalman filter on 3D positions.

    Attributes:
        position: Position estimate
        velocity: Velocity estimate
        error_p: Per-axis error variance
        q: Process noise (same on every axis)
        r: Measurement noise (same on every axis)
        dt: Time between updates (s); non-positive values fall back to 0.1
    """
    position: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    velocity: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    error_p: NDArray[np.float64] = field(default_factory=_ones3)
    q: float = KALMAN_DEFAULT_Q
    r: float = KALMAN_DEFAULT_R
    dt: float = KALMAN_DEFAULT_DT

    def __post_init__(self):
        self.position = as_vec3(self.position)
        self.velocity = as_vec3(self.velocity)
        self.error_p = as_vec3(self.error_p)
        if not self.dt > 0.0:
            logger.warning("KalmanVec3: dt=%s is not positive, using %s",
                           self.dt, KALMAN_DEFAULT_DT)
            self.dt = KALMAN_DEFAULT_DT

    def time_update(self) -> None:
        """Constant-velocity projection of the estimate and its variance."""
        self.position = self.position + self.velocity * self.dt
        self.error_p = self.error_p + self.q

    def measurement_update(self, measured_pos) -> NDArray[np.float64]:
        """
        Fuse a position measurement; velocity is re-estimated from the correction.

        Returns:
            Updated position estimate (copy)
        """
        z = as_vec3(measured_pos)
        denom = self.error_p + self.r
        safe = np.abs(denom) > EPS_FLOAT_ZERO
        k = np.where(safe, self.error_p / np.where(safe, denom, 1.0), 0.0)

        x_old = self.position
        x_new = x_old + k * (z - x_old)
        self.velocity = (x_new - x_old) / self.dt
        self.position = x_new
        self.error_p = (1.0 - k) * self.error_p
        return self.position.copy()

    def project(self, future_dt: float) -> NDArray[np.float64]:
        """Position expected after ``future_dt`` seconds; the filter is not modified."""
        return self.position + self.velocity * future_dt

    def state(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Copies of (position, velocity)."""
        return self.position.copy(), self.velocity.copy()
