"""
Common interface for state estimation filters.

Higher layers drive any filter through the same three calls, so a Kalman
filter can later be swapped for an EKF or UKF without touching the caller:

    >>> kf = KalmanVec3Filter(KalmanVec3(dt=0.1))
    >>> kf.time_update()
    >>> kf.measurement_update(measured_pos)
    >>> pos, vel = kf.get_state()
"""

from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from .kalman import KalmanVec3


@runtime_checkable
class StateFilter(Protocol):
    """Position/velocity estimator."""

    def time_update(self) -> None:
        ...

    def measurement_update(self, measured_pos, measured_vel=None) -> None:
        ...

    def get_state(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        ...


class KalmanVec3Filter:
    """StateFilter adapter around a KalmanVec3 (measured velocity is ignored)."""

    def __init__(self, kalman: KalmanVec3 | None = None):
        self.kalman = kalman if kalman is not None else KalmanVec3()

    def time_update(self) -> None:
        self.kalman.time_update()

    def measurement_update(self, measured_pos, measured_vel=None) -> None:
        self.kalman.measurement_update(measured_pos)

    def get_state(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        return self.kalman.state()
