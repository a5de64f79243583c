"""
Motion state records.

A MotionState bundles the linear state (position, velocity, last net
acceleration) and the angular state (orientation quaternion, angular
velocity, angular acceleration) of a rigid body at one instant.

Records are plain mutable values owned by the caller. Integrators update
them in place; use ``copy()`` to keep a snapshot.
"""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from .math_utils import as_vec3, q_identity, q_normalize


def _zeros3() -> NDArray[np.float64]:
    return np.zeros(3, dtype=np.float64)


@dataclass
class LinearState:
    """
    Translational state.

    Attributes:
        position: World position [x, y, z] (m)
        velocity: World velocity (m/s)
        acceleration: Last computed net acceleration (m/s²). Integrators
            driven by an acceleration model write their final evaluation
            back here.
    """
    position: NDArray[np.float64] = field(default_factory=_zeros3)
    velocity: NDArray[np.float64] = field(default_factory=_zeros3)
    acceleration: NDArray[np.float64] = field(default_factory=_zeros3)

    def __post_init__(self):
        self.position = as_vec3(self.position)
        self.velocity = as_vec3(self.velocity)
        self.acceleration = as_vec3(self.acceleration)

    def copy(self) -> "LinearState":
        return LinearState(self.position.copy(), self.velocity.copy(),
                           self.acceleration.copy())

    def assign(self, other: "LinearState") -> None:
        """Overwrite this state with the values of another."""
        self.position = other.position.copy()
        self.velocity = other.velocity.copy()
        self.acceleration = other.acceleration.copy()

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


@dataclass
class AngularState:
    """
    Rotational state.

    Attributes:
        orientation: Unit quaternion [w, x, y, z], world-from-body
        angular_velocity: Body rates ω (rad/s)
        angular_acceleration: α (rad/s²)
    """
    orientation: NDArray[np.float64] = field(default_factory=q_identity)
    angular_velocity: NDArray[np.float64] = field(default_factory=_zeros3)
    angular_acceleration: NDArray[np.float64] = field(default_factory=_zeros3)

    def __post_init__(self):
        self.orientation = q_normalize(
            np.array(self.orientation, dtype=np.float64).reshape(4))
        self.angular_velocity = as_vec3(self.angular_velocity)
        self.angular_acceleration = as_vec3(self.angular_acceleration)

    def copy(self) -> "AngularState":
        return AngularState(self.orientation.copy(),
                            self.angular_velocity.copy(),
                            self.angular_acceleration.copy())

    def assign(self, other: "AngularState") -> None:
        self.orientation = other.orientation.copy()
        self.angular_velocity = other.angular_velocity.copy()
        self.angular_acceleration = other.angular_acceleration.copy()


@dataclass
class MotionState:
    """Combined linear + angular state of a rigid body."""
    linear: LinearState = field(default_factory=LinearState)
    angular: AngularState = field(default_factory=AngularState)

    @classmethod
    def from_vectors(cls, position=(0.0, 0.0, 0.0), velocity=(0.0, 0.0, 0.0),
                     acceleration=(0.0, 0.0, 0.0)) -> "MotionState":
        """Build a state with identity orientation and no rotation."""
        return cls(LinearState(position, velocity, acceleration))

    def copy(self) -> "MotionState":
        return MotionState(self.linear.copy(), self.angular.copy())

    def assign(self, other: "MotionState") -> None:
        self.linear.assign(other.linear)
        self.angular.assign(other.angular)
