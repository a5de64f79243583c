"""
Guidance laws as a closed set of variants.

Each variant is an immutable value describing what the missile steers
toward. ``guidance_direction`` evaluates it for the current missile
position/velocity and returns the desired unit direction by value.

    NoGuidance                   zero vector (missile flies along its thrust)
    ToTarget(target)             pure pursuit of a fixed point
    Lead(position, velocity)     pursuit of a constant-velocity target's
                                 predicted position after ||Δ||/|v_self|
    FromTrajectory(traj, t)      lead pursuit of a target following a
                                 recorded trajectory, sampled at time t
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Union

import numpy as np
from numpy.typing import NDArray

from .constants import EPS_GUIDANCE_SPEED
from .math_utils import as_vec3
from .trajectory import Trajectory

logger = logging.getLogger(__name__)

# Below this squared speed the lead computation assumes 0.01 m/s
_MIN_SPEED_SQ = 1e-6
_FALLBACK_SPEED = 0.01


@dataclass(frozen=True, eq=False)
class NoGuidance:
    pass


@dataclass(frozen=True, eq=False)
class ToTarget:
    target: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        object.__setattr__(self, "target", as_vec3(self.target))


@dataclass(frozen=True, eq=False)
class Lead:
    target_position: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    target_velocity: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        object.__setattr__(self, "target_position", as_vec3(self.target_position))
        object.__setattr__(self, "target_velocity", as_vec3(self.target_velocity))


@dataclass(frozen=True, eq=False)
class FromTrajectory:
    trajectory: Trajectory
    current_time: float = 0.0


Guidance = Union[NoGuidance, ToTarget, Lead, FromTrajectory]


def _unit_or_zero(v: NDArray[np.float64]) -> NDArray[np.float64]:
    norm = float(np.linalg.norm(v))
    if norm < EPS_GUIDANCE_SPEED:
        return np.zeros(3)
    return v / norm


def _lead_speed(velocity: NDArray[np.float64]) -> float:
    speed_sq = float(np.dot(velocity, velocity))
    return np.sqrt(speed_sq) if speed_sq > _MIN_SPEED_SQ else _FALLBACK_SPEED


def guidance_direction(guidance: Guidance | None, position, velocity) -> NDArray[np.float64]:
    """
    Desired unit steering direction.

    Args:
        guidance: Guidance variant (None behaves like NoGuidance)
        position: Missile position
        velocity: Missile velocity

    Returns:
        Unit vector, or the zero vector for NoGuidance and degenerate
        geometry (target coincides with the missile)
    """
    pos = as_vec3(position)

    if guidance is None or isinstance(guidance, NoGuidance):
        return np.zeros(3)

    if isinstance(guidance, ToTarget):
        return _unit_or_zero(guidance.target - pos)

    if isinstance(guidance, Lead):
        speed = _lead_speed(as_vec3(velocity))
        distance = float(np.linalg.norm(guidance.target_position - pos))
        lead_time = distance / speed
        predicted = guidance.target_position + guidance.target_velocity * lead_time
        return _unit_or_zero(predicted - pos)

    if isinstance(guidance, FromTrajectory):
        target_now = guidance.trajectory.sample_position(guidance.current_time)
        if target_now is None:
            logger.debug("FromTrajectory guidance on empty trajectory")
            return np.zeros(3)
        speed = _lead_speed(as_vec3(velocity))
        lead_time = float(np.linalg.norm(target_now - pos)) / speed
        predicted = guidance.trajectory.sample_position(guidance.current_time + lead_time)
        return _unit_or_zero(predicted - pos)

    raise TypeError(f"Unsupported guidance variant: {type(guidance).__name__}")


def with_time(guidance: Guidance | None, t: float) -> Guidance | None:
    """Advance a trajectory-following guidance to time t; others are returned as-is."""
    if isinstance(guidance, FromTrajectory):
        return replace(guidance, current_time=float(t))
    return guidance


def is_active(guidance: Guidance | None) -> bool:
    """True for any variant that actually steers."""
    return guidance is not None and not isinstance(guidance, NoGuidance)
