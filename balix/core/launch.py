"""
Inverse launch-parameter solutions.

Given a start point and a target, find the launch direction (and force or
flight time) that puts a drag-free projectile on the target.

Fixed-force solution (flat-fire branch of the ballistic equation):

    v0       = √(2·F·R / m)
    D        = v0⁴ - g·(g·R² + 2·Δy·v0²)          (no solution if D < 0)
    θ        = atan((v0² - √D) / (g·R))
    dir      = unit(cos θ·ĥ + sin θ·ŷ)
    t_hit    = R / (v0·cos θ)

where R is the horizontal range, ĥ the unit horizontal direction and Δy
the height difference to the target.

Fixed-time solution:

    v_req = (Δ - ½·g·T² - w·T) / T,   force = m·||v_req||,   dir = v̂_req

All solvers return None when no solution exists.
"""

import logging
import math
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from .bodyprops import BodyProps
from .constants import GRAVITY, LAUNCH_GRAVITY
from .environment import Environ
from .math_utils import as_vec3, normalize_vector

logger = logging.getLogger(__name__)

# Horizontal range below which the target is considered straight above/below
_MIN_RANGE = 1e-6
# Floor on the effective horizontal speed in the wind-aware flight time
_MIN_HORIZONTAL_SPEED = 1e-3


@dataclass
class LaunchParam:
    direction: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    force: float = 0.0
    time_to_hit: float = 0.0


def _horizontal(start, target) -> tuple[NDArray[np.float64], float] | None:
    delta = target - start
    distance = math.hypot(delta[0], delta[2])
    if distance < _MIN_RANGE:
        return None
    return np.array([delta[0] / distance, 0.0, delta[2] / distance]), distance


def _solve_angle(v0: float, g: float, R: float, dy: float) -> float | None:
    under_sqrt = v0 ** 4 - g * (g * R * R + 2.0 * dy * v0 * v0)
    if under_sqrt < 0.0:
        return None
    return math.atan((v0 * v0 - math.sqrt(under_sqrt)) / (g * R))


def _fixed_force(start, target, mass: float, force: float, g: float,
                 wind_horizontal: float) -> LaunchParam | None:
    if mass <= 0.0 or force <= 0.0:
        logger.debug("Launch rejected: mass=%s force=%s", mass, force)
        return None
    start = as_vec3(start)
    target = as_vec3(target)

    horizontal = _horizontal(start, target)
    if horizontal is None:
        logger.debug("Launch rejected: target has no horizontal offset")
        return None
    h_dir, R = horizontal
    dy = target[1] - start[1]

    v0 = math.sqrt(2.0 * (force / mass) * R)
    theta = _solve_angle(v0, g, R, dy)
    if theta is None:
        logger.debug("Target out of reach: R=%.3f dy=%.3f v0=%.3f", R, dy, v0)
        return None

    direction = normalize_vector(np.array([
        math.cos(theta) * h_dir[0],
        math.sin(theta),
        math.cos(theta) * h_dir[2],
    ]))
    v_h = v0 * math.cos(theta) + wind_horizontal
    return LaunchParam(direction, force, R / max(v_h, _MIN_HORIZONTAL_SPEED))


def calc_launch_param(start, target, mass: float,
                      initial_force: float) -> LaunchParam | None:
    """
    Launch direction for a fixed launch force under g = 9.8 m/s².

    Args:
        start: Launch point
        target: Point to hit
        mass: Projectile mass (kg)
        initial_force: Launch force scalar F (N)

    Returns:
        LaunchParam with ``force = initial_force``, or None
    """
    return _fixed_force(start, target, mass, initial_force, LAUNCH_GRAVITY, 0.0)


def calc_launch_param_env(env: Environ, body: BodyProps, start, target,
                          initial_force: float) -> LaunchParam | None:
    """
    Fixed-force launch using the environment's gravity.

    g = |gravity.y| (9.8 when that is ~0). The horizontal wind speed is
    added to the horizontal launch speed when estimating ``time_to_hit``.
    """
    g = abs(float(env.gravity[1]))
    if g <= 1e-6:
        g = LAUNCH_GRAVITY
    wind_h = math.hypot(env.wind_velocity[0], env.wind_velocity[2])
    return _fixed_force(start, target, body.mass, initial_force, g, wind_h)


def _fixed_time(start, target, mass: float, hit_time: float,
                gravity, wind) -> LaunchParam | None:
    if mass <= 0.0 or hit_time <= 0.0:
        logger.debug("Inverse launch rejected: mass=%s hit_time=%s", mass, hit_time)
        return None
    delta = as_vec3(target) - as_vec3(start)
    T = hit_time
    required = (delta - 0.5 * as_vec3(gravity) * T * T - as_vec3(wind) * T) / T
    return LaunchParam(normalize_vector(required),
                       mass * float(np.linalg.norm(required)), T)


def calc_launch_param_inverse(start, target, mass: float, hit_time: float,
                              gravity=(0.0, -GRAVITY, 0.0)) -> LaunchParam | None:
    """
    Launch velocity that reaches ``target`` after exactly ``hit_time`` seconds.

    The returned force is m·||v_req|| (an impulse-like launch scalar).
    """
    return _fixed_time(start, target, mass, hit_time, gravity, np.zeros(3))


def calc_launch_param_inverse_env(env: Environ, body: BodyProps, start, target,
                                  hit_time: float) -> LaunchParam | None:
    """Fixed-time launch compensating the environment's gravity and wind drift."""
    return _fixed_time(start, target, body.mass, hit_time,
                       env.gravity, env.wind_velocity)
