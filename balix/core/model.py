"""
Motion Model: instantaneous accelerations from state, environment and body.

Net linear acceleration:

    a = g + a_drag(v - w)

    a_drag(u) = -û · ½·ρ·C_d·A·|u|² / m     (zero when |u| < 1e-6)

where g is env.gravity, w the wind velocity and u the air-relative velocity.
Wind enters only through the drag term, and the same air-relative policy is
used by every evaluation (closed-form predictions and all RK4 stages).
External forces such as thrust are added by the caller.

Angular damping used by the attitude integrators is linear in ω:

    α_drag = -(½·ρ·C_d·A / (m + 1e-6)) · ω

Time-parameterized queries (``vel_at``, ``pos_at``, ``accel_at``) freeze the
initial acceleration a0 = a(v0) and extrapolate with constant a0.
"""

import logging
from typing import Callable

import numpy as np
from numba import jit
from numpy.typing import NDArray

from .bodyprops import BodyProps
from .constants import EPS_DRAG_SPEED, EPS_FLOAT_ZERO, EPS_MASS
from .environment import Environ
from .math_utils import as_vec3, vector_distance, vector_reflect
from .state import LinearState, MotionState

logger = logging.getLogger(__name__)

BounceFunc = Callable[[NDArray[np.float64], NDArray[np.float64], float], NDArray[np.float64]]


# =============================================================================
# Drag Kernels
# =============================================================================

@jit(nopython=True, cache=True)
def drag_acceleration(rel_velocity: np.ndarray, air_density: float,
                      drag_coef: float, cross_section: float,
                      mass: float) -> np.ndarray:
    """
    Quadratic aerodynamic drag acceleration.

        a_drag = -û · ½·ρ·C_d·A·|u|² / m

    Args:
        rel_velocity: Air-relative velocity u = v - wind (m/s)
        air_density: ρ (kg/m³)
        drag_coef: C_d
        cross_section: A (m²)
        mass: m (kg); a non-positive mass yields zero drag

    Returns:
        Drag acceleration vector (m/s²)
    """
    speed = np.sqrt(rel_velocity[0]**2 + rel_velocity[1]**2 + rel_velocity[2]**2)
    if speed < EPS_DRAG_SPEED or mass <= EPS_FLOAT_ZERO:
        return np.zeros(3)

    accel_mag = 0.5 * air_density * speed * speed * drag_coef * cross_section / mass
    scale = -accel_mag / speed
    return np.array([rel_velocity[0] * scale,
                     rel_velocity[1] * scale,
                     rel_velocity[2] * scale])


@jit(nopython=True, cache=True)
def angular_drag_coefficient(air_density: float, drag_coef: float,
                             cross_section: float, mass: float) -> float:
    """Linear angular damping rate ½·ρ·C_d·A / (m + 1e-6) (1/s); zero for m ≤ 0."""
    if mass <= EPS_FLOAT_ZERO:
        return 0.0
    return 0.5 * air_density * drag_coef * cross_section / (mass + EPS_MASS)


def _linear(state) -> LinearState:
    return state.linear if isinstance(state, MotionState) else state


def drag_accel(velocity, env: Environ, body: BodyProps) -> NDArray[np.float64]:
    """Drag acceleration of a body moving at ``velocity`` through env's wind."""
    rel = as_vec3(velocity) - env.wind_velocity
    return drag_acceleration(rel, env.air_density, body.drag_coef,
                             body.cross_section, body.mass)


def angular_drag_accel(angular_velocity, env: Environ, body: BodyProps) -> NDArray[np.float64]:
    """Angular damping α_drag = -k·ω."""
    k = angular_drag_coefficient(env.air_density, body.drag_coef,
                                 body.cross_section, body.mass)
    return -k * as_vec3(angular_velocity)


# =============================================================================
# Acceleration Model
# =============================================================================

def accel(state, env: Environ, body: BodyProps) -> NDArray[np.float64]:
    """
    Instantaneous net acceleration: gravity + drag on the air-relative velocity.

    Args:
        state: LinearState or MotionState
        env: Environment
        body: Body properties

    Returns:
        Acceleration (m/s²), external forces excluded
    """
    linear = _linear(state)
    return env.gravity + drag_accel(linear.velocity, env, body)


def vel_at(t: float, state, env: Environ, body: BodyProps) -> NDArray[np.float64]:
    """Velocity after t seconds under the frozen initial acceleration: v0 + a0·t."""
    linear = _linear(state)
    a0 = accel(linear, env, body)
    return linear.velocity + a0 * t


def pos_at(t: float, state, env: Environ, body: BodyProps) -> NDArray[np.float64]:
    """Position after t seconds: p0 + v0·t + ½·a0·t²."""
    linear = _linear(state)
    a0 = accel(linear, env, body)
    return linear.position + linear.velocity * t + a0 * (0.5 * t * t)


def accel_at(t: float, state, env: Environ, body: BodyProps) -> NDArray[np.float64]:
    """
    Acceleration at time offset t.

    Drag is evaluated at the extrapolated velocity ``vel_at(t, state)``; at
    t = 0 this equals ``accel(state)``. The RK4-with-environment integrator
    calls this at its stage times.
    """
    v_t = vel_at(t, state, env, body)
    return env.gravity + drag_accel(v_t, env, body)


def predict(t: float, state, env: Environ, body: BodyProps) -> LinearState:
    """Closed-form linear state after t seconds."""
    return LinearState(
        position=pos_at(t, state, env, body),
        velocity=vel_at(t, state, env, body),
        acceleration=accel_at(t, state, env, body),
    )


def predict_rk4(t: float, state, env: Environ, body: BodyProps,
                steps: int) -> LinearState:
    """
    Numerically integrated linear state after t seconds.

    Runs ``steps`` MotionRK4WithEnv steps of size t/steps. Invalid inputs
    (t ≤ 0 or steps ≤ 0) return a copy of the initial state.
    """
    # Local import: the integrator engine depends on this module
    from .integrators import IntegratorConfig, IntegratorScheme, integrate

    linear = _linear(state)
    if steps <= 0 or t <= 0.0:
        return linear.copy()

    current = MotionState(linear.copy())
    cfg = IntegratorConfig(scheme=IntegratorScheme.MOTION_RK4_ENV,
                           dt=t / steps, env=env, body=body)
    for _ in range(steps):
        integrate(current, cfg)
    return current.linear


# =============================================================================
# State Predicates
# =============================================================================

def is_apex(state) -> bool:
    """True when the vertical velocity is (numerically) zero."""
    return abs(_linear(state).velocity[1]) <= EPS_FLOAT_ZERO


def is_grounded(state, ground_height: float = 0.0) -> bool:
    """True when the body is at or below the ground plane."""
    return _linear(state).position[1] <= ground_height


# =============================================================================
# Bounce and Collision
# =============================================================================

def default_bounce(velocity, normal, restitution: float) -> NDArray[np.float64]:
    """
    Restitution-scaled mirror reflection: (v - 2(v·n)n)·e.

    ``normal`` is expected to be unit length.
    """
    return vector_reflect(as_vec3(velocity), as_vec3(normal)) * restitution


def bounce(velocity, normal, restitution: float,
           bounce_func: BounceFunc | None = None) -> NDArray[np.float64]:
    """Post-contact velocity using ``bounce_func`` or the default reflection."""
    func = bounce_func or default_bounce
    return as_vec3(func(as_vec3(velocity), as_vec3(normal), restitution))


def predict_collision(state_a, state_b, env: Environ,
                      body_a: BodyProps, body_b: BodyProps,
                      radius_sum: float, max_time: float,
                      time_step: float) -> tuple[float, NDArray[np.float64]] | None:
    """
    First time two bodies come within ``radius_sum`` of each other.

    Both bodies follow their closed-form ``pos_at`` trajectories; time is
    scanned from 0 to max_time in increments of time_step.

    Returns:
        (time, contact_point) where the point is the midpoint of the two
        centers, or None if they never meet (or on invalid step/horizon)
    """
    if time_step <= 0.0 or max_time <= 0.0:
        return None

    n_steps = int(max_time / time_step + 1e-9)
    for i in range(n_steps + 1):
        t = i * time_step
        pa = pos_at(t, state_a, env, body_a)
        pb = pos_at(t, state_b, env, body_b)
        if vector_distance(pa, pb) <= radius_sum:
            return t, (pa + pb) * 0.5

    logger.debug("predict_collision: no contact within %.3f s", max_time)
    return None
