"""
Algebraic and Kinematic Solvers.

Closed-form roots (linear, quadratic, cubic), bracketed bisection, and
constant-acceleration kinematics queries on a LinearState (apex, time to
reach a height or a ground position, stopping time).

Every solver returns ``None`` when no solution exists. Loops are bounded:
bisection stops after 100 iterations and the sampled scans use 101 samples.
"""

import logging
import math
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from .constants import BISECTION_MAX_ITER, EPS_FLOAT_ZERO, POSITION_SCAN_SAMPLES
from .math_utils import as_vec3
from .state import LinearState

logger = logging.getLogger(__name__)


# =============================================================================
# Equation Roots
# =============================================================================

def solve_linear(a: float, b: float) -> float | None:
    """Root of a·x + b = 0, or None when |a| < 1e-8."""
    if abs(a) < EPS_FLOAT_ZERO:
        return None
    return -b / a


def solve_quadratic(a: float, b: float, c: float) -> tuple[float, float] | None:
    """
    Real roots of a·x² + b·x + c = 0.

    Returns:
        (x1, x2) with x1 = (-b - √D)/2a and x2 = (-b + √D)/2a, or None when
        a == 0 or the discriminant D = b² - 4ac is negative
    """
    if a == 0.0:
        return None
    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        logger.debug("solve_quadratic: negative discriminant %.6g", disc)
        return None
    sqrt_d = math.sqrt(disc)
    return (-b - sqrt_d) / (2.0 * a), (-b + sqrt_d) / (2.0 * a)


def solve_cubic(a: float, b: float, c: float, d: float) -> list[float] | None:
    """
    Real roots of a·x³ + b·x² + c·x + d = 0, ascending.

    Uses Cardano's method on the depressed cubic, with the trigonometric
    form when three distinct real roots exist. A vanishing leading
    coefficient degrades to the quadratic case.

    Returns:
        List of 1 to 3 real roots, or None if none exist
    """
    if abs(a) < EPS_FLOAT_ZERO:
        roots = solve_quadratic(b, c, d)
        if roots is None:
            return None
        x1, x2 = roots
        return [x1] if x1 == x2 else sorted([x1, x2])

    A = b / a
    B = c / a
    C = d / a

    sq_a = A * A
    p = (1.0 / 3.0) * (-1.0 / 3.0 * sq_a + B)
    q = 0.5 * (2.0 / 27.0 * A * sq_a - A * B / 3.0 + C)
    disc = q * q + p * p * p
    shift = A / 3.0

    if abs(disc) < EPS_FLOAT_ZERO:
        if abs(q) < EPS_FLOAT_ZERO:
            # Triple root
            return [-shift]
        u = math.copysign(abs(q) ** (1.0 / 3.0), -q)
        return sorted([2.0 * u - shift, -u - shift])

    if disc < 0.0:
        phi = math.acos(-q / math.sqrt(-p * p * p))
        t = 2.0 * math.sqrt(-p)
        return sorted([
            t * math.cos(phi / 3.0) - shift,
            t * math.cos((phi + 2.0 * math.pi) / 3.0) - shift,
            t * math.cos((phi + 4.0 * math.pi) / 3.0) - shift,
        ])

    sqrt_d = math.sqrt(disc)
    u = np.cbrt(-q + sqrt_d)
    v = np.cbrt(-q - sqrt_d)
    return [float(u + v - shift)]


def solve_bisection(func: Callable[[float], float], a: float, b: float,
                    tol: float = 1e-6) -> float | None:
    """
    Bracketed root of a scalar function.

    Stops when |f(mid)| < tol or the interval is narrower than tol, and
    after at most 100 halvings returns the final midpoint.

    Args:
        func: Continuous scalar function
        a, b: Bracket with a < b and f(a)·f(b) ≤ 0
        tol: Convergence tolerance

    Returns:
        Root estimate, or None for an invalid bracket
    """
    if func is None or a >= b:
        return None
    fa = func(a)
    fb = func(b)
    if fa * fb > 0.0:
        logger.debug("solve_bisection: [%g, %g] does not bracket a root", a, b)
        return None

    for _ in range(BISECTION_MAX_ITER):
        mid = 0.5 * (a + b)
        fmid = func(mid)
        if abs(fmid) < tol or (b - a) < tol:
            return mid
        if fa * fmid < 0.0:
            b = mid
        else:
            a = mid
            fa = fmid

    return 0.5 * (a + b)


# =============================================================================
# Kinematics Under Constant Acceleration
# =============================================================================

def _position_at(state: LinearState, t: float) -> NDArray[np.float64]:
    return state.position + state.velocity * t + state.acceleration * (0.5 * t * t)


def solve_apex(state: LinearState) -> tuple[NDArray[np.float64], float] | None:
    """
    Highest point of a ballistic arc.

        t_apex = -v_y / a_y
        p_apex = p + v·t + ½·a·t²

    Returns:
        (apex_position, t_apex), or None when a_y == 0
    """
    ay = state.acceleration[1]
    if ay == 0.0:
        return None
    t = -state.velocity[1] / ay
    return _position_at(state, t), float(t)


def solve_time_for_y(state: LinearState, target_y: float) -> float | None:
    """
    Earliest non-negative time at which the body reaches height target_y.

    Solves ½·a_y·t² + v_y·t + (p_y - target_y) = 0.
    """
    roots = solve_quadratic(0.5 * state.acceleration[1], state.velocity[1],
                            state.position[1] - target_y)
    if roots is None:
        return None
    candidates = sorted(t for t in roots if t >= 0.0)
    if not candidates:
        return None
    return float(candidates[0])


def solve_time_for_position(state: LinearState, target, tolerance: float,
                            max_time: float) -> float | None:
    """
    Time at which the (x, z) ground projection passes closest to a target.

    Samples t = max_time·i/100 for i = 0..100 and stops early once the
    horizontal distance is below ``tolerance``. The y coordinate of the
    target is ignored.
    """
    if max_time < 0.0:
        return None
    target = as_vec3(target)
    best_t = 0.0
    best_d = math.inf

    for i in range(POSITION_SCAN_SAMPLES + 1):
        t = max_time * i / POSITION_SCAN_SAMPLES
        p = _position_at(state, t)
        dist = math.hypot(p[0] - target[0], p[2] - target[2])
        if dist < best_d:
            best_d = dist
            best_t = t
        if dist < tolerance:
            break

    return best_t


def solve_velocity_for_range(distance: float, gravity: float) -> float | None:
    """Launch speed √(d·g) that reaches range d at 45° on flat ground."""
    if distance <= 0.0 or gravity <= 0.0:
        return None
    return math.sqrt(distance * gravity)


def solve_stop_time(state: LinearState) -> float | None:
    """
    Time for the current deceleration to bring the body to rest.

    Assumes the acceleration opposes the velocity: t = |v| / |a|.
    """
    accel = float(np.linalg.norm(state.acceleration))
    if accel <= 0.0:
        return None
    return float(np.linalg.norm(state.velocity)) / accel


def solve_time_for_vec3(func: Callable[[float], NDArray[np.float64]], target,
                        t_min: float, t_max: float, tol: float) -> float | None:
    """
    Time in [t_min, t_max] at which a vector-valued curve comes closest to target.

    Scans 101 evenly spaced samples and stops early once within tol.
    """
    if func is None or t_min >= t_max:
        return None
    target = as_vec3(target)
    best_t = t_min
    best_d = math.inf

    for i in range(POSITION_SCAN_SAMPLES + 1):
        t = t_min + (t_max - t_min) * i / POSITION_SCAN_SAMPLES
        d = float(np.linalg.norm(as_vec3(func(t)) - target))
        if d < best_d:
            best_d = d
            best_t = t
        if d < tol:
            break

    return best_t
