"""
Numerical Integration of Rigid Body Motion.

Advances a MotionState by one step under a selectable scheme:

    Linear only:   Euler, SemiImplicitEuler, Verlet, RK4, RK4WithEnv
    Linear + attitude:
                   MotionEuler, MotionSemiImplicit, MotionRK4,
                   MotionRK4WithEnv, MotionVerlet

Constant-acceleration schemes use ``state.linear.acceleration`` as given.
The *WithEnv schemes re-evaluate the motion model at every RK4 stage and
write the final-stage acceleration back into the state.

Attitude update (all Motion* schemes):

    ω ← ω + Δω
    q ← normalize(q ⊗ Δq),   Δq = axis-angle(ω̂, |ω|·dt)

The body-frame increment is applied by right multiplication because the
orientation is world-from-body.

RK4WithEnv stages hold the position argument at its base value and only
substitute the stage velocity (velocity-only sub-stepping). This matches
the established numerical behavior of the model, which depends on velocity
alone.

Verlet schemes require the previous state. The integrator copies the
pre-step state into ``prev_state`` so successive calls chain correctly.

References:
    - Hairer, Lubich & Wanner (2003). "Geometric numerical integration
      illustrated by the Störmer-Verlet method." Acta Numerica 12: 399-450.
"""

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np
from numba import jit

from .bodyprops import BodyProps
from .constants import DEFAULT_TIME_STEP
from .environment import Environ
from .math_utils import q_integrate
from .model import accel_at, angular_drag_accel
from .state import MotionState
from .types import ContractViolationError

logger = logging.getLogger(__name__)


# =============================================================================
# Classical RK4 Butcher Tableau
# =============================================================================

# Time nodes (c_i)
RK4_C = np.array([0.0, 0.5, 0.5, 1.0], dtype=np.float64)

# Stage weights (b_i)
RK4_B = np.array([1.0 / 6.0, 1.0 / 3.0, 1.0 / 3.0, 1.0 / 6.0], dtype=np.float64)


class IntegratorScheme(Enum):
    """Discrete-time update rule."""
    EULER = "euler"
    SEMI_IMPLICIT = "semi_implicit"
    VERLET = "verlet"
    RK4 = "rk4"
    RK4_ENV = "rk4_env"
    MOTION_EULER = "motion_euler"
    MOTION_SEMI_IMPLICIT = "motion_semi_implicit"
    MOTION_RK4 = "motion_rk4"
    MOTION_RK4_ENV = "motion_rk4_env"
    MOTION_VERLET = "motion_verlet"

    @property
    def needs_prev_state(self) -> bool:
        return self in (IntegratorScheme.VERLET, IntegratorScheme.MOTION_VERLET)


@dataclass
class IntegratorConfig:
    """
    Integration settings.

    Attributes:
        scheme: Update rule
        dt: Step size (s), must be > 0
        prev_state: Previous state, required by Verlet schemes; updated in
            place to the pre-step state after each Verlet step
        env: Environment for the *WithEnv schemes
        body: Body properties for the *WithEnv schemes
    """
    scheme: IntegratorScheme = IntegratorScheme.RK4_ENV
    dt: float = DEFAULT_TIME_STEP
    prev_state: MotionState | None = None
    env: Environ | None = None
    body: BodyProps | None = None


# =============================================================================
# Constant-Acceleration Kernels
# =============================================================================

@jit(nopython=True, cache=True)
def euler_step(p: np.ndarray, v: np.ndarray, a: np.ndarray, dt: float):
    """
    Explicit Euler.

        v' = v + a·dt
        p' = p + v·dt        (old velocity)

    Returns:
        Tuple (p', v')
    """
    return p + v * dt, v + a * dt


@jit(nopython=True, cache=True)
def semi_implicit_step(p: np.ndarray, v: np.ndarray, a: np.ndarray, dt: float):
    """
    Semi-implicit (symplectic) Euler.

        v' = v + a·dt
        p' = p + v'·dt       (new velocity)

    Returns:
        Tuple (p', v')
    """
    v_new = v + a * dt
    return p + v_new * dt, v_new


@jit(nopython=True, cache=True)
def verlet_step(p: np.ndarray, p_prev: np.ndarray, a: np.ndarray, dt: float):
    """
    Position Verlet with central-difference velocity.

        p' = 2p - p_prev + a·dt²
        v' = (p' - p_prev) / (2·dt)

    Returns:
        Tuple (p', v')
    """
    p_new = 2.0 * p - p_prev + a * (dt * dt)
    v_new = (p_new - p_prev) / (2.0 * dt)
    return p_new, v_new


@jit(nopython=True, cache=True)
def rk4_constant_step(p: np.ndarray, v: np.ndarray, a: np.ndarray, dt: float):
    """
    Four-stage RK4 with a constant acceleration.

    With constant a this reduces to Euler in v and the midpoint rule in p,
    but the full stage structure is kept so a stage-dependent acceleration
    can be dropped in.

    Returns:
        Tuple (p', v')
    """
    k1_v = a * dt
    k1_p = v * dt

    k2_v = a * dt
    k2_p = (v + k1_v * 0.5) * dt

    k3_v = a * dt
    k3_p = (v + k2_v * 0.5) * dt

    k4_v = a * dt
    k4_p = (v + k3_v) * dt

    dv = (k1_v + 2.0 * (k2_v + k3_v) + k4_v) / 6.0
    dp = (k1_p + 2.0 * (k2_p + k3_p) + k4_p) / 6.0
    return p + dp, v + dv


@jit(nopython=True, cache=True)
def rk4_combine(y0: np.ndarray, k1: np.ndarray, k2: np.ndarray,
                k3: np.ndarray, k4: np.ndarray) -> np.ndarray:
    """y0 + (k1 + 2k2 + 2k3 + k4)/6"""
    return y0 + (k1 + 2.0 * (k2 + k3) + k4) / 6.0


# =============================================================================
# Linear Integrators
# =============================================================================

def integrate_euler(state: MotionState, dt: float) -> None:
    lin = state.linear
    lin.position, lin.velocity = euler_step(lin.position, lin.velocity,
                                            lin.acceleration, dt)


def integrate_semi_implicit(state: MotionState, dt: float) -> None:
    lin = state.linear
    lin.position, lin.velocity = semi_implicit_step(lin.position, lin.velocity,
                                                    lin.acceleration, dt)


def integrate_verlet(state: MotionState, prev_state: MotionState, dt: float) -> None:
    """
    Linear Verlet step.

    ``prev_state`` receives a copy of the pre-step state.

    Raises:
        ContractViolationError: if prev_state is None
    """
    if prev_state is None:
        logger.error("Verlet integration requires prev_state")
        raise ContractViolationError("Verlet integration requires prev_state")

    lin = state.linear
    p_prev = prev_state.linear.position.copy()
    prev_state.assign(state)
    lin.position, lin.velocity = verlet_step(lin.position, p_prev,
                                             lin.acceleration, dt)


def integrate_rk4(state: MotionState, dt: float) -> None:
    lin = state.linear
    lin.position, lin.velocity = rk4_constant_step(lin.position, lin.velocity,
                                                   lin.acceleration, dt)


def integrate_rk4_env(state: MotionState, dt: float,
                      env: Environ | None, body: BodyProps | None) -> None:
    """
    RK4 driven by the motion model.

    Stage k evaluates ``accel_at(c_k·dt, stage_state)`` with c = (0, ½, ½, 1).
    Each stage state keeps the base position and substitutes the velocity
    v0 + k_{k-1}·dt/2 (v0 + k3·dt for the last stage). The k4 acceleration
    is written back to ``state.linear.acceleration``.

    Falls back to constant-acceleration RK4 when both env and body are
    missing. A single missing record is replaced by its defaults.
    """
    if env is None and body is None:
        integrate_rk4(state, dt)
        return
    env = env if env is not None else Environ()
    body = body if body is not None else BodyProps()

    lin = state.linear
    p0 = lin.position.copy()
    v0 = lin.velocity.copy()
    stage = lin.copy()

    a1 = accel_at(RK4_C[0] * dt, stage, env, body)
    k1_v = a1 * dt
    k1_p = v0 * dt

    stage.velocity = v0 + k1_v * 0.5
    a2 = accel_at(RK4_C[1] * dt, stage, env, body)
    k2_v = a2 * dt
    k2_p = (v0 + k1_v * 0.5) * dt

    stage.velocity = v0 + k2_v * 0.5
    a3 = accel_at(RK4_C[2] * dt, stage, env, body)
    k3_v = a3 * dt
    k3_p = (v0 + k2_v * 0.5) * dt

    stage.velocity = v0 + k3_v
    a4 = accel_at(RK4_C[3] * dt, stage, env, body)
    k4_v = a4 * dt
    k4_p = (v0 + k3_v) * dt

    lin.position = rk4_combine(p0, k1_p, k2_p, k3_p, k4_p)
    lin.velocity = rk4_combine(v0, k1_v, k2_v, k3_v, k4_v)
    lin.acceleration = a4


# =============================================================================
# Attitude Integrators
# =============================================================================

def _compose_rotation(state: MotionState, dt: float) -> None:
    ang = state.angular
    ang.orientation = q_integrate(ang.orientation, ang.angular_velocity, dt)


def integrate_attitude_euler(state: MotionState, dt: float) -> None:
    """ω ← ω + α·dt, then compose the rotation swept by the new ω."""
    ang = state.angular
    ang.angular_velocity = ang.angular_velocity + ang.angular_acceleration * dt
    _compose_rotation(state, dt)


def integrate_attitude_semi_implicit(state: MotionState, dt: float) -> None:
    """Same update as Euler: the rotation always uses the updated ω."""
    integrate_attitude_euler(state, dt)


def integrate_attitude_rk4(state: MotionState, dt: float) -> None:
    """RK4 in ω with constant α (all stages equal), then rotation update."""
    ang = state.angular
    k = ang.angular_acceleration * dt
    ang.angular_velocity = rk4_combine(ang.angular_velocity, k, k, k, k)
    _compose_rotation(state, dt)


def integrate_attitude_rk4_env(state: MotionState, dt: float,
                               env: Environ | None, body: BodyProps | None) -> None:
    """
    RK4 attitude step with linear angular damping.

        α_eff = α - (½·ρ·C_d·A / (m + ε))·ω0

    Falls back to ``integrate_attitude_rk4`` when env or body is missing.
    """
    if env is None or body is None:
        integrate_attitude_rk4(state, dt)
        return

    ang = state.angular
    alpha = ang.angular_acceleration + angular_drag_accel(ang.angular_velocity, env, body)
    k = alpha * dt
    ang.angular_velocity = rk4_combine(ang.angular_velocity, k, k, k, k)
    _compose_rotation(state, dt)


def integrate_attitude_verlet(state: MotionState, prev_state: MotionState,
                              dt: float) -> None:
    """
    Attitude step for the Verlet family.

    The angular rate advances by α·dt; ``prev_state`` receives the pre-step
    angular state.

    Raises:
        ContractViolationError: if prev_state is None
    """
    if prev_state is None:
        logger.error("Attitude Verlet integration requires prev_state")
        raise ContractViolationError("Attitude Verlet integration requires prev_state")
    prev_state.angular.assign(state.angular)
    integrate_attitude_euler(state, dt)


# =============================================================================
# Combined Motion Integrators
# =============================================================================

def integrate_motion_euler(state: MotionState, dt: float) -> None:
    integrate_euler(state, dt)
    integrate_attitude_euler(state, dt)


def integrate_motion_semi_implicit(state: MotionState, dt: float) -> None:
    integrate_semi_implicit(state, dt)
    integrate_attitude_semi_implicit(state, dt)


def integrate_motion_rk4(state: MotionState, dt: float) -> None:
    integrate_rk4(state, dt)
    integrate_attitude_rk4(state, dt)


def integrate_motion_rk4_env(state: MotionState, dt: float,
                             env: Environ | None, body: BodyProps | None) -> None:
    """Model-driven RK4 for both translation and attitude.

    Falls back to ``integrate_motion_rk4`` unless both env and body are given.
    """
    if env is None or body is None:
        integrate_motion_rk4(state, dt)
        return
    integrate_rk4_env(state, dt, env, body)
    integrate_attitude_rk4_env(state, dt, env, body)


def integrate_motion_verlet(state: MotionState, prev_state: MotionState,
                            dt: float) -> None:
    """
    Linear Verlet plus attitude update.

    Raises:
        ContractViolationError: if prev_state is None
    """
    if prev_state is None:
        logger.error("Motion Verlet integration requires prev_state")
        raise ContractViolationError("Motion Verlet integration requires prev_state")

    pre_step = state.copy()
    lin = state.linear
    lin.position, lin.velocity = verlet_step(lin.position,
                                             prev_state.linear.position,
                                             lin.acceleration, dt)
    integrate_attitude_euler(state, dt)
    prev_state.assign(pre_step)


# =============================================================================
# Dispatch
# =============================================================================

def integrate(state: MotionState, config: IntegratorConfig) -> bool:
    """
    Advance ``state`` in place by one step of ``config.dt``.

    Args:
        state: Motion state to update
        config: Scheme, step and optional prev_state / env / body

    Returns:
        True if a step was taken; False (state untouched) when dt ≤ 0 or
        the body has a non-positive mass

    Raises:
        ContractViolationError: unknown scheme, or a Verlet scheme without
            ``config.prev_state``
    """
    dt = config.dt
    if not dt > 0.0:
        logger.debug("integrate: non-positive dt %s ignored", dt)
        return False
    if config.body is not None and not config.body.mass > 0.0:
        logger.debug("integrate: non-positive mass %s ignored", config.body.mass)
        return False

    scheme = config.scheme
    if scheme is IntegratorScheme.EULER:
        integrate_euler(state, dt)
    elif scheme is IntegratorScheme.SEMI_IMPLICIT:
        integrate_semi_implicit(state, dt)
    elif scheme is IntegratorScheme.VERLET:
        integrate_verlet(state, config.prev_state, dt)
    elif scheme is IntegratorScheme.RK4:
        integrate_rk4(state, dt)
    elif scheme is IntegratorScheme.RK4_ENV:
        integrate_rk4_env(state, dt, config.env, config.body)
    elif scheme is IntegratorScheme.MOTION_EULER:
        integrate_motion_euler(state, dt)
    elif scheme is IntegratorScheme.MOTION_SEMI_IMPLICIT:
        integrate_motion_semi_implicit(state, dt)
    elif scheme is IntegratorScheme.MOTION_RK4:
        integrate_motion_rk4(state, dt)
    elif scheme is IntegratorScheme.MOTION_RK4_ENV:
        integrate_motion_rk4_env(state, dt, config.env, config.body)
    elif scheme is IntegratorScheme.MOTION_VERLET:
        integrate_motion_verlet(state, config.prev_state, dt)
    else:
        logger.error("Unknown integration scheme: %r", scheme)
        raise ContractViolationError(f"Unknown integration scheme: {scheme!r}")
    return True
