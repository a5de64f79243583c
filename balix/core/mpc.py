"""
Model Predictive Control by candidate search.

Each solve rolls the motion model forward from the current state once per
candidate (linear acceleration, angular acceleration) pair, sums a cost
against the target over the horizon, and returns the cheapest pair:

    for each candidate (a, α):
        sim = current
        repeat n = horizon_sec / step_dt times:
            sim.a = a + a_ext(sim)       (gravity + drag, or gravity + wind)
            sim.α = α
            MotionRK4 step, speed clamp
            J += cost(sim, target)
    pick argmin J

The caller applies the returned acceleration for one frame and solves again
on the next frame.
"""

import logging
import math
from dataclasses import dataclass, field
from itertools import product
from typing import Callable, Iterable

import numpy as np
from numpy.typing import NDArray

from .bodyprops import BodyProps
from .environment import Environ, gravity_wind_accel
from .integrators import integrate_motion_rk4
from .math_utils import (
    as_vec3,
    q_identity,
    q_inverse,
    q_mult,
    q_normalize,
    q_to_axis_angle,
)
from .model import accel
from .state import LinearState, MotionState
from .trajectory import Trajectory

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration & Targets
# =============================================================================

@dataclass
class MPCConfig:
    """
    MPC parameters.

    Attributes:
        horizon_sec: Prediction horizon (s)
        step_dt: Rollout step (s); the rollout has horizon_sec / step_dt steps
        max_accel: Linear acceleration limit (m/s²)
        max_ang_accel: Angular acceleration limit (rad/s²)
        max_speed: Linear speed clamp (m/s), 0 = none
        max_ang_speed: Angular speed clamp (rad/s), 0 = none
        weight_distance: Position error weight
        weight_orientation: Orientation error weight
        weight_velocity: Velocity error weight (hybrid cost)
        weight_accel: Linear acceleration effort weight
        weight_ang_accel: Angular acceleration effort weight
        candidate_step: Spacing of linear candidates for finer searches
        ang_candidate_step: Spacing of angular candidates for finer searches
    """
    horizon_sec: float = 1.0
    step_dt: float = 0.05
    max_accel: float = 10.0
    max_ang_accel: float = 5.0
    max_speed: float = 50.0
    max_ang_speed: float = 10.0
    weight_distance: float = 1.0
    weight_orientation: float = 0.5
    weight_velocity: float = 0.1
    weight_accel: float = 0.1
    weight_ang_accel: float = 0.1
    candidate_step: float = 0.5
    ang_candidate_step: float = 0.1


@dataclass
class MPCRoute:
    """Waypoints to follow; the nearest point is tracked each solve."""
    points: list = field(default_factory=list)
    loop: bool = False


@dataclass
class MPCDirectionTarget:
    """Hold a heading: aim ahead along ``direction`` with a given orientation."""
    direction: NDArray[np.float64] = field(default_factory=lambda: np.array([1.0, 0.0, 0.0]))
    orientation: NDArray[np.float64] = field(default_factory=q_identity)
    weight_dir: float = 1.0
    weight_rot: float = 0.5
    duration: float = 1.0

    def __post_init__(self):
        self.direction = as_vec3(self.direction)
        self.orientation = q_normalize(np.asarray(self.orientation, dtype=np.float64))


@dataclass
class MPCOutput:
    desired_accel: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    desired_ang_accel: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    future_state: MotionState = field(default_factory=MotionState)
    cost: float = 0.0


CostFunc = Callable[[MotionState, MotionState, MPCConfig | None], float]


# =============================================================================
# Cost Functions
# =============================================================================

def orientation_error(q_a: NDArray[np.float64], q_b: NDArray[np.float64]) -> float:
    """Rotation angle between two orientations, in [0, π] (rad)."""
    rel = q_mult(q_a, q_inverse(q_b))
    return 2.0 * math.acos(min(1.0, abs(float(rel[0]))))


def cost_default(sim: MotionState, target: MotionState,
                 config: MPCConfig | None = None) -> float:
    """
    Position, orientation and effort cost.

        J = w_dist·|p - p_t|² + w_rot·θ² + w_acc·|a|² + w_ang·|α|²
    """
    cfg = config if config is not None else MPCConfig()
    diff = sim.linear.position - target.linear.position
    angle = orientation_error(sim.angular.orientation, target.angular.orientation)
    return (cfg.weight_distance * float(diff @ diff)
            + cfg.weight_orientation * angle * angle
            + cfg.weight_accel * float(sim.linear.acceleration @ sim.linear.acceleration)
            + cfg.weight_ang_accel * float(sim.angular.angular_acceleration
                                           @ sim.angular.angular_acceleration))


def cost_speed(sim: MotionState, target: MotionState,
               config: MPCConfig | None = None) -> float:
    """Speed tracking: the target speed is carried in ``target.linear.velocity[0]``."""
    cfg = config if config is not None else MPCConfig()
    dv = sim.linear.speed - float(target.linear.velocity[0])
    return (cfg.weight_distance * dv * dv
            + cfg.weight_accel * float(sim.linear.acceleration @ sim.linear.acceleration))


def cost_hybrid(sim: MotionState, target: MotionState,
                config: MPCConfig | None = None) -> float:
    """Default cost plus a velocity matching term w_vel·|v - v_t|²."""
    cfg = config if config is not None else MPCConfig()
    dv = sim.linear.velocity - target.linear.velocity
    return cost_default(sim, target, cfg) + cfg.weight_velocity * float(dv @ dv)


# =============================================================================
# Rollout
# =============================================================================

def _horizon_steps(config: MPCConfig) -> int | None:
    if config.horizon_sec <= 0.0 or config.step_dt <= 0.0:
        logger.debug("MPC rejected: horizon_sec=%s step_dt=%s",
                     config.horizon_sec, config.step_dt)
        return None
    return max(1, int(math.floor(config.horizon_sec / config.step_dt + 1e-9)))


def _external_accel(sim: MotionState, env: Environ | None,
                    body: BodyProps | None) -> NDArray[np.float64]:
    if env is not None and body is not None:
        return accel(sim, env, body)
    if env is not None:
        return gravity_wind_accel(env)
    return np.zeros(3)


def _clamp_speed(sim: MotionState, config: MPCConfig) -> None:
    lin = sim.linear
    speed = float(np.linalg.norm(lin.velocity))
    if config.max_speed > 0.0 and speed > config.max_speed:
        lin.velocity = lin.velocity * (config.max_speed / speed)

    ang = sim.angular
    ang_speed = float(np.linalg.norm(ang.angular_velocity))
    if config.max_ang_speed > 0.0 and ang_speed > config.max_ang_speed:
        ang.angular_velocity = ang.angular_velocity * (config.max_ang_speed / ang_speed)


def _rollout(current: MotionState, target: MotionState, env: Environ | None,
             body: BodyProps | None, config: MPCConfig, cost_fn: CostFunc,
             accel_cmd: NDArray[np.float64], ang_cmd: NDArray[np.float64],
             steps: int, bound: float = math.inf,
             trajectory: Trajectory | None = None) -> tuple[float, MotionState]:
    """Simulate one candidate; stops early once the running cost exceeds ``bound``."""
    sim = current.copy()
    dt = config.step_dt
    total = 0.0
    for k in range(steps):
        sim.linear.acceleration = accel_cmd + _external_accel(sim, env, body)
        sim.angular.angular_acceleration = ang_cmd.copy()
        integrate_motion_rk4(sim, dt)
        _clamp_speed(sim, config)
        total += cost_fn(sim, target, config)
        if trajectory is not None:
            trajectory.add_sample((k + 1) * dt, sim)
        if total > bound:
            break
    return total, sim


def _levels(limit: float) -> tuple[float, ...]:
    return (-limit, 0.0, limit) if limit > 0.0 else (0.0,)


def _search(current, target, env, body, config, cost_fn, steps,
            linear: Iterable, angular: Iterable, early_exit: bool = False, best=None):
    if best is None:
        best = (math.inf, np.zeros(3), np.zeros(3))
    best_cost, best_accel, best_ang = best
    angular = [as_vec3(c) for c in angular]
    for cand in linear:
        a = as_vec3(cand)
        for alpha in angular:
            bound = best_cost if early_exit else math.inf
            cost, _ = _rollout(current, target, env, body, config, cost_fn,
                               a, alpha, steps, bound)
            if cost < best_cost:
                best_cost, best_accel, best_ang = cost, a, alpha
    return best_cost, best_accel, best_ang


def _finish(current, target, env, body, config, cost_fn, steps, best,
            trajectory: Trajectory | None) -> MPCOutput:
    best_cost, best_accel, best_ang = best
    if trajectory is not None:
        trajectory.clear()
    _, future = _rollout(current, target, env, body, config, cost_fn,
                         best_accel, best_ang, steps, trajectory=trajectory)
    return MPCOutput(best_accel.copy(), best_ang.copy(), future, best_cost)


# =============================================================================
# Solvers
# =============================================================================

def mpc_solve(current: MotionState, target: MotionState,
              env: Environ | None = None, body: BodyProps | None = None,
              config: MPCConfig | None = None, cost_fn: CostFunc = cost_default,
              trajectory: Trajectory | None = None) -> MPCOutput | None:
    """
    Full candidate search.

    Every axis of the linear and angular commands tries {-max, 0, +max}
    (a zero limit gives the single value 0), so up to 3⁶ rollouts run.

    Args:
        current: State to plan from (not modified)
        target: Desired state
        env: Environment; with ``body`` the model acceleration is used,
            alone it contributes gravity plus the distorted wind
        body: Body properties
        config: MPC parameters (defaults when None)
        cost_fn: Per-step cost, summed over the horizon
        trajectory: Receives the best rollout when given

    Returns:
        MPCOutput, or None for a non-positive horizon or step
    """
    config = config if config is not None else MPCConfig()
    steps = _horizon_steps(config)
    if steps is None:
        return None

    linear = list(product(_levels(config.max_accel), repeat=3))
    angular = list(product(_levels(config.max_ang_accel), repeat=3))
    best = _search(current, target, env, body, config, cost_fn, steps, linear, angular)
    return _finish(current, target, env, body, config, cost_fn, steps, best, trajectory)


def mpc_solve_fast(current: MotionState, target: MotionState,
                   env: Environ | None = None, body: BodyProps | None = None,
                   config: MPCConfig | None = None, cost_fn: CostFunc = cost_default,
                   trajectory: Trajectory | None = None) -> MPCOutput | None:
    """
    Reduced search toward the error.

    Each linear axis tries {0, sign(Δp)·max_accel} and each angular axis
    {0, sign(r)·max_ang_accel}, where r is the rotation vector from the
    current to the target orientation. Rollouts stop as soon as they cost
    more than the best so far.
    """
    config = config if config is not None else MPCConfig()
    steps = _horizon_steps(config)
    if steps is None:
        return None

    error = target.linear.position - current.linear.position
    axis_angle = q_to_axis_angle(q_mult(target.angular.orientation,
                                        q_inverse(current.angular.orientation)))
    rotation = axis_angle[:3] * axis_angle[3]

    def axis_options(err: float, limit: float) -> tuple[float, ...]:
        push = float(np.sign(err)) * limit
        return (0.0, push) if push != 0.0 else (0.0,)

    linear = list(product(*(axis_options(e, config.max_accel) for e in error)))
    angular = list(product(*(axis_options(r, config.max_ang_accel) for r in rotation)))
    best = _search(current, target, env, body, config, cost_fn, steps,
                   linear, angular, early_exit=True)
    return _finish(current, target, env, body, config, cost_fn, steps, best, trajectory)


def mpc_solve_coarse2fine(current: MotionState, target: MotionState,
                          env: Environ | None = None, body: BodyProps | None = None,
                          config: MPCConfig | None = None, cost_fn: CostFunc = cost_default,
                          trajectory: Trajectory | None = None) -> MPCOutput | None:
    """
    Full search followed by a local refinement of the linear command.

    The refinement tries best ± {-¼, 0, +¼}·max_accel per axis with the
    angular command fixed, so the result never costs more than ``mpc_solve``.
    """
    config = config if config is not None else MPCConfig()
    steps = _horizon_steps(config)
    if steps is None:
        return None

    linear = list(product(_levels(config.max_accel), repeat=3))
    angular = list(product(_levels(config.max_ang_accel), repeat=3))
    best = _search(current, target, env, body, config, cost_fn, steps, linear, angular)

    base = best[1]
    fine = [base + np.array(offset)
            for offset in product(_levels(0.25 * config.max_accel), repeat=3)]
    best = _search(current, target, env, body, config, cost_fn, steps,
                   fine, [best[2]], best=best)
    return _finish(current, target, env, body, config, cost_fn, steps, best, trajectory)


def mpc_solve_route(current: MotionState, route: MPCRoute,
                    env: Environ | None = None, body: BodyProps | None = None,
                    config: MPCConfig | None = None, cost_fn: CostFunc = cost_default,
                    trajectory: Trajectory | None = None) -> MPCOutput | None:
    """Solve toward the route point nearest to the current position."""
    if not route.points:
        logger.debug("MPC route is empty")
        return None

    points = [as_vec3(p) for p in route.points]
    position = current.linear.position
    nearest = min(points, key=lambda p: float((p - position) @ (p - position)))

    target = current.copy()
    target.linear.position = nearest
    return mpc_solve(current, target, env, body, config, cost_fn, trajectory)


def mpc_solve_directional(current: MotionState, direction_target: MPCDirectionTarget,
                          env: Environ | None = None, body: BodyProps | None = None,
                          config: MPCConfig | None = None, cost_fn: CostFunc = cost_default,
                          trajectory: Trajectory | None = None) -> MPCOutput | None:
    """
    Solve toward a point ahead along a heading.

    The aim point is p + direction·duration·step_dt·max_speed and the target
    orientation is the direction target's orientation.
    """
    config = config if config is not None else MPCConfig()
    reach = direction_target.duration * config.step_dt * config.max_speed

    target = current.copy()
    target.linear.position = current.linear.position + direction_target.direction * reach
    target.angular.orientation = direction_target.orientation.copy()
    return mpc_solve(current, target, env, body, config, cost_fn, trajectory)


# =============================================================================
# Controller
# =============================================================================

class MPCController:
    """
    MPC behind the Controller interface.

    The scalar problem is mapped onto the x axis: the body starts at the
    origin moving at ``measured`` and is steered toward position ``target``.
    The command is the x component of the chosen acceleration.
    """

    def __init__(self, config: MPCConfig | None = None, env: Environ | None = None,
                 body: BodyProps | None = None, cost_fn: CostFunc = cost_default):
        self.config = config if config is not None else MPCConfig()
        self.env = env
        self.body = body
        self.cost_fn = cost_fn

    def compute(self, target: float, measured: float, dt: float) -> float:
        current = MotionState(LinearState(velocity=(measured, 0.0, 0.0)))
        goal = MotionState(LinearState(position=(target, 0.0, 0.0)))
        out = mpc_solve(current, goal, self.env, self.body, self.config, self.cost_fn)
        if out is None:
            return 0.0
        return float(out.desired_accel[0])

    def reset(self) -> None:
        pass
