"""
Forward projectile and missile predictors.

Both predictors march a point mass with semi-implicit Euler steps of a
fixed dt from t = 0, recording every pre-step state into a Trajectory and
checking the ground plane after each step. The first step that ends at or
below ``ground_height`` is resolved by linear interpolation between the
pre- and post-step positions:

    α          = (ground - y_prev) / (y - y_prev)
    t_impact   = t + α·dt
    p_impact   = lerp(p_prev, p, α),   p_impact.y = ground

The impact sample is appended after the regular sample of the same step.
A run that reaches ``max_time`` without touching the ground is reported as
``valid=False``. A launch point below the ground is an impact at t = 0 at
the launch point; a launch from exactly ground height flies normally.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from .constants import DEFAULT_TIME_STEP, GRAVITY
from .controller import Controller
from .guidance import Guidance, guidance_direction, is_active, with_time
from .integrators import semi_implicit_step
from .math_utils import as_vec3, normalize_vector, vector_lerp
from .projectile import EnvCallback
from .state import LinearState, MotionState
from .trajectory import Trajectory

logger = logging.getLogger(__name__)


def _default_gravity() -> NDArray[np.float64]:
    return np.array([0.0, -GRAVITY, 0.0])


# =============================================================================
# Configuration & Result
# =============================================================================

@dataclass
class ProjectilePredictConfig:
    """
    Settings for an unguided forward prediction.

    Attributes:
        start_position: Launch point
        start_velocity: Launch velocity
        gravity: Gravity acceleration vector
        env_callback: Optional (state, dt) -> acceleration sample
        ground_height: y of the ground plane
        max_time: Simulation horizon (s)
        dt: Step size (s)
    """
    start_position: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    start_velocity: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    gravity: NDArray[np.float64] = field(default_factory=_default_gravity)
    env_callback: EnvCallback | None = None
    ground_height: float = 0.0
    max_time: float = 10.0
    dt: float = DEFAULT_TIME_STEP

    def __post_init__(self):
        self.start_position = as_vec3(self.start_position)
        self.start_velocity = as_vec3(self.start_velocity)
        self.gravity = as_vec3(self.gravity)


@dataclass
class MissilePredictConfig(ProjectilePredictConfig):
    """
    Settings for a guided forward prediction.

    Attributes:
        thrust: Thrust acceleration; its magnitude caps the applied thrust and
            its direction is used when no guidance is active
        fuel: Burn time (s)
        guidance: Steering law
        controller: Thrust-magnitude controller regulating speed toward
            ||v0|| + ||thrust|| (None = no thrust)
    """
    thrust: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    fuel: float = 0.0
    guidance: Guidance | None = None
    controller: Controller | None = None

    def __post_init__(self):
        super().__post_init__()
        self.thrust = as_vec3(self.thrust)


@dataclass
class ProjectileResult:
    trajectory: Trajectory = field(default_factory=Trajectory)
    impact_time: float = 0.0
    impact_position: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    valid: bool = False


# =============================================================================
# Forward Loop
# =============================================================================

StepAccel = Callable[[float, MotionState, float], NDArray[np.float64]]


def _env_sample(env_callback: EnvCallback | None, state: MotionState,
                dt: float) -> NDArray[np.float64]:
    if env_callback is None:
        return np.zeros(3)
    sample = env_callback(state, dt)
    return np.zeros(3) if sample is None else as_vec3(sample)


def _simulate(config: ProjectilePredictConfig, step_accel: StepAccel) -> ProjectileResult:
    result = ProjectileResult()
    dt = config.dt
    if dt <= 0.0 or config.max_time <= 0.0:
        logger.debug("Prediction rejected: dt=%s max_time=%s", dt, config.max_time)
        return result

    ground = config.ground_height
    state = MotionState(LinearState(config.start_position, config.start_velocity,
                                    config.gravity))
    lin = state.linear

    # Launched below the ground: impact at t = 0
    if lin.position[1] < ground:
        result.trajectory.add_sample(0.0, state)
        result.impact_time = 0.0
        result.impact_position = lin.position.copy()
        result.valid = True
        return result

    n_steps = int(np.floor(config.max_time / dt + 1e-9))

    for i in range(n_steps + 1):
        t = i * dt
        lin.acceleration = step_accel(t, state, dt)
        result.trajectory.add_sample(t, state)

        pos_prev = lin.position.copy()
        vel_prev = lin.velocity.copy()
        lin.position, lin.velocity = semi_implicit_step(lin.position, lin.velocity,
                                                        lin.acceleration, dt)

        if lin.position[1] <= ground:
            dy = lin.position[1] - pos_prev[1]
            alpha = (ground - pos_prev[1]) / dy if dy != 0.0 else 0.0
            impact_pos = vector_lerp(pos_prev, lin.position, alpha)
            impact_pos[1] = ground

            impact_state = MotionState(LinearState(
                impact_pos, vector_lerp(vel_prev, lin.velocity, alpha), lin.acceleration))
            result.impact_time = t + alpha * dt
            result.impact_position = impact_pos
            result.trajectory.add_sample(result.impact_time, impact_state)
            result.valid = True
            return result

    logger.debug("No ground contact within %.3f s", config.max_time)
    return result


def predict_projectile(config: ProjectilePredictConfig) -> ProjectileResult:
    """
    Predict an unguided shell's flight to the ground.

    Net acceleration each step is gravity plus the environment sample.

    Example:
        >>> cfg = ProjectilePredictConfig((0, 10, 0), (5, 0, 0), (0, -9.8, 0), dt=0.01)
        >>> predict_projectile(cfg).impact_time     # ≈ 1.4236
    """
    def step_accel(t, state, dt):
        return config.gravity + _env_sample(config.env_callback, state, dt)

    return _simulate(config, step_accel)


def predict_missile(config: MissilePredictConfig) -> ProjectileResult:
    """
    Predict a guided missile's flight to the ground.

    Per step:
        1. trajectory-following guidance is moved to the current time
        2. steering direction from guidance; without active guidance the
           normalized thrust vector is used
        3. while fuel lasts and a controller is set, the thrust magnitude is
           the controller output clamped to [0, ||thrust||] and dt of fuel
           is burned; without a controller no thrust is applied
        4. a = gravity + env + direction·thrust_magnitude
    """
    max_thrust = float(np.linalg.norm(config.thrust))
    target_speed = float(np.linalg.norm(config.start_velocity)) + max_thrust
    thrust_dir = normalize_vector(config.thrust)
    controller = config.controller
    guidance = config.guidance
    fuel = config.fuel

    if controller is not None:
        controller.reset()

    def step_accel(t, state, dt):
        nonlocal guidance, fuel
        lin = state.linear

        guidance = with_time(guidance, t)
        if is_active(guidance):
            direction = guidance_direction(guidance, lin.position, lin.velocity)
        else:
            direction = thrust_dir

        thrust_mag = 0.0
        if fuel > 0.0 and controller is not None:
            command = controller.compute(target_speed, float(np.linalg.norm(lin.velocity)), dt)
            thrust_mag = min(max(command, 0.0), max_thrust)
            fuel -= dt

        return (config.gravity + _env_sample(config.env_callback, state, dt)
                + direction * thrust_mag)

    return _simulate(config, step_accel)
