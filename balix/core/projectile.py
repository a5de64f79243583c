"""
Projectiles and their per-frame update.

A shell flies ballistically under its base acceleration (usually gravity),
an optional environment field and a linear drag term. A missile adds
guided thrust while fuel remains. Both advance with a semi-implicit Euler
step, spin their orientation by the current angular velocity, and age.
When age reaches the lifetime the hit callback fires once.

Environment callbacks take (state, dt) and return an acceleration sample
or None. They return new arrays, never shared buffers.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from .bodyprops import BodyProps
from .constants import GRAVITY, PROJECTILE_DEFAULT_LIFETIME
from .controller import Controller
from .environment import Environ
from .guidance import Guidance, guidance_direction, is_active
from .integrators import semi_implicit_step
from .math_utils import as_vec3, q_integrate
from .state import LinearState, MotionState

logger = logging.getLogger(__name__)

EnvCallback = Callable[[MotionState, float], NDArray[np.float64] | None]
HitCallback = Callable[["Projectile"], None]


# =============================================================================
# Environment Callbacks
# =============================================================================

def env_none(state: MotionState, dt: float) -> None:
    """No environmental influence."""
    return None


def env_constant(env: Environ | None = None) -> EnvCallback:
    """
    Callback returning a constant wind acceleration.

    Args:
        env: Source of the wind vector; defaults to a (1, 0, 0) wind

    Returns:
        Callable (state, dt) -> wind vector (fresh copy on every call)
    """
    wind = as_vec3(env.wind_velocity) if env is not None else np.array([1.0, 0.0, 0.0])

    def sample(state: MotionState, dt: float) -> NDArray[np.float64]:
        return wind.copy()

    return sample


# =============================================================================
# Projectile Records
# =============================================================================

@dataclass
class Projectile:
    """
    Ballistic body.

    ``state.linear.acceleration`` is the base acceleration (gravity plus any
    constant term). It is not modified by updates.
    """
    state: MotionState = field(default_factory=MotionState)
    body: BodyProps = field(default_factory=BodyProps)
    age: float = 0.0
    lifetime: float = PROJECTILE_DEFAULT_LIFETIME
    on_hit: HitCallback | None = None
    hit_fired: bool = False

    @classmethod
    def launch(cls, position, velocity, gravity=(0.0, -GRAVITY, 0.0), **kwargs):
        """Projectile at ``position`` moving with ``velocity`` under ``gravity``."""
        state = MotionState(LinearState(position, velocity, gravity))
        return cls(state=state, **kwargs)

    @property
    def position(self) -> NDArray[np.float64]:
        return self.state.linear.position

    @property
    def velocity(self) -> NDArray[np.float64]:
        return self.state.linear.velocity

    @property
    def expired(self) -> bool:
        return self.age >= self.lifetime


@dataclass
class Missile(Projectile):
    """
    Guided projectile.

    Attributes:
        thrust: Maximum thrust acceleration; only its magnitude is used when
            guidance supplies a direction
        fuel: Remaining burn time (s)
        guidance: Steering law
        controller: Optional thrust-magnitude controller (used by the predictor)
    """
    thrust: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    fuel: float = 0.0
    guidance: Guidance | None = None
    controller: Controller | None = None

    def __post_init__(self):
        self.thrust = as_vec3(self.thrust)


# =============================================================================
# Per-Frame Update
# =============================================================================

def apply_rotation(state: MotionState, dt: float) -> None:
    """Spin the orientation by the current angular velocity over dt."""
    ang = state.angular
    ang.orientation = q_integrate(ang.orientation, ang.angular_velocity, dt)


def _env_sample(env_callback: EnvCallback | None, state: MotionState,
                dt: float) -> NDArray[np.float64]:
    if env_callback is None:
        return np.zeros(3)
    sample = env_callback(state, dt)
    return np.zeros(3) if sample is None else as_vec3(sample)


def _advance(proj: Projectile, total_accel: NDArray[np.float64], dt: float) -> None:
    lin = proj.state.linear
    lin.position, lin.velocity = semi_implicit_step(lin.position, lin.velocity,
                                                    total_accel, dt)
    apply_rotation(proj.state, dt)

    proj.age += dt
    if proj.expired and not proj.hit_fired:
        proj.hit_fired = True
        if proj.on_hit is not None:
            proj.on_hit(proj)


def shell_update(shell: Projectile, dt: float,
                 env_callback: EnvCallback | None = None,
                 drag_coef: float = 0.0) -> bool:
    """
    Advance an unguided projectile by dt.

        a = a_base + env(state, dt) - drag_coef·v

    Returns:
        False (no-op) when dt ≤ 0
    """
    if dt <= 0.0:
        return False
    lin = shell.state.linear
    total = lin.acceleration + _env_sample(env_callback, shell.state, dt)
    total = total - drag_coef * lin.velocity
    _advance(shell, total, dt)
    return True


def missile_update(missile: Missile, dt: float,
                   env_callback: EnvCallback | None = None) -> bool:
    """
    Advance a guided projectile by dt.

    While fuel remains, thrust of magnitude |thrust| is applied along the
    guidance direction (or along the thrust vector itself when no guidance
    is active) and dt of fuel is burned.

    Returns:
        False (no-op) when dt ≤ 0
    """
    if dt <= 0.0:
        return False
    lin = missile.state.linear
    total = lin.acceleration.copy()

    if missile.fuel > 0.0:
        if is_active(missile.guidance):
            direction = guidance_direction(missile.guidance, lin.position, lin.velocity)
            total = total + direction * float(np.linalg.norm(missile.thrust))
        else:
            total = total + missile.thrust
        missile.fuel = max(0.0, missile.fuel - dt)

    total = total + _env_sample(env_callback, missile.state, dt)
    _advance(missile, total, dt)
    return True
