"""
Environmental Physics Module.

Defines the per-step environment bundle (gravity, wind, air properties)
consumed by the motion model, a lumped atmospheric "distortion" factor
that scales non-gravitational accelerations, and a periodic gust model.

The environment is uniform in space: every body in a step sees the same
gravity, wind and air density.
"""

import logging
from dataclasses import dataclass, field, replace

import numpy as np
from numba import jit
from numpy.typing import NDArray

from .constants import (
    AIR_DENSITY_SEA_LEVEL,
    GRAVITY,
    HUMIDITY_REF,
    PRESSURE_REF,
    TEMPERATURE_REF,
)
from .math_utils import as_vec3

logger = logging.getLogger(__name__)


def _default_gravity() -> NDArray[np.float64]:
    return np.array([0.0, -GRAVITY, 0.0])


@dataclass
class Environ:
    """
    Environment acting on a body during a step.

    Attributes:
        gravity: Gravitational acceleration vector (m/s²), default (0, -9.81, 0)
        wind_velocity: Air mass velocity (m/s)
        air_density: ρ (kg/m³)
        humidity: Relative humidity (%)
        temperature: Air temperature (°C)
        pressure: Static pressure (Pa)
    """
    gravity: NDArray[np.float64] = field(default_factory=_default_gravity)
    wind_velocity: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    air_density: float = AIR_DENSITY_SEA_LEVEL
    humidity: float = HUMIDITY_REF
    temperature: float = TEMPERATURE_REF
    pressure: float = PRESSURE_REF

    def __post_init__(self):
        self.gravity = as_vec3(self.gravity)
        self.wind_velocity = as_vec3(self.wind_velocity)

    @classmethod
    def vacuum(cls, gravity=(0.0, -GRAVITY, 0.0)) -> "Environ":
        """Gravity only: no air, no wind."""
        return cls(gravity=gravity, air_density=0.0)

    def copy(self) -> "Environ":
        return replace(self, gravity=self.gravity.copy(),
                       wind_velocity=self.wind_velocity.copy())


# =============================================================================
# Atmospheric Distortion Factor
# =============================================================================

@jit(nopython=True, cache=True)
def _calc_factor(humidity: float, temperature: float,
                 air_density: float, pressure: float) -> float:
    """
    Lumped scale factor for non-gravitational accelerations.

    Product of four bounded terms:
        humidity:    1 - 0.3·((h - 50)/50)²,             ≥ 0.7
        temperature: (0.7 + 0.3·((T - 20)/40)²) · max(0.8, 1 - |T - 20|/200)
        density:     clamp(ρ / 1.225, 0.8, 1.2)
        pressure:    (1 - 0.1·((P - P0)/20000)²) · max(0.85, 1 - |P - P0|/200000)

    The product is floored at 0.5.
    """
    humidity_norm = (humidity - 50.0) / 50.0
    humidity_factor = 1.0 - 0.3 * humidity_norm * humidity_norm
    if humidity_factor < 0.7:
        humidity_factor = 0.7

    temp_norm = (temperature - 20.0) / 40.0
    temp_u = 0.7 + 0.3 * temp_norm * temp_norm
    temp_linear = 1.0 - abs(temperature - 20.0) / 200.0
    if temp_linear < 0.8:
        temp_linear = 0.8
    temp_factor = temp_u * temp_linear

    density_factor = air_density / 1.225
    if density_factor < 0.8:
        density_factor = 0.8
    elif density_factor > 1.2:
        density_factor = 1.2

    pressure_norm = (pressure - 101325.0) / 20000.0
    pressure_u = 1.0 - 0.1 * pressure_norm * pressure_norm
    pressure_linear = 1.0 - abs(pressure - 101325.0) / 200000.0
    if pressure_linear < 0.85:
        pressure_linear = 0.85
    pressure_factor = pressure_u * pressure_linear

    factor = humidity_factor * temp_factor * density_factor * pressure_factor
    if factor < 0.5:
        factor = 0.5
    return factor


def environ_factor(env: Environ | None) -> float:
    """Distortion factor of an environment (1.0 when env is None)."""
    if env is None:
        return 1.0
    return float(_calc_factor(env.humidity, env.temperature,
                              env.air_density, env.pressure))


def distort_accel(env: Environ | None, accel, include_gravity: bool = True) -> NDArray[np.float64]:
    """
    Scale the non-gravitational part of an acceleration by the environment factor.

    Args:
        env: Environment (None leaves the acceleration unchanged)
        accel: Acceleration vector
        include_gravity: When True, ``accel`` contains env.gravity, which is
            split off before scaling and added back afterwards.

    Returns:
        New acceleration vector
    """
    a = as_vec3(accel)
    if env is None:
        return a

    factor = environ_factor(env)
    if include_gravity:
        return (a - env.gravity) * factor + env.gravity
    return a * factor


def gravity_accel(env: Environ | None) -> NDArray[np.float64]:
    """Gravity of the environment, or the standard (0, -9.81, 0)."""
    if env is None:
        return _default_gravity()
    return env.gravity.copy()


def gravity_wind_accel(env: Environ | None) -> NDArray[np.float64]:
    """
    Gravity plus the wind term, distorted by the environment factor.

    The wind velocity is treated as an acceleration field sample here, as
    the projectile update path consumes it.
    """
    if env is None:
        return _default_gravity()
    return distort_accel(env, env.gravity + env.wind_velocity)


def apply_wind(env: Environ, accel, dt: float) -> bool:
    """
    Accelerate the wind in place: wind += accel·dt.

    Returns:
        False (and leaves env unchanged) when dt ≤ 0
    """
    if env is None or dt <= 0.0:
        logger.debug("apply_wind ignored (dt=%s)", dt)
        return False
    env.wind_velocity = env.wind_velocity + as_vec3(accel) * dt
    return True


# =============================================================================
# Periodic Gust Model
# =============================================================================

@dataclass
class GustModel:
    """
    Sinusoidal gust superimposed on a base wind.

        s = sin(2π·f·elapsed)
        sample = (base.x + amp.x·s, gravity.y + amp.y·s, base.z + amp.z·s)

    The vertical channel carries gravity so the sample can be used directly
    as an acceleration field.
    """
    base_wind: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    amplitude: NDArray[np.float64] = field(
        default_factory=lambda: np.array([0.5, 0.0, 0.5]))
    frequency: float = 1.0  # Hz
    gravity: NDArray[np.float64] = field(default_factory=_default_gravity)
    elapsed: float = 0.0    # s

    def __post_init__(self):
        self.base_wind = as_vec3(self.base_wind)
        self.amplitude = as_vec3(self.amplitude)
        self.gravity = as_vec3(self.gravity)
        if self.frequency < 0.0:
            self.frequency = 0.0

    def advance(self, dt: float) -> None:
        """Move the gust clock forward."""
        self.elapsed += dt

    def sample(self, env: Environ | None = None) -> NDArray[np.float64]:
        """Current gust acceleration, distorted by ``env`` when given."""
        s = np.sin(2.0 * np.pi * self.frequency * self.elapsed)
        out = np.array([
            self.base_wind[0] + self.amplitude[0] * s,
            self.gravity[1] + self.amplitude[1] * s,
            self.base_wind[2] + self.amplitude[2] * s,
        ])
        if env is not None:
            out = distort_accel(env, out)
        return out
