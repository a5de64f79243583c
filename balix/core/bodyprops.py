"""
Body properties and friction helpers.

Friction is a linear velocity damping, v ← v · max(0, 1 - μ·dt). There is
no static (Coulomb) threshold.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .constants import (
    DEFAULT_CROSS_SECTION,
    DEFAULT_DRAG_COEF,
    DEFAULT_FRICTION,
    DEFAULT_MASS,
    DEFAULT_RESTITUTION,
    EPS_FRICTION_SPEED,
)
from .math_utils import as_vec3
from .solver import solve_linear
from .types import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass
class BodyProps:
    """
    Physical parameters of a body.

    Attributes:
        mass: kg, must be > 0
        drag_coef: Aerodynamic drag coefficient C_d (0.47 = sphere)
        cross_section: Reference area A (m²)
        restitution: Bounce coefficient e in [0, 1]
        friction: Linear friction coefficient μ in [0, 1] (1/s)
    """
    mass: float = DEFAULT_MASS
    drag_coef: float = DEFAULT_DRAG_COEF
    cross_section: float = DEFAULT_CROSS_SECTION
    restitution: float = DEFAULT_RESTITUTION
    friction: float = DEFAULT_FRICTION

    def validated(self) -> "BodyProps":
        """
        Return self after checking the documented ranges.

        Raises:
            InvalidArgumentError: if any parameter is out of range
        """
        if not self.mass > 0.0:
            raise InvalidArgumentError(f"mass must be positive, got {self.mass}")
        if self.drag_coef < 0.0 or self.cross_section < 0.0:
            raise InvalidArgumentError("drag_coef and cross_section must be non-negative")
        if not 0.0 <= self.restitution <= 1.0:
            raise InvalidArgumentError(f"restitution must be in [0, 1], got {self.restitution}")
        if not 0.0 <= self.friction <= 1.0:
            raise InvalidArgumentError(f"friction must be in [0, 1], got {self.friction}")
        return self

    @property
    def drag_area(self) -> float:
        """C_d · A (m²)."""
        return self.drag_coef * self.cross_section


def apply_friction(velocity, body: BodyProps, dt: float) -> NDArray[np.float64]:
    """
    Damp a velocity over dt: v · max(0, 1 - μ·dt).

    Returns the velocity unchanged when dt ≤ 0.
    """
    v = as_vec3(velocity)
    if body is None or dt <= 0.0:
        return v
    factor = max(0.0, 1.0 - body.friction * dt)
    return v * factor


def apply_friction_dt(velocity, body: BodyProps, dt: float) -> tuple[NDArray[np.float64], float]:
    """
    Damp a velocity and report how much of dt was consumed.

    If the damping factor would go negative, the body stops at
    t_stop = 1/μ (root of μ·t = 1) and the consumed time is min(t_stop, dt).

    Returns:
        (new_velocity, consumed_dt). A body already at rest (|v| ≤ 1e-5)
        is zeroed and consumes 0.
    """
    v = as_vec3(velocity)
    if body is None or dt <= 0.0:
        return v, 0.0

    if np.linalg.norm(v) <= EPS_FRICTION_SPEED:
        return np.zeros(3), 0.0

    factor = 1.0 - body.friction * dt
    if factor >= 0.0:
        return v * factor, dt

    t_stop = solve_linear(body.friction, -1.0)
    if t_stop is not None and t_stop > 0.0:
        logger.debug("friction stops body after %.4f s", t_stop)
        return np.zeros(3), min(t_stop, dt)
    return v, dt


def apply_friction_heat(velocity, body: BodyProps, dt: float) -> tuple[NDArray[np.float64], float]:
    """
    Damp a velocity and return the kinetic energy dissipated as heat.

        ΔKE = max(0, ½·m·(|v_before|² - |v_after|²))

    Returns:
        (new_velocity, heat in J)
    """
    v = as_vec3(velocity)
    if body is None or dt <= 0.0:
        return v, 0.0

    v_prev = float(np.linalg.norm(v))
    v_new = apply_friction(v, body, dt)
    speed_new = float(np.linalg.norm(v_new))
    delta_ke = 0.5 * body.mass * (v_prev * v_prev - speed_new * speed_new)
    return v_new, max(0.0, delta_ke)
