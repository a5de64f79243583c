"""
PID controllers (scalar and per-axis vector).

Scalar update:

    e = target - measured
    I ← I + e·dt
    D = (e - e_prev) / dt
    u = kp·e + ki·I + kd·D
    u_out = clamp(u, ±output_limit)          (output_limit = 0: no clamp)

With anti-windup enabled, the integral increment of a step whose output was
clamped is rolled back. ``preview`` runs the same arithmetic without
touching the controller state.
"""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from .constants import PID_DEFAULT_DT
from .math_utils import as_vec3
from .scalar import safe_div


def clamp_output(value: float, limit: float) -> float:
    """Symmetric clamp to [-limit, limit]; a non-positive limit disables it."""
    if limit <= 0.0:
        return value
    if value > limit:
        return limit
    if value < -limit:
        return -limit
    return value


@dataclass
class PIDController:
    """
    Scalar PID controller.

    Attributes:
        kp, ki, kd: Gains
        dt: Control period (s)
        integral: Accumulated ∫e dt
        prev_error: Error from the previous update
        output_limit: Symmetric output bound (0 = unlimited)
        anti_windup: Roll back integration while saturated
    """
    kp: float = 1.0
    ki: float = 0.0
    kd: float = 0.0
    dt: float = PID_DEFAULT_DT
    integral: float = 0.0
    prev_error: float = 0.0
    output_limit: float = 0.0
    anti_windup: bool = False

    @classmethod
    def auto(cls, dt: float) -> "PIDController":
        """
        Conservative starting gains for a control period dt.

            kp = 0.6,  ki = kp / (0.5·dt),  kd = 0.125·kp·dt

        A non-positive dt yields the default controller.
        """
        if dt <= 0.0:
            return cls()
        kp = 0.6
        return cls(kp=kp, ki=kp / (0.5 * dt), kd=0.125 * kp * dt, dt=dt)

    def set_state(self, integral: float, prev_error: float) -> None:
        self.integral = integral
        self.prev_error = prev_error

    def reset(self) -> None:
        """Clear integral and derivative memory."""
        self.integral = 0.0
        self.prev_error = 0.0

    def _compute(self, error: float, integral: float) -> float:
        derivative = safe_div(error - self.prev_error, self.dt, 0.0)
        return self.kp * error + self.ki * integral + self.kd * derivative

    def update(self, target: float, measured: float) -> float:
        """
        Advance the controller one period.

        Returns:
            Clamped control output
        """
        error = target - measured
        self.integral += error * self.dt

        output = self._compute(error, self.integral)
        limited = clamp_output(output, self.output_limit)

        if self.anti_windup and limited != output:
            self.integral -= error * self.dt

        self.prev_error = error
        return limited

    def preview(self, target: float, measured: float) -> float:
        """Output ``update`` would return now, without mutating state."""
        error = target - measured
        output = self._compute(error, self.integral + error * self.dt)
        return clamp_output(output, self.output_limit)


@dataclass
class PIDVec3:
    """Three independent scalar PID controllers for the x, y and z axes."""
    x: PIDController = field(default_factory=PIDController)
    y: PIDController = field(default_factory=PIDController)
    z: PIDController = field(default_factory=PIDController)

    @classmethod
    def with_gains(cls, kp: float, ki: float, kd: float, dt: float = PID_DEFAULT_DT,
                   output_limit: float = 0.0, anti_windup: bool = False) -> "PIDVec3":
        """Build three identically tuned axes."""
        def make():
            return PIDController(kp=kp, ki=ki, kd=kd, dt=dt,
                                 output_limit=output_limit, anti_windup=anti_windup)
        return cls(make(), make(), make())

    @classmethod
    def auto(cls, dt: float) -> "PIDVec3":
        return cls(PIDController.auto(dt), PIDController.auto(dt), PIDController.auto(dt))

    @property
    def axes(self) -> tuple[PIDController, PIDController, PIDController]:
        return self.x, self.y, self.z

    def reset(self) -> None:
        for axis in self.axes:
            axis.reset()

    def set_state(self, integral, prev_error) -> None:
        integral = as_vec3(integral)
        prev_error = as_vec3(prev_error)
        for i, axis in enumerate(self.axes):
            axis.set_state(float(integral[i]), float(prev_error[i]))

    def update(self, target, measured) -> NDArray[np.float64]:
        target = as_vec3(target)
        measured = as_vec3(measured)
        return np.array([axis.update(target[i], measured[i])
                         for i, axis in enumerate(self.axes)])

    def preview(self, target, measured) -> NDArray[np.float64]:
        target = as_vec3(target)
        measured = as_vec3(measured)
        return np.array([axis.preview(target[i], measured[i])
                         for i, axis in enumerate(self.axes)])
