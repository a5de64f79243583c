"""
Generic scalar controllers.

A Controller maps (target, measured, dt) to a command. The missile
predictor uses one to regulate thrust magnitude against a target speed.
"""

from typing import Protocol, runtime_checkable

from .pid import PIDController, clamp_output


@runtime_checkable
class Controller(Protocol):
    def compute(self, target: float, measured: float, dt: float) -> float:
        ...

    def reset(self) -> None:
        ...


class PIDControllerAdapter:
    """
    PID behind the Controller interface.

    The controller period follows the caller's dt on every call, and the
    output is additionally bounded by ``output_limit`` when positive.
    """

    def __init__(self, pid: PIDController | None = None, output_limit: float = 0.0):
        self.pid = pid if pid is not None else PIDController()
        self.output_limit = output_limit

    def compute(self, target: float, measured: float, dt: float) -> float:
        self.pid.dt = dt
        output = self.pid.update(target, measured)
        return clamp_output(output, self.output_limit)

    def reset(self) -> None:
        self.pid.reset()


class BangBangController:
    """Full command toward the target: +max below it, -max otherwise."""

    def __init__(self, max_output: float = 1.0):
        self.max_output = max_output

    def compute(self, target: float, measured: float, dt: float) -> float:
        return self.max_output if measured < target else -self.max_output

    def reset(self) -> None:
        pass
