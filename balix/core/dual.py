"""
Dual numbers for forward-mode automatic differentiation.

A dual number a + bε with ε² = 0 carries a value (``re``) and a derivative
coefficient (``du``). Evaluating f on Dual.variable(x) yields
Dual(f(x), f'(x)), which lets solvers obtain exact Jacobian entries without
finite differences.

Example:
    >>> from balix.core.dual import Dual, derivative
    >>> derivative(lambda x: x * x * 3.0, 2.0)
    12.0
"""

import math
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class Dual:
    """Value + derivative pair."""
    re: float = 0.0
    du: float = 0.0

    @classmethod
    def variable(cls, x: float) -> "Dual":
        """Independent variable: derivative seed 1."""
        return cls(float(x), 1.0)

    @classmethod
    def constant(cls, x: float) -> "Dual":
        return cls(float(x), 0.0)

    @staticmethod
    def _lift(other) -> "Dual":
        if isinstance(other, Dual):
            return other
        return Dual(float(other), 0.0)

    def __neg__(self) -> "Dual":
        return Dual(-self.re, -self.du)

    def __add__(self, other) -> "Dual":
        o = Dual._lift(other)
        return Dual(self.re + o.re, self.du + o.du)

    __radd__ = __add__

    def __sub__(self, other) -> "Dual":
        o = Dual._lift(other)
        return Dual(self.re - o.re, self.du - o.du)

    def __rsub__(self, other) -> "Dual":
        return Dual._lift(other) - self

    def __mul__(self, other) -> "Dual":
        o = Dual._lift(other)
        return Dual(self.re * o.re, self.re * o.du + self.du * o.re)

    __rmul__ = __mul__

    def __truediv__(self, other) -> "Dual":
        o = Dual._lift(other)
        if o.re == 0.0:
            raise ZeroDivisionError("dual division by zero real part")
        return Dual(self.re / o.re,
                    (self.du * o.re - self.re * o.du) / (o.re * o.re))

    def __rtruediv__(self, other) -> "Dual":
        return Dual._lift(other) / self

    def __pow__(self, n: float) -> "Dual":
        """Real power: (a + bε)^n = a^n + n·a^(n-1)·b ε."""
        return Dual(self.re ** n, n * self.re ** (n - 1) * self.du)

    def scale(self, s: float) -> "Dual":
        return Dual(self.re * s, self.du * s)


def dual_sin(a: Dual) -> Dual:
    return Dual(math.sin(a.re), math.cos(a.re) * a.du)


def dual_cos(a: Dual) -> Dual:
    return Dual(math.cos(a.re), -math.sin(a.re) * a.du)


def dual_exp(a: Dual) -> Dual:
    e = math.exp(a.re)
    return Dual(e, e * a.du)


def dual_sqrt(a: Dual) -> Dual:
    if a.re <= 0.0:
        raise ValueError("dual sqrt requires a positive real part")
    r = math.sqrt(a.re)
    return Dual(r, a.du / (2.0 * r))


def derivative(f: Callable[[Dual], Dual], x: float) -> float:
    """df/dx at x, evaluated in one forward pass."""
    result = f(Dual.variable(x))
    if not isinstance(result, Dual):
        return 0.0
    return result.du
