"""Scalar helpers: tolerant comparison, guarded division, interpolation."""

import math

from .constants import EPS_FLOAT_EQUAL, EPS_FLOAT_ZERO


def float_equal(a: float, b: float) -> bool:
    """Relative equality: |a - b| ≤ 1e-5 · max(|a|, |b|)."""
    if a == b:
        return True
    return abs(a - b) <= EPS_FLOAT_EQUAL * max(abs(a), abs(b))


def float_equal_tol(a: float, b: float, tol: float) -> bool:
    """Absolute equality within |tol| (negative tolerances are mirrored)."""
    return abs(a - b) <= abs(tol)


def float_zero(x: float) -> bool:
    """True when |x| ≤ 1e-8."""
    return abs(x) <= EPS_FLOAT_ZERO


def safe_div(a: float, b: float, fallback: float = 0.0) -> float:
    """a / b, or ``fallback`` when b is numerically zero."""
    return fallback if float_zero(b) else a / b


def clamp(x: float, min_val: float, max_val: float) -> float:
    return min_val if x < min_val else (max_val if x > max_val else x)


def clamp01(x: float) -> float:
    return clamp(x, 0.0, 1.0)


def sign(x: float) -> float:
    """-1, 0 or +1."""
    return 1.0 if x > 0.0 else (-1.0 if x < 0.0 else 0.0)


def deg2rad(deg: float) -> float:
    return deg * (math.pi / 180.0)


def rad2deg(rad: float) -> float:
    return rad * (180.0 / math.pi)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def inv_lerp(a: float, b: float, value: float) -> float:
    """Parameter t with lerp(a, b, t) == value; 0 for an empty interval."""
    return 0.0 if float_zero(b - a) else (value - a) / (b - a)


def remap(in_min: float, in_max: float,
          out_min: float, out_max: float, value: float) -> float:
    """Map value from [in_min, in_max] onto [out_min, out_max] (unclamped)."""
    return lerp(out_min, out_max, inv_lerp(in_min, in_max, value))


def smoothstep(edge0: float, edge1: float, x: float) -> float:
    """Hermite step 3t² - 2t³ with t = clamp01(inv_lerp(edge0, edge1, x))."""
    t = clamp01(inv_lerp(edge0, edge1, x))
    return t * t * (3.0 - 2.0 * t)
