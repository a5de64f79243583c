"""
Numeric defaults and tolerances for motion simulation.

Tolerances keep the magnitudes of the single-precision library they were
tuned for, even though all arithmetic here runs in float64.
"""

from typing import Final

# Standard gravitational acceleration used by environment defaults (m/s²)
GRAVITY: Final[float] = 9.81

# Gravity magnitude assumed by the vacuum launch-parameter solver (m/s²)
LAUNCH_GRAVITY: Final[float] = 9.8

# Sea-level air density (kg/m³)
AIR_DENSITY_SEA_LEVEL: Final[float] = 1.225

# Reference atmosphere for the environment factor
HUMIDITY_REF: Final[float] = 50.0        # %
TEMPERATURE_REF: Final[float] = 20.0     # °C
PRESSURE_REF: Final[float] = 101325.0    # Pa

# Body property defaults
DEFAULT_MASS: Final[float] = 1.0               # kg
DEFAULT_DRAG_COEF: Final[float] = 0.47         # sphere
DEFAULT_CROSS_SECTION: Final[float] = 0.01     # m²
DEFAULT_RESTITUTION: Final[float] = 0.5
DEFAULT_FRICTION: Final[float] = 0.1

# Integrator defaults
DEFAULT_TIME_STEP: Final[float] = 0.016        # ~60 Hz

# Kalman defaults
KALMAN_DEFAULT_Q: Final[float] = 0.01
KALMAN_DEFAULT_R: Final[float] = 1.0
KALMAN_DEFAULT_DT: Final[float] = 0.1

# PID defaults
PID_DEFAULT_DT: Final[float] = 0.01

# Projectile defaults
PROJECTILE_DEFAULT_LIFETIME: Final[float] = 60.0   # s

# Solver limits
BISECTION_MAX_ITER: Final[int] = 100
POSITION_SCAN_SAMPLES: Final[int] = 100

# Tolerances
EPS_FLOAT_EQUAL: Final[float] = 1e-5     # relative equality
EPS_FLOAT_ZERO: Final[float] = 1e-8      # |x| treated as zero
EPS_VEC_ZERO: Final[float] = 1e-8        # vector normalization guard
EPS_OMEGA_ZERO: Final[float] = 1e-6      # angular velocity treated as zero
EPS_DRAG_SPEED: Final[float] = 1e-6      # drag vanishes below this speed
EPS_FRICTION_SPEED: Final[float] = 1e-5  # friction stops the body below this speed
EPS_GUIDANCE_SPEED: Final[float] = 1e-5  # lead guidance needs at least this speed
EPS_MASS: Final[float] = 1e-6            # angular drag mass regularizer
