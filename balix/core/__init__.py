"""Core motion engine - GUI independent."""

from .constants import GRAVITY, AIR_DENSITY_SEA_LEVEL, DEFAULT_TIME_STEP
from .types import (
    BalixError,
    ContractViolationError,
    InvalidArgumentError,
)
from .math_utils import (
    vec3,
    normalize_vector,
    q_identity,
    q_mult,
    q_rotate_vector,
    q_from_axis_angle,
    q_integrate,
)
from .dual import Dual, derivative
from .state import LinearState, AngularState, MotionState
from .environment import (
    Environ,
    GustModel,
    environ_factor,
    distort_accel,
    gravity_wind_accel,
)
from .bodyprops import BodyProps, apply_friction
from .model import (
    accel,
    predict,
    predict_rk4,
    predict_collision,
)
from .integrators import (
    IntegratorScheme,
    IntegratorConfig,
    integrate,
)
from .kalman import KalmanScalar, KalmanVec3
from .filters import StateFilter, KalmanVec3Filter
from .pid import PIDController, PIDVec3
from .controller import Controller, PIDControllerAdapter, BangBangController
from .mpc import MPCConfig, MPCController, MPCOutput, cost_default, mpc_solve
from .solver import (
    solve_quadratic,
    solve_bisection,
    solve_apex,
    solve_time_for_y,
)
from .trajectory import Trajectory, TrajectorySample
from .guidance import (
    Guidance,
    NoGuidance,
    ToTarget,
    Lead,
    FromTrajectory,
    guidance_direction,
)
from .projectile import Projectile, Missile, shell_update, missile_update
from .predict import (
    ProjectilePredictConfig,
    MissilePredictConfig,
    ProjectileResult,
    predict_projectile,
    predict_missile,
)
from .launch import (
    LaunchParam,
    calc_launch_param,
    calc_launch_param_env,
    calc_launch_param_inverse,
    calc_launch_param_inverse_env,
)
from .validation import (
    ValidationResult,
    ValidationIssue,
    ValidationSeverity,
    validate_all,
)

__all__ = [
    # Constants
    "GRAVITY",
    "AIR_DENSITY_SEA_LEVEL",
    "DEFAULT_TIME_STEP",
    # Errors
    "BalixError",
    "ContractViolationError",
    "InvalidArgumentError",
    # Math
    "vec3",
    "normalize_vector",
    "q_identity",
    "q_mult",
    "q_rotate_vector",
    "q_from_axis_angle",
    "q_integrate",
    "Dual",
    "derivative",
    # State & environment
    "LinearState",
    "AngularState",
    "MotionState",
    "Environ",
    "GustModel",
    "environ_factor",
    "distort_accel",
    "gravity_wind_accel",
    "BodyProps",
    "apply_friction",
    # Model & integration
    "accel",
    "predict",
    "predict_rk4",
    "predict_collision",
    "IntegratorScheme",
    "IntegratorConfig",
    "integrate",
    # Filtering & control
    "KalmanScalar",
    "KalmanVec3",
    "StateFilter",
    "KalmanVec3Filter",
    "PIDController",
    "PIDVec3",
    "Controller",
    "PIDControllerAdapter",
    "BangBangController",
    "MPCConfig",
    "MPCController",
    "MPCOutput",
    "cost_default",
    "mpc_solve",
    # Solvers
    "solve_quadratic",
    "solve_bisection",
    "solve_apex",
    "solve_time_for_y",
    # Projectiles
    "Trajectory",
    "TrajectorySample",
    "Guidance",
    "NoGuidance",
    "ToTarget",
    "Lead",
    "FromTrajectory",
    "guidance_direction",
    "Projectile",
    "Missile",
    "shell_update",
    "missile_update",
    "ProjectilePredictConfig",
    "MissilePredictConfig",
    "ProjectileResult",
    "predict_projectile",
    "predict_missile",
    "LaunchParam",
    "calc_launch_param",
    "calc_launch_param_env",
    "calc_launch_param_inverse",
    "calc_launch_param_inverse_env",
    # Validation
    "ValidationResult",
    "ValidationIssue",
    "ValidationSeverity",
    "validate_all",
]
