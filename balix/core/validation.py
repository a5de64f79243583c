"""
Input Validation Framework for Balix.

Checks simulation inputs (environment, body, integrator and predictor
settings) and reports every problem found instead of stopping at the first.
"""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .bodyprops import BodyProps
from .environment import Environ
from .integrators import IntegratorConfig, IntegratorScheme
from .predict import ProjectilePredictConfig


class ValidationSeverity(Enum):
    """Severity level for validation issues."""
    ERROR = "error"      # Cannot proceed
    WARNING = "warning"  # Can proceed but unusual
    INFO = "info"        # Just informational


@dataclass
class ValidationIssue:
    """A single validation issue."""
    severity: ValidationSeverity
    field: str
    message: str
    value: float | None = None
    valid_range: tuple[float, float] | None = None

    def __str__(self) -> str:
        tag = {"error": "E", "warning": "W", "info": "I"}[self.severity.value]
        return f"[{tag}] {self.field}: {self.message}"


@dataclass
class ValidationResult:
    """Complete validation result."""
    is_valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def infos(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.INFO]

    def __str__(self) -> str:
        if self.is_valid and not self.warnings:
            return "All inputs valid"
        return "\n".join(str(issue) for issue in self.issues)


# =============================================================================
# Limits for Validation
# =============================================================================

# Integration step above which accuracy degrades noticeably (s)
DT_WARN = 0.1

# Step count above which a prediction is considered excessive
PREDICT_STEPS_WARN = 1e6

# Air density of the densest plausible atmosphere (kg/m³)
AIR_DENSITY_HIGH = 5.0


def _error(field_name: str, message: str, value=None, valid_range=None) -> ValidationIssue:
    return ValidationIssue(ValidationSeverity.ERROR, field_name, message, value, valid_range)


def _warning(field_name: str, message: str, value=None) -> ValidationIssue:
    return ValidationIssue(ValidationSeverity.WARNING, field_name, message, value)


# =============================================================================
# Validation Functions
# =============================================================================

def validate_environ(env: Environ) -> list[ValidationIssue]:
    """
    Validate an environment record.

    Args:
        env: Environment to check

    Returns:
        List of validation issues
    """
    issues = []

    if env.air_density < 0:
        issues.append(_error(
            "Air Density",
            f"Density must be non-negative (got {env.air_density:.3f} kg/m³)",
            env.air_density, (0.0, AIR_DENSITY_HIGH)))
    elif env.air_density > AIR_DENSITY_HIGH:
        issues.append(_warning(
            "Air Density",
            f"Unusually dense atmosphere ({env.air_density:.2f} kg/m³)",
            env.air_density))

    if not np.all(np.isfinite(env.gravity)):
        issues.append(_error("Gravity", "Gravity vector must be finite"))
    elif env.gravity[1] > 0:
        issues.append(_warning(
            "Gravity", f"Gravity points upward (y = {env.gravity[1]:.2f} m/s²)",
            float(env.gravity[1])))

    if not np.all(np.isfinite(env.wind_velocity)):
        issues.append(_error("Wind", "Wind vector must be finite"))

    if not 0.0 <= env.humidity <= 100.0:
        issues.append(_warning(
            "Humidity", f"Humidity outside 0-100 % ({env.humidity:.1f})", env.humidity))

    return issues


def validate_bodyprops(body: BodyProps) -> list[ValidationIssue]:
    """
    Validate body properties.

    Args:
        body: Body to check

    Returns:
        List of validation issues
    """
    issues = []

    if body.mass <= 0:
        issues.append(_error(
            "Mass", f"Mass must be positive (got {body.mass:.3g} kg)", body.mass))

    if body.drag_coef < 0:
        issues.append(_error(
            "Drag Coefficient", f"Drag coefficient must be non-negative (got {body.drag_coef:.3f})",
            body.drag_coef))

    if body.cross_section < 0:
        issues.append(_error(
            "Cross Section", f"Area must be non-negative (got {body.cross_section:.4f} m²)",
            body.cross_section))

    for name, value in (("Restitution", body.restitution), ("Friction", body.friction)):
        if not 0.0 <= value <= 1.0:
            issues.append(_error(name, f"{name} must be in [0, 1] (got {value:.3f})",
                                 value, (0.0, 1.0)))

    return issues


def validate_integrator_config(config: IntegratorConfig) -> list[ValidationIssue]:
    """
    Validate integration settings.

    Args:
        config: Integrator configuration

    Returns:
        List of validation issues
    """
    issues = []

    if config.dt <= 0:
        issues.append(_error(
            "Time Step", f"Time step must be positive (got {config.dt:.4g} s)", config.dt))
    elif config.dt > DT_WARN:
        issues.append(_warning(
            "Time Step", f"Large time step ({config.dt:.3f} s) - accuracy may suffer", config.dt))

    if not isinstance(config.scheme, IntegratorScheme):
        issues.append(_error(
            "Scheme", f"Unknown integration scheme {config.scheme!r}", config.scheme))
    elif config.scheme.needs_prev_state and config.prev_state is None:
        issues.append(_error(
            "Previous State", f"{config.scheme.value} requires a previous state"))

    return issues


def validate_predict_config(config: ProjectilePredictConfig) -> list[ValidationIssue]:
    """
    Validate predictor settings.

    Args:
        config: Projectile or missile predictor configuration

    Returns:
        List of validation issues
    """
    issues = []

    if config.dt <= 0:
        issues.append(_error(
            "Time Step", f"Time step must be positive (got {config.dt:.4g} s)", config.dt))
    if config.max_time <= 0:
        issues.append(_error(
            "Max Time", f"Horizon must be positive (got {config.max_time:.3g} s)", config.max_time))

    if config.dt > 0 and config.max_time > 0:
        steps = config.max_time / config.dt
        if steps > PREDICT_STEPS_WARN:
            issues.append(_warning(
                "Max Time", f"Prediction needs {steps:.0f} steps", steps))

    if config.start_position[1] < config.ground_height:
        issues.append(_warning(
            "Start Position", "Launch point is below the ground plane",
            float(config.start_position[1])))

    return issues


def validate_all(
    env: Environ | None = None,
    body: BodyProps | None = None,
    integrator: IntegratorConfig | None = None,
    predict: ProjectilePredictConfig | None = None,
) -> ValidationResult:
    """
    Validate every supplied input.

    Args:
        env: Environment
        body: Body properties
        integrator: Integrator configuration
        predict: Predictor configuration

    Returns:
        ValidationResult with all issues
    """
    all_issues = []

    if env is not None:
        all_issues.extend(validate_environ(env))
    if body is not None:
        all_issues.extend(validate_bodyprops(body))
    if integrator is not None:
        all_issues.extend(validate_integrator_config(integrator))
    if predict is not None:
        all_issues.extend(validate_predict_config(predict))

    # Any ERROR = invalid
    has_errors = any(i.severity == ValidationSeverity.ERROR for i in all_issues)

    return ValidationResult(
        is_valid=not has_errors,
        issues=all_issues
    )
