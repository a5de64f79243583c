"""
Unit tests for the integrator engine.

Single-step results are checked against hand-computed values, and the
dispatcher's contract (step/no-step, Verlet bookkeeping, unit quaternion)
is exercised for every scheme.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from balix.core.bodyprops import BodyProps
from balix.core.environment import Environ
from balix.core.integrators import (
    IntegratorConfig,
    IntegratorScheme,
    integrate,
    euler_step,
    semi_implicit_step,
    verlet_step,
    rk4_constant_step,
    integrate_attitude_rk4_env,
)
from balix.core.math_utils import q_norm, q_rotate_vector
from balix.core.state import AngularState, LinearState, MotionState
from balix.core.types import ContractViolationError


ALL_SCHEMES = list(IntegratorScheme)
FREE_SPACE = Environ(gravity=(0.0, 0.0, 0.0), air_density=0.0)


def _config(scheme, dt, state):
    prev = None
    if scheme.needs_prev_state:
        lin = state.linear
        prev = MotionState(LinearState(lin.position - lin.velocity * dt, lin.velocity))
    return IntegratorConfig(scheme=scheme, dt=dt, prev_state=prev,
                            env=FREE_SPACE, body=BodyProps())


# =============================================================================
# Kernels
# =============================================================================

class TestKernels:
    """Test the constant-acceleration kernels directly."""

    def test_euler_uses_old_velocity(self):
        p, v = euler_step(np.zeros(3), np.array([1.0, 0.0, 0.0]),
                          np.array([2.0, 0.0, 0.0]), 0.5)
        assert_allclose(p, [0.5, 0.0, 0.0])
        assert_allclose(v, [2.0, 0.0, 0.0])

    def test_semi_implicit_step(self):
        """Semi-implicit step from rest with a = (2, 0, 0), dt = 0.5."""
        p, v = semi_implicit_step(np.zeros(3), np.zeros(3), np.array([2.0, 0.0, 0.0]), 0.5)
        assert v[0] == pytest.approx(1.0)
        assert p[0] == pytest.approx(0.5)

    def test_verlet_step(self):
        """p' = 2p - p_prev with zero acceleration."""
        p, v = verlet_step(np.array([1.0, 0.0, 0.0]), np.zeros(3), np.zeros(3), 1.0)
        assert p[0] == pytest.approx(2.0)
        assert v[0] == pytest.approx(1.0)

    def test_rk4_constant_exact(self):
        """RK4 with constant acceleration reproduces p0 + v0·t + ½at²."""
        p, v = rk4_constant_step(np.zeros(3), np.array([1.0, 2.0, 0.0]),
                                 np.array([0.0, -10.0, 0.0]), 0.2)
        assert_allclose(p, [0.2, 0.4 - 0.2, 0.0])
        assert_allclose(v, [1.0, 0.0, 0.0])


# =============================================================================
# Dispatcher
# =============================================================================

class TestIntegrate:
    """Test the scheme dispatcher."""

    def test_default_config(self):
        cfg = IntegratorConfig()
        assert cfg.scheme is IntegratorScheme.RK4_ENV
        assert cfg.dt == pytest.approx(0.016)

    def test_semi_implicit_through_dispatch(self):
        state = MotionState.from_vectors(acceleration=(2.0, 0.0, 0.0))
        assert integrate(state, IntegratorConfig(IntegratorScheme.SEMI_IMPLICIT, dt=0.5))
        assert state.linear.velocity[0] == pytest.approx(1.0)
        assert state.linear.position[0] == pytest.approx(0.5)

    def test_verlet_through_dispatch(self):
        state = MotionState.from_vectors(position=(1.0, 0.0, 0.0))
        prev = MotionState.from_vectors(position=(0.0, 0.0, 0.0))
        cfg = IntegratorConfig(IntegratorScheme.VERLET, dt=1.0, prev_state=prev)
        assert integrate(state, cfg)
        assert state.linear.position[0] == pytest.approx(2.0)
        # prev_state now holds the pre-step state
        assert prev.linear.position[0] == pytest.approx(1.0)

    @pytest.mark.parametrize("scheme", ALL_SCHEMES)
    @pytest.mark.parametrize("dt", [0.0, -0.1])
    def test_non_positive_dt_is_no_op(self, scheme, dt):
        state = MotionState.from_vectors((1, 2, 3), (4, 5, 6), (0, -9.8, 0))
        before = state.copy()
        cfg = IntegratorConfig(scheme=scheme, dt=dt, prev_state=state.copy())
        assert integrate(state, cfg) is False
        assert_allclose(state.linear.position, before.linear.position)
        assert_allclose(state.linear.velocity, before.linear.velocity)

    @pytest.mark.parametrize("scheme", [IntegratorScheme.RK4_ENV, IntegratorScheme.MOTION_RK4_ENV])
    @pytest.mark.parametrize("mass", [0.0, -1e-6, -1.0])
    def test_non_positive_mass_is_no_op(self, scheme, mass):
        """A massless or negative-mass body is rejected before any state change."""
        state = MotionState(LinearState(velocity=(10.0, 0.0, 0.0)),
                            AngularState(angular_velocity=(0.0, 2.0, 0.0)))
        before = state.copy()
        cfg = IntegratorConfig(scheme=scheme, dt=0.1, env=Environ(), body=BodyProps(mass=mass))
        assert integrate(state, cfg) is False
        assert_allclose(state.linear.position, before.linear.position)
        assert_allclose(state.linear.velocity, before.linear.velocity)
        assert_allclose(state.angular.angular_velocity, before.angular.angular_velocity)
        assert_allclose(state.angular.orientation, before.angular.orientation)

    @pytest.mark.parametrize("scheme", [IntegratorScheme.VERLET, IntegratorScheme.MOTION_VERLET])
    def test_verlet_requires_prev_state(self, scheme):
        with pytest.raises(ContractViolationError):
            integrate(MotionState(), IntegratorConfig(scheme=scheme, dt=0.1))

    def test_unknown_scheme(self):
        with pytest.raises(ContractViolationError):
            integrate(MotionState(), IntegratorConfig(scheme="leapfrog", dt=0.1))

    @pytest.mark.parametrize("scheme", ALL_SCHEMES)
    @pytest.mark.parametrize("dt", [0.001, 0.016, 0.5])
    def test_zero_acceleration_keeps_velocity(self, scheme, dt):
        """Without acceleration every scheme coasts: Δp = v·dt, v unchanged."""
        state = MotionState.from_vectors((1.0, 2.0, 3.0), (3.0, -1.0, 2.0))
        cfg = _config(scheme, dt, state)
        assert integrate(state, cfg)
        assert_allclose(state.linear.velocity, [3.0, -1.0, 2.0], atol=1e-9)
        assert_allclose(state.linear.position,
                        np.array([1.0, 2.0, 3.0]) + np.array([3.0, -1.0, 2.0]) * dt,
                        atol=1e-9)

    @pytest.mark.parametrize("scheme", ALL_SCHEMES)
    def test_quaternion_stays_unit(self, scheme):
        """Orientation remains a unit quaternion over many spinning steps."""
        state = MotionState(
            LinearState(velocity=(1.0, 0.0, 0.0)),
            AngularState(angular_velocity=(0.3, 2.0, -1.1),
                         angular_acceleration=(0.5, 0.1, 0.0)),
        )
        for _ in range(200):
            integrate(state, _config(scheme, 0.01, state))
        assert abs(q_norm(state.angular.orientation) - 1.0) <= 1e-5


# =============================================================================
# Model-Driven Schemes
# =============================================================================

class TestModelDriven:
    """Test the RK4-with-environment family."""

    def test_rk4_env_projectile_vacuum(self):
        """In vacuum RK4WithEnv reproduces the ballistic parabola."""
        env = Environ.vacuum(gravity=(0.0, -9.8, 0.0))
        state = MotionState.from_vectors((0, 10, 0), (5, 0, 0))
        cfg = IntegratorConfig(IntegratorScheme.RK4_ENV, dt=0.01, env=env, body=BodyProps())
        for _ in range(100):
            integrate(state, cfg)
        assert_allclose(state.linear.position, [5.0, 10.0 - 4.9, 0.0], atol=1e-9)
        assert_allclose(state.linear.acceleration, [0.0, -9.8, 0.0])

    def test_rk4_env_falls_back_without_env_and_body(self):
        state = MotionState.from_vectors(acceleration=(1.0, 0.0, 0.0))
        cfg = IntegratorConfig(IntegratorScheme.RK4_ENV, dt=1.0)
        integrate(state, cfg)
        assert_allclose(state.linear.position, [0.5, 0.0, 0.0])
        assert_allclose(state.linear.velocity, [1.0, 0.0, 0.0])

    def test_rk4_env_uses_default_gravity_with_body_only(self):
        state = MotionState.from_vectors()
        integrate(state, IntegratorConfig(IntegratorScheme.RK4_ENV, dt=0.1, body=BodyProps()))
        assert state.linear.velocity[1] == pytest.approx(-0.981, rel=1e-3)

    def test_drag_decelerates(self):
        env = Environ(gravity=(0.0, 0.0, 0.0))
        state = MotionState.from_vectors(velocity=(30.0, 0.0, 0.0))
        cfg = IntegratorConfig(IntegratorScheme.MOTION_RK4_ENV, dt=0.05, env=env, body=BodyProps())
        for _ in range(20):
            integrate(state, cfg)
        assert 0.0 < state.linear.velocity[0] < 30.0

    def test_angular_drag_damps_spin(self):
        state = MotionState(angular=AngularState(angular_velocity=(0.0, 5.0, 0.0)))
        integrate_attitude_rk4_env(state, 0.1, Environ(), BodyProps())
        assert 0.0 < state.angular.angular_velocity[1] < 5.0

    def test_angular_drag_ignores_non_positive_mass(self):
        """Calling the attitude step directly with m ≈ -1e-6 does not divide by zero."""
        state = MotionState(angular=AngularState(angular_velocity=(0.0, 5.0, 0.0)))
        integrate_attitude_rk4_env(state, 0.1, Environ(), BodyProps(mass=-1e-6))
        assert state.angular.angular_velocity[1] == pytest.approx(5.0)


class TestAttitude:
    """Test the rotation update shared by the Motion* schemes."""

    @pytest.mark.parametrize("scheme", [IntegratorScheme.MOTION_EULER,
                                        IntegratorScheme.MOTION_SEMI_IMPLICIT,
                                        IntegratorScheme.MOTION_RK4])
    def test_quarter_turn(self, scheme):
        """Spinning at π/2 rad/s about ŷ for 1 s turns body +z onto world +x."""
        state = MotionState(angular=AngularState(angular_velocity=(0.0, np.pi / 2, 0.0)))
        cfg = IntegratorConfig(scheme=scheme, dt=0.01)
        for _ in range(100):
            integrate(state, cfg)
        forward = q_rotate_vector(state.angular.orientation, np.array([0.0, 0.0, 1.0]))
        assert_allclose(forward, [1.0, 0.0, 0.0], atol=1e-9)

    def test_motion_verlet_updates_prev_state(self):
        state = MotionState(
            LinearState(position=(1.0, 0.0, 0.0)),
            AngularState(angular_velocity=(0.0, 1.0, 0.0)),
        )
        prev = MotionState()
        integrate(state, IntegratorConfig(IntegratorScheme.MOTION_VERLET, dt=0.1, prev_state=prev))
        assert prev.linear.position[0] == pytest.approx(1.0)
        assert_allclose(prev.angular.orientation, [1.0, 0.0, 0.0, 0.0])
        assert state.linear.position[0] == pytest.approx(2.0)
