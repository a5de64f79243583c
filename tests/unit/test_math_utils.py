"""
Unit tests for the vector and quaternion mathematics module.

Validates quaternion operations against known mathematical properties
and analytical solutions.

Reference:
    Diebel, J. "Representing Attitude: Euler Angles, Unit Quaternions,
    and Rotation Vectors"
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from balix.core.math_utils import (
    vec3,
    as_vec3,
    cross_product,
    dot_product,
    vector_norm,
    normalize_vector,
    vector_distance,
    vector_lerp,
    vector_project,
    vector_reflect,
    vector_is_zero,
    vector_equal,
    q_identity,
    q_mult,
    q_conjugate,
    q_norm,
    q_normalize,
    q_inverse,
    q_rotate_vector,
    q_from_axis_angle,
    q_to_axis_angle,
    q_from_angular_velocity,
    q_integrate,
    q_slerp,
    q_from_two_vectors,
    q_from_euler,
    q_to_euler,
    q_forward,
    q_up,
    q_right,
    q_to_rotation_matrix,
)


# =============================================================================
# Vector Operations
# =============================================================================

class TestVectorOperations:
    """Test 3D vector kernels."""

    def test_vec3_dtype(self):
        """vec3 builds a float64 array."""
        v = vec3(1, 2, 3)
        assert v.dtype == np.float64
        assert_allclose(v, [1.0, 2.0, 3.0])

    def test_as_vec3_copies(self):
        """as_vec3 returns a fresh array."""
        src = np.array([1.0, 2.0, 3.0])
        out = as_vec3(src)
        out[0] = 9.0
        assert src[0] == 1.0

    def test_cross_product_basis(self):
        """x̂ × ŷ = ẑ."""
        result = cross_product(vec3(1, 0, 0), vec3(0, 1, 0))
        assert_allclose(result, [0.0, 0.0, 1.0])

    def test_dot_and_norm(self):
        v = vec3(3, 4, 0)
        assert dot_product(v, v) == pytest.approx(25.0)
        assert vector_norm(v) == pytest.approx(5.0)

    def test_normalize_vector(self):
        """Normalization produces a unit vector."""
        assert_allclose(normalize_vector(vec3(3, 4, 0)), [0.6, 0.8, 0.0])

    def test_normalize_zero_vector(self):
        """A degenerate vector normalizes to zero instead of NaN."""
        assert_allclose(normalize_vector(vec3(1e-10, 0, 0)), [0.0, 0.0, 0.0])

    def test_distance_and_lerp(self):
        a = vec3(0, 0, 0)
        b = vec3(2, 0, 0)
        assert vector_distance(a, b) == pytest.approx(2.0)
        assert_allclose(vector_lerp(a, b, 0.25), [0.5, 0.0, 0.0])

    def test_project(self):
        """Projection keeps only the component along the target direction."""
        assert_allclose(vector_project(vec3(2, 3, 0), vec3(5, 0, 0)), [2.0, 0.0, 0.0])
        assert_allclose(vector_project(vec3(2, 3, 0), vec3(0, 0, 0)), [0.0, 0.0, 0.0])

    def test_reflect(self):
        """Reflection off the ground flips the vertical component."""
        assert_allclose(vector_reflect(vec3(1, -2, 0), vec3(0, 1, 0)), [1.0, 2.0, 0.0])

    def test_is_zero(self):
        assert vector_is_zero(vec3(0, 1e-9, 0))
        assert not vector_is_zero(vec3(0, 1e-3, 0))

    def test_vector_equal_relative(self):
        """Equality tolerance scales with magnitude."""
        assert vector_equal(vec3(1e6, 0, 0), vec3(1e6 + 1.0, 0, 0))
        assert not vector_equal(vec3(1.0, 0, 0), vec3(1.001, 0, 0))


# =============================================================================
# Quaternion Basic Operations
# =============================================================================

class TestQuaternionBasics:
    """Test basic quaternion operations."""

    def test_q_identity(self):
        """Identity quaternion should be [1, 0, 0, 0]."""
        assert_allclose(q_identity(), [1.0, 0.0, 0.0, 0.0])

    def test_q_normalize(self):
        """Normalization should produce unit quaternion."""
        q_unit = q_normalize(np.array([2.0, 0.0, 0.0, 0.0]))
        assert abs(q_norm(q_unit) - 1.0) < 1e-10
        assert_allclose(q_unit, [1.0, 0.0, 0.0, 0.0])

    def test_q_normalize_degenerate(self):
        """A zero quaternion normalizes to identity."""
        assert_allclose(q_normalize(np.zeros(4)), [1.0, 0.0, 0.0, 0.0])

    def test_q_conjugate(self):
        """Conjugate should negate vector part."""
        q_conj = q_conjugate(np.array([0.5, 0.1, 0.2, 0.3]))
        assert_allclose(q_conj, [0.5, -0.1, -0.2, -0.3])

    def test_q_mult_identity(self):
        """q ⊗ I = I ⊗ q = q."""
        q = np.array([0.5, 0.5, 0.5, 0.5])
        assert_allclose(q_mult(q, q_identity()), q, atol=1e-12)
        assert_allclose(q_mult(q_identity(), q), q, atol=1e-12)

    def test_q_mult_inverse(self):
        """q ⊗ q⁻¹ = I, also for non-unit q."""
        q = np.array([1.0, 2.0, -1.0, 0.5])
        assert_allclose(q_mult(q, q_inverse(q)), [1.0, 0.0, 0.0, 0.0], atol=1e-12)

    def test_q_mult_non_commutative(self):
        """i ⊗ j = k but j ⊗ i = -k."""
        i = np.array([0.0, 1.0, 0.0, 0.0])
        j = np.array([0.0, 0.0, 1.0, 0.0])
        assert_allclose(q_mult(i, j), [0.0, 0.0, 0.0, 1.0])
        assert_allclose(q_mult(j, i), [0.0, 0.0, 0.0, -1.0])


# =============================================================================
# Rotations
# =============================================================================

class TestRotation:
    """Test vector rotation and axis-angle conversion."""

    def test_rotate_z_by_pi(self):
        """Rotating x̂ by π about ẑ gives -x̂."""
        q = q_from_axis_angle(vec3(0, 0, 1), np.pi)
        assert_allclose(q_rotate_vector(q, vec3(1, 0, 0)), [-1.0, 0.0, 0.0], atol=1e-4)

    def test_rotate_z_by_half_pi(self):
        """Right-hand rule: x̂ → ŷ for +90° about ẑ."""
        q = q_from_axis_angle(vec3(0, 0, 1), np.pi / 2)
        assert_allclose(q_rotate_vector(q, vec3(1, 0, 0)), [0.0, 1.0, 0.0], atol=1e-12)

    def test_rotation_preserves_length(self):
        q = q_from_axis_angle(vec3(1, 2, 3), 0.7)
        v = vec3(-2, 5, 1)
        assert vector_norm(q_rotate_vector(q, v)) == pytest.approx(vector_norm(v))

    def test_axis_angle_round_trip(self):
        q = q_from_axis_angle(vec3(0, 1, 0), 1.2)
        result = q_to_axis_angle(q)
        assert_allclose(result[:3], [0.0, 1.0, 0.0], atol=1e-12)
        assert result[3] == pytest.approx(1.2)

    def test_zero_axis_gives_identity(self):
        assert_allclose(q_from_axis_angle(vec3(0, 0, 0), 1.0), q_identity())

    def test_rotation_matrix_matches_rotate(self):
        """R·v equals q ⊗ v ⊗ q*."""
        q = q_from_euler(0.3, -0.2, 1.1)
        v = vec3(1, 2, 3)
        assert_allclose(q_to_rotation_matrix(q) @ v, q_rotate_vector(q, v), atol=1e-12)

    def test_body_axes_identity(self):
        q = q_identity()
        assert_allclose(q_forward(q), [0.0, 0.0, 1.0])
        assert_allclose(q_up(q), [0.0, 1.0, 0.0])
        assert_allclose(q_right(q), [1.0, 0.0, 0.0])


class TestEulerConversion:
    """Test ZYX Euler angle conversions."""

    def test_euler_round_trip(self):
        angles = np.array([0.4, -0.3, 2.0])
        assert_allclose(q_to_euler(q_from_euler(*angles)), angles, atol=1e-12)

    def test_pure_yaw(self):
        q = q_from_euler(0.0, 0.0, np.pi / 2)
        assert_allclose(q, q_from_axis_angle(vec3(0, 0, 1), np.pi / 2), atol=1e-12)


# =============================================================================
# Integration & Interpolation
# =============================================================================

class TestQuaternionIntegration:
    """Test orientation updates from angular velocity."""

    def test_small_omega_is_identity(self):
        """||ω|| below 1e-6 produces no rotation."""
        assert_allclose(q_from_angular_velocity(vec3(1e-8, 0, 0), 1.0), q_identity())

    def test_integrate_full_turn_steps(self):
        """Integrating ω = π/2 rad/s about ẑ for 1 s rotates x̂ to ŷ."""
        q = q_identity()
        omega = vec3(0, 0, np.pi / 2)
        for _ in range(100):
            q = q_integrate(q, omega, 0.01)
        assert_allclose(q_rotate_vector(q, vec3(1, 0, 0)), [0.0, 1.0, 0.0], atol=1e-9)
        assert abs(q_norm(q) - 1.0) < 1e-12

    def test_integrate_body_frame_order(self):
        """The increment is applied in the body frame (right multiplication)."""
        q0 = q_from_axis_angle(vec3(0, 0, 1), np.pi / 2)
        q1 = q_integrate(q0, vec3(1, 0, 0), np.pi / 2)
        expected = q_mult(q0, q_from_axis_angle(vec3(1, 0, 0), np.pi / 2))
        assert_allclose(q1, expected, atol=1e-12)

    def test_slerp_endpoints_and_midpoint(self):
        a = q_identity()
        b = q_from_axis_angle(vec3(0, 1, 0), np.pi / 2)
        assert_allclose(q_slerp(a, b, 0.0), a, atol=1e-12)
        assert_allclose(q_slerp(a, b, 1.0), b, atol=1e-12)
        assert_allclose(q_slerp(a, b, 0.5), q_from_axis_angle(vec3(0, 1, 0), np.pi / 4),
                        atol=1e-12)

    def test_from_two_vectors(self):
        q = q_from_two_vectors(vec3(1, 0, 0), vec3(0, 0, 1))
        assert_allclose(q_rotate_vector(q, vec3(1, 0, 0)), [0.0, 0.0, 1.0], atol=1e-12)

    def test_from_two_vectors_antiparallel(self):
        q = q_from_two_vectors(vec3(1, 0, 0), vec3(-1, 0, 0))
        assert_allclose(q_rotate_vector(q, vec3(1, 0, 0)), [-1.0, 0.0, 0.0], atol=1e-12)
