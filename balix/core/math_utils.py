"""
Vector and Quaternion Mathematics for Rigid Body Motion.

Vectors are numpy arrays of shape (3,) holding [x, y, z].
Quaternions use the Hamilton convention:
    q = [w, x, y, z] = w + xi + yj + zk

where:
    i² = j² = k² = ijk = -1

Coordinate system is right-handed with +Y up. Orientation quaternions are
world-from-body, so a body-frame increment Δq is applied by right
multiplication: q_new = q ⊗ Δq.

All kernels are Numba JIT-compiled and return new arrays (inputs are never
modified).

References:
    - Diebel, J. "Representing Attitude: Euler Angles, Unit Quaternions, and Rotation Vectors"
    - Shoemake, K. "Animating Rotation with Quaternion Curves" (SLERP)
"""

import numpy as np
from numba import jit

from .constants import EPS_FLOAT_EQUAL, EPS_VEC_ZERO, EPS_OMEGA_ZERO


def vec3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> np.ndarray:
    """Build a float64 vector [x, y, z]."""
    return np.array([x, y, z], dtype=np.float64)


def as_vec3(v) -> np.ndarray:
    """Coerce any 3-sequence into a fresh float64 vector."""
    arr = np.array(v, dtype=np.float64).reshape(3)
    return arr


# =============================================================================
# Vector Utilities (Numba-compatible)
# =============================================================================

@jit(nopython=True, cache=True)
def cross_product(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    3D cross product: a × b

    Args:
        a: First vector [x, y, z]
        b: Second vector [x, y, z]

    Returns:
        Cross product vector [x, y, z]
    """
    return np.array([
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0]
    ])


@jit(nopython=True, cache=True)
def dot_product(a: np.ndarray, b: np.ndarray) -> float:
    """3D dot product: a · b"""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


@jit(nopython=True, cache=True)
def vector_norm(v: np.ndarray) -> float:
    """3D vector magnitude: ||v|| = sqrt(x² + y² + z²)"""
    return np.sqrt(v[0]*v[0] + v[1]*v[1] + v[2]*v[2])


@jit(nopython=True, cache=True)
def normalize_vector(v: np.ndarray) -> np.ndarray:
    """
    Normalize vector to unit length.

    Degenerate vectors (||v|| < 1e-8) map to the zero vector instead of
    producing NaN.

    Args:
        v: Input vector [x, y, z]

    Returns:
        Unit vector, or [0, 0, 0] if v is (numerically) zero
    """
    norm = np.sqrt(v[0]*v[0] + v[1]*v[1] + v[2]*v[2])
    if norm < EPS_VEC_ZERO:
        return np.zeros(3)
    return np.array([v[0] / norm, v[1] / norm, v[2] / norm])


@jit(nopython=True, cache=True)
def vector_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance ||a - b||."""
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    dz = a[2] - b[2]
    return np.sqrt(dx*dx + dy*dy + dz*dz)


@jit(nopython=True, cache=True)
def vector_lerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """Linear interpolation a + (b - a)·t."""
    return np.array([
        a[0] + (b[0] - a[0]) * t,
        a[1] + (b[1] - a[1]) * t,
        a[2] + (b[2] - a[2]) * t
    ])


@jit(nopython=True, cache=True)
def vector_project(a: np.ndarray, onto: np.ndarray) -> np.ndarray:
    """Projection of a onto the direction of `onto` (zero if `onto` is zero)."""
    denom = onto[0]*onto[0] + onto[1]*onto[1] + onto[2]*onto[2]
    if denom < EPS_VEC_ZERO * EPS_VEC_ZERO:
        return np.zeros(3)
    s = (a[0]*onto[0] + a[1]*onto[1] + a[2]*onto[2]) / denom
    return np.array([onto[0] * s, onto[1] * s, onto[2] * s])


@jit(nopython=True, cache=True)
def vector_reflect(v: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """
    Mirror reflection of v about a surface with unit normal n.

    r = v - 2(v·n)n
    """
    d = 2.0 * (v[0]*normal[0] + v[1]*normal[1] + v[2]*normal[2])
    return np.array([
        v[0] - d * normal[0],
        v[1] - d * normal[1],
        v[2] - d * normal[2]
    ])


@jit(nopython=True, cache=True)
def vector_is_zero(v: np.ndarray) -> bool:
    """True when every component is below the zero tolerance."""
    return (abs(v[0]) < EPS_VEC_ZERO and abs(v[1]) < EPS_VEC_ZERO
            and abs(v[2]) < EPS_VEC_ZERO)


@jit(nopython=True, cache=True)
def vector_equal(a: np.ndarray, b: np.ndarray) -> bool:
    """
    Tolerance-based vector equality.

    Components compare equal when |a_i - b_i| ≤ ε · max(1, |a_i|, |b_i|)
    with relative ε = 1e-5.
    """
    for i in range(3):
        scale = max(1.0, abs(a[i]), abs(b[i]))
        if abs(a[i] - b[i]) > EPS_FLOAT_EQUAL * scale:
            return False
    return True


# =============================================================================
# Quaternion Basic Operations
# =============================================================================

@jit(nopython=True, cache=True)
def q_identity() -> np.ndarray:
    """Identity quaternion [1, 0, 0, 0] (no rotation)."""
    return np.array([1.0, 0.0, 0.0, 0.0])


@jit(nopython=True, cache=True)
def q_mult(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """
    Quaternion multiplication (Hamilton product).

    Given q1 = [w1, x1, y1, z1] and q2 = [w2, x2, y2, z2]:

    q1 ⊗ q2 = [w1*w2 - x1*x2 - y1*y2 - z1*z2,
               w1*x2 + x1*w2 + y1*z2 - z1*y2,
               w1*y2 - x1*z2 + y1*w2 + z1*x2,
               w1*z2 + x1*y2 - y1*x2 + z1*w2]

    Note:
        Quaternion multiplication is NOT commutative: q1⊗q2 ≠ q2⊗q1
    """
    w1, x1, y1, z1 = q1[0], q1[1], q1[2], q1[3]
    w2, x2, y2, z2 = q2[0], q2[1], q2[2], q2[3]

    return np.array([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2
    ])


@jit(nopython=True, cache=True)
def q_conjugate(q: np.ndarray) -> np.ndarray:
    """
    Quaternion conjugate [w, -x, -y, -z].

    For unit quaternions the conjugate equals the inverse.
    """
    return np.array([q[0], -q[1], -q[2], -q[3]])


@jit(nopython=True, cache=True)
def q_norm(q: np.ndarray) -> float:
    """Quaternion norm ||q|| = sqrt(w² + x² + y² + z²)."""
    return np.sqrt(q[0]*q[0] + q[1]*q[1] + q[2]*q[2] + q[3]*q[3])


@jit(nopython=True, cache=True)
def q_normalize(q: np.ndarray) -> np.ndarray:
    """
    Normalize quaternion to unit length.

    Every rotation-producing operation ends with this call so the unit
    constraint ||q|| = 1 holds after each integration step.

    Returns:
        Unit quaternion, or identity if the input is degenerate
    """
    norm = q_norm(q)
    if norm < 1e-12:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q / norm


@jit(nopython=True, cache=True)
def q_inverse(q: np.ndarray) -> np.ndarray:
    """
    Quaternion inverse q⁻¹ = q* / ||q||².

    Returns identity for a degenerate quaternion.
    """
    norm_sq = q[0]*q[0] + q[1]*q[1] + q[2]*q[2] + q[3]*q[3]
    if norm_sq < 1e-12:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q_conjugate(q) / norm_sq


# =============================================================================
# Rotation Operations
# =============================================================================

@jit(nopython=True, cache=True)
def q_rotate_vector(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Rotate a 3D vector by a quaternion.

    Uses the expanded form of v' = q ⊗ [0, v] ⊗ q*:
        v' = v + 2w(ω × v) + 2(ω × (ω × v))

    where q = [w, ω] and ω = [x, y, z] is the vector part.
    """
    w = q[0]
    qx, qy, qz = q[1], q[2], q[3]

    cx = qy * v[2] - qz * v[1]
    cy = qz * v[0] - qx * v[2]
    cz = qx * v[1] - qy * v[0]

    ccx = qy * cz - qz * cy
    ccy = qz * cx - qx * cz
    ccz = qx * cy - qy * cx

    return np.array([
        v[0] + 2.0 * (w * cx + ccx),
        v[1] + 2.0 * (w * cy + ccy),
        v[2] + 2.0 * (w * cz + ccz)
    ])


@jit(nopython=True, cache=True)
def q_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """
    Create quaternion from axis-angle representation.

    q = [cos(θ/2), sin(θ/2) * n̂]

    Args:
        axis: Rotation axis [x, y, z] (normalized internally)
        angle: Rotation angle in radians (right-hand rule)

    Returns:
        Unit quaternion [w, x, y, z]; identity for a zero axis
    """
    half_angle = angle * 0.5
    s = np.sin(half_angle)
    c = np.cos(half_angle)

    axis_norm = np.sqrt(axis[0]**2 + axis[1]**2 + axis[2]**2)
    if axis_norm < 1e-12:
        return np.array([1.0, 0.0, 0.0, 0.0])

    ax = axis[0] / axis_norm
    ay = axis[1] / axis_norm
    az = axis[2] / axis_norm

    return np.array([c, s * ax, s * ay, s * az])


@jit(nopython=True, cache=True)
def q_to_axis_angle(q: np.ndarray) -> np.ndarray:
    """
    Extract axis-angle representation from quaternion.

    Returns:
        Array [ax, ay, az, angle]; [1, 0, 0, 0] when the angle is ~0
    """
    norm = np.sqrt(q[0]*q[0] + q[1]*q[1] + q[2]*q[2] + q[3]*q[3])
    if norm < 1e-12:
        return np.array([1.0, 0.0, 0.0, 0.0])

    w = q[0] / norm
    x = q[1] / norm
    y = q[2] / norm
    z = q[3] / norm

    # Manual clamp for Numba
    if w > 1.0:
        w = 1.0
    elif w < -1.0:
        w = -1.0

    angle = 2.0 * np.arccos(w)

    s = np.sqrt(1.0 - w * w)
    if s < 1e-8:
        return np.array([1.0, 0.0, 0.0, 0.0])

    return np.array([x / s, y / s, z / s, angle])


@jit(nopython=True, cache=True)
def q_from_angular_velocity(omega: np.ndarray, dt: float) -> np.ndarray:
    """
    Incremental rotation produced by angular velocity ω over dt.

    Δq = axis-angle(ω̂, ||ω||·dt)

    Returns identity when ||ω|| < 1e-6 or the swept angle is below 1e-8.
    """
    omega_norm = np.sqrt(omega[0]**2 + omega[1]**2 + omega[2]**2)
    angle = omega_norm * dt
    if omega_norm < EPS_OMEGA_ZERO or abs(angle) < 1e-8:
        return np.array([1.0, 0.0, 0.0, 0.0])

    half_angle = angle * 0.5
    s = np.sin(half_angle) / omega_norm
    return np.array([np.cos(half_angle), s * omega[0], s * omega[1], s * omega[2]])


@jit(nopython=True, cache=True)
def q_integrate(q: np.ndarray, omega: np.ndarray, dt: float) -> np.ndarray:
    """
    Advance orientation by a body-frame angular velocity over dt.

        q(t+dt) = normalize(q(t) ⊗ Δq),  Δq = q_from_angular_velocity(ω, dt)

    Args:
        q: Current orientation quaternion [w, x, y, z] (world-from-body)
        omega: Angular velocity [ωx, ωy, ωz] (rad/s)
        dt: Time step (s)

    Returns:
        Updated unit quaternion
    """
    dq = q_from_angular_velocity(omega, dt)
    return q_normalize(q_mult(q, dq))


@jit(nopython=True, cache=True)
def q_slerp(q1: np.ndarray, q2: np.ndarray, t: float) -> np.ndarray:
    """
    Spherical linear interpolation along the shortest arc.

    Falls back to normalized linear interpolation when the quaternions are
    nearly parallel (cos Ω > 0.9995).
    """
    a = q_normalize(q1)
    b = q_normalize(q2)
    cos_omega = a[0]*b[0] + a[1]*b[1] + a[2]*b[2] + a[3]*b[3]

    # Shortest path
    if cos_omega < 0.0:
        b = -b
        cos_omega = -cos_omega

    if cos_omega > 0.9995:
        return q_normalize(a + (b - a) * t)

    omega = np.arccos(cos_omega)
    sin_omega = np.sin(omega)
    wa = np.sin((1.0 - t) * omega) / sin_omega
    wb = np.sin(t * omega) / sin_omega
    return q_normalize(a * wa + b * wb)


@jit(nopython=True, cache=True)
def q_from_two_vectors(v_from: np.ndarray, v_to: np.ndarray) -> np.ndarray:
    """
    Shortest rotation taking direction v_from onto direction v_to.

    Antiparallel inputs rotate by π about any axis perpendicular to v_from.
    """
    a = normalize_vector(v_from)
    b = normalize_vector(v_to)
    if vector_is_zero(a) or vector_is_zero(b):
        return np.array([1.0, 0.0, 0.0, 0.0])

    d = dot_product(a, b)
    if d < -1.0 + 1e-6:
        axis = cross_product(np.array([1.0, 0.0, 0.0]), a)
        if vector_norm(axis) < 1e-6:
            axis = cross_product(np.array([0.0, 1.0, 0.0]), a)
        return q_from_axis_angle(axis, np.pi)

    c = cross_product(a, b)
    return q_normalize(np.array([1.0 + d, c[0], c[1], c[2]]))


# =============================================================================
# Euler Angle Conversions (ZYX Convention)
# =============================================================================

@jit(nopython=True, cache=True)
def q_from_euler(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """
    Create quaternion from Euler angles (ZYX convention).

    Rotations are applied yaw (Z), then pitch (Y), then roll (X).

    Args:
        roll: Rotation around X-axis (φ) in radians
        pitch: Rotation around Y-axis (θ) in radians
        yaw: Rotation around Z-axis (ψ) in radians

    Returns:
        Unit quaternion [w, x, y, z]
    """
    cr = np.cos(roll * 0.5)
    sr = np.sin(roll * 0.5)
    cp = np.cos(pitch * 0.5)
    sp = np.sin(pitch * 0.5)
    cy = np.cos(yaw * 0.5)
    sy = np.sin(yaw * 0.5)

    w = cr * cp * cy + sr * sp * sy
    x = sr * cp * cy - cr * sp * sy
    y = cr * sp * cy + sr * cp * sy
    z = cr * cp * sy - sr * sp * cy

    return np.array([w, x, y, z])


@jit(nopython=True, cache=True)
def q_to_euler(q: np.ndarray) -> np.ndarray:
    """
    Extract Euler angles [roll, pitch, yaw] from quaternion (ZYX convention).

    WARNING: singular at pitch = ±90°.
    """
    w, x, y, z = q[0], q[1], q[2], q[3]

    sinr_cosp = 2.0 * (w * x + y * z)
    cosr_cosp = 1.0 - 2.0 * (x * x + y * y)
    roll = np.arctan2(sinr_cosp, cosr_cosp)

    sinp = 2.0 * (w * y - z * x)
    if sinp > 1.0:
        sinp = 1.0
    elif sinp < -1.0:
        sinp = -1.0
    pitch = np.arcsin(sinp)

    siny_cosp = 2.0 * (w * z + x * y)
    cosy_cosp = 1.0 - 2.0 * (y * y + z * z)
    yaw = np.arctan2(siny_cosp, cosy_cosp)

    return np.array([roll, pitch, yaw])


# =============================================================================
# Body Axes and Rotation Matrix
# =============================================================================

@jit(nopython=True, cache=True)
def q_forward(q: np.ndarray) -> np.ndarray:
    """Body +Z axis expressed in world frame."""
    return q_rotate_vector(q, np.array([0.0, 0.0, 1.0]))


@jit(nopython=True, cache=True)
def q_up(q: np.ndarray) -> np.ndarray:
    """Body +Y axis expressed in world frame."""
    return q_rotate_vector(q, np.array([0.0, 1.0, 0.0]))


@jit(nopython=True, cache=True)
def q_right(q: np.ndarray) -> np.ndarray:
    """Body +X axis expressed in world frame."""
    return q_rotate_vector(q, np.array([1.0, 0.0, 0.0]))


@jit(nopython=True, cache=True)
def q_to_rotation_matrix(q: np.ndarray) -> np.ndarray:
    """
    Convert quaternion to 3x3 rotation matrix (body → world).

    Reference:
        NASA RP-1207, Eq. 54
    """
    w, x, y, z = q[0], q[1], q[2], q[3]

    xx = x * x
    yy = y * y
    zz = z * z
    xy = x * y
    xz = x * z
    yz = y * z
    wx = w * x
    wy = w * y
    wz = w * z

    R = np.zeros((3, 3))

    R[0, 0] = 1.0 - 2.0 * (yy + zz)
    R[0, 1] = 2.0 * (xy - wz)
    R[0, 2] = 2.0 * (xz + wy)

    R[1, 0] = 2.0 * (xy + wz)
    R[1, 1] = 1.0 - 2.0 * (xx + zz)
    R[1, 2] = 2.0 * (yz - wx)

    R[2, 0] = 2.0 * (xz - wy)
    R[2, 1] = 2.0 * (yz + wx)
    R[2, 2] = 1.0 - 2.0 * (xx + yy)

    return R
