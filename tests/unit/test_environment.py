"""
Unit tests for the environment model.

Covers the atmospheric distortion factor, wind handling and the periodic
gust model.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from balix.core.environment import (
    Environ,
    GustModel,
    environ_factor,
    distort_accel,
    gravity_accel,
    gravity_wind_accel,
    apply_wind,
)


class TestEnviron:
    """Test the Environ record."""

    def test_defaults(self):
        env = Environ()
        assert_allclose(env.gravity, [0.0, -9.81, 0.0])
        assert_allclose(env.wind_velocity, [0.0, 0.0, 0.0])
        assert env.air_density == pytest.approx(1.225)

    def test_vacuum(self):
        env = Environ.vacuum()
        assert env.air_density == 0.0
        assert_allclose(env.gravity, [0.0, -9.81, 0.0])

    def test_copy_is_independent(self):
        env = Environ(wind_velocity=(1, 0, 0))
        clone = env.copy()
        clone.wind_velocity[0] = 5.0
        assert env.wind_velocity[0] == 1.0


class TestEnvironFactor:
    """Test the lumped distortion factor."""

    def test_reference_atmosphere(self):
        """At reference conditions only the temperature base term (0.7) remains."""
        assert environ_factor(Environ()) == pytest.approx(0.7)

    def test_none_env(self):
        assert environ_factor(None) == 1.0

    def test_density_clamped(self):
        """Density contributes at most a factor 1.2."""
        dense = Environ(air_density=10.0)
        assert environ_factor(dense) == pytest.approx(0.7 * 1.2)

    def test_floor(self):
        """Extreme conditions never push the factor below 0.5."""
        harsh = Environ(humidity=100.0, temperature=20.0, air_density=0.0, pressure=50000.0)
        assert environ_factor(harsh) >= 0.5


class TestDistortion:
    """Test gravity/wind acceleration helpers."""

    def test_gravity_is_not_scaled(self):
        env = Environ()
        assert_allclose(distort_accel(env, env.gravity), env.gravity)

    def test_non_gravity_part_scaled(self):
        env = Environ()
        result = distort_accel(env, env.gravity + np.array([10.0, 0.0, 0.0]))
        assert_allclose(result, [7.0, -9.81, 0.0])

    def test_without_gravity(self):
        result = distort_accel(Environ(), [1.0, 2.0, 3.0], include_gravity=False)
        assert_allclose(result, [0.7, 1.4, 2.1])

    def test_gravity_accel_default(self):
        assert_allclose(gravity_accel(None), [0.0, -9.81, 0.0])

    def test_gravity_wind_accel(self):
        env = Environ(wind_velocity=(2.0, 0.0, 0.0))
        assert_allclose(gravity_wind_accel(env), [1.4, -9.81, 0.0])


class TestWind:
    """Test wind acceleration."""

    def test_apply_wind(self):
        env = Environ()
        assert apply_wind(env, [1.0, 0.0, 0.0], 0.5)
        assert_allclose(env.wind_velocity, [0.5, 0.0, 0.0])

    def test_apply_wind_invalid_dt(self):
        env = Environ()
        assert not apply_wind(env, [1.0, 0.0, 0.0], 0.0)
        assert_allclose(env.wind_velocity, [0.0, 0.0, 0.0])


class TestGustModel:
    """Test the periodic gust."""

    def test_sample_at_zero_phase(self):
        gust = GustModel(base_wind=(1.0, 0.0, 2.0))
        assert_allclose(gust.sample(), [1.0, -9.81, 2.0])

    def test_sample_quarter_period(self):
        """At a quarter period sin = 1 and the full amplitude is added."""
        gust = GustModel(frequency=1.0)
        gust.advance(0.25)
        assert_allclose(gust.sample(), [0.5, -9.81, 0.5], atol=1e-12)

    def test_negative_frequency_clamped(self):
        gust = GustModel(frequency=-3.0)
        assert gust.frequency == 0.0
        gust.advance(0.25)
        assert_allclose(gust.sample(), [0.0, -9.81, 0.0])

    def test_sample_distorted_by_env(self):
        gust = GustModel(base_wind=(10.0, 0.0, 0.0), amplitude=(0.0, 0.0, 0.0))
        assert_allclose(gust.sample(Environ()), [7.0, -9.81, 0.0])
