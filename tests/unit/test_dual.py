"""
Unit tests for dual numbers.

Derivatives obtained by forward-mode differentiation are compared against
their closed forms.
"""

import math

import pytest

from balix.core.dual import Dual, derivative, dual_sin, dual_cos, dual_exp, dual_sqrt


class TestDualArithmetic:
    """Test operator overloads."""

    def test_add_sub(self):
        a = Dual(1.0, 2.0)
        b = Dual(3.0, -1.0)
        assert a + b == Dual(4.0, 1.0)
        assert a - b == Dual(-2.0, 3.0)
        assert 1.0 - a == Dual(0.0, -2.0)

    def test_product_rule(self):
        """(a + a'ε)(b + b'ε) = ab + (ab' + a'b)ε."""
        assert Dual(2.0, 1.0) * Dual(3.0, 4.0) == Dual(6.0, 11.0)

    def test_quotient_rule(self):
        result = Dual(6.0, 1.0) / Dual(2.0, 1.0)
        assert result.re == pytest.approx(3.0)
        assert result.du == pytest.approx((1.0 * 2.0 - 6.0 * 1.0) / 4.0)

    def test_division_by_zero(self):
        with pytest.raises(ZeroDivisionError):
            Dual(1.0, 1.0) / Dual(0.0, 1.0)

    def test_scale_and_neg(self):
        assert Dual(1.0, 2.0).scale(3.0) == Dual(3.0, 6.0)
        assert -Dual(1.0, 2.0) == Dual(-1.0, -2.0)


class TestDerivative:
    """Test derivatives of elementary functions."""

    def test_polynomial(self):
        """d/dx 3x² = 6x."""
        assert derivative(lambda x: x * x * 3.0, 2.0) == pytest.approx(12.0)

    def test_power(self):
        assert derivative(lambda x: x ** 3, 2.0) == pytest.approx(12.0)

    def test_sin_cos(self):
        x = 0.7
        assert derivative(dual_sin, x) == pytest.approx(math.cos(x))
        assert derivative(dual_cos, x) == pytest.approx(-math.sin(x))

    def test_exp_sqrt(self):
        assert derivative(dual_exp, 1.5) == pytest.approx(math.exp(1.5))
        assert derivative(dual_sqrt, 4.0) == pytest.approx(0.25)

    def test_chain_rule(self):
        """d/dx sin(x²) = 2x·cos(x²)."""
        x = 1.3
        assert derivative(lambda d: dual_sin(d * d), x) == pytest.approx(2 * x * math.cos(x * x))

    def test_constant_function(self):
        assert derivative(lambda d: Dual.constant(5.0), 1.0) == 0.0
