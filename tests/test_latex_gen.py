"""Tests for the LaTeX formula labels."""

import pytest

from curve_composer.latex_gen import FormulaGenerator
from curve_composer.models import (
    ExponentialParams,
    GaussianParams,
    LinearParams,
    PowerLawParams,
    QuadraticParams,
)


@pytest.fixture
def exact():
    return FormulaGenerator(approx=False)


class TestExact:
    """Exact mode renders rational coefficients."""

    def test_linear(self, exact):
        assert exact.generate(LinearParams(2.0, 3.0)) == "$f(x) = 2 x + 3$"

    def test_quadratic(self, exact):
        assert exact.generate(QuadraticParams(1.0, 0.0, 0.0)) == "$f(x) = x^{2}$"

    def test_fraction(self, exact):
        assert "\\frac{x}{2}" in exact.generate(LinearParams(0.5, -1.0))

    def test_power_law_absolute_value(self, exact):
        assert "\\left|" in exact.generate(PowerLawParams(1.0, 3.0, 1.0, 0.0))

    def test_exponential_keeps_base(self, exact):
        assert "2^{x}" in exact.generate(ExponentialParams(1.0, 2.0, 0.0, 0.0))


class TestApprox:
    """Approximate mode rounds to a fixed number of decimals."""

    def test_wrapped(self):
        out = FormulaGenerator().generate(GaussianParams(0.0, 1.0, 5.0))
        assert out.startswith("$f(x) = ") and out.endswith("$")
        assert "e^{" in out

    def test_rounding(self):
        out = FormulaGenerator(decimals=2).generate(LinearParams(1.23456, 0.0))
        assert "1.23" in out
        assert "1.2346" not in out

    def test_zero_sigma(self):
        """A degenerate Gaussian renders as a spike rather than dividing by zero."""
        assert "delta" in FormulaGenerator().generate(GaussianParams(1.0, 0.0, 3.0))

    @pytest.mark.parametrize("decimals,expected", [(-3, 0), (4, 4), (25, 10)])
    def test_decimals_clamped(self, decimals, expected):
        assert FormulaGenerator(decimals=decimals).decimals == expected

    def test_reconfigure(self):
        gen = FormulaGenerator()
        gen.reconfigure(approx=False, decimals=1)
        assert not gen.approx
        assert gen.generate(LinearParams(2.0, 3.0)) == "$f(x) = 2 x + 3$"
