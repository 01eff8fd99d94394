"""
Unit tests for src/analysis/special_functions.py.

Each approximation is checked against scipy's reference implementation and
against a few textbook values.
"""

from __future__ import annotations

import math

import pytest
from scipy import special, stats

from src.analysis.special_functions import (
    beta_continued_fraction,
    log_gamma,
    regularized_incomplete_beta,
    standard_normal_cdf,
    student_t_two_tailed_p,
    two_tailed_normal_p,
)


class TestLogGamma:

    @pytest.mark.parametrize("x", [0.5, 1.0, 1.5, 2.0, 3.7, 10.0, 25.5, 120.0])
    def test_matches_scipy_gammaln(self, x):
        assert log_gamma(x) == pytest.approx(special.gammaln(x), rel=1e-10, abs=1e-12)

    def test_factorials(self):
        """Γ(n) = (n − 1)!"""
        assert log_gamma(1.0) == pytest.approx(0.0, abs=1e-12)
        assert log_gamma(2.0) == pytest.approx(0.0, abs=1e-12)
        assert log_gamma(5.0) == pytest.approx(math.log(24), rel=1e-12)

    def test_half(self):
        assert log_gamma(0.5) == pytest.approx(math.log(math.sqrt(math.pi)), rel=1e-12)

    @pytest.mark.parametrize("x", [0.25, 0.1, -0.5, -1.5])
    def test_reflection_below_half(self, x):
        """Below 0.5 the reflection formula gives log|Γ(x)|."""
        assert log_gamma(x) == pytest.approx(special.gammaln(x), rel=1e-9)

    @pytest.mark.parametrize("x", [0.0, -1.0, -3.0])
    def test_poles_raise(self, x):
        with pytest.raises(ValueError):
            log_gamma(x)


class TestIncompleteBeta:

    @pytest.mark.parametrize("x,a,b", [
        (0.1, 2.0, 3.0),
        (0.5, 2.0, 3.0),
        (0.9, 2.0, 3.0),
        (0.3, 0.5, 0.5),
        (0.75, 5.0, 0.5),
        (0.95, 15.0, 0.5),
        (0.2, 1.0, 1.0),
        (0.6, 30.0, 20.0),
    ])
    def test_matches_scipy_betainc(self, x, a, b):
        assert regularized_incomplete_beta(x, a, b) == pytest.approx(
            special.betainc(a, b, x), abs=5e-6
        )

    def test_bounds(self):
        assert regularized_incomplete_beta(0.0, 2.0, 3.0) == 0.0
        assert regularized_incomplete_beta(1.0, 2.0, 3.0) == 1.0

    def test_symmetric_parameters_at_half(self):
        assert regularized_incomplete_beta(0.5, 4.0, 4.0) == pytest.approx(0.5, abs=1e-6)

    def test_symmetry_relation(self):
        x, a, b = 0.35, 3.0, 7.0
        total = regularized_incomplete_beta(x, a, b) + regularized_incomplete_beta(1 - x, b, a)
        assert total == pytest.approx(1.0, abs=1e-7)

    def test_uniform_case_is_identity(self):
        """I_x(1, 1) = x."""
        assert regularized_incomplete_beta(0.37, 1.0, 1.0) == pytest.approx(0.37, abs=1e-6)

    def test_monotone_in_x(self):
        values = [regularized_incomplete_beta(x / 10, 2.5, 4.0) for x in range(11)]
        assert values == sorted(values)

    def test_out_of_range_x_raises(self):
        with pytest.raises(ValueError):
            regularized_incomplete_beta(1.2, 2.0, 2.0)

    def test_continued_fraction_positive(self):
        assert beta_continued_fraction(0.2, 2.0, 3.0) > 0


class TestStudentT:

    @pytest.mark.parametrize("t,df", [(0.5, 3), (1.0, 10), (2.0, 5), (3.5, 20), (-2.2, 8)])
    def test_matches_scipy_t_distribution(self, t, df):
        expected = 2 * stats.t.sf(abs(t), df)
        assert student_t_two_tailed_p(t, df) == pytest.approx(expected, abs=5e-6)

    def test_critical_value_table(self):
        """t(10) = 2.228 is the 5% two-tailed critical value."""
        assert student_t_two_tailed_p(2.228138852, 10) == pytest.approx(0.05, abs=1e-5)

    def test_zero_statistic_gives_one(self):
        assert student_t_two_tailed_p(0.0, 7) == 1.0


class TestStandardNormalCdf:

    @pytest.mark.parametrize("z", [-3.5, -1.96, -1.0, -0.3, 0.4, 1.0, 1.6449, 2.5758, 4.0])
    def test_matches_scipy_norm_cdf(self, z):
        assert standard_normal_cdf(z) == pytest.approx(stats.norm.cdf(z), abs=2e-7)

    def test_zero_is_exactly_half(self):
        assert standard_normal_cdf(0.0) == 0.5

    def test_symmetry(self):
        assert standard_normal_cdf(-1.3) == pytest.approx(1 - standard_normal_cdf(1.3), abs=1e-12)

    def test_two_tailed_p(self):
        assert two_tailed_normal_p(1.959964) == pytest.approx(0.05, abs=1e-6)
        assert two_tailed_normal_p(0.0) == 1.0
        assert two_tailed_normal_p(-1.959964) == two_tailed_normal_p(1.959964)
