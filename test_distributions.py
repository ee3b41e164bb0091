# test_distributions.py
# run as: pytest -q test_distributions.py
import math

import numpy as np
import pytest
from scipy import stats

import special
from distributions import (
    STANDARD_NORMAL,
    Beta,
    ChiSquared,
    Empirical,
    F,
    Gamma,
    Normal,
    TStudent,
    Uniform,
    Weibull,
)
from errors import InvalidParameterError

POINTS = [1, 2, 3, 4, 5]


# -------------------------
# Beta
# -------------------------
def test_beta_cumulative_values():
    beta = Beta(2, 3)
    expected = [0.0523, 0.1808, 0.3483, 0.5248, 0.6875]
    for x, value in zip([0.1, 0.2, 0.3, 0.4, 0.5], expected):
        assert beta.cumulative(x) == pytest.approx(value, abs=1e-4)


def test_beta_density_values():
    beta = Beta(3, 2)
    expected = [0.0, 0.108, 0.384, 0.756, 1.152, 1.5]
    for x, value in zip([0.0, 0.1, 0.2, 0.3, 0.4, 0.5], expected):
        assert beta.density(x) == pytest.approx(value, abs=1e-9)


def test_beta_density_edges_and_support():
    assert Beta(0.5, 2).density(0.0) == math.inf
    assert Beta(2, 0.5).density(1.0) == math.inf
    assert Beta(1, 1).density(0.0) == pytest.approx(1.0)
    assert Beta(2, 3).density(-0.1) is None
    assert Beta(2, 3).density(1.1) is None
    assert Beta(0, 3).density(0.5) is None
    assert Beta(-1, 3).cumulative(0.5) is None


def test_beta_moments():
    beta = Beta(2, 3)
    assert beta.mean() == pytest.approx(0.4)
    assert beta.variance() == pytest.approx(stats.beta(2, 3).var())
    assert beta.mode() == pytest.approx(1.0 / 3.0)
    assert Beta(1, 3).mode() is None
    assert Beta(0, 0).mean() is None
    assert beta.beta_function() == pytest.approx(special.beta_function(2, 3))


# -------------------------
# Gamma
# -------------------------
def test_gamma_scale_parameterization():
    gamma = Gamma(4, scale=2)
    pdf = [0.006318028, 0.03065662, 0.06275536, 0.09022352, 0.1068815]
    cdf = [0.001751623, 0.01898816, 0.06564245, 0.1428765, 0.2424239]
    for x, p, c in zip(POINTS, pdf, cdf):
        assert gamma.density(x) == pytest.approx(p, rel=1e-6)
        assert gamma.cumulative(x) == pytest.approx(c, rel=1e-5)


def test_gamma_default_rate_is_inverse_shape():
    gamma = Gamma(4)
    assert gamma.rate == pytest.approx(0.25)
    assert gamma.as_rate
    pdf = [0.0005070318, 0.003159014, 0.008303318, 0.01532831, 0.02331582]
    cdf = [0.0001333697, 0.001751623, 0.007292167, 0.01898816, 0.03826905]
    for x, p, c in zip(POINTS, pdf, cdf):
        assert gamma.density(x) == pytest.approx(p, rel=1e-6)
        assert gamma.cumulative(x) == pytest.approx(c, rel=1e-5)


def test_gamma_moments_follow_active_parameterization():
    by_scale = Gamma(3, scale=2)
    by_rate = Gamma(3, rate=0.5)
    assert by_scale.mean() == pytest.approx(6.0)
    assert by_rate.mean() == pytest.approx(6.0)
    assert by_scale.variance() == pytest.approx(12.0)
    assert by_rate.variance() == pytest.approx(12.0)
    assert by_scale.mode() == pytest.approx(4.0)
    assert by_rate.mode() == pytest.approx(4.0)
    assert by_scale.skewness() == pytest.approx(2 / math.sqrt(3))


def test_gamma_mode_is_zero_for_small_shapes():
    assert Gamma(0.5, scale=1).mode() == 0.0
    assert Gamma(0.5).mode() == 0.0


@pytest.mark.parametrize("gamma", [Gamma(0), Gamma(-2), Gamma(-2, scale=3), Gamma(0, rate=1)])
def test_gamma_moments_undefined_for_non_positive_shape(gamma):
    assert gamma.mean() is None
    assert gamma.variance() is None
    assert gamma.mode() is None
    assert gamma.skewness() is None
    assert gamma.density(1) is None
    assert gamma.cumulative(1) is None


def test_gamma_configuration_errors():
    with pytest.raises(InvalidParameterError):
        Gamma(2, scale=1, rate=1)
    with pytest.raises(InvalidParameterError):
        Gamma(2, scale=0)
    with pytest.raises(InvalidParameterError):
        Gamma(2, rate=-1)


def test_gamma_undefined_inputs():
    assert Gamma(0).density(1) is None
    assert Gamma(-1).cumulative(1) is None
    assert Gamma(2, scale=1).density(-1) is None
    assert Gamma(2, scale=1).cumulative(-1) is None


def test_gamma_is_immutable():
    gamma = Gamma(2, scale=1)
    with pytest.raises(AttributeError):
        gamma.shape = 3


# -------------------------
# Chi-squared
# -------------------------
def test_chi_squared_cumulative_values():
    chi = ChiSquared(5)
    expected = [0.0374, 0.1509, 0.3, 0.4506, 0.5841]
    for x, value in zip(POINTS, expected):
        assert chi.cumulative(x) == pytest.approx(value, abs=1e-4)


@pytest.mark.parametrize("k", [1, 3, 4, 7, 10, 30, 60, 100])
def test_chi_squared_cumulative_matches_scipy(k):
    chi = ChiSquared(k)
    for x in (0.5, k / 2.0, float(k), 2.0 * k):
        assert chi.cumulative(x) == pytest.approx(float(stats.chi2.cdf(x, k)), abs=1e-6)


def test_chi_squared_density_values():
    chi = ChiSquared(1)
    for x in POINTS:
        assert chi.density(x) == pytest.approx(float(stats.chi2.pdf(x, 1)), rel=1e-9)
    assert chi.density(1) == pytest.approx(0.242, abs=1e-3)


def test_chi_squared_two_degrees_closed_form():
    chi = ChiSquared(2)
    for x in np.linspace(0.0, 20.0, 41):
        closed = chi.cumulative(x)
        assert closed == 1 - math.exp(-x / 2)
        assert closed == pytest.approx(special.regularized_lower_incomplete_gamma(1.0, x / 2.0), abs=1e-4)


def test_cumulative_for_very_large_statistics():
    assert ChiSquared(3).cumulative(4.0e5) == pytest.approx(1.0, abs=1e-10)
    assert ChiSquared(50).cumulative(1.0e6) == pytest.approx(1.0, abs=1e-10)
    assert Gamma(2, scale=0.5).cumulative(3.0e8) == pytest.approx(1.0, abs=1e-10)


def test_chi_squared_domain_and_moments():
    assert ChiSquared(3).cumulative(-1) is None
    assert ChiSquared(3).density(-1) is None
    assert ChiSquared(0).cumulative(1) is None
    assert ChiSquared(1).density(0) == math.inf
    assert ChiSquared(2).density(0) == pytest.approx(0.5)
    assert ChiSquared(4).density(0) == 0.0
    assert ChiSquared(5).mode() == 3
    assert ChiSquared(1).mode() == 0
    assert ChiSquared(5).variance() == 10
    assert ChiSquared(5).mean() == 5


# -------------------------
# t-Student
# -------------------------
def test_t_student_cumulative_values():
    t = TStudent(2)
    expected = [0.7886751, 0.9082483, 0.9522670, 0.9714045, 0.9811252]
    for x, value in zip(POINTS, expected):
        assert t.cumulative(x) == pytest.approx(value, rel=1e-6)


def test_t_student_density_values():
    t = TStudent(5)
    expected = [0.2196798, 0.065090310, 0.01729258, 0.00512373, 0.00175744]
    for x, value in zip(POINTS, expected):
        assert t.density(x) == pytest.approx(value, rel=1e-5)


def test_t_student_negative_values_and_symmetry():
    t = TStudent(7)
    for x in (0.3, 1.7, 4.2):
        assert t.cumulative(-x) == pytest.approx(1 - t.cumulative(x), abs=1e-9)
        assert t.cumulative(-x) == pytest.approx(float(stats.t.cdf(-x, 7)), abs=1e-9)
    assert t.cumulative(0) == pytest.approx(0.5)
    assert t.cumulative(math.inf) == 1.0
    assert t.cumulative(-math.inf) == 0.0


def test_t_student_moments_and_undefined():
    assert TStudent(1.5).variance() == math.inf
    assert TStudent(2).variance() == math.inf
    assert TStudent(4).variance() == pytest.approx(2.0)
    assert TStudent(1).variance() is None
    assert TStudent(1).mean() is None
    assert TStudent(3).mean() == 0.0
    assert TStudent(3).mode() == 0.0
    assert TStudent(0).density(1) is None
    assert TStudent(-2).cumulative(1) is None


# -------------------------
# F
# -------------------------
def test_f_density_values():
    f = F(1, 2)
    expected = [0.19245009, 0.08838835, 0.05163978, 0.03402069, 0.02414726]
    for x, value in zip(POINTS, expected):
        assert f.density(x) == pytest.approx(value, rel=1e-7)


@pytest.mark.parametrize("d1, d2", [(1, 2), (3, 16), (2, 21), (10, 4)])
def test_f_cumulative_matches_scipy(d1, d2):
    f = F(d1, d2)
    for x in (0.2, 1.0, 2.23, 6.0):
        assert f.cumulative(x) == pytest.approx(float(stats.f.cdf(x, d1, d2)), abs=1e-9)


def test_f_domain_and_moments():
    assert F(0, 2).density(1) is None
    assert F(2, -1).cumulative(1) is None
    assert F(3, 4).cumulative(-1) is None
    assert F(3, 4).cumulative(0) == 0.0
    assert F(2, 5).density(0) == 1.0
    assert F(1, 5).density(0) == math.inf
    assert F(3, 2).mean() is None
    assert F(3, 6).mean() == pytest.approx(1.5)
    assert F(4, 10).mode() == pytest.approx((2 / 4) * (10 / 12))
    assert F(4, 10).variance() == pytest.approx(float(stats.f(4, 10).var()))
    assert F(4, 4).variance() is None


# -------------------------
# Normal
# -------------------------
def test_normal_cumulative_scenario():
    normal = Normal(3, 5)
    assert normal.cumulative(1) == pytest.approx(0.3445783, abs=1e-7)
    assert normal.cumulative(3) == 0.5


def test_normal_density_and_moments():
    normal = Normal(3, 5)
    assert normal.density(1) == pytest.approx(float(stats.norm.pdf(1, 3, 5)), rel=1e-12)
    assert normal.mean() == 3
    assert normal.mode() == 3
    assert normal.variance() == 25
    assert Normal(0, 0).cumulative(1) is None
    assert Normal(0, -1).density(1) is None


def test_standard_normal_is_fixed_instance():
    assert Normal.standard() is STANDARD_NORMAL
    assert STANDARD_NORMAL == Normal(0.0, 1.0)
    assert STANDARD_NORMAL.cumulative(1.96) == pytest.approx(0.9750021, abs=1e-7)


def test_normal_random_is_reproducible():
    first = Normal(3.0, 1.0).random(elements=10, seed=100)
    second = Normal(3.0, 1.0).random(elements=10, seed=100)
    assert isinstance(first, np.ndarray)
    assert first.shape == (10,)
    np.testing.assert_array_equal(first, second)
    assert isinstance(Normal(0, 1).random(seed=1), float)


def test_normal_random_moments():
    draws = Normal(10.0, 2.0).random(elements=4000, seed=7)
    assert float(np.mean(draws)) == pytest.approx(10.0, abs=0.15)
    assert float(np.std(draws, ddof=1)) == pytest.approx(2.0, abs=0.15)


# -------------------------
# Closed-form families
# -------------------------
def test_uniform():
    u = Uniform(2, 6)
    assert u.density(3) == pytest.approx(0.25)
    assert u.density(7) == 0.0
    assert u.cumulative(1) == 0.0
    assert u.cumulative(3) == pytest.approx(0.25)
    assert u.cumulative(9) == 1.0
    assert u.mean() == 4
    assert u.variance() == pytest.approx(16 / 12)
    assert Uniform(3, 3).density(3) is None


def test_weibull():
    w = Weibull(2.0, 3.0)
    ref = stats.weibull_min(2.0, scale=3.0)
    for x in (0.5, 1.0, 3.0, 6.0):
        assert w.density(x) == pytest.approx(float(ref.pdf(x)), rel=1e-12)
        assert w.cumulative(x) == pytest.approx(float(ref.cdf(x)), rel=1e-12)
    assert w.mean() == pytest.approx(float(ref.mean()))
    assert w.variance() == pytest.approx(float(ref.var()))
    assert w.mode() == pytest.approx(3.0 * math.sqrt(0.5))
    assert w.cumulative(-1) == 0.0
    assert Weibull(0, 1).density(1) is None


def test_empirical_cumulative():
    e = Empirical([1, 2, 3, 4, 5, 6, 7, 8, 9, 0])
    assert e.cumulative(7) == pytest.approx(0.8)
    assert e.cumulative(-1) == 0.0
    assert e.cumulative(100) == 1.0
    assert e.mean() == pytest.approx(4.5)
    with pytest.raises(InvalidParameterError):
        Empirical([])


# -------------------------
# Purity
# -------------------------
@pytest.mark.parametrize(
    "dist, x",
    [
        (Beta(2, 3), 0.4),
        (Gamma(4, scale=2), 3.0),
        (ChiSquared(5), 2.2),
        (TStudent(3), 1.1),
        (F(3, 7), 1.4),
        (Normal(1, 2), 0.3),
    ],
)
def test_evaluation_is_idempotent(dist, x):
    assert dist.cumulative(x) == dist.cumulative(x)
    assert dist.density(x) == dist.density(x)
