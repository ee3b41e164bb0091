# special.py
"""
Special-function kernel for the distribution layer.

This module provides:
- Gamma-function primitives (`gamma`, `ln_gamma`) evaluated by scipy.special
- The complete beta function (`beta_function`, `ln_beta`)
- The regularized incomplete beta function I_x(a, b), evaluated with a
  continued fraction (modified Lentz algorithm)
- Composite Simpson's rule (`simpson_rule`)
- The lower incomplete gamma function and its regularized form P(s, x),
  integrated with Simpson's rule

Results outside a function's domain are returned as None. A continued fraction
that does not converge, or a Simpson rule asked for an odd interval count,
raises a `ComputationError` subclass instead.

Docstrings in this file follow the NumPy documentation style.
"""

from typing import Callable, Optional, Tuple
import logging
import math

import numpy as np
from scipy import special as sc

from errors import ConvergenceError, IntegrationError
from settings import get_settings

logger = logging.getLogger(__name__)


# -------------------------
# Gamma and beta primitives
# -------------------------
def gamma(x: float) -> float:
    """Gamma function; +/-inf at the poles (non-positive integers)."""
    return float(sc.gamma(x))


def ln_gamma(x: float) -> float:
    """Natural logarithm of |Gamma(x)|."""
    return float(sc.gammaln(x))


def ln_beta(a: float, b: float) -> float:
    """ln B(a, b) = lnGamma(a) + lnGamma(b) - lnGamma(a + b)."""
    return ln_gamma(a) + ln_gamma(b) - ln_gamma(a + b)


def beta_function(x: float, y: float) -> float:
    """
    Complete beta function B(x, y) = Gamma(x) * Gamma(y) / Gamma(x + y).

    Parameters
    ----------
    x, y : float
        Arguments of the beta function.

    Returns
    -------
    float
        B(x, y). The case x = y = 1 returns 1.0 without evaluating Gamma.
    """
    if x == 1 and y == 1:
        return 1.0
    value = gamma(x) * gamma(y) / gamma(x + y)
    if not math.isfinite(value) and x > 0 and y > 0:
        # Gamma overflows long before B(x, y) does
        value = math.exp(ln_beta(x, y))
    return value


# -------------------------
# Regularized incomplete beta
# -------------------------
def regularized_incomplete_beta(
    x: float,
    a: float,
    b: float,
    *,
    max_iterations: Optional[int] = None,
    tolerance: Optional[float] = None,
) -> Optional[float]:
    """
    Regularized incomplete beta function I_x(a, b).

    The continued fraction converges quickly for x < (a + 1) / (a + b + 2);
    above that point the identity I_x(a, b) = 1 - I_{1-x}(b, a) is used.

    Parameters
    ----------
    x : float
        Upper integration limit.
    a, b : float
        Shape parameters (must be > 0).
    max_iterations : int, optional
        Continued-fraction term budget (default from settings, 500).
    tolerance : float, optional
        Stop when |1 - c*d| falls below this value (default 1e-10).

    Returns
    -------
    float or None
        I_x(a, b) in [0, 1]; None for x < 0, NaN input or non-positive a/b;
        1.0 for x > 1.

    Raises
    ------
    ConvergenceError
        If the continued fraction has not converged within the budget.
    """
    if math.isnan(x) or x < 0.0:
        return None
    if x > 1.0:
        return 1.0
    if not (a > 0.0 and b > 0.0):
        return None
    if x == 0.0:
        return 0.0
    if x == 1.0:
        return 1.0

    settings = get_settings()
    if max_iterations is None:
        max_iterations = settings.beta_max_iterations
    if tolerance is None:
        tolerance = settings.beta_tolerance

    if x > (a + 1.0) / (a + b + 2.0):
        complement = regularized_incomplete_beta(
            1.0 - x, b, a, max_iterations=max_iterations, tolerance=tolerance
        )
        return 1.0 - complement

    # front factor in log space: x^a (1-x)^b / (a B(a, b))
    front = math.exp(a * math.log(x) + b * math.log1p(-x) - ln_beta(a, b)) / a
    fraction = _incomplete_beta_fraction(x, a, b, max_iterations, tolerance, settings.beta_tiny)
    value = front * (fraction - 1.0)
    return min(1.0, max(0.0, value))


def _incomplete_beta_fraction(x, a, b, max_iterations, tolerance, tiny):
    """Modified Lentz evaluation of the incomplete beta continued fraction."""
    f, c, d = 1.0, 1.0, 0.0
    for i in range(max_iterations + 1):
        m = i // 2
        if i == 0:
            numerator = 1.0
        elif i % 2 == 0:
            numerator = (m * (b - m) * x) / ((a + 2.0 * m - 1.0) * (a + 2.0 * m))
        else:
            numerator = -((a + m) * (a + b + m) * x) / ((a + 2.0 * m) * (a + 2.0 * m + 1.0))

        d = 1.0 + numerator * d
        if abs(d) < tiny:
            d = tiny
        d = 1.0 / d

        c = 1.0 + numerator / c
        if abs(c) < tiny:
            c = tiny

        cd = c * d
        f *= cd
        if abs(1.0 - cd) < tolerance:
            return f

    raise ConvergenceError("regularized_incomplete_beta", max_iterations, tolerance)


# -------------------------
# Composite Simpson's rule
# -------------------------
# grid points evaluated per block; bounds memory for large interval counts
SIMPSON_BLOCK_SIZE = 1 << 20


def _evaluate(f: Callable, points: np.ndarray, vectorized: bool) -> Tuple[np.ndarray, bool]:
    if vectorized:
        try:
            values = np.asarray(f(points), dtype=float)
        except TypeError:
            # integrand written for scalars (e.g. math.sin)
            vectorized = False
    if not vectorized:
        values = np.fromiter((f(float(t)) for t in points), dtype=float, count=points.size)
    if values.shape != points.shape:
        values = np.broadcast_to(values, points.shape)
    return values, vectorized


def simpson_rule(a: float, b: float, n: int, f: Callable) -> float:
    """
    Composite Simpson's 1/3 rule for the integral of `f` over [a, b].

    Parameters
    ----------
    a, b : float
        Integration limits.
    n : int
        Number of sub-intervals (must be positive and even).
    f : callable
        Integrand. Called with numpy arrays of grid points, at most
        `SIMPSON_BLOCK_SIZE` at a time; a scalar-only callable is evaluated
        point by point instead.

    Returns
    -------
    float
        The approximation (h/3) * [f(a) + 4*sum(odd) + 2*sum(even) + f(b)].

    Raises
    ------
    IntegrationError
        If n is not a positive even integer.
    """
    if int(n) != n or n <= 0 or int(n) % 2 != 0:
        raise IntegrationError(f"The composite Simpson's rule needs a positive even interval count, got {n}.")
    n = int(n)
    h = (b - a) / n

    total = 0.0
    vectorized = True
    for start in range(0, n + 1, SIMPSON_BLOCK_SIZE):
        index = np.arange(start, min(start + SIMPSON_BLOCK_SIZE, n + 1))
        points = a + index * h
        points[index == n] = b
        values, vectorized = _evaluate(f, points, vectorized)
        weights = np.where(index % 2 == 1, 4.0, 2.0)
        weights[(index == 0) | (index == n)] = 1.0
        total += float(np.dot(weights, values))
    return total * h / 3.0


def simpson_intervals(
    x: float,
    *,
    intervals_per_unit: Optional[int] = None,
    min_intervals: Optional[int] = None,
) -> int:
    """
    Interval count used to integrate over [0, x].

    The count is intervals_per_unit * x rounded to the nearest even integer,
    2 * round(intervals_per_unit * x / 2), so rounding never yields an odd
    count. A count that rounds to zero is replaced by `min_intervals`.

    Raises
    ------
    IntegrationError
        If the resulting count is odd (only possible through an odd
        `min_intervals`).
    """
    settings = get_settings()
    if intervals_per_unit is None:
        intervals_per_unit = settings.simpson_intervals_per_unit
    if min_intervals is None:
        min_intervals = settings.simpson_min_intervals

    n = 2 * int(math.floor(intervals_per_unit * x / 2.0 + 0.5))
    if n == 0:
        logger.debug("Simpson interval count for x=%r rounds to zero; using %d", x, min_intervals)
        n = int(min_intervals)
    if n % 2 != 0:
        raise IntegrationError(f"Simpson interval count for x={x!r} is odd ({n}).")
    return n


# -------------------------
# Lower incomplete gamma
# -------------------------
def _incomplete_gamma_integrand(s: float, log_scale: float) -> Tuple[Callable, Callable]:
    """
    Integrand and transformed upper limit for the integral of t^(s-1) e^(-t).

    With t = u^2 the integrand becomes 2 u^(2s-1) e^(-u^2), finite at the origin
    for s >= 1/2. Smaller shapes use t = u^(1/s), giving e^(-u^(1/s)) / s.
    `log_scale` is subtracted in the exponent (ln Gamma(s) for the regularized form).
    """
    if s >= 0.5:
        power = 2.0 * s - 1.0

        def integrand(u):
            with np.errstate(divide="ignore", over="ignore"):
                return 2.0 * np.exp(sc.xlogy(power, u) - u * u - log_scale)

        return integrand, math.sqrt

    exponent = 1.0 / s

    def integrand(u):
        with np.errstate(over="ignore"):
            return np.exp(-np.power(u, exponent) - log_scale) / s

    return integrand, lambda x: x ** s


def incomplete_gamma_cutoff(s: float) -> float:
    """
    Point past which the integrand of gamma(s, x) is negligible.

    The upper tail beyond s + 40 sqrt(s) + 40 is below exp(-40) relative to
    Gamma(s) for every s > 0, so integrating further only adds intervals.
    """
    return s + 40.0 * math.sqrt(s) + 40.0


def _integrate_incomplete_gamma(s, x, log_scale, intervals_per_unit, min_intervals):
    cutoff = incomplete_gamma_cutoff(s)
    if x > cutoff:
        logger.debug("Truncating incomplete gamma integral for s=%r at %r instead of x=%r", s, cutoff, x)
        x = cutoff
    n = simpson_intervals(x, intervals_per_unit=intervals_per_unit, min_intervals=min_intervals)
    integrand, upper_limit = _incomplete_gamma_integrand(s, log_scale)
    logger.debug("Integrating lower incomplete gamma s=%r x=%r with %d intervals", s, x, n)
    return simpson_rule(0.0, upper_limit(x), n, integrand)


def lower_incomplete_gamma(
    s: float,
    x: float,
    *,
    intervals_per_unit: Optional[int] = None,
    min_intervals: Optional[int] = None,
) -> Optional[float]:
    """
    Lower incomplete gamma function gamma(s, x) = integral_0^x t^(s-1) e^(-t) dt.

    Parameters
    ----------
    s : float
        Shape (must be > 0).
    x : float
        Upper limit (must be >= 0).
    intervals_per_unit : int, optional
        Simpson sub-intervals per unit of x (default 10000).
    min_intervals : int, optional
        Interval count used when the scaled count rounds to zero (default 100000).

    Returns
    -------
    float or None
        gamma(s, x); None when s <= 0, x < 0 or either is NaN.
    """
    if math.isnan(s) or math.isnan(x) or s <= 0.0 or x < 0.0:
        return None
    if x == 0.0:
        return 0.0
    if math.isinf(x):
        return gamma(s)
    return _integrate_incomplete_gamma(s, x, 0.0, intervals_per_unit, min_intervals)


def regularized_lower_incomplete_gamma(
    s: float,
    x: float,
    *,
    intervals_per_unit: Optional[int] = None,
    min_intervals: Optional[int] = None,
) -> Optional[float]:
    """
    Regularized lower incomplete gamma P(s, x) = gamma(s, x) / Gamma(s).

    The division by Gamma(s) happens inside the integrand's exponent so large
    shapes do not overflow. The result is clamped to [0, 1].

    Returns
    -------
    float or None
        P(s, x); None under the same conditions as `lower_incomplete_gamma`.
    """
    if math.isnan(s) or math.isnan(x) or s <= 0.0 or x < 0.0:
        return None
    if x == 0.0:
        return 0.0
    if math.isinf(x):
        return 1.0
    value = _integrate_incomplete_gamma(s, x, ln_gamma(s), intervals_per_unit, min_intervals)
    return min(1.0, max(0.0, value))
