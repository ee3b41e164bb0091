# distributions.py
"""
Probability distributions built on the special-function kernel.

This module provides immutable distribution objects exposing `density`,
`cumulative`, `mean`, `variance` and `mode`:
- Beta, Gamma, ChiSquared, TStudent and F (cumulative functions evaluated with
  the incomplete beta / incomplete gamma kernel)
- Normal (and the fixed `STANDARD_NORMAL` instance), with Marsaglia polar sampling
- Uniform, Weibull and Empirical (closed forms)

Any query outside a distribution's support, or on degenerate parameters,
returns None instead of a number. Explicit configuration errors (e.g. a
non-positive Gamma scale) raise `InvalidParameterError` at construction.

Docstrings in this file follow the NumPy documentation style.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union
import math

import numpy as np

from errors import InvalidParameterError
import special


class Distribution(ABC):
    """Capability set shared by every distribution family."""

    @abstractmethod
    def density(self, x: float) -> Optional[float]:
        ...

    @abstractmethod
    def cumulative(self, x: float) -> Optional[float]:
        ...

    def mean(self) -> Optional[float]:
        return None

    def variance(self) -> Optional[float]:
        return None

    def mode(self) -> Optional[float]:
        return None


def _power_at_zero(exponent: float) -> float:
    """Value of 0**exponent, with +inf for negative exponents."""
    if exponent < 0:
        return math.inf
    if exponent == 0:
        return 1.0
    return 0.0


# =============================================================================
# DISTRIBUTIONS BACKED BY THE INCOMPLETE BETA FUNCTION
# =============================================================================

@dataclass(frozen=True)
class Beta(Distribution):
    """Beta(alpha, beta) on [0, 1]."""

    alpha: float
    beta: float

    @property
    def _valid(self) -> bool:
        return self.alpha > 0 and self.beta > 0

    def beta_function(self) -> float:
        return special.beta_function(self.alpha, self.beta)

    def density(self, x: float) -> Optional[float]:
        if not self._valid or x < 0 or x > 1:
            return None
        if x == 0 or x == 1:
            exponent = self.alpha - 1 if x == 0 else self.beta - 1
            edge = _power_at_zero(exponent)
            if edge != 1.0:
                return edge
            return 1.0 / self.beta_function()
        num = (x ** (self.alpha - 1)) * ((1 - x) ** (self.beta - 1))
        return num / self.beta_function()

    def cumulative(self, x: float) -> Optional[float]:
        if not self._valid:
            # the incomplete beta is still 1.0 past the upper bound
            return 1.0 if x > 1 else None
        return special.regularized_incomplete_beta(x, self.alpha, self.beta)

    def mean(self) -> Optional[float]:
        total = self.alpha + self.beta
        if total == 0:
            return None
        return self.alpha / total

    def variance(self) -> Optional[float]:
        if not self._valid:
            return None
        total = self.alpha + self.beta
        return (self.alpha * self.beta) / (total ** 2 * (total + 1))

    def mode(self) -> Optional[float]:
        if not (self.alpha > 1 and self.beta > 1):
            return None
        return (self.alpha - 1) / (self.alpha + self.beta - 2)


@dataclass(frozen=True)
class TStudent(Distribution):
    """Student's t distribution with `degrees_of_freedom` (v)."""

    degrees_of_freedom: float

    def cumulative(self, x: float) -> Optional[float]:
        v = self.degrees_of_freedom
        if v <= 0 or math.isnan(x):
            return None
        if math.isinf(x):
            return 1.0 if x > 0 else 0.0
        root = math.sqrt(x * x + v)
        point = (x + root) / (2.0 * root)
        return special.regularized_incomplete_beta(point, v / 2.0, v / 2.0)

    def density(self, x: float) -> Optional[float]:
        v = self.degrees_of_freedom
        if v <= 0:
            return None
        log_left = special.ln_gamma((v + 1) / 2.0) - special.ln_gamma(v / 2.0) - 0.5 * math.log(v * math.pi)
        return math.exp(log_left) * (1 + (x ** 2) / v) ** (-(v + 1) / 2.0)

    def mean(self) -> Optional[float]:
        return 0.0 if self.degrees_of_freedom > 1 else None

    def variance(self) -> Optional[float]:
        v = self.degrees_of_freedom
        if 1 < v <= 2:
            return math.inf
        if v > 2:
            return v / (v - 2.0)
        return None

    def mode(self) -> Optional[float]:
        return 0.0


@dataclass(frozen=True)
class F(Distribution):
    """Fisher-Snedecor F distribution with degrees of freedom d1 and d2."""

    d1: float
    d2: float

    @property
    def _valid(self) -> bool:
        return self.d1 > 0 and self.d2 > 0

    def cumulative(self, x: float) -> Optional[float]:
        if not self._valid or math.isnan(x) or x < 0:
            return None
        if math.isinf(x):
            return 1.0
        k = self.d2 / (self.d2 + self.d1 * x)
        return 1.0 - special.regularized_incomplete_beta(k, self.d2 / 2.0, self.d1 / 2.0)

    def density(self, x: float) -> Optional[float]:
        if not self._valid or x < 0:
            return None
        d1, d2 = self.d1, self.d2
        if x == 0:
            if d1 == 2:
                return 1.0
            return _power_at_zero(d1 / 2.0 - 1)
        # sqrt((d1 x)^d1 d2^d2 / (d1 x + d2)^(d1 + d2)) in log space
        log_up = 0.5 * (d1 * math.log(d1 * x) + d2 * math.log(d2) - (d1 + d2) * math.log(d1 * x + d2))
        down = x * special.beta_function(d1 / 2.0, d2 / 2.0)
        return math.exp(log_up) / down

    def mean(self) -> Optional[float]:
        if self.d2 <= 2:
            return None
        return self.d2 / (self.d2 - 2.0)

    def variance(self) -> Optional[float]:
        d1, d2 = self.d1, self.d2
        if d1 <= 0 or d2 <= 4:
            return None
        return (2.0 * d2 ** 2 * (d1 + d2 - 2)) / (d1 * (d2 - 2) ** 2 * (d2 - 4))

    def mode(self) -> Optional[float]:
        if self.d1 <= 2:
            return None
        return ((self.d1 - 2) / self.d1) * (self.d2 / (self.d2 + 2.0))


# =============================================================================
# DISTRIBUTIONS BACKED BY THE INCOMPLETE GAMMA FUNCTION
# =============================================================================

@dataclass(frozen=True)
class ChiSquared(Distribution):
    """Chi-squared distribution with k `degrees_of_freedom`."""

    degrees_of_freedom: float

    def cumulative(self, x: float) -> Optional[float]:
        k = self.degrees_of_freedom
        if k <= 0 or math.isnan(x) or x < 0:
            return None
        if k == 2:
            # closed form for two degrees of freedom
            return 1.0 - math.exp(-x / 2.0)
        return special.regularized_lower_incomplete_gamma(k / 2.0, x / 2.0)

    def density(self, x: float) -> Optional[float]:
        k = self.degrees_of_freedom
        if k <= 0 or x < 0:
            return None
        common = k / 2.0
        left_down = (2 ** common) * special.gamma(common)
        if x == 0:
            return _power_at_zero(common - 1) / left_down
        right = math.exp((common - 1) * math.log(x) - x / 2.0)
        return right / left_down

    def mean(self) -> Optional[float]:
        return self.degrees_of_freedom

    def variance(self) -> Optional[float]:
        return self.degrees_of_freedom * 2

    def mode(self) -> Optional[float]:
        return max(self.degrees_of_freedom - 2, 0)


@dataclass(frozen=True)
class Gamma(Distribution):
    """
    Gamma distribution with a scale or a rate parameterization.

    Exactly one of `scale` and `rate` is active. When neither is given the
    distribution behaves with a rate parameter of 1 / shape.

    Raises
    ------
    InvalidParameterError
        If both scale and rate are given, or either is given and non-positive.
    """

    shape: float
    scale: Optional[float] = None
    rate: Optional[float] = None

    def __post_init__(self):
        if self.scale is not None and self.rate is not None:
            raise InvalidParameterError("Gamma takes either a scale or a rate, not both.")
        if self.scale is not None and not self.scale > 0:
            raise InvalidParameterError(f"Gamma scale must be positive, got {self.scale}.")
        if self.rate is not None and not self.rate > 0:
            raise InvalidParameterError(f"Gamma rate must be positive, got {self.rate}.")
        if self.scale is None and self.rate is None:
            object.__setattr__(self, "rate", 1.0 / self.shape if self.shape != 0 else math.inf)

    @property
    def as_rate(self) -> bool:
        return self.scale is None

    @property
    def _valid(self) -> bool:
        return self.shape > 0

    def mean(self) -> Optional[float]:
        if not self._valid:
            return None
        if self.as_rate:
            return self.shape / self.rate
        return self.shape * self.scale

    def mode(self) -> Optional[float]:
        if not self._valid:
            return None
        if self.shape < 1.0:
            return 0.0
        if self.as_rate:
            return (self.shape - 1.0) / self.rate
        return (self.shape - 1.0) * self.scale

    def variance(self) -> Optional[float]:
        if not self._valid:
            return None
        if self.as_rate:
            return self.shape / (self.rate ** 2.0)
        return self.shape * (self.scale ** 2.0)

    def skewness(self) -> Optional[float]:
        if not self._valid:
            return None
        return 2.0 / math.sqrt(self.shape)

    def density(self, x: float) -> Optional[float]:
        if not self._valid or x < 0:
            return None
        if self.as_rate:
            log_left = self.shape * math.log(self.rate) - special.ln_gamma(self.shape)
            exponent = -self.rate * x
        else:
            log_left = -special.ln_gamma(self.shape) - self.shape * math.log(self.scale)
            exponent = -x / self.scale
        if x == 0:
            return math.exp(log_left) * _power_at_zero(self.shape - 1)
        return math.exp(log_left + (self.shape - 1) * math.log(x) + exponent)

    def cumulative(self, x: float) -> Optional[float]:
        if not self._valid or math.isnan(x) or x < 0:
            return None
        upper = self.rate * x if self.as_rate else x / self.scale
        return special.regularized_lower_incomplete_gamma(self.shape, upper)


# =============================================================================
# NORMAL FAMILY
# =============================================================================

@dataclass(frozen=True)
class Normal(Distribution):
    """Normal distribution N(mu, sigma^2)."""

    mu: float
    sigma: float

    @classmethod
    def standard(cls) -> "Normal":
        return STANDARD_NORMAL

    def cumulative(self, x: float) -> Optional[float]:
        if not self.sigma > 0:
            return None
        return 0.5 * (1.0 + math.erf((x - self.mu) / (self.sigma * math.sqrt(2.0))))

    def density(self, x: float) -> Optional[float]:
        if not self.sigma > 0:
            return None
        variance = self.sigma ** 2
        return math.exp(-((x - self.mu) ** 2) / (2.0 * variance)) / math.sqrt(2.0 * math.pi * variance)

    def mean(self) -> Optional[float]:
        return self.mu

    def mode(self) -> Optional[float]:
        return self.mu

    def variance(self) -> Optional[float]:
        return self.sigma ** 2

    def random(self, elements: int = 1, seed: Optional[int] = None) -> Union[float, np.ndarray]:
        """
        Draw normal variates with the Marsaglia polar method.

        Parameters
        ----------
        elements : int, optional
            Number of draws, by default 1.
        seed : int, optional
            Seed of the uniform(0, 1) source (numpy Generator) for reproducibility.

        Returns
        -------
        float or numpy.ndarray
            A single float when `elements == 1`, otherwise an array of draws.
        """
        rng = np.random.default_rng(seed)
        results = np.empty(int(elements), dtype=float)
        for i in range(results.size):
            # find a point strictly inside the unit circle
            while True:
                u = 2.0 * rng.random() - 1.0
                v = 2.0 * rng.random() - 1.0
                r = u * u + v * v
                if 0.0 < r < 1.0:
                    break
            results[i] = self.mu + u * math.sqrt(-2.0 * math.log(r) / r) * self.sigma
        if elements == 1:
            return float(results[0])
        return results


STANDARD_NORMAL = Normal(0.0, 1.0)


# =============================================================================
# CLOSED-FORM FAMILIES
# =============================================================================

@dataclass(frozen=True)
class Uniform(Distribution):
    """Continuous uniform distribution on [left, right]."""

    left: float
    right: float

    @property
    def _valid(self) -> bool:
        return self.left < self.right

    def density(self, x: float) -> Optional[float]:
        if not self._valid:
            return None
        if self.left <= x <= self.right:
            return 1.0 / (self.right - self.left)
        return 0.0

    def cumulative(self, x: float) -> Optional[float]:
        if not self._valid:
            return None
        if x < self.left:
            return 0.0
        if x > self.right:
            return 1.0
        return (x - self.left) / (self.right - self.left)

    def mean(self) -> Optional[float]:
        return 0.5 * (self.left + self.right)

    def variance(self) -> Optional[float]:
        return ((self.right - self.left) ** 2) / 12.0


@dataclass(frozen=True)
class Weibull(Distribution):
    """Weibull distribution with shape k and scale lambda."""

    shape: float
    scale: float

    @property
    def _valid(self) -> bool:
        return self.shape > 0 and self.scale > 0

    def cumulative(self, x: float) -> Optional[float]:
        if not self._valid:
            return None
        if x < 0:
            return 0.0
        return 1.0 - math.exp(-((x / self.scale) ** self.shape))

    def density(self, x: float) -> Optional[float]:
        if not self._valid:
            return None
        if x < 0:
            return 0.0
        if x == 0:
            return (self.shape / self.scale) * _power_at_zero(self.shape - 1)
        ratio = x / self.scale
        return (self.shape / self.scale) * ratio ** (self.shape - 1) * math.exp(-(ratio ** self.shape))

    def mean(self) -> Optional[float]:
        if not self._valid:
            return None
        return self.scale * special.gamma(1 + 1 / self.shape)

    def mode(self) -> Optional[float]:
        if not self._valid:
            return None
        if self.shape <= 1:
            return 0.0
        return self.scale * ((self.shape - 1) / self.shape) ** (1 / self.shape)

    def variance(self) -> Optional[float]:
        if not self._valid:
            return None
        left = special.gamma(1 + 2 / self.shape)
        right = special.gamma(1 + 1 / self.shape) ** 2
        return self.scale ** 2 * (left - right)


@dataclass(frozen=True, eq=False)
class Empirical(Distribution):
    """Empirical distribution of an observed sample (step CDF)."""

    samples: Sequence[float] = field(default_factory=tuple)

    def __post_init__(self):
        values = np.sort(np.asarray(self.samples, dtype=float).ravel())
        if values.size == 0:
            raise InvalidParameterError("Empirical distribution needs at least one sample.")
        values.setflags(write=False)
        object.__setattr__(self, "samples", values)

    def cumulative(self, x: float) -> Optional[float]:
        """Fraction of samples <= x."""
        count = int(np.searchsorted(self.samples, x, side="right"))
        return count / self.samples.size

    def density(self, x: float) -> Optional[float]:
        return None

    def mean(self) -> Optional[float]:
        return float(np.mean(self.samples))

    def variance(self) -> Optional[float]:
        if self.samples.size < 2:
            return None
        return float(np.var(self.samples, ddof=1))
