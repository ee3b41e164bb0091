# backend.py
"""
Hypothesis tests built on the distribution layer.

This module provides:
- Summary helper (`summarize`) shared by the parametric tests
- The common decision record (`HypothesisTestResult`)
- Chi-squared goodness-of-fit and test of independence (`ContingencyTable`)
- One-sample, two-sample and paired t-tests, with summary-statistic variants
- Two-sample Kolmogorov-Smirnov test
- Wilcoxon rank-sum / Mann-Whitney U test (normal approximation)
- Spearman rank correlation coefficient and its significance test
- One-way ANOVA F-test

Every test maps its statistic through a distribution's `cumulative` function:
probability = cdf(statistic), p_value = (1 - probability) * tails, and the null
hypothesis is accepted when alpha < p_value.

Docstrings in this file follow the NumPy documentation style.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union
import logging
import math
import numbers

import numpy as np
import pandas as pd

from distributions import STANDARD_NORMAL, ChiSquared, Empirical, F, TStudent
from errors import (
    IdenticalSamplesError,
    InsufficientDataError,
    InvalidParameterError,
    SampleSizeMismatchError,
    ZeroExpectedCellError,
    ZeroVarianceError,
)
import ranking

logger = logging.getLogger(__name__)

ONE_SIDED = "one-sided"
TWO_SIDED = "two-sided"

_TAILS = {
    "one-sided": ONE_SIDED,
    "one_tail": ONE_SIDED,
    "one-tail": ONE_SIDED,
    "two-sided": TWO_SIDED,
    "two_tail": TWO_SIDED,
    "two-tail": TWO_SIDED,
}


# -------------------------
# Utility summarizer
# -------------------------
def summarize(arr_like) -> Tuple[float, float, int]:
    """
    Compute mean, sample standard deviation, and sample size for an array-like.

    NaN values are ignored.

    Parameters
    ----------
    arr_like : array-like
        Sequence of numeric values (will be cast to float).

    Returns
    -------
    mean : float
        Sample mean of non-NaN values.
    sd : float
        Sample standard deviation (ddof=1). If n <= 1, returns 0.0.
    n : int
        Number of non-NaN observations.

    Raises
    ------
    InsufficientDataError
        If there are no valid (non-NaN) observations.
    """
    a = _clean(arr_like)
    n = a.size
    if n == 0:
        raise InsufficientDataError("No valid (non-NaN) observations found.")
    mean = float(np.mean(a))
    sd = float(np.std(a, ddof=1)) if n > 1 else 0.0
    return mean, sd, int(n)


def _clean(arr_like) -> np.ndarray:
    a = np.asarray(arr_like, dtype=float).ravel()
    return a[~np.isnan(a)]


# -------------------------
# Decision record
# -------------------------
@dataclass(frozen=True)
class HypothesisTestResult:
    """
    Outcome of a hypothesis test.

    `probability` is the cumulative probability of the statistic under the
    null distribution and `p_value = (1 - probability) * tails`. Tests without
    a p-value (Kolmogorov-Smirnov) leave both as None and decide on
    `critical_value` instead.
    """

    method: str
    statistic: float
    alpha: float
    null_accepted: bool
    probability: Optional[float] = None
    p_value: Optional[float] = None
    degrees_of_freedom: Optional[Union[float, Tuple[float, float]]] = None
    tails: Optional[str] = None
    critical_value: Optional[float] = None
    details: Mapping[str, Any] = field(default_factory=dict)
    warnings: Tuple[str, ...] = ()

    def __post_init__(self):
        # arrays are copied read-only and the mapping itself is a read-only view
        frozen = {}
        for key, value in dict(self.details).items():
            if isinstance(value, np.ndarray):
                value = value.copy()
                value.setflags(write=False)
            elif isinstance(value, list):
                value = tuple(value)
            frozen[key] = value
        object.__setattr__(self, "details", MappingProxyType(frozen))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    @property
    def alternative_accepted(self) -> bool:
        return not self.null_accepted

    @property
    def confidence_level(self) -> float:
        return 1.0 - self.alpha

    def as_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "statistic": self.statistic,
            "degrees_of_freedom": self.degrees_of_freedom,
            "probability": self.probability,
            "p_value": self.p_value,
            "alpha": self.alpha,
            "null_accepted": self.null_accepted,
            "alternative_accepted": self.alternative_accepted,
            "confidence_level": self.confidence_level,
            "tails": self.tails,
            "critical_value": self.critical_value,
            "details": dict(self.details),
            "warnings": list(self.warnings),
        }


def normalize_tails(tails: str) -> str:
    """Map a tails spelling ("one-sided", "two_tail", ...) to its canonical name."""
    key = str(tails).strip().lower()
    if key not in _TAILS:
        raise InvalidParameterError(f"tails must be one of {sorted(_TAILS)}, got {tails!r}.")
    return _TAILS[key]


def _check_alpha(alpha: float) -> float:
    if not 0.0 < alpha < 1.0:
        raise InvalidParameterError(f"alpha must lie strictly between 0 and 1, got {alpha}.")
    return float(alpha)


def _decide(method, statistic, probability, alpha, tails=None, degrees_of_freedom=None, details=None, warnings=()):
    """Turn a cumulative probability into a HypothesisTestResult."""
    factor = 2 if tails == TWO_SIDED else 1
    p_value = (1.0 - probability) * factor
    result = HypothesisTestResult(
        method=method,
        statistic=float(statistic),
        alpha=alpha,
        null_accepted=bool(alpha < p_value),
        probability=float(probability),
        p_value=float(p_value),
        degrees_of_freedom=degrees_of_freedom,
        tails=tails,
        details=details or {},
        warnings=tuple(warnings),
    )
    logger.debug(
        "%s: statistic=%.6g df=%s p=%.6g alpha=%g null_accepted=%s",
        method, result.statistic, degrees_of_freedom, result.p_value, alpha, result.null_accepted,
    )
    return result


# =============================================================================
# CHI-SQUARED TESTS
# =============================================================================

@dataclass(frozen=True)
class UniformExpected:
    """The same expected count for every category (equal-probability null)."""

    value: float

    def per_category(self, size: int) -> np.ndarray:
        return np.full(size, float(self.value))


@dataclass(frozen=True)
class PerCategoryExpected:
    """One expected count per category."""

    values: Tuple[float, ...]

    def per_category(self, size: int) -> np.ndarray:
        expected = np.asarray(self.values, dtype=float)
        if expected.size != size:
            raise SampleSizeMismatchError(
                f"Expected counts ({expected.size}) and observed counts ({size}) differ in length."
            )
        return expected


Expected = Union[UniformExpected, PerCategoryExpected]


def as_expected(expected) -> Expected:
    """Wrap a scalar or a sequence of expected counts into an `Expected` variant."""
    if isinstance(expected, (UniformExpected, PerCategoryExpected)):
        return expected
    if isinstance(expected, numbers.Real):
        return UniformExpected(float(expected))
    return PerCategoryExpected(tuple(float(v) for v in np.asarray(expected, dtype=float).ravel()))


def chi_squared_statistic(expected, observed) -> Tuple[float, int]:
    """
    Pearson's chi-squared statistic for observed counts against expected counts.

    Parameters
    ----------
    expected : float, sequence of float, UniformExpected or PerCategoryExpected
        A scalar is used for every category.
    observed : sequence of float
        Observed counts per category.

    Returns
    -------
    statistic : float
        Sum of (observed - expected)^2 / expected.
    df : int
        Number of categories minus one.

    Raises
    ------
    InsufficientDataError
        If `observed` is empty.
    ZeroExpectedCellError
        If any expected count is zero.
    """
    obs = np.asarray(observed, dtype=float).ravel()
    if obs.size == 0:
        raise InsufficientDataError("No observed counts given.")
    exp = as_expected(expected).per_category(obs.size)
    if np.any(exp == 0):
        raise ZeroExpectedCellError("An expected count is zero; the chi-squared statistic is undefined.")
    statistic = float(np.sum((obs - exp) ** 2 / exp))
    return statistic, int(obs.size - 1)


def chi_squared_goodness_of_fit(observed, expected, alpha: float = 0.05) -> HypothesisTestResult:
    """
    Chi-squared goodness-of-fit test.

    Parameters
    ----------
    observed : sequence of float
        Observed counts per category.
    expected : float or sequence of float
        Expected counts (a scalar applies to every category).
    alpha : float, optional
        Significance level, by default 0.05.

    Returns
    -------
    HypothesisTestResult
        Statistic, df = categories - 1, p-value and decision.
    """
    alpha = _check_alpha(alpha)
    statistic, df = chi_squared_statistic(expected, observed)
    if df < 1:
        raise InsufficientDataError("A goodness-of-fit test needs at least two categories.")
    probability = ChiSquared(df).cumulative(statistic)

    warnings = []
    exp = as_expected(expected).per_category(df + 1)
    if np.any(exp < 5):
        warnings.append("Warning: Some expected counts are below 5. The chi-squared approximation may be inaccurate.")

    return _decide(
        "Chi-squared goodness-of-fit test",
        statistic,
        probability,
        alpha,
        degrees_of_freedom=df,
        details={"observed": np.asarray(observed, dtype=float).ravel(), "expected": exp},
        warnings=warnings,
    )


@dataclass(frozen=True, eq=False)
class ContingencyTable:
    """
    Two-way table of non-negative observed counts.

    Parameters
    ----------
    observed : array-like
        r x c matrix of counts.
    row_labels, column_labels : tuple, optional
        Labels carried along for display.
    """

    observed: np.ndarray
    row_labels: Tuple = ()
    column_labels: Tuple = ()

    def __post_init__(self):
        counts = np.array(self.observed, dtype=float)
        if counts.ndim != 2 or counts.size == 0:
            raise InvalidParameterError("A contingency table must be a non-empty 2-D matrix of counts.")
        if np.any(np.isnan(counts)):
            raise InvalidParameterError("A contingency table cannot contain missing counts.")
        if np.any(counts < 0):
            raise InvalidParameterError("A contingency table cannot contain negative counts.")
        counts.setflags(write=False)
        object.__setattr__(self, "observed", counts)
        object.__setattr__(self, "row_labels", tuple(self.row_labels))
        object.__setattr__(self, "column_labels", tuple(self.column_labels))

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "ContingencyTable":
        """Build a table from a DataFrame of counts, keeping its index and column labels."""
        counts = df.apply(pd.to_numeric, errors="coerce").to_numpy(dtype=float)
        return cls(counts, tuple(df.index), tuple(df.columns))

    @property
    def shape(self) -> Tuple[int, int]:
        return self.observed.shape

    @property
    def row_sums(self) -> np.ndarray:
        return self.observed.sum(axis=1)

    @property
    def column_sums(self) -> np.ndarray:
        return self.observed.sum(axis=0)

    @property
    def total(self) -> float:
        return float(self.observed.sum())

    @property
    def degrees_of_freedom(self) -> int:
        rows, cols = self.shape
        return (rows - 1) * (cols - 1)

    def expected(self) -> np.ndarray:
        """Expected counts under independence: row_sum[i] * col_sum[j] / total."""
        if self.total == 0:
            raise ZeroExpectedCellError("The contingency table is empty (total count is zero).")
        return np.outer(self.row_sums, self.column_sums) / self.total


def _as_table(table) -> ContingencyTable:
    if isinstance(table, ContingencyTable):
        return table
    if isinstance(table, pd.DataFrame):
        return ContingencyTable.from_frame(table)
    return ContingencyTable(table)


def chi_squared_test_of_independence(table, alpha: float = 0.05) -> HypothesisTestResult:
    """
    Chi-squared test of independence for an r x c contingency table.

    Parameters
    ----------
    table : ContingencyTable, pandas.DataFrame or nested sequence
        Observed counts.
    alpha : float, optional
        Significance level, by default 0.05.

    Returns
    -------
    HypothesisTestResult
        `details["expected"]` holds the expected-count matrix.

    Raises
    ------
    ZeroExpectedCellError
        If any expected cell is zero (an all-zero row or column).
    InsufficientDataError
        If the table has a single row or column.
    """
    alpha = _check_alpha(alpha)
    table = _as_table(table)
    df = table.degrees_of_freedom
    if df < 1:
        raise InsufficientDataError("A test of independence needs at least two rows and two columns.")
    expected = table.expected()
    if np.any(expected == 0):
        raise ZeroExpectedCellError("An expected cell count is zero; remove empty rows or columns.")

    statistic = float(np.sum((table.observed - expected) ** 2 / expected))
    probability = ChiSquared(df).cumulative(statistic)

    warnings = []
    if np.any(expected < 5):
        warnings.append("Warning: Some expected cell counts are below 5. The chi-squared approximation may be inaccurate.")

    return _decide(
        "Chi-squared test of independence",
        statistic,
        probability,
        alpha,
        degrees_of_freedom=df,
        details={"expected": expected, "observed": table.observed},
        warnings=warnings,
    )


# =============================================================================
# T-TESTS
# =============================================================================

def _small_sample_warning(n: int, label: str = "n") -> list:
    if n < 30:
        return [
            f"Warning: Sample size is small ({label} < 30). "
            "The t-test assumes approximately normal data; interpret results cautiously."
        ]
    return []


def _t_probability(t_score: float, df: float, tails: str) -> float:
    """Cumulative t probability: at |t| for two-sided tests, at t (upper tail) for one-sided."""
    if tails == TWO_SIDED:
        return TStudent(df).cumulative(abs(t_score))
    return TStudent(df).cumulative(t_score)


def one_sample_t_test_from_summary(mean: float, sd: float, n: int, comparison_mean: float, alpha: float = 0.05, tails: str = TWO_SIDED) -> HypothesisTestResult:
    """
    One-sample t-test using summary statistics.

    Parameters
    ----------
    mean, sd : float
        Sample mean and sample standard deviation (ddof=1).
    n : int
        Sample size (must be > 1).
    comparison_mean : float
        Mean under the null hypothesis.
    alpha : float, optional
        Significance level, by default 0.05.
    tails : str, optional
        "one-sided" or "two-sided", by default "two-sided".

    Returns
    -------
    HypothesisTestResult
        t = (mean - comparison_mean) / (sd / sqrt(n)) with df = n.

    Raises
    ------
    InsufficientDataError
        If n <= 1.
    ZeroVarianceError
        If sd is zero.
    """
    alpha = _check_alpha(alpha)
    tails = normalize_tails(tails)
    if n <= 1:
        raise InsufficientDataError("n must be > 1 for one-sample test.")
    if sd == 0:
        raise ZeroVarianceError()
    se = sd / math.sqrt(n)
    diff = mean - comparison_mean
    t_score = diff / se
    df = int(n)
    probability = _t_probability(t_score, df, tails)
    details = {
        "mean": float(mean),
        "sd": float(sd),
        "n": int(n),
        "se": float(se),
        "mean_diff": float(diff),
    }
    return _decide("One-sample t-test", t_score, probability, alpha, tails, df, details, _small_sample_warning(n))


def one_sample_t_test(data, comparison_mean: float, alpha: float = 0.05, tails: str = TWO_SIDED) -> HypothesisTestResult:
    """One-sample t-test on raw data (NaNs ignored); see `one_sample_t_test_from_summary`."""
    mean, sd, n = summarize(data)
    return one_sample_t_test_from_summary(mean, sd, n, comparison_mean, alpha, tails)


def two_sample_t_test_from_summary(m1: float, s1: float, n1: int, m2: float, s2: float, n2: int, alpha: float = 0.05, tails: str = TWO_SIDED) -> HypothesisTestResult:
    """
    Two-sample (unpaired) t-test using summary statistics.

    The standard error is unpooled, sqrt(s1^2/n1 + s2^2/n2), and the degrees of
    freedom are n1 + n2 - 2. A two-sided p-value is computed from |t|, so swapping
    the groups only flips the sign of the reported statistic; a one-sided test
    looks at the upper tail, 1 - cdf(t).

    Parameters
    ----------
    m1, s1, n1 : float, float, int
        Mean, sample sd, and sample size for group 1.
    m2, s2, n2 : float, float, int
        Mean, sample sd, and sample size for group 2.
    alpha : float, optional
        Significance level, by default 0.05.
    tails : str, optional
        "one-sided" or "two-sided", by default "two-sided".

    Returns
    -------
    HypothesisTestResult

    Raises
    ------
    InsufficientDataError
        If n1 <= 1 or n2 <= 1.
    ZeroVarianceError
        If both groups have zero standard deviation.
    """
    alpha = _check_alpha(alpha)
    tails = normalize_tails(tails)
    if n1 <= 1 or n2 <= 1:
        raise InsufficientDataError("n1 and n2 must be > 1 for two-sample test.")
    se = math.sqrt((s1 ** 2) / n1 + (s2 ** 2) / n2)
    if se == 0:
        raise ZeroVarianceError()
    diff = m1 - m2
    t_score = diff / se
    df = int(n1 + n2 - 2)
    probability = _t_probability(t_score, df, tails)
    details = {
        "mean1": float(m1),
        "sd1": float(s1),
        "n1": int(n1),
        "mean2": float(m2),
        "sd2": float(s2),
        "n2": int(n2),
        "se": float(se),
        "mean_diff": float(diff),
    }
    warnings = _small_sample_warning(min(n1, n2), "n in at least one group")
    return _decide("Two-sample t-test", t_score, probability, alpha, tails, df, details, warnings)


def two_sample_t_test(a, b, alpha: float = 0.05, tails: str = TWO_SIDED) -> HypothesisTestResult:
    """
    Two-sample t-test wrapper that accepts raw data arrays for groups a and b.

    See `two_sample_t_test_from_summary` for parameter meanings.
    """
    m1, sd1, n1 = summarize(a)
    m2, sd2, n2 = summarize(b)
    return two_sample_t_test_from_summary(m1, sd1, n1, m2, sd2, n2, alpha, tails)


def paired_t_test(left, right, alpha: float = 0.05, tails: str = TWO_SIDED) -> HypothesisTestResult:
    """
    Paired t-test on the differences left - right (df = pairs - 1).

    Parameters
    ----------
    left, right : array-like
        Paired observations of equal length. Pairs with a missing value on
        either side are dropped.
    alpha : float, optional
        Significance level, by default 0.05.
    tails : str, optional
        "one-sided" or "two-sided", by default "two-sided".

    Returns
    -------
    HypothesisTestResult

    Raises
    ------
    SampleSizeMismatchError
        If the inputs differ in length.
    IdenticalSamplesError
        If both samples are the same.
    ZeroVarianceError
        If the differences have zero standard deviation.
    """
    alpha = _check_alpha(alpha)
    tails = normalize_tails(tails)
    x = np.asarray(left, dtype=float).ravel()
    y = np.asarray(right, dtype=float).ravel()
    if x.size != y.size:
        raise SampleSizeMismatchError("Paired t-test requires equal-length inputs.")

    # Complete-case: drop pairs where either is NaN
    ok = ~(np.isnan(x) | np.isnan(y))
    x = x[ok]
    y = y[ok]
    if np.array_equal(x, y):
        raise IdenticalSamplesError()

    differences = x - y
    n = differences.size
    if n < 2:
        raise InsufficientDataError("Paired t-test requires at least 2 complete pairs.")
    sd = float(np.std(differences, ddof=1))
    if sd == 0:
        raise ZeroVarianceError()

    mean = float(np.mean(differences))
    se = sd / math.sqrt(n)
    t_score = mean / se
    df = n - 1
    probability = _t_probability(t_score, df, tails)
    details = {
        "mean_diff": mean,
        "sd_diff": sd,
        "n": int(n),
        "se": se,
    }
    return _decide("Paired t-test", t_score, probability, alpha, tails, df, details, _small_sample_warning(n, "n pairs"))


# =============================================================================
# NONPARAMETRIC TESTS - TWO SAMPLE
# =============================================================================

def kolmogorov_smirnov_two_samples(group_one, group_two, alpha: float = 0.05) -> HypothesisTestResult:
    """
    Two-sample Kolmogorov-Smirnov test.

    D is the largest gap between the two empirical CDFs over the pooled sample
    points. The null hypothesis (same distribution) is accepted when
    D <= sqrt(-0.5 ln(alpha)) * sqrt((n1 + n2) / (n1 n2)). No p-value is
    computed.

    Parameters
    ----------
    group_one, group_two : array-like
        Samples (NaNs ignored); the groups may differ in size.
    alpha : float, optional
        Significance level, by default 0.05.

    Returns
    -------
    HypothesisTestResult
        `statistic` is D, `critical_value` is the critical D.
    """
    alpha = _check_alpha(alpha)
    x = _clean(group_one)
    y = _clean(group_two)
    if x.size == 0 or y.size == 0:
        raise InsufficientDataError("Both groups need at least one observation.")

    ecdf_one = Empirical(x)
    ecdf_two = Empirical(y)
    pooled = np.sort(np.concatenate([x, y]))
    d_max = max(abs(ecdf_one.cumulative(v) - ecdf_two.cumulative(v)) for v in pooled)

    n1, n2 = x.size, y.size
    d_critical = math.sqrt(-0.5 * math.log(alpha)) * math.sqrt((n1 + n2) / (n1 * n2))

    result = HypothesisTestResult(
        method="Two-sample Kolmogorov-Smirnov test",
        statistic=float(d_max),
        alpha=alpha,
        null_accepted=bool(d_max <= d_critical),
        critical_value=float(d_critical),
        tails=TWO_SIDED,
        details={"n1": int(n1), "n2": int(n2)},
    )
    logger.debug("KS two samples: D=%.6g critical=%.6g null_accepted=%s", d_max, d_critical, result.null_accepted)
    return result


ks_two_samples = kolmogorov_smirnov_two_samples


def wilcoxon_rank_sum_test(group_one, group_two, alpha: float = 0.05, tails: str = TWO_SIDED, tie_correction: bool = False) -> HypothesisTestResult:
    """
    Wilcoxon rank-sum (Mann-Whitney U) test with the normal approximation.

    The pooled sample is ranked in ascending order with tied values sharing the
    mean of their ranks. U_k = R_k - n_k (n_k + 1) / 2 and U = min(U_1, U_2);
    z = (U - n1 n2 / 2) / sqrt(n1 n2 (n1 + n2 + 1) / 12).

    Parameters
    ----------
    group_one, group_two : array-like
        Independent samples (NaNs ignored).
    alpha : float, optional
        Significance level, by default 0.05.
    tails : str, optional
        "one-sided" or "two-sided", by default "two-sided".
    tie_correction : bool, optional
        Reduce the variance of U by the tie term sum(t^3 - t) / (N (N - 1)),
        by default False.

    Returns
    -------
    HypothesisTestResult
        `statistic` is U; `details` holds z, U1, U2 and the rank sums.
    """
    alpha = _check_alpha(alpha)
    tails = normalize_tails(tails)
    x = _clean(group_one)
    y = _clean(group_two)
    if x.size == 0 or y.size == 0:
        raise InsufficientDataError("Both groups need at least one observation.")

    n1, n2 = x.size, y.size
    pooled = np.concatenate([x, y])
    ranks = np.asarray(ranking.rank_values(pooled))
    r1 = float(ranks[:n1].sum())
    r2 = float(ranks[n1:].sum())

    u1 = r1 - n1 * (n1 + 1) / 2.0
    u2 = r2 - n2 * (n2 + 1) / 2.0
    u_statistic = min(u1, u2)

    total = n1 + n2
    median_u = n1 * n2 / 2.0
    variance_u = n1 * n2 * (total + 1) / 12.0
    if tie_correction:
        tie_term = sum(t ** 3 - t for t in ranking.tie_counts(pooled.tolist()).values())
        variance_u = n1 * n2 / 12.0 * ((total + 1) - tie_term / (total * (total - 1)))
    if variance_u <= 0:
        raise ZeroVarianceError("Every observation is tied; the rank-sum test carries no information.")

    z = (u_statistic - median_u) / math.sqrt(variance_u)
    probability = 1.0 - STANDARD_NORMAL.cumulative(z)

    warnings = []
    if n1 < 10 or n2 < 10:
        warnings.append(
            "Warning: Sample size is small (n < 10 in at least one group). "
            "The normal approximation to U may be inaccurate."
        )

    details = {
        "u": u_statistic,
        "u1": u1,
        "u2": u2,
        "z": z,
        "rank_sum_one": r1,
        "rank_sum_two": r2,
        "n1": int(n1),
        "n2": int(n2),
        "tie_correction": bool(tie_correction),
    }
    return _decide("Wilcoxon rank-sum test", u_statistic, probability, alpha, tails, None, details, warnings)


mann_whitney_u_test = wilcoxon_rank_sum_test


# =============================================================================
# RANK CORRELATION
# =============================================================================

def spearman_simplified(rank_x: Sequence[float], rank_y: Sequence[float]) -> float:
    """rho = 1 - 6 sum(d^2) / (n^3 - n); valid only for tie-free ranks."""
    rx = np.asarray(rank_x, dtype=float)
    ry = np.asarray(rank_y, dtype=float)
    n = rx.size
    return 1.0 - 6.0 * float(np.sum((rx - ry) ** 2)) / (n ** 3 - n)


def rank_correlation(rank_x: Sequence[float], rank_y: Sequence[float]) -> Optional[float]:
    """Pearson correlation of two rank vectors; None when either has no spread."""
    rx = np.asarray(rank_x, dtype=float)
    ry = np.asarray(rank_y, dtype=float)
    dx = rx - rx.mean()
    dy = ry - ry.mean()
    denominator = math.sqrt(float(np.sum(dx ** 2)) * float(np.sum(dy ** 2)))
    if denominator == 0:
        return None
    return float(np.sum(dx * dy)) / denominator


def spearman_rank_coefficient(x: Sequence[float], y: Sequence[float]) -> Optional[float]:
    """
    Spearman's rank correlation coefficient.

    Both samples are ranked in descending order with tie-adjusted ranks. Without
    ties the simplified formula is used; with ties, the Pearson correlation of
    the ranks.

    Parameters
    ----------
    x, y : sequence of float
        Paired samples of equal size.

    Returns
    -------
    float or None
        rho in [-1, 1]; None for empty samples, a single pair, or a sample whose
        values are all tied.

    Raises
    ------
    SampleSizeMismatchError
        If the samples differ in size.
    """
    x = list(x)
    y = list(y)
    if len(x) != len(y):
        raise SampleSizeMismatchError("Both group sets must have the same number of cases.")
    if len(x) < 2:
        return None

    ranked_x = ranking.rank(x, descending=True)
    ranked_y = ranking.rank(y, descending=True)
    rank_x = [item.rank for item in ranked_x]
    rank_y = [item.rank for item in ranked_y]

    if any(item.tied for item in ranked_x + ranked_y):
        return rank_correlation(rank_x, rank_y)
    return spearman_simplified(rank_x, rank_y)


def spearman_rank_test(x, y, alpha: float = 0.05, tails: str = TWO_SIDED) -> HypothesisTestResult:
    """
    Significance test for Spearman's rho via t = rho sqrt((n - 2) / (1 - rho^2)), df = n - 2.

    Raises
    ------
    InsufficientDataError
        If fewer than 3 pairs are given.
    ZeroVarianceError
        If either sample has all values tied.
    """
    alpha = _check_alpha(alpha)
    tails = normalize_tails(tails)
    n = len(x)
    rho = spearman_rank_coefficient(x, y)
    if n < 3:
        raise InsufficientDataError("Spearman's test needs at least 3 pairs.")
    if rho is None:
        raise ZeroVarianceError("One of the samples has every value tied; the rank correlation is undefined.")

    df = n - 2
    if rho * rho >= 1.0:
        t_score = math.copysign(math.inf, rho)
    else:
        t_score = rho * math.sqrt(df / (1.0 - rho * rho))
    probability = _t_probability(t_score, df, tails)

    warnings = []
    if n < 10:
        warnings.append("Warning: Sample size is small (n < 10 pairs). The t approximation for rho may be inaccurate.")

    details = {"rho": rho, "t": t_score, "n": int(n)}
    return _decide("Spearman rank correlation test", rho, probability, alpha, tails, df, details, warnings)


# =============================================================================
# ANALYSIS OF VARIANCE
# =============================================================================

def anova_f_score(*groups) -> Tuple[float, int, int]:
    """
    One-way ANOVA F statistic.

    Parameters
    ----------
    *groups : array-like
        Two or more samples (NaNs ignored).

    Returns
    -------
    f_score : float
        Between-group mean square over within-group mean square.
    df_between : int
        Number of groups minus one.
    df_within : int
        Total observations minus number of groups.
    """
    samples = [_clean(g) for g in groups]
    if len(samples) < 2:
        raise InsufficientDataError("ANOVA needs at least two groups.")
    if any(s.size == 0 for s in samples):
        raise InsufficientDataError("Every ANOVA group needs at least one observation.")

    k = len(samples)
    total = sum(s.size for s in samples)
    df_between = k - 1
    df_within = total - k
    if df_within < 1:
        raise InsufficientDataError("ANOVA needs more observations than groups.")

    grand_mean = float(np.mean(np.concatenate(samples)))
    ss_between = sum(s.size * (float(np.mean(s)) - grand_mean) ** 2 for s in samples)
    ss_within = sum(float(np.sum((s - np.mean(s)) ** 2)) for s in samples)
    if ss_within == 0:
        raise ZeroVarianceError()

    f_score = (ss_between / df_between) / (ss_within / df_within)
    return float(f_score), int(df_between), int(df_within)


def one_way_anova(*groups, alpha: float = 0.05) -> HypothesisTestResult:
    """One-way ANOVA F-test; the p-value comes from F(df_between, df_within)."""
    alpha = _check_alpha(alpha)
    f_score, df_between, df_within = anova_f_score(*groups)
    probability = F(df_between, df_within).cumulative(f_score)
    details = {"group_sizes": tuple(int(_clean(g).size) for g in groups)}
    return _decide("One-way ANOVA", f_score, probability, alpha, None, (df_between, df_within), details)
