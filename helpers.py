# helpers.py - formatting & plain-language summary helpers
"""
Utility functions that turn test results into text.

- `format_p`: compact p-value formatting
- `describe_result`: produce a plain-language summary paragraph of a HypothesisTestResult
"""

from typing import Optional

from backend import HypothesisTestResult


def format_p(p: Optional[float], digits: int = 3) -> str:
    """Format a p-value; values below 0.001 print as "< 0.001"."""
    if p is None:
        return "NA"
    if p < 0.001:
        return "< 0.001"
    return f"{p:.{digits}g}"


def _format_df(df) -> Optional[str]:
    if df is None:
        return None
    if isinstance(df, tuple):
        return ", ".join(f"{d:g}" for d in df)
    return f"{df:g}"


def describe_result(result: HypothesisTestResult, digits: int = 3) -> str:
    """
    Build a plain-language description of a hypothesis test result.

    Parameters
    ----------
    result : HypothesisTestResult
        Output of any test in `backend`.
    digits : int, optional
        Significant digits for numbers, by default 3.

    Returns
    -------
    str
        One paragraph: method and alpha, statistic and p-value (or critical
        value), the decision, and any warnings.
    """
    tails_text = f" ({result.tails})" if result.tails else ""
    method_state = f"Using the {result.method}{tails_text}, the null hypothesis was tested with alpha = {result.alpha}."

    df_text = _format_df(result.degrees_of_freedom)
    stat_text = f"The test statistic is {result.statistic:.{digits}g}"
    if df_text is not None:
        stat_text += f" with df = {df_text}"
    if result.p_value is not None:
        stat_text += f" (p = {format_p(result.p_value, digits)})."
    elif result.critical_value is not None:
        stat_text += f" against a critical value of {result.critical_value:.{digits}g}."
    else:
        stat_text += "."

    confidence = f"{result.confidence_level * 100:.{digits}g}%"
    if result.null_accepted:
        claim_text = f"The null hypothesis cannot be rejected at the {confidence} confidence level."
    else:
        claim_text = f"The null hypothesis is rejected in favour of the alternative at the {confidence} confidence level."

    full = f"{method_state} {stat_text} {claim_text}"
    if result.warnings:
        full += " " + " ".join(result.warnings)
    return full
