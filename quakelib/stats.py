"""Poisson occurrence statistics.

Helpers for the homogeneous Poisson model used by the outlook:
exceedance probability over a horizon, fixed-decimal half-up rounding,
and the exact (Garwood) confidence interval for an observed rate.

Usage::

    from quakelib.stats import exceedance_probability, round_half_up, poisson_rate_ci

    p = exceedance_probability(rate=1.0, horizon=3)   # 0.9502...
    round_half_up(63.2120558, 2)                      # 63.21
    poisson_rate_ci(count=12, exposure=30.0)          # {'rate': 0.4, 'lower': ..., 'upper': ...}
"""

import math

from scipy import stats as sp_stats


def exceedance_probability(rate: float, horizon: float) -> float:
    """Probability of at least one event in *horizon* at a constant *rate*.

    ``P(N >= 1) = 1 - P(N = 0) = 1 - exp(-rate * horizon)``.

    Args:
        rate: Mean events per unit time (must be >= 0).
        horizon: Length of the window, same time unit as *rate*.

    Examples:
        >>> round(exceedance_probability(1.0, 1), 4)
        0.6321
        >>> exceedance_probability(0.0, 9)
        0.0
    """
    return 1 - math.exp(-(rate * horizon))


def round_half_up(x: float, decimals: int = 0) -> float:
    """Round to *decimals* places, ties toward +infinity.

    Python's ``round`` rounds ties to even; published percentages here
    round ties up, so ``round_half_up(0.125, 2) == 0.13``.

    Examples:
        >>> round_half_up(2.5)
        3.0
        >>> round_half_up(0.125, 2)
        0.13
    """
    scale = 10 ** decimals
    return math.floor(x * scale + 0.5) / scale


def poisson_rate_ci(count: int, exposure: float, confidence: float = 0.95) -> dict:
    """Exact Poisson confidence interval for an event rate.

    Uses the chi-square relation (Garwood, 1936):
    lower = chi2(alpha/2, 2k) / 2, upper = chi2(1 - alpha/2, 2k + 2) / 2,
    both divided by the exposure.

    Args:
        count: Observed number of events (k >= 0).
        exposure: Observation length (e.g. years); must be > 0.
        confidence: Two-sided confidence level (default 0.95).

    Returns:
        Dict with keys ``rate``, ``lower``, ``upper``.

    Raises:
        ValueError: If exposure is not positive or count is negative.
    """
    if exposure <= 0:
        raise ValueError(f"exposure must be positive, got {exposure}")
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")

    alpha = 1 - confidence
    lower = 0.0 if count == 0 else sp_stats.chi2.ppf(alpha / 2, 2 * count) / 2
    upper = sp_stats.chi2.ppf(1 - alpha / 2, 2 * count + 2) / 2
    return {
        "rate": count / exposure,
        "lower": float(lower) / exposure,
        "upper": float(upper) / exposure,
    }
