"""Occurrence probabilities per region and intensity.

Counts how often each (region, intensity) pair appears in the merged
catalog, converts the count into an annual rate over the observed
window, and applies the homogeneous Poisson model:

    rate   = count / window_years
    P(t)   = 1 - exp(-rate * t)          for t in 1, 3, 6, 9 years

Probabilities are published as percentages rounded half-up to two
decimals. Windows shorter than one year are not analysed.
"""

import logging
from collections import defaultdict

from quakelib.stats import exceedance_probability, poisson_rate_ci, round_half_up
from shindo_outlook.models import HORIZONS, horizon_label

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25
SECONDS_PER_YEAR = DAYS_PER_YEAR * 86400

MIN_WINDOW_YEARS = 1.0


def window_years(events, now):
    """Years between the earliest event and *now* (0 for no events)."""
    earliest = min((e.time for e in events), default=now)
    return (now - earliest).total_seconds() / SECONDS_PER_YEAR


def frequency_table(events):
    """Count events per region and intensity: ``{region: {intensity: n}}``."""
    table = defaultdict(lambda: defaultdict(int))
    for e in events:
        table[e.region][e.intensity] += 1
    return {region: dict(counts) for region, counts in table.items()}


def probability_percent(rate, horizon):
    """P(at least one event within *horizon* years) as a 2-decimal percentage."""
    return round_half_up(exceedance_probability(rate, horizon) * 10000) / 100


def estimate(events, now):
    """Estimate occurrence probabilities for every (region, intensity).

    Args:
        events: Sequence of ``EarthquakeEvent`` (current and history merged).
        now: Aware datetime the window ends at.

    Returns:
        ``{region: {intensity: {"1yr": pct, "3yr": pct, "6yr": pct, "9yr": pct}}}``,
        or ``{}`` when less than a year of history is available.
    """
    events = list(events)
    years = window_years(events, now)
    if years < MIN_WINDOW_YEARS:
        logger.warning("only %.2f years of history, need at least %.0f; no analysis",
                       years, MIN_WINDOW_YEARS)
        return {}

    results = {}
    for region, counts in frequency_table(events).items():
        results[region] = {}
        for intensity, count in counts.items():
            rate = count / years
            results[region][intensity] = {
                horizon_label(t): probability_percent(rate, t) for t in HORIZONS
            }

    logger.info("estimated %d region/intensity cells over %.2f years",
                sum(len(v) for v in results.values()), years)
    return results


def rate_summary(events, now, confidence=0.95):
    """Annual rates with exact Poisson confidence bounds.

    Returns a list of dicts sorted by region then intensity, each with
    ``region``, ``intensity``, ``count``, ``rate``, ``lower``, ``upper``,
    ``window_years`` and ``confidence``. Empty when the window is under a year.
    """
    events = list(events)
    years = window_years(events, now)
    if years < MIN_WINDOW_YEARS:
        return []

    rows = []
    for region, counts in sorted(frequency_table(events).items()):
        for intensity, count in sorted(counts.items()):
            ci = poisson_rate_ci(count, years, confidence)
            rows.append({
                "region": region,
                "intensity": intensity,
                "count": count,
                "rate": ci["rate"],
                "lower": ci["lower"],
                "upper": ci["upper"],
                "window_years": years,
                "confidence": confidence,
            })
    return rows
