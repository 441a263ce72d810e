"""Number formatting helpers for outlook reports.

Missing values (None, NaN, inf) render as an em-dash.

Usage::

    from quakelib.formatting import fmt, fmt_pct, fmt_num

    fmt(0.43219, 2)     # '0.43'
    fmt_pct(63.21)      # '63.21%'
    fmt_num(12345)      # '12,345'
"""

import math
from typing import Optional, Union

_DASH = "—"

Numeric = Optional[Union[int, float]]


def _is_missing(x: Numeric) -> bool:
    if x is None:
        return True
    if isinstance(x, float) and (math.isnan(x) or math.isinf(x)):
        return True
    return False


def fmt(x: Numeric, decimals: int = 3) -> str:
    """Format a number with fixed decimal places.

    Examples:
        >>> fmt(1.23456)
        '1.235'
        >>> fmt(None)
        '—'
    """
    if _is_missing(x):
        return _DASH
    return f"{x:.{decimals}f}"


def fmt_pct(x: Numeric, decimals: int = 2) -> str:
    """Format a value already on the 0-100 scale as a percentage.

    Examples:
        >>> fmt_pct(63.21)
        '63.21%'
        >>> fmt_pct(100)
        '100.00%'
    """
    if _is_missing(x):
        return _DASH
    return f"{x:.{decimals}f}%"


def fmt_num(x: Numeric) -> str:
    """Comma-separated number; floats keep one decimal.

    Examples:
        >>> fmt_num(1234567)
        '1,234,567'
        >>> fmt_num(1234.5)
        '1,234.5'
    """
    if _is_missing(x):
        return _DASH
    if isinstance(x, float):
        return f"{x:,.1f}"
    return f"{x:,}"
