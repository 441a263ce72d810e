"""Data models for the shindo outlook pipeline.

Canonical event records produced from the CWA catalogs, per-node skip
records, and the run context consumed by the publishing step.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

# Forecast horizons in years, in publication order.
HORIZONS = (1, 3, 6, 9)

DEFAULT_ACTOR = "GitHub Actions System Automation"
DEFAULT_ACTOR_UID = "system-gh-actions"

DISCLAIMER = (
    "本分析結果基於中央氣象署歷史地震目錄，採用簡化的泊松分佈模型推估未來發生機率。"
    "本數據由 GitHub Actions 系統排程自動更新，不代表即時或官方預測。"
    "對於任何依此資訊所做的決定，開發者不承擔任何責任。"
)

# Skip reasons recorded by the normalizer.
MISSING_INTENSITY = "missing_intensity"
MISSING_TIME = "missing_time"
INVALID_TIME = "invalid_time"
MALFORMED = "malformed"


def horizon_label(years: int) -> str:
    """Key used for a horizon in the published result, e.g. ``'3yr'``."""
    return f"{years}yr"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class EarthquakeEvent:
    """One felt earthquake, reduced to what the estimator needs.

    Args:
        time: Origin time (timezone-aware).
        region: Canonical county/city name.
        intensity: Intensity-scale label as published (e.g. "3", "5弱").
    """

    time: datetime
    region: str
    intensity: str


@dataclass(frozen=True)
class SkippedNode:
    """A catalog node that did not yield an event.

    Args:
        index: Position of the node in its feed.
        reason: One of the skip-reason constants in this module.
        detail: Human-readable explanation.
    """

    index: int
    reason: str
    detail: str = ""


@dataclass
class NormalizationReport:
    """Outcome of normalizing one catalog."""

    events: list[EarthquakeEvent] = field(default_factory=list)
    skipped: list[SkippedNode] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of event nodes seen in the feed."""
        return len(self.events) + len(self.skipped)

    def skip_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for s in self.skipped:
            counts[s.reason] = counts.get(s.reason, 0) + 1
        return counts


@dataclass(frozen=True)
class RunContext:
    """Who ran the update, when, and what text accompanies the result.

    Args:
        actor: Display name of the triggering account.
        actor_uid: Stable identifier recorded with every document.
        disclaimer: Text published alongside the probabilities.
        clock: Zero-argument callable returning an aware UTC datetime.
    """

    actor: str = DEFAULT_ACTOR
    actor_uid: str = DEFAULT_ACTOR_UID
    disclaimer: str = DISCLAIMER
    clock: Callable[[], datetime] = utc_now

    def now(self) -> datetime:
        return self.clock()
