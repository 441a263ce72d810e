"""Event extraction from parsed CWA earthquake catalogs.

Both CWA feeds (current year and history) parse to the same tree shape:
``{"Data": {"Earthquake": [node, ...]}}`` where every child value is a
list, as produced by ``shindo_outlook.cwa.parser``. Each node is turned
into an ``EarthquakeEvent`` or recorded as a ``SkippedNode``; one bad
node never stops the rest of the feed from being read.

Usage::

    from shindo_outlook.analysis.events import normalize, normalize_with_report

    events = normalize(catalog)
    report = normalize_with_report(catalog)
    print(report.skip_counts())   # {'missing_intensity': 12}
"""

import logging
from datetime import datetime, timedelta, timezone

from shindo_outlook.analysis.regions import UNKNOWN_LOCATION, UNKNOWN_REGION, canonical_region
from shindo_outlook.models import (
    INVALID_TIME,
    MALFORMED,
    MISSING_INTENSITY,
    MISSING_TIME,
    EarthquakeEvent,
    NormalizationReport,
    SkippedNode,
)

logger = logging.getLogger(__name__)

EVENT_PATH = ("Data", "Earthquake")

# CWA publishes origin times in Taiwan local time without an offset.
TAIWAN_TZ = timezone(timedelta(hours=8))


# --- Tree access ---

def _first(value):
    """Unwrap a singleton list; parsers wrap every child value in one."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _child(node, key):
    node = _first(node)
    if not isinstance(node, dict):
        return None
    return node.get(key)


def _dig(node, *keys):
    for key in keys:
        node = _child(node, key)
        if node is None:
            return None
    return node


def _raw_text(value):
    """Leaf text as stored, whether bare or as ``{"_": text, "$": attrs}``."""
    value = _first(value)
    if isinstance(value, dict):
        value = value.get("_")
    if value is None:
        return None
    return str(value)


def _text(value):
    """Stripped leaf text; None when absent or blank."""
    value = _raw_text(value)
    if value is None:
        return None
    return value.strip() or None


def event_nodes(raw_catalog, path=EVENT_PATH):
    """Return the list of event nodes at *path*, or [] if absent."""
    parent = _dig(raw_catalog, *path[:-1]) if len(path) > 1 else raw_catalog
    nodes = _child(parent, path[-1])
    if isinstance(nodes, dict):
        return [nodes]
    if not isinstance(nodes, list):
        return []
    return nodes


# --- Field parsing ---

def parse_origin_time(text):
    """Parse a CWA origin time into an aware datetime.

    Accepts ISO-8601 with ``T`` or a space between date and time, an
    optional fraction, and an optional offset or ``Z``. Slash-separated
    dates are accepted too. Naive values are Taiwan local time.

    Raises:
        ValueError: If the text is not a recognizable timestamp.
    """
    s = text.strip().replace("/", "-")
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=TAIWAN_TZ)
    return dt


def normalize_node(node, index=0):
    """Convert one raw event node.

    Returns:
        An ``EarthquakeEvent``, or a ``SkippedNode`` explaining why the
        node was dropped.
    """
    if not isinstance(_first(node), dict):
        return SkippedNode(index, MALFORMED, f"expected a mapping, got {type(node).__name__}")

    try:
        intensity = _text(_dig(node, "Shindo", "ShindoValue"))
        if intensity is None:
            return SkippedNode(index, MISSING_INTENSITY, "no ShindoValue")

        # Truncation sees the raw name; canonical_region trims afterwards.
        location = _raw_text(_dig(node, "Location", "LocationName"))
        region = canonical_region(location if location is not None else UNKNOWN_LOCATION)
        if not region:
            region = UNKNOWN_REGION

        origin = _text(_dig(node, "EarthquakeInfo", "OriginTime"))
        if origin is None:
            return SkippedNode(index, MISSING_TIME, "no EarthquakeInfo/OriginTime")
        try:
            time = parse_origin_time(origin)
        except ValueError:
            return SkippedNode(index, INVALID_TIME, f"unparseable OriginTime {origin!r}")
    except (TypeError, AttributeError, KeyError, IndexError) as e:
        return SkippedNode(index, MALFORMED, str(e))

    return EarthquakeEvent(time=time, region=region, intensity=intensity)


# --- Public API ---

def normalize_with_report(raw_catalog, path=EVENT_PATH):
    """Normalize a parsed catalog, keeping a record of every dropped node.

    Nodes without an intensity are dropped quietly (most catalog entries
    were not felt anywhere); every other failure is logged as a warning.
    Events keep feed order and are not deduplicated.
    """
    report = NormalizationReport()
    for index, node in enumerate(event_nodes(raw_catalog, path)):
        outcome = normalize_node(node, index)
        if isinstance(outcome, EarthquakeEvent):
            report.events.append(outcome)
            continue
        report.skipped.append(outcome)
        if outcome.reason == MISSING_INTENSITY:
            logger.debug("event node %d has no intensity, skipped", index)
        else:
            logger.warning("skipping event node %d (%s): %s",
                           index, outcome.reason, outcome.detail)
    return report


def normalize(raw_catalog, path=EVENT_PATH):
    """Return the canonical events of a parsed catalog, in feed order."""
    return normalize_with_report(raw_catalog, path).events


def dedupe_events(events):
    """Drop exact (region, intensity, time) repeats, keeping the first.

    Used when the current-year and history feeds overlap; off by default.
    """
    seen = set()
    unique = []
    for e in events:
        key = (e.region, e.intensity, e.time)
        if key in seen:
            continue
        seen.add(key)
        unique.append(e)
    return unique
