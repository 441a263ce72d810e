"""Shared pytest configuration and fixtures for the outlook tests."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Make quakelib / shindo_outlook importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent))

FIXED_NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _event_node(intensity="3", location="臺北市信義區", origin_time="2023-05-01 10:00:00"):
    """One catalog node in the parsed-tree shape; pass None to omit a field."""
    node = {}
    if intensity is not None:
        node["Shindo"] = [{"ShindoValue": [intensity]}]
    if location is not None:
        node["Location"] = [{"LocationName": [location]}]
    if origin_time is not None:
        node["EarthquakeInfo"] = [{"OriginTime": [origin_time]}]
    return node


@pytest.fixture
def event_node():
    """Factory for a parsed event node."""
    return _event_node


@pytest.fixture
def catalog():
    """Factory wrapping nodes into a parsed catalog."""
    def _catalog(*nodes):
        return {"Data": {"Earthquake": list(nodes)}}
    return _catalog


@pytest.fixture
def now():
    return FIXED_NOW
