"""Tests for shindo_outlook.publish: snapshot and run-history documents."""

from datetime import datetime, timezone

import pytest

from quakelib.docstore import DocumentStore
from shindo_outlook.models import DEFAULT_ACTOR, DEFAULT_ACTOR_UID, DISCLAIMER, RunContext
from shindo_outlook.publish import (
    FAILED,
    HISTORY_COLLECTION,
    LATEST_DOC,
    RESULTS_COLLECTION,
    SUCCESS,
    build_history_entry,
    build_snapshot,
    load_latest,
    publish_failure,
    publish_success,
)

T0 = datetime(2025, 1, 1, 3, 0, tzinfo=timezone.utc)
ANALYSIS = {"台北市": {"3": {"1yr": 63.21, "3yr": 95.02, "6yr": 99.75, "9yr": 99.99}}}


@pytest.fixture
def context():
    return RunContext(actor="octocat", clock=lambda: T0)


class TestRunContext:
    """Run identity and clock."""

    def test_defaults(self):
        """Defaults match the scheduled-run identity."""
        ctx = RunContext()
        assert ctx.actor == DEFAULT_ACTOR == "GitHub Actions System Automation"
        assert ctx.actor_uid == DEFAULT_ACTOR_UID == "system-gh-actions"
        assert ctx.disclaimer == DISCLAIMER
        assert ctx.now().tzinfo is not None


class TestBuildSnapshot:
    """The published latest-results document."""

    def test_shape(self, context):
        """The snapshot carries exactly the published fields."""
        snap = build_snapshot(ANALYSIS, 2, context)
        assert snap == {
            "updateTime": "2025-01-01T03:00:00+00:00",
            "updaterName": "octocat",
            "updaterUID": "system-gh-actions",
            "analysisData": ANALYSIS,
            "disclaimer": DISCLAIMER,
            "totalEvents": 2,
        }

    def test_explicit_update_time(self, context):
        """An explicit time overrides the clock."""
        t = datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert build_snapshot({}, 0, context, update_time=t)["updateTime"] == t.isoformat()

    def test_empty_analysis_kept(self, context):
        """An empty analysis is still published."""
        assert build_snapshot({}, 5, context)["analysisData"] == {}


class TestBuildHistoryEntry:
    """Run-history records."""

    def test_success_entry(self, context):
        """Success entries carry the event count."""
        entry = build_history_entry(context, SUCCESS, event_count=10)
        assert entry == {
            "updateTime": "2025-01-01T03:00:00+00:00",
            "updaterName": "octocat",
            "updaterUID": "system-gh-actions",
            "status": "SUCCESS",
            "eventCount": 10,
        }

    def test_failed_entry(self, context):
        """Failure entries carry the error message instead."""
        entry = build_history_entry(context, FAILED, error="timeout")
        assert entry["status"] == "FAILED"
        assert entry["errorMessage"] == "timeout"
        assert "eventCount" not in entry

    def test_failed_entry_default_message(self, context):
        """A blank error falls back to a generic message."""
        assert build_history_entry(context, FAILED, error="")["errorMessage"] == "unknown error"

    def test_unknown_status_rejected(self, context):
        """Only SUCCESS and FAILED are accepted."""
        with pytest.raises(ValueError):
            build_history_entry(context, "PARTIAL")


class TestPublish:
    """Writing documents to the store."""

    def test_success_writes_latest_and_history(self, tmp_path, context):
        """Success writes the snapshot and one history entry."""
        snap = build_snapshot(ANALYSIS, 2, context)
        with DocumentStore(tmp_path / "store.db") as store:
            publish_success(store, snap, context)
            assert store.get(RESULTS_COLLECTION, LATEST_DOC) == snap
            assert load_latest(store) == snap
            history = store.list(HISTORY_COLLECTION)
        assert len(history) == 1
        assert history[0]["status"] == SUCCESS
        assert history[0]["eventCount"] == 2
        assert history[0]["updateTime"] == snap["updateTime"]

    def test_latest_overwritten_history_appended(self, tmp_path, context):
        """Latest is replaced; history accumulates."""
        with DocumentStore(tmp_path / "store.db") as store:
            publish_success(store, build_snapshot(ANALYSIS, 2, context), context)
            publish_success(store, build_snapshot({}, 7, context), context)
            assert load_latest(store)["totalEvents"] == 7
            assert [h["eventCount"] for h in store.list(HISTORY_COLLECTION)] == [2, 7]

    def test_failure_appends_history_only(self, tmp_path, context):
        """Failure leaves the latest snapshot untouched."""
        with DocumentStore(tmp_path / "store.db") as store:
            publish_failure(store, context, RuntimeError("feed unavailable"))
            assert load_latest(store) is None
            (entry,) = store.list(HISTORY_COLLECTION)
        assert entry["status"] == FAILED
        assert entry["errorMessage"] == "feed unavailable"
        assert entry["updaterName"] == "octocat"
