"""Assembly and storage of outlook results.

Two document shapes are written per run:

- ``analysis_results/latest``: the current snapshot (overwritten)
- ``update_history/<id>``: one entry per run, SUCCESS or FAILED (appended)

Field names are camelCase; the published documents are read by a web
front end that expects them.
"""

import logging

from shindo_outlook.models import RunContext

logger = logging.getLogger(__name__)

RESULTS_COLLECTION = "analysis_results"
LATEST_DOC = "latest"
HISTORY_COLLECTION = "update_history"

SUCCESS = "SUCCESS"
FAILED = "FAILED"


def _timestamp(dt):
    return dt.isoformat()


def build_snapshot(analysis, total_events, context: RunContext, update_time=None):
    """Wrap an analysis result with run metadata."""
    update_time = update_time or context.now()
    return {
        "updateTime": _timestamp(update_time),
        "updaterName": context.actor,
        "updaterUID": context.actor_uid,
        "analysisData": analysis,
        "disclaimer": context.disclaimer,
        "totalEvents": total_events,
    }


def build_history_entry(context: RunContext, status, event_count=None, error=None,
                        update_time=None):
    """Run-history entry; carries ``eventCount`` on success, ``errorMessage`` on failure."""
    if status not in (SUCCESS, FAILED):
        raise ValueError(f"unknown run status {status!r}")

    update_time = update_time or context.now()
    entry = {
        "updateTime": _timestamp(update_time),
        "updaterName": context.actor,
        "updaterUID": context.actor_uid,
        "status": status,
    }
    if status == SUCCESS:
        entry["eventCount"] = event_count
    else:
        entry["errorMessage"] = error or "unknown error"
    return entry


def publish_success(store, snapshot, context: RunContext):
    """Store the snapshot as latest and log a SUCCESS run. Returns the history id."""
    store.set(RESULTS_COLLECTION, LATEST_DOC, snapshot)
    entry = build_history_entry(context, SUCCESS, event_count=snapshot["totalEvents"])
    # Both documents carry the same timestamp.
    entry["updateTime"] = snapshot["updateTime"]
    doc_id = store.add(HISTORY_COLLECTION, entry)
    logger.info("published snapshot with %d events (history %s)",
                snapshot["totalEvents"], doc_id)
    return doc_id


def publish_failure(store, context: RunContext, error):
    """Log a FAILED run carrying the error message. Returns the history id."""
    message = str(error) if error is not None else ""
    entry = build_history_entry(context, FAILED, error=message)
    doc_id = store.add(HISTORY_COLLECTION, entry)
    logger.info("recorded failed run (history %s)", doc_id)
    return doc_id


def load_latest(store):
    return store.get(RESULTS_COLLECTION, LATEST_DOC)
