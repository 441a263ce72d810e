#!/usr/bin/env python3
"""Scheduled outlook update.

Fetches both CWA catalogs concurrently, normalizes them, estimates the
per-region occurrence probabilities and publishes the snapshot plus a
run-history entry. Any failure is recorded as a FAILED history entry and
the process exits with status 1 so the scheduler marks the run failed.

Usage:
    shindo-outlook                         Run with CWA_AUTH_CODE / GITHUB_ACTOR from env
    shindo-outlook --report out/outlook.md Also write a Markdown report
    shindo-outlook --export out/latest.json --dedupe -v
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from quakelib.docstore import DocumentStore
from shindo_outlook.analysis.events import EVENT_PATH, dedupe_events, normalize_with_report
from shindo_outlook.analysis.poisson import estimate, rate_summary
from shindo_outlook.cwa.client import CWAClient
from shindo_outlook.models import DEFAULT_ACTOR, NormalizationReport, RunContext
from shindo_outlook.publish import build_snapshot, publish_failure, publish_success
from shindo_outlook.report.generator import generate_report

logger = logging.getLogger(__name__)

DATA_DIR = Path("data")
DEFAULT_STORE = DATA_DIR / "outlook.db"
DEFAULT_CACHE = DATA_DIR / "cwa_cache.db"


class UpdateError(Exception):
    """Fatal condition for an update run."""


class ConfigError(UpdateError):
    """Required configuration is missing."""


class NoEventsError(UpdateError):
    """Neither catalog yielded a usable event."""


@dataclass
class UpdateConfig:
    """Resolved settings for one run."""
    auth_code: str | None
    store_path: Path = DEFAULT_STORE
    cache_path: Path | None = DEFAULT_CACHE
    dedupe: bool = False
    report_path: Path | None = None
    export_path: Path | None = None
    event_path: tuple[str, ...] = EVENT_PATH


@dataclass
class UpdateOutcome:
    snapshot: dict
    current: NormalizationReport
    history: NormalizationReport
    events: list = field(default_factory=list)


# --- Pipeline ---

async def fetch_catalogs(client):
    """Fetch the current-year and history catalogs concurrently."""
    current, history = await asyncio.gather(
        asyncio.to_thread(client.fetch_current_year),
        asyncio.to_thread(client.fetch_history),
    )
    return current, history


def _log_report(name, report):
    skips = report.skip_counts()
    logger.info("%s catalog: %d nodes, %d events, skipped %s",
                name, report.total, len(report.events), skips or "none")


def _write_text(path, text):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("wrote %s", path)


def run_update(config: UpdateConfig, context: RunContext, store, client) -> UpdateOutcome:
    """Run one update end to end; exceptions propagate to the caller."""
    if not config.auth_code:
        raise ConfigError("CWA authorization code not set (CWA_AUTH_CODE or --auth-code)")

    current_raw, history_raw = asyncio.run(fetch_catalogs(client))

    current = normalize_with_report(current_raw, config.event_path)
    history = normalize_with_report(history_raw, config.event_path)
    _log_report("current-year", current)
    _log_report("history", history)

    events = current.events + history.events
    if config.dedupe:
        before = len(events)
        events = dedupe_events(events)
        logger.info("dedupe removed %d duplicate events", before - len(events))

    if not events:
        raise NoEventsError("no earthquake events in either catalog")

    now = context.now()
    analysis = estimate(events, now)
    snapshot = build_snapshot(analysis, len(events), context, update_time=now)
    publish_success(store, snapshot, context)

    if config.export_path:
        _write_text(config.export_path, json.dumps(snapshot, ensure_ascii=False, indent=2))
    if config.report_path:
        _write_text(config.report_path, generate_report(snapshot, rate_summary(events, now)))

    return UpdateOutcome(snapshot=snapshot, current=current, history=history, events=events)


# --- CLI ---

def build_parser():
    parser = argparse.ArgumentParser(
        description="Felt-earthquake occurrence outlook from CWA catalogs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Environment:
  CWA_AUTH_CODE   CWA open-data authorization code (or --auth-code)
  GITHUB_ACTOR    Name recorded as the updater (or --actor)
""",
    )
    parser.add_argument("--auth-code", help="CWA open-data authorization code")
    parser.add_argument("--actor", help=f"Updater name (default: $GITHUB_ACTOR or '{DEFAULT_ACTOR}')")
    parser.add_argument("--store", type=Path, default=DEFAULT_STORE,
                        help=f"SQLite document store (default: {DEFAULT_STORE})")
    parser.add_argument("--cache", type=Path, default=DEFAULT_CACHE,
                        help=f"Response cache (default: {DEFAULT_CACHE})")
    parser.add_argument("--no-cache", action="store_true", help="Disable the response cache")
    parser.add_argument("--dedupe", action="store_true",
                        help="Drop identical events present in both catalogs")
    parser.add_argument("--event-path", default="/".join(EVENT_PATH),
                        help="Slash-separated path to the event list (default: %(default)s)")
    parser.add_argument("--report", type=Path, help="Write a Markdown report here")
    parser.add_argument("--export", type=Path, help="Write the snapshot JSON here")
    parser.add_argument("--quiet", "-q", action="store_true", help="Warnings and errors only")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser


def resolve_config(args, environ):
    """Build the run configuration and context from CLI args and environment."""
    config = UpdateConfig(
        auth_code=args.auth_code or environ.get("CWA_AUTH_CODE"),
        store_path=args.store,
        cache_path=None if args.no_cache else args.cache,
        dedupe=args.dedupe,
        report_path=args.report,
        export_path=args.export,
        event_path=tuple(p for p in args.event_path.split("/") if p),
    )
    context = RunContext(actor=args.actor or environ.get("GITHUB_ACTOR") or DEFAULT_ACTOR)
    return config, context


def configure_logging(verbose=False, quiet=False):
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main(argv=None, environ=None, transport=None):
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)
    environ = os.environ if environ is None else environ

    config, context = resolve_config(args, environ)
    logger.info("starting outlook update, updater: %s", context.actor)

    with DocumentStore(config.store_path) as store:
        try:
            with CWAClient(
                auth_code=config.auth_code or "",
                cache_path=str(config.cache_path) if config.cache_path else None,
                transport=transport,
            ) as client:
                outcome = run_update(config, context, store, client)
        except Exception as e:
            logger.error("update failed: %s", e)
            publish_failure(store, context, e)
            sys.exit(1)

    logger.info("update complete, %d events", outcome.snapshot["totalEvents"])


if __name__ == "__main__":
    main()
