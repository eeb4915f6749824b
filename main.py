#!/usr/bin/env python3
"""
LinkedIn Easy Apply Bot
========================
Runs one application pass: logs in, collects Easy Apply listings for a
title + location, applies to each one not applied to before, and records
every outcome in data/applications.csv.

Usage:
    python main.py "Software Engineer" "Remote"       # title, location
    python main.py --max-jobs 10 --headed            # settings from .env
    python main.py --no-email                        # skip the summary email
"""

import argparse
import logging
import signal
import sys
import threading

from easyapply.config import Settings
from easyapply.models import AuthenticationFailed, ConfigError
from easyapply.notifier import send_run_summary
from easyapply.runner import AutomationRun

# ── Logging setup ────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)
log = logging.getLogger("easyapply")

# ── Graceful shutdown ────────────────────────────────────────
_shutdown = threading.Event()


def _handle_signal(signum, frame):
    log.info(f"Received signal {signum} — finishing the current job, then stopping...")
    _shutdown.set()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="LinkedIn Easy Apply Bot")
    parser.add_argument("title", nargs="?", help="Job title to search for (default: JOB_TITLE)")
    parser.add_argument("location", nargs="?", help="Location to search in (default: JOB_LOCATION)")
    parser.add_argument("--max-jobs", type=int, help="Maximum applications to attempt this run")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--no-email", action="store_true", help="Do not send the summary email")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


# ── Main entry point ─────────────────────────────────────────
def main(argv=None) -> int:
    args = parse_args(argv)
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = Settings.from_env().with_overrides(
            job_title=args.title,
            job_location=args.location,
            max_jobs_to_apply=args.max_jobs,
            headless=False if args.headed else None,
        )
        settings.validate()
    except ConfigError as e:
        log.error(f"Configuration error: {e}")
        return 2

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    run = AutomationRun(settings, should_stop=_shutdown.is_set)
    try:
        summary = run.execute()
    except AuthenticationFailed as e:
        log.error(f"LinkedIn login failed: {e}")
        return 1
    except Exception as e:
        log.error(f"Easy Apply run crashed: {e}", exc_info=True)
        return 1

    if not args.no_email:
        try:
            send_run_summary(settings, summary, history=run.history)
        except Exception as e:
            log.error(f"Failed to send summary email: {e}")

    stats = summary.stats
    log.info("=" * 60)
    log.info(f"  RUN COMPLETE — {stats.successful} applied, {stats.failed} failed, {stats.skipped} skipped")
    log.info("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
