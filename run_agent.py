#!/usr/bin/env python3
"""Entry point to run the daily job agent.

Usage:
    python run_agent.py                 fetch jobs and build today's slate
    python run_agent.py run --no-fetch  rebuild from stored jobs only
    python run_agent.py apply JOB_ID
    python run_agent.py skip JOB_ID --reason "not a fit"
    python run_agent.py refresh
    python run_agent.py stats
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from daymark.config import SETTINGS_PATH, ConfigError
from daymark.log import get_logger

log = get_logger(__name__)


def _check_setup() -> None:
    if not SETTINGS_PATH.exists():
        log.warning("No %s found; using default settings", SETTINGS_PATH.name)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Daily job slate and task planner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--date", help="Day to act on (YYYY-MM-DD); defaults to today")
    sub = parser.add_subparsers(dest="command")

    run_parser = sub.add_parser("run", help="Fetch jobs and build the day's slate")
    run_parser.add_argument("--no-fetch", action="store_true", help="Use stored jobs only")

    apply_parser = sub.add_parser("apply", help="Mark a job as applied")
    apply_parser.add_argument("job_id")

    skip_parser = sub.add_parser("skip", help="Skip a job and refill the slate")
    skip_parser.add_argument("job_id")
    skip_parser.add_argument("--reason")

    sub.add_parser("refresh", help="Replace the day's open jobs with fresh ones")
    sub.add_parser("stats", help="Show application counts")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _check_setup()

    from daymark import agent

    try:
        if args.command == "apply":
            ok = agent.mark_applied(args.job_id, date=args.date)
            log.info("Applied: %s" if ok else "Nothing to do for %s", args.job_id)
        elif args.command == "skip":
            ok = agent.mark_skipped(args.job_id, date=args.date, reason=args.reason)
            log.info("Skipped: %s" if ok else "Nothing to do for %s", args.job_id)
        elif args.command == "refresh":
            added = agent.refresh(date=args.date)
            log.info("Refreshed: %d new job(s)", len(added))
        elif args.command == "stats":
            for key, value in agent.stats(date=args.date).items():
                log.info("  %s: %d", key, value)
        else:
            result = agent.run(date=args.date, fetch=not getattr(args, "no_fetch", False))
            log.info("Run complete.")
            log.info("  Jobs fetched: %d (stored: %d)", result["jobs_found"], result["jobs_total"])
            for job in result["daily_jobs"]:
                score = "" if job["match_score"] is None else f" [{job['match_score']}%]"
                log.info("  • %s @ %s%s  %s", job["role"], job["company"], score, job["url"])
            log.info(
                "  Today: %d/%d applied",
                result["stats"]["today_completed"], result["stats"]["today_total"],
            )
            if result["tasks"]:
                log.info("  Tasks planned: %d (unscheduled: %d)", len(result["tasks"]), result["unscheduled"])
    except ConfigError as exc:
        log.error("Invalid settings: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
