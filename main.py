"""CLI entrypoint for the article refresh pipeline."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import List, Optional

from config import get_settings
from core import RunState
from orchestrator import run_pipeline
from storage import StatusFileStore
from utils import attach_package_loggers, setup_logger


logger = logging.getLogger("article_refresh")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Refresh original articles from web references")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default="", help="Also log to logs/<name>")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Process a batch of original articles")
    run.add_argument("--force", action="store_true", help="Process originals that already have an update")
    run.add_argument("--max-originals", type=int, default=None)

    status = sub.add_parser("status", help="Print the run health document")
    status.add_argument("--max-age", type=int, default=None, help="Staleness threshold in seconds")
    status.add_argument("--strict", action="store_true", help="Exit 1 when the run errored or is stale")

    return parser


def _run(args: argparse.Namespace) -> int:
    settings = get_settings()
    if args.max_originals is not None:
        settings = settings.model_copy(
            update={"run": settings.run.model_copy(update={"max_originals": args.max_originals})}
        )

    try:
        summary = asyncio.run(run_pipeline(settings, force=args.force))
    except Exception as exc:
        logger.error(f"Run failed: {exc}")
        return 1

    print(json.dumps(summary.model_dump(mode="json"), ensure_ascii=False))
    return 0


def _status(args: argparse.Namespace) -> int:
    settings = get_settings()
    max_age = args.max_age if args.max_age is not None else settings.run.status_max_age_seconds
    health = StatusFileStore(settings.run.status_path).describe(max_age)
    print(json.dumps(health, ensure_ascii=False))

    if args.strict and (health.get("stale") or health.get("status") == RunState.ERROR.value):
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    setup_logger(level=level, log_file=args.log_file or None)
    attach_package_loggers(level)

    if args.command == "run":
        return _run(args)
    return _status(args)


if __name__ == "__main__":
    raise SystemExit(main())
